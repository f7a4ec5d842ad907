"""ABC analysis — classify items by their cumulative share of total spend.

Items are ranked by amount, highest first. Each item is placed in a tier by
the cumulative share of the items *before* it, so the most expensive item is
always A, an item preceded by exactly 80% is B, and one preceded by exactly
95% is C.
"""

from __future__ import annotations

import logging
from dataclasses import fields
from typing import Iterable, Sequence

from abc_ven.discovery.models import ClassifiedItem, Item, percent_of

logger = logging.getLogger(__name__)

_ITEM_FIELDS = tuple(f.name for f in fields(Item))


def _tier_for(cumulative_before: float, a_threshold: float, b_threshold: float) -> str:
    if cumulative_before < a_threshold:
        return "A"
    if cumulative_before < b_threshold:
        return "B"
    return "C"


def classify(
    items: Iterable[Item],
    a_threshold: float = 80.0,
    b_threshold: float = 95.0,
) -> list[ClassifiedItem]:
    """Rank items by amount and assign ABC tiers.

    Args:
        items: Items to classify. Not modified.
        a_threshold: Cumulative % below which an item is A (default 80%).
        b_threshold: Cumulative % below which an item is B (default 95%).

    Returns:
        Classified items, sorted by amount descending. Equal amounts keep
        their input order.
    """
    if a_threshold > b_threshold:
        raise ValueError(
            f"a_threshold ({a_threshold}) must not exceed b_threshold ({b_threshold})"
        )

    sorted_items = sorted(items, key=lambda x: -x.amount)
    if not sorted_items:
        return []

    total = sum(item.amount for item in sorted_items)

    classified: list[ClassifiedItem] = []
    cumulative = 0.0
    for i, item in enumerate(sorted_items):
        pct = percent_of(item.amount, total)
        # Tier is decided before this item's share is added
        tier = _tier_for(cumulative, a_threshold, b_threshold)
        cumulative += pct

        classified.append(ClassifiedItem(
            **{name: getattr(item, name) for name in _ITEM_FIELDS},
            percent_of_total=pct,
            cumulative_percent=cumulative,
            abc=tier,
            rank=i + 1,
        ))

    logger.debug(
        "Classified %d items (total %.2f, A<%.1f%%, B<%.1f%%)",
        len(classified), total, a_threshold, b_threshold,
    )
    return classified


def get_tier_items(items: Sequence[ClassifiedItem], tier: str) -> list[ClassifiedItem]:
    """Get all items in a specific tier."""
    return [item for item in items if item.abc == tier]

"""VEN cross-tabulation — roll classified items up by tier and criticality.

Pure functions over a classified batch. Every tier and every criticality tag
is always present in the output, empty buckets included, and any percentage
whose denominator is zero is reported as 0.
"""

from __future__ import annotations

from typing import Callable, Sequence

from abc_ven.discovery.models import (
    CRITICALITIES,
    TIERS,
    CategoryStat,
    CategorySummary,
    ClassifiedItem,
    percent_of,
)

Matrix = dict[str, dict[str, CategoryStat]]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _tally(items: Sequence[ClassifiedItem], keys: tuple, key_of: Callable) -> dict:
    """Count items and sum amounts per key, starting every key at zero."""
    counts = {k: 0 for k in keys}
    amounts = {k: 0.0 for k in keys}
    for item in items:
        k = key_of(item)
        counts[k] += 1
        amounts[k] += item.amount
    return {k: (counts[k], amounts[k]) for k in keys}


def _summarize(
    items: Sequence[ClassifiedItem],
    keys: tuple[str, ...],
    key_of: Callable[[ClassifiedItem], str],
) -> list[CategorySummary]:
    total_count = len(items)
    total_amount = sum(item.amount for item in items)

    return [
        CategorySummary(
            category=k,
            count=count,
            amount=amount,
            percent_count=percent_of(count, total_count),
            percent_amount=percent_of(amount, total_amount),
        )
        for k, (count, amount) in _tally(items, keys, key_of).items()
    ]


def _stat(count: int, amount: float, count_base: float, amount_base: float) -> CategoryStat:
    return CategoryStat(
        count=count,
        amount=amount,
        percent_count=percent_of(count, count_base),
        percent_amount=percent_of(amount, amount_base),
    )


# ---------------------------------------------------------------------------
# 1. Tier and criticality summaries
# ---------------------------------------------------------------------------


def summarize_by_tier(items: Sequence[ClassifiedItem]) -> list[CategorySummary]:
    """Count, amount and shares of the whole batch for tiers A, B, C."""
    return _summarize(items, TIERS, lambda item: item.abc)


def summarize_by_criticality(items: Sequence[ClassifiedItem]) -> list[CategorySummary]:
    """Count, amount and shares of the whole batch for tags V, E, N."""
    return _summarize(items, CRITICALITIES, lambda item: item.ven)


# ---------------------------------------------------------------------------
# 2. Tier x criticality matrix
# ---------------------------------------------------------------------------


def build_matrix(items: Sequence[ClassifiedItem]) -> Matrix:
    """Build the 3x3 ABC/VEN matrix with shares of the grand total.

    Returns:
        ``matrix[tier][ven]`` for all nine pairs. All cells' percentages
        add up to 100 for a non-empty batch.
    """
    total_count = len(items)
    total_amount = sum(item.amount for item in items)

    cells = _tally(
        items,
        tuple((abc, ven) for abc in TIERS for ven in CRITICALITIES),
        lambda item: (item.abc, item.ven),
    )

    return {
        abc: {
            ven: _stat(*cells[(abc, ven)], total_count, total_amount)
            for ven in CRITICALITIES
        }
        for abc in TIERS
    }


# ---------------------------------------------------------------------------
# 3. VEN distribution within each tier
# ---------------------------------------------------------------------------


def build_conditional_distribution(items: Sequence[ClassifiedItem]) -> Matrix:
    """Build the 3x3 matrix with shares of each tier's own subtotal.

    Each non-empty tier's three cells add up to 100% of its count and of its
    amount. A tier without items has all-zero cells.
    """
    result: Matrix = {}
    for abc in TIERS:
        group = [item for item in items if item.abc == abc]
        group_count = len(group)
        group_amount = sum(item.amount for item in group)

        cells = _tally(group, CRITICALITIES, lambda item: item.ven)
        result[abc] = {
            ven: _stat(*cells[ven], group_count, group_amount)
            for ven in CRITICALITIES
        }
    return result

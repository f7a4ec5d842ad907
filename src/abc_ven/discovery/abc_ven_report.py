"""Combined ABC/VEN report — run the classifier and every roll-up in one pass.

The report is a plain bundle of the computed structures. Helpers here turn it
into JSON-ready dicts and delimited text; number formatting for people is
left to whoever displays them.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Iterable, Sequence

import pandas as pd

from abc_ven.discovery.abc_analysis import classify
from abc_ven.discovery.models import CategorySummary, ClassifiedItem, Item
from abc_ven.discovery.ven_matrix import (
    Matrix,
    build_conditional_distribution,
    build_matrix,
    summarize_by_criticality,
    summarize_by_tier,
)

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = [
    "code",
    "name",
    "amount",
    "percent_of_total",
    "cumulative_percent",
    "abc",
    "ven",
]


@dataclass
class AbcVenReport:
    """Everything an ABC/VEN run produces."""
    items: list[ClassifiedItem]
    abc_summary: list[CategorySummary]
    ven_summary: list[CategorySummary]
    matrix: Matrix
    ven_by_abc: Matrix  # VEN shares within each tier
    total_count: int
    total_amount: float
    summary: str = field(default="")


def _summary_text(
    items: Sequence[ClassifiedItem],
    abc_summary: Sequence[CategorySummary],
    total_amount: float,
) -> str:
    if not items:
        return "ABC/VEN analysis: no items supplied."

    parts = [f"ABC/VEN analysis: {len(items)} items, total {total_amount:,.2f}."]
    for s in abc_summary:
        parts.append(
            f"{s.category}: {s.count} items ({s.percent_count:.0f}%) = {s.percent_amount:.1f}% of value."
        )
    top = items[0]
    parts.append(
        f"Top item: {top.name} ({top.percent_of_total:.2f}%, {top.abc}/{top.ven})."
    )
    return " ".join(parts)


def build_report(
    items: Iterable[Item],
    a_threshold: float = 80.0,
    b_threshold: float = 95.0,
) -> AbcVenReport:
    """Classify items and compute all four roll-ups.

    Args:
        items: Items to analyse. Not modified.
        a_threshold: Cumulative % boundary for tier A.
        b_threshold: Cumulative % boundary for tier B.
    """
    classified = classify(items, a_threshold=a_threshold, b_threshold=b_threshold)
    abc_summary = summarize_by_tier(classified)
    total_amount = sum(item.amount for item in classified)

    report = AbcVenReport(
        items=classified,
        abc_summary=abc_summary,
        ven_summary=summarize_by_criticality(classified),
        matrix=build_matrix(classified),
        ven_by_abc=build_conditional_distribution(classified),
        total_count=len(classified),
        total_amount=total_amount,
    )
    report.summary = _summary_text(classified, abc_summary, total_amount)

    logger.info(
        "ABC/VEN report built: %d items, A/B/C = %s",
        report.total_count,
        "/".join(str(s.count) for s in abc_summary),
    )
    return report


def report_to_dict(report: AbcVenReport) -> dict:
    """Convert a report into plain JSON-serializable data."""
    return {
        "total_count": report.total_count,
        "total_amount": report.total_amount,
        "summary": report.summary,
        "items": [asdict(item) for item in report.items],
        "abc_summary": [asdict(s) for s in report.abc_summary],
        "ven_summary": [asdict(s) for s in report.ven_summary],
        "matrix": {
            abc: {ven: asdict(stat) for ven, stat in row.items()}
            for abc, row in report.matrix.items()
        },
        "ven_by_abc": {
            abc: {ven: asdict(stat) for ven, stat in row.items()}
            for abc, row in report.ven_by_abc.items()
        },
    }


def items_to_frame(items: Sequence[ClassifiedItem]) -> pd.DataFrame:
    """One row per classified item, in ranked order."""
    records = [{col: getattr(item, col) for col in EXPORT_COLUMNS} for item in items]
    return pd.DataFrame(records, columns=EXPORT_COLUMNS)


def export_items_csv(items: Sequence[ClassifiedItem], sep: str = ";") -> str:
    """Render classified items as delimited text with two-decimal numbers."""
    df = items_to_frame(items)
    if not df.empty:
        df["amount"] = df["amount"].astype(float)
    return df.to_csv(sep=sep, index=False, float_format="%.2f", lineterminator="\n")

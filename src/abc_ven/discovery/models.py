"""Shared record types for ABC/VEN analysis.

Items arrive from a record source already validated; every derived structure
is built fresh by the function that returns it.
"""

from __future__ import annotations

from dataclasses import dataclass

TIERS: tuple[str, ...] = ("A", "B", "C")
CRITICALITIES: tuple[str, ...] = ("V", "E", "N")

CRITICALITY_NAMES: dict[str, str] = {
    "V": "Vital",
    "E": "Essential",
    "N": "Non-essential",
}


@dataclass(frozen=True)
class Item:
    """A priced inventory line with its criticality tag."""
    code: int
    name: str
    unit: str
    quantity: float
    amount: float
    ven: str  # "V", "E", or "N"


@dataclass(frozen=True)
class ClassifiedItem(Item):
    """An item with its share of the batch and ABC tier."""
    percent_of_total: float
    cumulative_percent: float
    abc: str  # "A", "B", or "C"
    rank: int


@dataclass(frozen=True)
class CategoryStat:
    """Count and amount of one bucket, with shares relative to a denominator."""
    count: int
    amount: float
    percent_count: float
    percent_amount: float


@dataclass(frozen=True)
class CategorySummary(CategoryStat):
    """A CategoryStat labelled with its tier or criticality tag."""
    category: str


def percent_of(part: float, whole: float) -> float:
    """Return part as a percentage of whole, or 0 when whole is zero."""
    if whole == 0:
        return 0.0
    return part / whole * 100

"""Delimited consumption report → Item records.

Reports exported from the pharmacy accounting system start with a few title
and column-header lines, followed by one line per product:

    code, name, unit, quantity, amount, ven

and usually end with a totals line (",,Всего:,..."). Rows that are blank,
totals, or fail the checks below are skipped and recorded, never raised.
"""

from __future__ import annotations

import logging
import warnings
from io import StringIO
from typing import Any

import numpy as np
import pandas as pd

from abc_ven.discovery.models import CRITICALITIES, Item

logger = logging.getLogger(__name__)

_COLUMNS = ["code", "name", "unit", "quantity", "amount", "ven"]


# ---------------------------------------------------------------------------
# Result container
# ---------------------------------------------------------------------------


class RecordLoadResult:
    """Items parsed from a report plus the rows that were left out."""

    __slots__ = ("items", "skipped")

    def __init__(self) -> None:
        self.items: list[Item] = []
        # row_index counts data rows from 0, after header and blank lines
        self.skipped: list[dict] = []  # [{row_index, reason}]

    def summary(self) -> dict:
        return {
            "rows_loaded": len(self.items),
            "rows_skipped": len(self.skipped),
        }


# ---------------------------------------------------------------------------
# Field parsing
# ---------------------------------------------------------------------------


def _parse_code(raw: str) -> int | None:
    text = raw.strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        pass
    # Spreadsheet exports sometimes write codes as "12.0"
    try:
        value = float(text)
    except ValueError:
        return None
    if value.is_integer():
        return int(value)
    return None


def _parse_number(raw: str) -> float:
    """Parse a quantity or amount, accepting a decimal comma. Bad input → 0."""
    text = raw.strip().replace("\u00a0", "").replace(" ", "")
    if "," in text and "." in text:
        # "1,234.56": comma groups thousands
        text = text.replace(",", "")
    else:
        text = text.replace(",", ".", 1)
    if not text:
        return 0.0
    try:
        return float(text)
    except ValueError:
        return 0.0


def _keep_first_fields(bad_line: list[str]) -> list[str]:
    return bad_line[: len(_COLUMNS)]


def _is_total_row(row: dict[str, Any], marker: str) -> bool:
    """A totals row has no product code and a cell starting with the marker."""
    marker = marker.strip().lower()
    if not marker or str(row["code"]).strip():
        return False
    return any(str(v).strip().lower().startswith(marker) for v in row.values())


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_records(
    text: str,
    header_rows: int = 4,
    total_marker: str = "Всего",
    delimiter: str = ",",
) -> RecordLoadResult:
    """Parse report text into Items.

    Args:
        text: Full report content.
        header_rows: Leading lines to skip before the first data row.
        total_marker: Label that identifies a totals row (code cell blank).
        delimiter: Field separator.

    Returns:
        RecordLoadResult with the parsed items in file order. Skipped rows
        carry a 0-based row_index over data rows, not a file line number.
    """
    result = RecordLoadResult()

    try:
        with warnings.catch_warnings():
            # Rows with extra fields are trimmed by _keep_first_fields
            warnings.simplefilter("ignore", pd.errors.ParserWarning)
            df = pd.read_csv(
                StringIO(text),
                sep=delimiter,
                header=None,
                names=_COLUMNS,
                skiprows=header_rows,
                index_col=False,
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=True,
                engine="python",
                on_bad_lines=_keep_first_fields,
            )
    except pd.errors.EmptyDataError:
        logger.info("Report has no data rows after %d header lines", header_rows)
        return result

    # Short rows are padded with NaN
    rows = df.replace({np.nan: ""}).to_dict(orient="records")

    for idx, row in enumerate(rows):
        if all(not str(v).strip() for v in row.values()):
            continue
        if _is_total_row(row, total_marker):
            logger.debug("Row %d: totals row skipped", idx)
            continue

        reason = None
        code = _parse_code(str(row["code"]))
        name = str(row["name"]).strip()
        ven = str(row["ven"]).strip().upper()

        if code is None:
            reason = f"invalid code {row['code']!r}"
        elif not name:
            reason = "missing name"
        elif ven not in CRITICALITIES:
            reason = f"invalid VEN category {row['ven']!r}"

        if reason:
            logger.debug("Row %d skipped: %s", idx, reason)
            result.skipped.append({"row_index": idx, "reason": reason})
            continue

        result.items.append(Item(
            code=code,
            name=name,
            unit=str(row["unit"]).strip(),
            quantity=_parse_number(str(row["quantity"])),
            amount=_parse_number(str(row["amount"])),
            ven=ven,
        ))

    logger.info(
        "Parsed %d items (%d rows skipped)", len(result.items), len(result.skipped),
    )
    return result


def parse_records_bytes(raw: bytes, **kwargs: Any) -> RecordLoadResult:
    """Decode UTF-8 report bytes (BOM tolerated) and parse them."""
    return parse_records(raw.decode("utf-8-sig"), **kwargs)

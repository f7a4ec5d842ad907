"""ABC/VEN analysis routes.

Endpoints follow a common pattern:
1. Collect items (JSON body or an uploaded consumption report)
2. Run the ABC/VEN report
3. Return structured JSON results, or the per-item export as CSV
"""

import logging
from typing import Optional

from fastapi import APIRouter, File, UploadFile
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, field_validator

from abc_ven.discovery.abc_ven_report import build_report, export_items_csv, report_to_dict
from abc_ven.discovery.models import CRITICALITIES, Item
from abc_ven.ingestion.record_loader import RecordLoadResult, parse_records_bytes
from config.settings import settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/abc-ven", tags=["abc-ven"])


class ItemIn(BaseModel):
    code: int
    name: str
    unit: str = ""
    quantity: float = 0.0
    amount: float
    ven: str

    @field_validator("ven")
    @classmethod
    def _normalize_ven(cls, v: str) -> str:
        v = v.strip().upper()
        if v not in CRITICALITIES:
            raise ValueError(f"ven must be one of {', '.join(CRITICALITIES)}")
        return v


class AnalyzeRequest(BaseModel):
    items: list[ItemIn]
    a_threshold: Optional[float] = None
    b_threshold: Optional[float] = None


def _thresholds(a_threshold: Optional[float], b_threshold: Optional[float]) -> tuple[float, float]:
    return (
        settings.abc_a_threshold if a_threshold is None else a_threshold,
        settings.abc_b_threshold if b_threshold is None else b_threshold,
    )


async def _load_upload(file: UploadFile) -> RecordLoadResult:
    raw = await file.read()
    return parse_records_bytes(
        raw,
        header_rows=settings.record_header_rows,
        total_marker=settings.record_total_marker,
        delimiter=settings.record_delimiter,
    )


# ---------------------------------------------------------------------------
# Analysis Routes
# ---------------------------------------------------------------------------


@router.post("/analyze")
async def analyze_items(req: AnalyzeRequest):
    """Run ABC/VEN analysis on items posted as JSON."""
    if not req.items:
        return JSONResponse({"error": "No items supplied"}, 400)

    items = [Item(**item.model_dump()) for item in req.items]
    a_threshold, b_threshold = _thresholds(req.a_threshold, req.b_threshold)
    try:
        report = build_report(items, a_threshold=a_threshold, b_threshold=b_threshold)
    except ValueError as exc:
        return JSONResponse({"error": str(exc)}, 400)

    return report_to_dict(report)


@router.post("/upload")
async def analyze_upload(file: UploadFile = File(...)):
    """Run ABC/VEN analysis on an uploaded consumption report."""
    file_name = file.filename or "upload.csv"
    try:
        loaded = await _load_upload(file)
    except UnicodeDecodeError:
        logger.exception("Could not decode upload %s", file_name)
        return JSONResponse({"error": "File must be UTF-8 encoded text"}, 400)

    if not loaded.items:
        return JSONResponse(
            {"error": "No valid rows found in file", **loaded.summary()}, 400,
        )

    try:
        report = build_report(
            loaded.items,
            a_threshold=settings.abc_a_threshold,
            b_threshold=settings.abc_b_threshold,
        )
    except ValueError as exc:
        return JSONResponse({"error": str(exc)}, 400)
    return {"file": file_name, **loaded.summary(), **report_to_dict(report)}


@router.post("/export")
async def export_upload(file: UploadFile = File(...)):
    """Classify an uploaded report and download the ranked items as CSV."""
    file_name = file.filename or "upload.csv"
    try:
        loaded = await _load_upload(file)
    except UnicodeDecodeError:
        logger.exception("Could not decode upload %s", file_name)
        return JSONResponse({"error": "File must be UTF-8 encoded text"}, 400)

    if not loaded.items:
        return JSONResponse({"error": "No valid rows found in file"}, 400)

    try:
        report = build_report(
            loaded.items,
            a_threshold=settings.abc_a_threshold,
            b_threshold=settings.abc_b_threshold,
        )
    except ValueError as exc:
        return JSONResponse({"error": str(exc)}, 400)
    stem = file_name.rsplit(".", 1)[0] if "." in file_name else file_name
    return Response(
        content=export_items_csv(report.items),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{stem}_abc_ven.csv"'},
    )

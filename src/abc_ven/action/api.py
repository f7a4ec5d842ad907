"""FastAPI application exposing ABC/VEN analysis."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"

app = FastAPI(title="ABC/VEN Analysis API", version=API_VERSION)

# ---------------------------------------------------------------------------
# Include modular routers
# ---------------------------------------------------------------------------
from abc_ven.action.routers.abc_ven import router as abc_ven_router  # noqa: E402

app.include_router(abc_ven_router)


@app.exception_handler(Exception)
async def _global_error_handler(request: Request, exc: Exception):
    """Catch-all: ensure every unhandled error returns JSON, not raw HTML."""
    logger.exception("Unhandled error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=500,
        content={
            "detail": f"Server error: {exc}",
            "error": str(exc),
            "status": "failed",
        },
    )


@app.get("/health")
async def health() -> dict:
    return {
        "status": "ok",
        "version": API_VERSION,
    }

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import JSONResponse, PlainTextResponse

from app.ingestion import sync

router = APIRouter()


@router.get("/", response_class=PlainTextResponse)
def root():
    """Liveness check, independent of the sync pipeline."""
    return "success"


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/sync-activities")
def sync_activities():
    """Run the club activity sync now.

    200 when activities were fetched and processed, 500 when none were
    fetched (empty club feed or upstream failure).
    """
    summary = sync.run_sync()
    if summary.fetched > 0:
        return JSONResponse(
            status_code=200,
            content={"message": "Activities synced and saved to database!", **summary.as_dict()},
        )
    return JSONResponse(
        status_code=500,
        content={"message": "No activities found or failed to fetch data.", **summary.as_dict()},
    )

"""Scheduler entry point for periodic club activity sync."""

from __future__ import annotations

from loguru import logger

from app.ingestion.sync import run_sync


def sync_tick() -> None:
    """Run one sync cycle.

    Called by APScheduler on a fixed interval. Exceptions are logged and
    swallowed so the scheduler keeps firing.
    """
    logger.info("[SCHEDULER] Starting club activity sync tick")
    try:
        summary = run_sync()
        logger.info(f"[SCHEDULER] Sync tick complete: {summary.as_dict()}")
    except Exception as e:
        logger.exception("[SCHEDULER] Sync tick failed: {}", e)

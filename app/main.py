import asyncio
from contextlib import asynccontextmanager

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from fastapi import FastAPI, Request
from loguru import logger

from app.api.sync import router as sync_router
from app.config.settings import settings
from app.core.logger import setup_logger
from app.db.session import init_db
from app.ingestion.scheduler import sync_tick

setup_logger(level=settings.log_level, log_file=settings.log_file, json_logs=settings.log_json)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Create tables and run the sync scheduler for the app's lifetime.

    Note: FastAPI requires async for lifespan context manager,
    even if no await operations are used.
    """
    init_db()

    scheduler = BackgroundScheduler()
    scheduler.add_job(
        sync_tick,
        trigger=IntervalTrigger(minutes=settings.sync_interval_minutes),
        id="club_activity_sync",
        name="Strava Club Activity Sync",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    scheduler.start()
    logger.info(f"[SCHEDULER] Started club activity sync (runs every {settings.sync_interval_minutes} minutes)")

    if settings.sync_on_startup:
        sync_tick()

    await asyncio.sleep(0)
    yield

    scheduler.shutdown()
    logger.info("[SCHEDULER] Stopped club activity sync")


app = FastAPI(title="Club Activity Sync", lifespan=lifespan)

app.include_router(sync_router)

logger.info("FastAPI application initialized")


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all HTTP requests."""
    logger.debug(f"Request: {request.method} {request.url.path}")
    response = await call_next(request)
    logger.debug(f"Response: {response.status_code} for {request.method} {request.url.path}")
    return response


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Server is running on http://{settings.host}:{settings.port}")
    uvicorn.run("app.main:app", host=settings.host, port=settings.port)

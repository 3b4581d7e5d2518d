"""Club activity sync pipeline: fetch -> filter -> enrich -> persist.

Triggered by the scheduler and by the on-demand endpoint. Runs are
serialized within the process; a trigger that arrives mid-run waits for
the current run to finish.
"""

from __future__ import annotations

import threading
from dataclasses import asdict, dataclass

from loguru import logger

from app.config.settings import settings
from app.ingestion.enrichment import EnrichedActivity, enrich_activity
from app.ingestion.filters import check_eligibility
from app.ingestion.save_activities import PersistStatus, SessionFactory, save_activities
from app.integrations.strava.client import StravaClubClient
from app.integrations.strava.credentials import CredentialManager
from app.integrations.strava.errors import StravaAuthError


@dataclass
class SyncSummary:
    fetched: int = 0
    inserted: int = 0
    skipped: int = 0
    rejected: int = 0
    failed: int = 0

    @property
    def status(self) -> str:
        return "no_activities" if self.fetched == 0 else "processed"

    def as_dict(self) -> dict[str, int | str]:
        return {"status": self.status, **asdict(self)}


class ClubSyncPipeline:
    def __init__(
        self,
        *,
        client: StravaClubClient,
        session_factory: SessionFactory | None = None,
    ) -> None:
        self._client = client
        self._session_factory = session_factory
        self._run_lock = threading.Lock()

    def run(self) -> SyncSummary:
        """Run one sync pass, waiting for any pass already in progress."""
        with self._run_lock:
            return self._run()

    def _run(self) -> SyncSummary:
        logger.info("[SYNC] Starting the sync process...")

        try:
            activities = self._client.fetch_club_activities()
        except StravaAuthError as e:
            logger.error(f"[SYNC] Could not authorize against Strava: {e}")
            activities = []

        summary = SyncSummary(fetched=len(activities))
        if not activities:
            logger.info("[SYNC] No activities found or failed to fetch data.")
            return summary

        eligible: list[EnrichedActivity] = []
        for activity in activities:
            result = check_eligibility(activity)
            if not result.eligible or result.speed_kmh is None:
                summary.rejected += 1
                continue
            eligible.append(enrich_activity(activity, result.speed_kmh))

        if eligible:
            for outcome in save_activities(eligible, session_factory=self._session_factory):
                if outcome.status is PersistStatus.INSERTED:
                    summary.inserted += 1
                elif outcome.status is PersistStatus.SKIPPED:
                    summary.skipped += 1
                else:
                    summary.failed += 1

        logger.info(
            f"[SYNC] Activities synced: fetched={summary.fetched} inserted={summary.inserted} "
            f"skipped={summary.skipped} rejected={summary.rejected} failed={summary.failed}"
        )
        return summary


_pipeline: ClubSyncPipeline | None = None
_pipeline_init_lock = threading.Lock()


def build_pipeline() -> ClubSyncPipeline:
    """Wire a pipeline from settings."""
    credentials = CredentialManager(
        access_token=settings.strava_access_token,
        refresh_token=settings.strava_refresh_token,
        client_id=settings.strava_client_id,
        client_secret=settings.strava_client_secret,
        token_url=settings.strava_token_url,
        timeout=settings.request_timeout_seconds,
    )
    client = StravaClubClient(
        credentials=credentials,
        club_id=settings.strava_club_id,
        base_url=settings.strava_api_base_url,
        per_page=settings.activities_per_page,
        timeout=settings.request_timeout_seconds,
    )
    return ClubSyncPipeline(client=client)


def get_pipeline() -> ClubSyncPipeline:
    """Get or create the process-wide pipeline."""
    global _pipeline
    with _pipeline_init_lock:
        if _pipeline is None:
            _pipeline = build_pipeline()
            logger.info(f"[SYNC] Pipeline initialized for club_id={settings.strava_club_id}")
        return _pipeline


def run_sync() -> SyncSummary:
    return get_pipeline().run()

"""Persist enriched club activities with duplicate detection.

Per activity:
1. Resolve the athlete by (firstname, lastname), creating it on first sighting
2. Skip when an activity with the same dedup key already exists for that athlete
3. Otherwise insert the activity with raw, denormalized and derived fields

The dedup key is (athlete, distance, moving_time, elapsed_time,
total_elevation_gain). The lookups are backed by unique constraints. An
athlete created concurrently is reused; an activity imported concurrently
surfaces as a dedup-key IntegrityError and is reported as a skip.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from contextlib import AbstractContextManager
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.db.models import Athlete, ClubActivity
from app.db.session import get_session
from app.ingestion.enrichment import EnrichedActivity
from app.integrations.strava.schemas import StravaClubActivity

SessionFactory = Callable[[], AbstractContextManager[Session]]

DEDUP_CONSTRAINT = "uq_club_activities_dedup"


class PersistStatus(str, Enum):
    INSERTED = "inserted"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class PersistOutcome:
    status: PersistStatus
    activity_name: str | None
    reason: str | None = None


def find_athlete_id(session: Session, firstname: str, lastname: str) -> int | None:
    return session.execute(
        select(Athlete.id).where(
            Athlete.firstname == firstname,
            Athlete.lastname == lastname,
        )
    ).scalar_one_or_none()


def resolve_athlete_id(session: Session, firstname: str, lastname: str) -> int:
    """Return the id of the athlete with this exact name, creating it if absent.

    The insert runs in a savepoint; if another writer created the athlete
    in the meantime, its row is reused.
    """
    athlete_id = find_athlete_id(session, firstname, lastname)
    if athlete_id is not None:
        return athlete_id

    athlete = Athlete(firstname=firstname, lastname=lastname)
    try:
        with session.begin_nested():
            session.add(athlete)
    except IntegrityError:
        athlete_id = find_athlete_id(session, firstname, lastname)
        if athlete_id is None:
            raise
        logger.info(f"[SAVE_ACTIVITIES] Athlete {firstname} {lastname} was created concurrently (id={athlete_id})")
        return athlete_id

    logger.info(f"[SAVE_ACTIVITIES] Created athlete {firstname} {lastname} (id={athlete.id})")
    return athlete.id


def is_dedup_violation(error: IntegrityError) -> bool:
    """True when the error comes from the club activity dedup key."""
    diag = getattr(error.orig, "diag", None)
    if diag is not None and getattr(diag, "constraint_name", None):
        return diag.constraint_name == DEDUP_CONSTRAINT
    message = str(error.orig)
    return DEDUP_CONSTRAINT in message or "UNIQUE constraint failed: club_activities." in message


def find_existing_activity_id(session: Session, athlete_id: int, activity: StravaClubActivity) -> int | None:
    """Look up a stored activity with the same dedup key for this athlete."""
    return (
        session.execute(
            select(ClubActivity.id)
            .where(
                ClubActivity.id_athlete == athlete_id,
                ClubActivity.distance == activity.distance,
                ClubActivity.moving_time == activity.moving_time,
                ClubActivity.elapsed_time == activity.elapsed_time,
                ClubActivity.total_elevation_gain == activity.total_elevation_gain,
            )
            .limit(1)
        )
        .scalars()
        .first()
    )


def save_activity(session: Session, enriched: EnrichedActivity) -> PersistOutcome:
    """Save one enriched activity unless it was already imported.

    Flushes but does not commit; the caller owns the transaction.
    """
    activity = enriched.activity
    firstname = activity.athlete.firstname
    lastname = activity.athlete.lastname

    athlete_id = resolve_athlete_id(session, firstname, lastname)

    if find_existing_activity_id(session, athlete_id, activity) is not None:
        logger.info(f'[SAVE_ACTIVITIES] Activity already exists for athlete "{firstname} {lastname}".')
        return PersistOutcome(PersistStatus.SKIPPED, activity.name, "already imported")

    session.add(
        ClubActivity(
            id_athlete=athlete_id,
            athlete_firstname=firstname,
            athlete_lastname=lastname,
            activity_name=activity.name,
            distance=activity.distance,
            moving_time=activity.moving_time,
            elapsed_time=activity.elapsed_time,
            total_elevation_gain=activity.total_elevation_gain,
            activity_type=activity.type,
            sport_type=activity.sport_type,
            workout_type=activity.workout_type,
            imported_at=enriched.imported_at,
            imported_at_utc=datetime.fromisoformat(enriched.imported_at_utc),
            carbon_saving=enriched.carbon_saving,
            speed=enriched.speed,
        )
    )
    session.flush()
    logger.info(f'[SAVE_ACTIVITIES] Saved: "{activity.name}" for {firstname} {lastname} (speed: {enriched.speed:.2f} km/h)')
    return PersistOutcome(PersistStatus.INSERTED, activity.name)


def _save_one(session: Session, enriched: EnrichedActivity) -> PersistOutcome:
    name = enriched.activity.name
    try:
        outcome = save_activity(session, enriched)
        session.commit()
    except IntegrityError as e:
        session.rollback()
        if is_dedup_violation(e):
            logger.info(f'[SAVE_ACTIVITIES] Activity "{name}" was imported concurrently, skipping: {e.orig}')
            return PersistOutcome(PersistStatus.SKIPPED, name, "imported concurrently")
        logger.exception(f'[SAVE_ACTIVITIES] Integrity error saving activity "{name}": {e.orig}')
        return PersistOutcome(PersistStatus.FAILED, name, str(e.orig))
    except SQLAlchemyError as e:
        session.rollback()
        logger.exception(f'[SAVE_ACTIVITIES] Error saving activity "{name}" to the database: {e}')
        return PersistOutcome(PersistStatus.FAILED, name, str(e))
    return outcome


def save_activities(
    enriched_activities: Iterable[EnrichedActivity],
    *,
    session_factory: SessionFactory | None = None,
) -> list[PersistOutcome]:
    """Persist a batch using one session for the whole batch.

    Each activity is committed on its own; a failure rolls back only that
    activity and the batch moves on. The session is closed once at the end.
    If no session can be obtained at all, every remaining activity is
    reported as failed.
    """
    factory = session_factory or get_session
    batch = list(enriched_activities)
    outcomes: list[PersistOutcome] = []

    try:
        with factory() as session:
            for enriched in batch:
                outcomes.append(_save_one(session, enriched))
    except SQLAlchemyError as e:
        logger.exception(f"[SAVE_ACTIVITIES] Database unavailable, {len(batch) - len(outcomes)} activities not saved: {e}")
        outcomes.extend(
            PersistOutcome(PersistStatus.FAILED, enriched.activity.name, str(e)) for enriched in batch[len(outcomes):]
        )

    inserted = sum(1 for o in outcomes if o.status is PersistStatus.INSERTED)
    logger.info(f"[SAVE_ACTIVITIES] Batch done: {inserted}/{len(outcomes)} activities inserted")
    return outcomes

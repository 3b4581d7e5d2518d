from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from app.integrations.strava.schemas import StravaClubActivity

# kg CO2 avoided per km ridden instead of driven
CARBON_SAVING_PER_KM = 0.24


@dataclass(frozen=True)
class EnrichedActivity:
    """Club activity plus the fields computed at import time."""

    activity: StravaClubActivity
    speed: float
    carbon_saving: float
    imported_at: datetime  # local wall clock, naive
    imported_at_utc: str  # ISO-8601, UTC


def compute_carbon_saving(distance_m: float) -> float:
    return (distance_m / 1000) * CARBON_SAVING_PER_KM


def enrich_activity(
    activity: StravaClubActivity,
    speed: float,
    *,
    now: datetime | None = None,
) -> EnrichedActivity:
    """Attach derived metrics and import timestamps.

    Args:
        activity: Eligible club activity
        speed: Average speed already computed by the filter (km/h)
        now: Aware timestamp to use instead of the current time

    Returns:
        EnrichedActivity ready for persistence
    """
    moment = now or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.astimezone()

    return EnrichedActivity(
        activity=activity,
        speed=speed,
        carbon_saving=compute_carbon_saving(activity.distance),
        imported_at=moment.astimezone().replace(tzinfo=None),
        imported_at_utc=moment.astimezone(timezone.utc).isoformat(),
    )

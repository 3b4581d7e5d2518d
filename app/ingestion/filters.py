"""Eligibility rules for club activities.

Only human-powered or electric cycling at a plausible average speed is
imported. Bounds are inclusive: 5.0 and 35.0 km/h both pass.
"""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from app.integrations.strava.schemas import StravaClubActivity

ALLOWED_SPORT_TYPES = frozenset(
    {
        "Ride",
        "MountainBikeRide",
        "GravelRide",
        "EBikeRide",
        "EMountainBikeRide",
        "Velomobile",
    }
)

MIN_SPEED_KMH = 5.0
MAX_SPEED_KMH = 35.0


@dataclass(frozen=True)
class Eligibility:
    eligible: bool
    speed_kmh: float | None = None
    reason: str | None = None


def compute_speed_kmh(distance_m: float, moving_time_s: int) -> float | None:
    """Average speed in km/h, or None when moving time is not positive."""
    if moving_time_s <= 0:
        return None
    return distance_m * 3.6 / moving_time_s


def check_eligibility(activity: StravaClubActivity) -> Eligibility:
    """Apply sport-type then speed rules, stopping at the first failure."""
    if activity.sport_type not in ALLOWED_SPORT_TYPES:
        reason = f'sport_type "{activity.sport_type}" is not allowed'
        logger.info(f'[FILTER] Skipped activity "{activity.name}" because {reason}')
        return Eligibility(eligible=False, reason=reason)

    speed = compute_speed_kmh(activity.distance, activity.moving_time)
    if speed is None or not MIN_SPEED_KMH <= speed <= MAX_SPEED_KMH:
        shown = "n/a" if speed is None else f"{speed:.2f}"
        reason = f"unrealistic speed ({shown} km/h)"
        logger.info(f'[FILTER] Skipped activity "{activity.name}" due to {reason}')
        return Eligibility(eligible=False, speed_kmh=speed, reason=reason)

    return Eligibility(eligible=True, speed_kmh=speed)

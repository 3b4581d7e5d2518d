from __future__ import annotations

from pydantic import BaseModel


class ClubAthlete(BaseModel):
    """Athlete summary as exposed by the club activities endpoint.

    Strava only returns first name and last initial here; there is no id.
    """

    firstname: str
    lastname: str


class StravaClubActivity(BaseModel):
    athlete: ClubAthlete
    name: str | None = None
    distance: float  # meters
    moving_time: int  # seconds
    elapsed_time: int  # seconds
    total_elevation_gain: float = 0.0
    type: str | None = None
    sport_type: str | None = None
    workout_type: int | None = None

    raw: dict | None = None  # Store raw API response

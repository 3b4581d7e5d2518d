from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all database models."""


class Athlete(Base):
    """Club member seen in at least one imported activity.

    The club activities payload carries no stable athlete id, so the
    (firstname, lastname) pair is the identity. Rows are created lazily
    on first sighting and never updated or deleted by the sync.
    """

    __tablename__ = "athletes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    firstname: Mapped[str] = mapped_column(String, nullable=False)
    lastname: Mapped[str] = mapped_column(String, nullable=False)

    __table_args__ = (UniqueConstraint("firstname", "lastname", name="uq_athletes_name"),)


class ClubActivity(Base):
    """Imported club activity, stored as an immutable fact.

    Stores:
    - Raw fields as delivered by the club activities endpoint
    - Denormalized athlete names
    - Import time twice: local wall clock (date) and UTC (datetime)
    - Derived metrics: speed (km/h) and carbon_saving (kg CO2)

    Duplicate prevention via unique constraint on
    (id_athlete, distance, moving_time, elapsed_time, total_elevation_gain).
    """

    __tablename__ = "club_activities"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id_athlete: Mapped[int] = mapped_column(Integer, ForeignKey("athletes.id"), nullable=False, index=True)
    athlete_firstname: Mapped[str] = mapped_column(String, nullable=False)
    athlete_lastname: Mapped[str] = mapped_column(String, nullable=False)
    activity_name: Mapped[str | None] = mapped_column(String, nullable=True)
    distance: Mapped[float] = mapped_column(Float, nullable=False)
    moving_time: Mapped[int] = mapped_column(Integer, nullable=False)
    elapsed_time: Mapped[int] = mapped_column(Integer, nullable=False)
    total_elevation_gain: Mapped[float] = mapped_column(Float, nullable=False)
    activity_type: Mapped[str | None] = mapped_column(String, nullable=True)
    sport_type: Mapped[str] = mapped_column(String, nullable=False)
    workout_type: Mapped[int | None] = mapped_column(Integer, nullable=True)
    imported_at: Mapped[datetime] = mapped_column("date", DateTime, nullable=False)
    imported_at_utc: Mapped[datetime] = mapped_column("datetime", DateTime(timezone=True), nullable=False)
    carbon_saving: Mapped[float] = mapped_column(Float, nullable=False)
    speed: Mapped[float] = mapped_column(Float, nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "id_athlete",
            "distance",
            "moving_time",
            "elapsed_time",
            "total_elevation_gain",
            name="uq_club_activities_dedup",
        ),
    )

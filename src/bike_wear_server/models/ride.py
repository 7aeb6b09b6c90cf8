"""Ride model."""

from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Float, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from bike_wear_server.models.base import Base, TimestampMixin, generate_uuid


class RideSource(str, Enum):
    """Where a ride was recorded."""

    APP = "app"
    HEALTH_CONNECT = "health_connect"
    MANUAL = "manual"


class Ride(Base, TimestampMixin):
    """A finished ride summary.

    Rides are facts: once stored they are never changed, apart from
    aggregated_at which marks that the ride's roll-up into bike and component
    totals has been applied.
    """

    __tablename__ = "rides"
    __table_args__ = (
        Index("ix_rides_source_started_at", "source", "started_at"),
        {"comment": "Completed ride summaries"},
    )

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=generate_uuid,
    )

    bike_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("bikes.id"),
        index=True,
        comment="Bike ridden (NULL = not attributed, no wear applied)",
    )

    distance_km: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    duration_ms: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    avg_speed_kmh: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    max_speed_kmh: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    elev_gain_m: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    elev_loss_m: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    ended_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    source: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=RideSource.APP.value,
        comment="app, health_connect or manual",
    )

    aggregated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        comment="When the roll-up into bike/component totals was applied",
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<Ride(id={self.id}, bike_id={self.bike_id}, km={self.distance_km})>"

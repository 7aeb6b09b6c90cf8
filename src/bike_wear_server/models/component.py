"""Component model."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from bike_wear_server.models.base import Base, TimestampMixin, generate_uuid, utcnow


class Component(Base, TimestampMixin):
    """A wearable bike part, installed on a bike or sitting in the garage.

    bike_id is the single source of truth for where the component is
    installed; NULL means it is unassigned. The swap ledger is history only.
    """

    __tablename__ = "components"
    __table_args__ = {"comment": "Bike components with usage roll-ups and alert config"}

    # Primary key
    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=generate_uuid,
    )

    bike_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("bikes.id"),
        index=True,
        comment="Bike the component is installed on (NULL = in garage)",
    )

    # Identity
    type: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        index=True,
        comment="Component type key (chain, cassette, brake_pads, ...)",
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    make_model: Mapped[str | None] = mapped_column(String(255))
    notes: Mapped[str | None] = mapped_column(Text)
    position: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        default="none",
        comment="none, front or rear",
    )

    # Wear
    lifespan_km: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    distance_used_km: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    total_time_seconds: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    avg_speed_kmh: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    max_speed_kmh: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    max_speed_bike_id: Mapped[str | None] = mapped_column(
        String(36),
        comment="Bike on which the max speed was recorded",
    )
    installed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    # Alerts
    alert_threshold_percent: Mapped[int] = mapped_column(Integer, nullable=False, default=10)
    alert_snooze_until_km: Mapped[float | None] = mapped_column(Float)
    alert_snooze_until_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    alerts_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Optimistic concurrency
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        """String representation."""
        return f"<Component(id={self.id}, type={self.type}, bike_id={self.bike_id})>"

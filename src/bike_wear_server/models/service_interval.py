"""Service interval model."""

from enum import Enum

from sqlalchemy import Float, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from bike_wear_server.models.base import Base, TimestampMixin, generate_uuid


class IntervalType(str, Enum):
    """What happens when an interval comes due."""

    REPLACE = "replace"
    INSPECTION = "inspection"
    GREASE = "grease"
    ON_FAILURE = "on_failure"  # Informational, never provisioned by default


class ServiceInterval(Base, TimestampMixin):
    """A distance and/or time based maintenance schedule for one component.

    interval_km == 0 means the interval ignores distance; interval_time_seconds
    NULL means it ignores time, and tracked_time_seconds then stays NULL too.
    """

    __tablename__ = "service_intervals"
    __table_args__ = {"comment": "Per-component maintenance schedules"}

    # Primary key
    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=generate_uuid,
    )

    component_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("components.id"),
        nullable=False,
        index=True,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=IntervalType.REPLACE.value,
    )

    # Distance clock
    interval_km: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    tracked_km: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    # Time clock
    interval_time_seconds: Mapped[int | None] = mapped_column(Integer)
    tracked_time_seconds: Mapped[int | None] = mapped_column(Integer)

    # Optimistic concurrency
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    @property
    def is_time_tracked(self) -> bool:
        """Whether this interval has a time clock."""
        return self.interval_time_seconds is not None

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<ServiceInterval(id={self.id}, name={self.name!r}, "
            f"tracked_km={self.tracked_km}/{self.interval_km})>"
        )

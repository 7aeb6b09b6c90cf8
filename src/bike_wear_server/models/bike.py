"""Bike model."""

from datetime import datetime

from sqlalchemy import DateTime, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from bike_wear_server.models.base import Base, TimestampMixin, generate_uuid

# Chain replacements after which the rest of the drivetrain should be inspected
DRIVETRAIN_ADVISORY_THRESHOLD = 3


class Bike(Base, TimestampMixin):
    """A bike and its denormalized ride roll-ups.

    Totals are maintained by ride aggregation; avg speed is recomputed from the
    cumulative distance and time, never averaged incrementally.
    """

    __tablename__ = "bikes"
    __table_args__ = {"comment": "Bikes with cumulative ride statistics"}

    # Primary key
    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=generate_uuid,
    )

    # Display fields
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    make: Mapped[str | None] = mapped_column(String(255))
    model: Mapped[str | None] = mapped_column(String(255))
    year: Mapped[int | None] = mapped_column(Integer)
    description: Mapped[str | None] = mapped_column(Text)

    # Ride roll-ups
    total_distance_km: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    total_time_seconds: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    avg_speed_kmh: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    max_speed_kmh: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    total_elev_gain_m: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    total_elev_loss_m: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    last_ride_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Wear-pattern counter
    chain_replacement_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Chains replaced since the cassette/freewheel/chainring was last replaced",
    )

    # Optimistic concurrency
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    @property
    def drivetrain_advisory(self) -> bool:
        """Whether the cassette/freewheel/chainrings should be inspected."""
        return self.chain_replacement_count >= DRIVETRAIN_ADVISORY_THRESHOLD

    def __repr__(self) -> str:
        """String representation."""
        return f"<Bike(id={self.id}, name={self.name!r}, km={self.total_distance_km})>"

"""Component install/uninstall history."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from bike_wear_server.models.base import Base, generate_uuid, utcnow


class ComponentSwap(Base):
    """One stint of a component on a bike.

    uninstalled_at is NULL while the stint is open; a component has at most
    one open stint.
    """

    __tablename__ = "component_swaps"
    __table_args__ = {"comment": "Append-only component install history"}

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
    bike_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("bikes.id"),
        nullable=False,
        index=True,
    )
    installed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    uninstalled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    @property
    def is_open(self) -> bool:
        """Whether the component is still installed in this stint."""
        return self.uninstalled_at is None

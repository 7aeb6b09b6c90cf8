"""Extra purchase and service information for a component."""

from datetime import date

from sqlalchemy import Date, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from bike_wear_server.models.base import Base, TimestampMixin


class ComponentContext(Base, TimestampMixin):
    """One-to-one context record for a component."""

    __tablename__ = "component_context"

    component_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("components.id"),
        primary_key=True,
    )
    notes: Mapped[str] = mapped_column(Text, nullable=False)
    install_date: Mapped[date | None] = mapped_column(Date)
    purchase_link: Mapped[str | None] = mapped_column(String(2048))
    serial_number: Mapped[str | None] = mapped_column(String(255))
    last_service_notes: Mapped[str | None] = mapped_column(Text)
    purchase_price: Mapped[str | None] = mapped_column(
        String(64),
        comment="Free text, no currency handling",
    )
    purchase_date: Mapped[date | None] = mapped_column(Date)

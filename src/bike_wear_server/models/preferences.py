"""User preferences stored in database."""

from sqlalchemy import Integer
from sqlalchemy.orm import Mapped, mapped_column

from bike_wear_server.models.base import Base, TimestampMixin


class AppPreferences(Base, TimestampMixin):
    """Wear preferences.

    Single row table - only one preferences record exists (id=1).
    """

    __tablename__ = "app_preferences"

    # Primary key (always id=1, singleton pattern)
    id: Mapped[int] = mapped_column(primary_key=True, default=1)

    close_to_service_threshold: Mapped[int] = mapped_column(Integer, nullable=False)
    default_alert_threshold_percent: Mapped[int] = mapped_column(Integer, nullable=False)

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<AppPreferences(close_to_service={self.close_to_service_threshold}, "
            f"alert={self.default_alert_threshold_percent})>"
        )

"""User preference source for wear thresholds."""

from dataclasses import dataclass

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from bike_wear_server.core.config import settings
from bike_wear_server.models.preferences import AppPreferences

logger = structlog.get_logger()

MIN_THRESHOLD = 1
MAX_THRESHOLD = 100


def clamp_threshold(value: int) -> int:
    """Clamp a percentage threshold to 1..100."""
    return max(MIN_THRESHOLD, min(MAX_THRESHOLD, value))


@dataclass(frozen=True)
class WearPreferences:
    close_to_service_threshold: int
    default_alert_threshold_percent: int


class PreferencesService:
    """Reads and writes the single preferences row, falling back to settings."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self) -> WearPreferences:
        row = await self.session.get(AppPreferences, 1, populate_existing=True)
        if row is None:
            return WearPreferences(
                close_to_service_threshold=clamp_threshold(settings.close_to_service_threshold),
                default_alert_threshold_percent=clamp_threshold(
                    settings.default_alert_threshold_percent
                ),
            )
        return WearPreferences(
            close_to_service_threshold=clamp_threshold(row.close_to_service_threshold),
            default_alert_threshold_percent=clamp_threshold(row.default_alert_threshold_percent),
        )

    async def update(
        self,
        close_to_service_threshold: int | None = None,
        default_alert_threshold_percent: int | None = None,
    ) -> WearPreferences:
        """Persist new thresholds (clamped to 1..100); omitted values are kept."""
        current = await self.get()
        row = await self.session.get(AppPreferences, 1)
        if row is None:
            row = AppPreferences(
                id=1,
                close_to_service_threshold=current.close_to_service_threshold,
                default_alert_threshold_percent=current.default_alert_threshold_percent,
            )
            self.session.add(row)
        if close_to_service_threshold is not None:
            row.close_to_service_threshold = clamp_threshold(close_to_service_threshold)
        if default_alert_threshold_percent is not None:
            row.default_alert_threshold_percent = clamp_threshold(default_alert_threshold_percent)
        await self.session.commit()

        logger.info(
            "Preferences updated",
            close_to_service_threshold=row.close_to_service_threshold,
            default_alert_threshold_percent=row.default_alert_threshold_percent,
        )
        return WearPreferences(
            close_to_service_threshold=row.close_to_service_threshold,
            default_alert_threshold_percent=row.default_alert_threshold_percent,
        )

"""Component alert evaluation and notification delivery.

After a ride (or on demand) every component of a bike is checked against its
own alert threshold. Components that need attention are reported together in
one notification, never one per component.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol

import httpx
import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bike_wear_server.core.config import settings
from bike_wear_server.formatting import format_for_display
from bike_wear_server.models.base import as_utc, utcnow
from bike_wear_server.models.component import Component
from bike_wear_server.services.wear import component_health_percent

logger = structlog.get_logger()


class NotificationSink(Protocol):
    """Delivers a notification to the rider."""

    async def send(self, title: str, body: str) -> None: ...


class LogNotificationSink:
    """Default sink: writes the notification to the log."""

    def __init__(self) -> None:
        self.logger = logger.bind(sink="log")

    async def send(self, title: str, body: str) -> None:
        self.logger.warning("Component alert", title=title, body=body)


class WebhookNotificationSink:
    """POSTs notifications as JSON to a webhook."""

    def __init__(self, url: str, timeout: float = 10.0) -> None:
        self.url = url
        self.timeout = timeout

    async def send(self, title: str, body: str) -> None:
        """Deliver the notification.

        Raises:
            httpx.HTTPError: If the webhook is unreachable or answers with an error
        """
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(self.url, json={"title": title, "body": body})
            response.raise_for_status()


def default_sink() -> NotificationSink:
    """Sink selected by configuration."""
    if settings.notification_webhook_url:
        return WebhookNotificationSink(
            settings.notification_webhook_url,
            timeout=settings.notification_timeout_seconds,
        )
    return LogNotificationSink()


@dataclass
class NeedsAlert:
    """Components of one bike that need attention."""

    count: int = 0
    names: list[str] = field(default_factory=list)
    component_ids: list[str] = field(default_factory=list)

    @property
    def title(self) -> str:
        return f"{self.count} component(s) need attention"

    @property
    def body(self) -> str:
        return ", ".join(format_for_display(name) for name in self.names)

    def __bool__(self) -> bool:
        return self.count > 0


def is_snoozed(component: Component, now: datetime | None = None) -> bool:
    """Whether either snooze bound is still in effect.

    The distance bound holds while usage is below it; the time bound holds
    until the instant passes. Either one is enough.
    """
    now = now or utcnow()
    if (
        component.alert_snooze_until_km is not None
        and component.distance_used_km < component.alert_snooze_until_km
    ):
        return True
    snooze_until = as_utc(component.alert_snooze_until_time)
    return snooze_until is not None and now < snooze_until


def needs_alert(component: Component, now: datetime | None = None) -> bool:
    """Alerts on, not snoozed, and health at or below the component's threshold."""
    return (
        component.alerts_enabled
        and not is_snoozed(component, now)
        and component_health_percent(component) <= component.alert_threshold_percent
    )


def evaluate_components(components: Iterable[Component], now: datetime | None = None) -> NeedsAlert:
    """Collect the components that need an alert."""
    now = now or utcnow()
    result = NeedsAlert()
    for component in components:
        if needs_alert(component, now):
            result.count += 1
            result.names.append(component.name)
            result.component_ids.append(component.id)
    return result


class AlertEvaluator:
    """Evaluates a bike's components and raises one aggregate notification."""

    def __init__(self, session: AsyncSession, sink: NotificationSink | None = None) -> None:
        """Initialize evaluator.

        Args:
            session: Database session
            sink: Where notifications go (configured default if None)
        """
        self.session = session
        self.sink = sink or default_sink()
        self.logger = logger.bind(service="alerts")

    async def evaluate(self, bike_id: str, now: datetime | None = None) -> NeedsAlert:
        """Components of the bike that need an alert."""
        stmt = (
            select(Component)
            .where(Component.bike_id == bike_id)
            .order_by(Component.created_at, Component.name)
            .execution_options(populate_existing=True)
        )
        components = (await self.session.execute(stmt)).scalars().all()
        return evaluate_components(components, now)

    async def notify(self, alert: NeedsAlert, bike_id: str | None = None) -> bool:
        """Send the aggregate notification if anything needs attention.

        Delivery failures are logged, never raised.

        Returns:
            True if a notification was delivered
        """
        if not alert:
            return False
        try:
            await self.sink.send(alert.title, alert.body)
        except Exception as e:
            self.logger.error(
                "Alert delivery failed",
                bike_id=bike_id,
                count=alert.count,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False
        self.logger.info("Alert sent", bike_id=bike_id, count=alert.count)
        return True

    async def evaluate_and_notify(self, bike_id: str) -> NeedsAlert:
        alert = await self.evaluate(bike_id)
        await self.notify(alert, bike_id=bike_id)
        return alert

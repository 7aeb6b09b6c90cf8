"""Service interval store.

Owns the ServiceInterval rows of each component: default provisioning from
the catalog, advancing tracked values after rides, and resetting them after
service. Helpers used inside larger units of work only flush; the plain CRUD
operations commit.
"""

from collections.abc import Iterable, Sequence

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from bike_wear_server.catalog.intervals import FALLBACK_INTERVAL_NAME, interval_specs_for
from bike_wear_server.core.database import commit_or_conflict
from bike_wear_server.core.errors import NotFoundError, ValidationError
from bike_wear_server.core.locks import entity_locks
from bike_wear_server.models.component import Component
from bike_wear_server.models.service_interval import IntervalType, ServiceInterval

logger = structlog.get_logger()

# Types reset by "mark inspection complete"
INSPECTION_TYPES = (IntervalType.INSPECTION, IntervalType.GREASE)
ALL_TYPES = tuple(IntervalType)


class ServiceIntervalStore:
    """Store for per-component service intervals."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize store.

        Args:
            session: Database session
        """
        self.session = session
        self.logger = logger.bind(service="service_intervals")

    async def get(self, interval_id: str) -> ServiceInterval:
        """Load one interval.

        Raises:
            NotFoundError: If the interval does not exist
        """
        interval = await self.session.get(ServiceInterval, interval_id, populate_existing=True)
        if interval is None:
            raise NotFoundError("Service interval", interval_id)
        return interval

    async def list_for_component(self, component_id: str) -> list[ServiceInterval]:
        stmt = (
            select(ServiceInterval)
            .where(ServiceInterval.component_id == component_id)
            .order_by(ServiceInterval.created_at, ServiceInterval.name)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_for_components(
        self, component_ids: Iterable[str]
    ) -> dict[str, list[ServiceInterval]]:
        """Intervals grouped by component id (components without any map to [])."""
        ids = list(component_ids)
        grouped: dict[str, list[ServiceInterval]] = {component_id: [] for component_id in ids}
        if not ids:
            return grouped
        stmt = (
            select(ServiceInterval)
            .where(ServiceInterval.component_id.in_(ids))
            .order_by(ServiceInterval.created_at, ServiceInterval.name)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        for interval in result.scalars().all():
            grouped[interval.component_id].append(interval)
        return grouped

    async def provision_for_component(
        self,
        component_id: str,
        component_type: str,
        lifespan_km: float,
        initial_distance_km: float = 0.0,
        initial_time_seconds: int = 0,
    ) -> list[ServiceInterval]:
        """Create the default intervals for a freshly created component.

        Types with a catalog schedule get one interval per scheduled entry
        (on-failure entries excluded); anything else gets a single "Max life"
        replace interval over the component's lifespan. Must be called once
        per component.
        """
        specs = interval_specs_for(component_type)
        if specs:
            intervals = [
                ServiceInterval(
                    component_id=component_id,
                    name=spec.name,
                    type=spec.interval_type.value,
                    interval_km=spec.interval_km,
                    tracked_km=initial_distance_km,
                    interval_time_seconds=spec.interval_time_seconds,
                    tracked_time_seconds=(
                        initial_time_seconds if spec.interval_time_seconds is not None else None
                    ),
                )
                for spec in specs
            ]
        else:
            intervals = [
                ServiceInterval(
                    component_id=component_id,
                    name=FALLBACK_INTERVAL_NAME,
                    type=IntervalType.REPLACE.value,
                    interval_km=lifespan_km,
                    tracked_km=initial_distance_km,
                )
            ]
        self.session.add_all(intervals)
        await self.session.flush()
        return intervals

    async def advance(self, component_id: str, new_distance_km: float, new_time_seconds: int) -> None:
        """Set every interval's tracked values to the component's new totals.

        Time is only written for time-tracked intervals.
        """
        for interval in await self.list_for_component(component_id):
            interval.tracked_km = new_distance_km
            if interval.interval_time_seconds is not None:
                interval.tracked_time_seconds = new_time_seconds
        await self.session.flush()

    async def reset_types(self, component_id: str, types: Sequence[IntervalType]) -> int:
        """Zero tracked values of the component's intervals whose type is listed.

        Returns:
            Number of intervals reset
        """
        wanted = {t.value for t in types}
        count = 0
        for interval in await self.list_for_component(component_id):
            if interval.type not in wanted:
                continue
            interval.tracked_km = 0.0
            if interval.interval_time_seconds is not None:
                interval.tracked_time_seconds = 0
            count += 1
        await self.session.flush()
        return count

    async def delete_for_component(self, component_id: str) -> None:
        await self.session.execute(
            delete(ServiceInterval).where(ServiceInterval.component_id == component_id)
        )

    async def add(
        self,
        component_id: str,
        name: str,
        interval_km: float = 0.0,
        interval_time_seconds: int | None = None,
        interval_type: IntervalType = IntervalType.REPLACE,
    ) -> ServiceInterval:
        """Add a custom interval, tracking from the component's current totals.

        Raises:
            NotFoundError: If the component does not exist
        """
        async with entity_locks.hold_component(component_id):
            component = await self.session.get(Component, component_id, populate_existing=True)
            if component is None:
                raise NotFoundError("Component", component_id)

            interval = ServiceInterval(
                component_id=component_id,
                name=name,
                type=interval_type.value,
                interval_km=interval_km,
                tracked_km=component.distance_used_km,
                interval_time_seconds=interval_time_seconds,
                tracked_time_seconds=(
                    component.total_time_seconds if interval_time_seconds is not None else None
                ),
            )
            self.session.add(interval)
            await commit_or_conflict(self.session, "Service interval")

        self.logger.info(
            "Service interval added",
            component_id=component_id,
            interval_id=interval.id,
            name=name,
        )
        return interval

    async def update(
        self,
        interval_id: str,
        name: str | None = None,
        interval_km: float | None = None,
        interval_time_seconds: int | None = None,
        clear_interval_time: bool = False,
        interval_type: IntervalType | None = None,
    ) -> ServiceInterval:
        """Edit an interval's schedule.

        Turning the time clock on starts it at zero; turning it off clears
        the tracked time.

        Raises:
            NotFoundError: If the interval does not exist
            ValidationError: If the edit would leave neither a distance nor a time clock
        """
        interval = await self.get(interval_id)
        async with entity_locks.hold_component(interval.component_id):
            interval = await self.get(interval_id)
            new_km = interval.interval_km if interval_km is None else interval_km
            if clear_interval_time:
                new_time = None
            elif interval_time_seconds is not None:
                new_time = interval_time_seconds
            else:
                new_time = interval.interval_time_seconds
            if new_km <= 0 and new_time is None:
                raise ValidationError(
                    "Set a distance interval, a time interval, or both", interval_id=interval_id
                )
            if name is not None:
                interval.name = name
            if interval_km is not None:
                interval.interval_km = interval_km
            if interval_type is not None:
                interval.type = interval_type.value
            if clear_interval_time:
                interval.interval_time_seconds = None
                interval.tracked_time_seconds = None
            elif interval_time_seconds is not None:
                if interval.tracked_time_seconds is None:
                    interval.tracked_time_seconds = 0
                interval.interval_time_seconds = interval_time_seconds
            await commit_or_conflict(self.session, "Service interval", interval_id)
        return interval

    async def delete(self, interval_id: str) -> None:
        """Delete one interval.

        Raises:
            NotFoundError: If the interval does not exist
        """
        interval = await self.get(interval_id)
        async with entity_locks.hold_component(interval.component_id):
            await self.session.delete(interval)
            await commit_or_conflict(self.session, "Service interval", interval_id)
        self.logger.info("Service interval deleted", interval_id=interval_id)

"""Due-for-service worklist and bulk service actions."""

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bike_wear_server.core.errors import BikeWearError
from bike_wear_server.models.bike import Bike
from bike_wear_server.models.component import Component
from bike_wear_server.models.service_interval import ServiceInterval
from bike_wear_server.services.components import ComponentStore
from bike_wear_server.services.preferences import PreferencesService
from bike_wear_server.services.service_intervals import ServiceIntervalStore
from bike_wear_server.services.wear import (
    component_health_percent,
    describe_interval,
    min_health,
    min_interval_health,
    next_due_interval,
)

logger = structlog.get_logger()


class ComponentSortOrder(str, Enum):
    """Sort orders for component lists."""

    TYPE_AZ = "type_az"  # Type A-Z, then name
    NEXT_SERVICE = "next_service"  # Soonest service first
    HEALTH = "health"  # Least healthy first


def sort_components(
    components: Sequence[Component],
    order: ComponentSortOrder,
    intervals_by_component: dict[str, list[ServiceInterval]] | None = None,
) -> list[Component]:
    """Sort any component list. Returns a new list; sorting is stable.

    NEXT_SERVICE ranks by the least healthy interval, HEALTH by lifespan health.
    """
    intervals_by_component = intervals_by_component or {}
    if order is ComponentSortOrder.TYPE_AZ:
        return sorted(components, key=lambda c: (c.type.casefold(), c.name.casefold()))
    if order is ComponentSortOrder.NEXT_SERVICE:
        return sorted(
            components,
            key=lambda c: min_interval_health(intervals_by_component.get(c.id, [])),
        )
    return sorted(components, key=component_health_percent)


@dataclass
class DueFilters:
    """Optional due list filters; search matches name, type or bike name."""

    bike_id: str | None = None
    component_type: str | None = None
    search: str | None = None


@dataclass
class DueItem:
    """One component that is close to or past service."""

    component: Component
    bike_name: str | None
    intervals: list[ServiceInterval]
    component_health: int
    min_health: int
    next_due_text: str

    @property
    def component_id(self) -> str:
        return self.component.id


@dataclass
class BulkResult:
    """Outcome of a bulk action; failures do not stop the remaining items."""

    succeeded: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)


class DueListPlanner:
    """Builds the service worklist across all bikes and the garage."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.components = ComponentStore(session)
        self.intervals = ServiceIntervalStore(session)
        self.logger = logger.bind(service="due_list")

    async def build_due_list(
        self,
        filters: DueFilters | None = None,
        sort: ComponentSortOrder = ComponentSortOrder.NEXT_SERVICE,
        threshold: int | None = None,
    ) -> list[DueItem]:
        """Components whose combined health is at or below the close-to-service threshold.

        Args:
            filters: Bike, type and free-text filters
            sort: Ordering of the result
            threshold: Override for the close-to-service preference

        Returns:
            Due items in the requested order
        """
        filters = filters or DueFilters()
        if threshold is None:
            threshold = (await PreferencesService(self.session).get()).close_to_service_threshold

        bike_names = await self._bike_names()
        components = await self.components.list_components(bike_id=filters.bike_id)
        components = [c for c in components if self._matches(c, filters, bike_names)]
        intervals = await self.intervals.list_for_components(c.id for c in components)

        items = []
        for component in components:
            component_intervals = intervals.get(component.id, [])
            health = min_health(component, component_intervals)
            if health > threshold:
                continue
            next_due = next_due_interval(component_intervals)
            items.append(
                DueItem(
                    component=component,
                    bike_name=bike_names.get(component.bike_id) if component.bike_id else None,
                    intervals=component_intervals,
                    component_health=component_health_percent(component),
                    min_health=health,
                    next_due_text=describe_interval(next_due) if next_due else "",
                )
            )

        if sort is ComponentSortOrder.TYPE_AZ:
            items.sort(key=lambda i: (i.component.type.casefold(), i.component.name.casefold()))
        else:
            items.sort(key=lambda i: i.min_health)
        return items

    async def _bike_names(self) -> dict[str, str]:
        result = await self.session.execute(select(Bike.id, Bike.name))
        return {row.id: row.name for row in result}

    @staticmethod
    def _matches(component: Component, filters: DueFilters, bike_names: dict[str, str]) -> bool:
        if filters.component_type and component.type != filters.component_type:
            return False
        if filters.search:
            needle = filters.search.strip().casefold()
            haystack = [component.name, component.type]
            if component.bike_id and component.bike_id in bike_names:
                haystack.append(bike_names[component.bike_id])
            if not any(needle in text.casefold() for text in haystack):
                return False
        return True

    async def replace_selected(self, component_ids: Sequence[str]) -> BulkResult:
        """Mark every selected component replaced."""
        return await self._bulk("replace", component_ids, self.components.mark_replaced)

    async def inspect_selected(self, component_ids: Sequence[str]) -> BulkResult:
        """Mark inspection complete on every selected component."""
        return await self._bulk("inspect", component_ids, self.components.mark_inspection_complete)

    async def _bulk(
        self,
        action: str,
        component_ids: Sequence[str],
        operation: Callable[[str], Awaitable[object]],
    ) -> BulkResult:
        result = BulkResult()
        for component_id in component_ids:
            try:
                await operation(component_id)
            except Exception as e:
                await self.session.rollback()
                message = e.message if isinstance(e, BikeWearError) else str(e)
                result.failed[component_id] = message
                self.logger.warning(
                    "Bulk action failed for component",
                    action=action,
                    component_id=component_id,
                    error=message,
                    error_type=type(e).__name__,
                )
            else:
                result.succeeded.append(component_id)
        self.logger.info(
            "Bulk action complete",
            action=action,
            succeeded=len(result.succeeded),
            failed=len(result.failed),
        )
        return result

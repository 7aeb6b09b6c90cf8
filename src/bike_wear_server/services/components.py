"""Component store.

Owns Component rows: creation with interval provisioning, default seeding,
install/uninstall, replacement, inspection, snoozing and deletion. Every
public operation is one unit of work that commits; row mutations run under
the component lock, and under the bike lock first when the bike row changes
too.
"""

from datetime import datetime, timedelta

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from bike_wear_server.catalog.seed import SEED_COMPONENTS, SUGGESTED_TYPES, SeedComponent
from bike_wear_server.catalog.intervals import replace_interval_km
from bike_wear_server.catalog.taxonomy import (
    DRIVETRAIN_WEAR_RESET_TYPES,
    ComponentType,
    Position,
)
from bike_wear_server.core.database import commit_or_conflict
from bike_wear_server.core.errors import ConcurrencyConflict, NotFoundError, ValidationError
from bike_wear_server.core.locks import entity_locks
from bike_wear_server.models.base import utcnow
from bike_wear_server.models.bike import Bike
from bike_wear_server.models.component import Component
from bike_wear_server.models.component_context import ComponentContext
from bike_wear_server.models.service_interval import IntervalType
from bike_wear_server.services.preferences import PreferencesService, clamp_threshold
from bike_wear_server.services.service_intervals import (
    ALL_TYPES,
    INSPECTION_TYPES,
    ServiceIntervalStore,
)
from bike_wear_server.services.swaps import SwapLedger

logger = structlog.get_logger()

# Default distance a snooze pushes the alert out by
DEFAULT_SNOOZE_KM = 500.0


def default_lifespan_km(component_type: str) -> float:
    """Lifespan for a type: suggested value, else the replace interval, else 0 (exempt)."""
    parsed = ComponentType.parse(component_type)
    for suggested in SUGGESTED_TYPES:
        if suggested.type is parsed:
            return suggested.lifespan_km
    return replace_interval_km(component_type) or 0.0


class ComponentStore:
    """Store and lifecycle operations for components."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize store.

        Args:
            session: Database session
        """
        self.session = session
        self.intervals = ServiceIntervalStore(session)
        self.swaps = SwapLedger(session)
        self.logger = logger.bind(service="components")

    # -- reads ---------------------------------------------------------------

    async def get(self, component_id: str) -> Component:
        """Load one component.

        Raises:
            NotFoundError: If the component does not exist
        """
        component = await self.session.get(Component, component_id, populate_existing=True)
        if component is None:
            raise NotFoundError("Component", component_id)
        return component

    async def list_components(
        self,
        bike_id: str | None = None,
        garage_only: bool = False,
    ) -> list[Component]:
        """List components, optionally scoped to one bike or to the garage."""
        stmt = select(Component).execution_options(populate_existing=True)
        if garage_only:
            stmt = stmt.where(Component.bike_id.is_(None))
        elif bike_id is not None:
            stmt = stmt.where(Component.bike_id == bike_id)
        stmt = stmt.order_by(Component.created_at, Component.name)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_for_bike(self, bike_id: str) -> int:
        stmt = select(func.count()).select_from(Component).where(Component.bike_id == bike_id)
        return (await self.session.execute(stmt)).scalar_one()

    async def _require_bike(self, bike_id: str) -> Bike:
        bike = await self.session.get(Bike, bike_id, populate_existing=True)
        if bike is None:
            raise NotFoundError("Bike", bike_id)
        return bike

    # -- creation ------------------------------------------------------------

    async def _insert(
        self,
        bike_id: str | None,
        component_type: str,
        name: str,
        lifespan_km: float,
        position: Position = Position.NONE,
        initial_distance_km: float = 0.0,
        initial_time_seconds: int = 0,
        alert_threshold_percent: int = 10,
        make_model: str | None = None,
        notes: str | None = None,
    ) -> Component:
        component = Component(
            bike_id=bike_id,
            type=component_type,
            name=name,
            lifespan_km=lifespan_km,
            position=position.value,
            distance_used_km=initial_distance_km,
            total_time_seconds=initial_time_seconds,
            alert_threshold_percent=alert_threshold_percent,
            make_model=make_model,
            notes=notes,
            installed_at=utcnow(),
        )
        self.session.add(component)
        await self.session.flush()
        await self.intervals.provision_for_component(
            component.id,
            component_type,
            lifespan_km,
            initial_distance_km,
            initial_time_seconds,
        )
        return component

    async def create(
        self,
        component_type: str,
        name: str,
        bike_id: str | None = None,
        lifespan_km: float | None = None,
        position: Position = Position.NONE,
        initial_distance_km: float = 0.0,
        initial_time_seconds: int = 0,
        alert_threshold_percent: int | None = None,
        make_model: str | None = None,
        notes: str | None = None,
    ) -> Component:
        """Add a component to a bike or to the garage, with default intervals.

        Raises:
            ValidationError: On blank name/type or negative numbers
            NotFoundError: If bike_id does not exist
        """
        if not name or not name.strip():
            raise ValidationError("Component name is required")
        if not component_type or not component_type.strip():
            raise ValidationError("Component type is required")
        if lifespan_km is not None and lifespan_km < 0:
            raise ValidationError("Lifespan must not be negative")
        if initial_distance_km < 0 or initial_time_seconds < 0:
            raise ValidationError("Initial distance and time must not be negative")

        component_type = component_type.strip().lower()
        if bike_id is not None:
            await self._require_bike(bike_id)
        if alert_threshold_percent is None:
            prefs = await PreferencesService(self.session).get()
            alert_threshold_percent = prefs.default_alert_threshold_percent

        component = await self._insert(
            bike_id=bike_id,
            component_type=component_type,
            name=name.strip(),
            lifespan_km=lifespan_km if lifespan_km is not None else default_lifespan_km(component_type),
            position=position,
            initial_distance_km=initial_distance_km,
            initial_time_seconds=initial_time_seconds,
            alert_threshold_percent=clamp_threshold(alert_threshold_percent),
            make_model=make_model,
            notes=notes,
        )
        if bike_id is not None:
            await self.swaps.open(component.id, bike_id)
        await self.session.commit()

        self.logger.info(
            "Component created",
            component_id=component.id,
            type=component_type,
            bike_id=bike_id,
        )
        return component

    async def _insert_seed_entries(self, bike_id: str, entries: list[SeedComponent]) -> int:
        prefs = await PreferencesService(self.session).get()
        for entry in entries:
            component = await self._insert(
                bike_id=bike_id,
                component_type=entry.type.value,
                name=entry.name,
                lifespan_km=entry.lifespan_km,
                position=entry.position,
                alert_threshold_percent=prefs.default_alert_threshold_percent,
            )
            await self.swaps.open(component.id, bike_id)
        return len(entries)

    async def seed_defaults_if_empty(self, bike_id: str) -> int:
        """Give a bike the default parts list unless it already has components.

        Returns:
            Number of components created (0 when the bike already had some)
        """
        async with entity_locks.hold_bike(bike_id):
            await self._require_bike(bike_id)
            if await self.count_for_bike(bike_id) > 0:
                return 0
            created = await self._insert_seed_entries(bike_id, list(SEED_COMPONENTS))
            await self.session.commit()

        self.logger.info("Seeded default components", bike_id=bike_id, count=created)
        return created

    async def seed_missing_defaults(self, bike_id: str) -> int:
        """Backfill catalog entries whose (type, position) pair the bike lacks.

        Returns:
            Number of components created
        """
        async with entity_locks.hold_bike(bike_id):
            await self._require_bike(bike_id)
            existing = {(c.type, c.position) for c in await self.list_components(bike_id=bike_id)}
            missing = [
                entry
                for entry in SEED_COMPONENTS
                if (entry.type.value, entry.position.value) not in existing
            ]
            if not missing:
                return 0
            created = await self._insert_seed_entries(bike_id, missing)
            await self.session.commit()

        self.logger.info("Backfilled default components", bike_id=bike_id, count=created)
        return created

    # -- edits ---------------------------------------------------------------

    async def edit(
        self,
        component_id: str,
        name: str | None = None,
        make_model: str | None = None,
        notes: str | None = None,
        lifespan_km: float | None = None,
        distance_used_km: float | None = None,
        total_time_seconds: int | None = None,
        position: Position | None = None,
        reset_speed_stats: bool = False,
    ) -> Component:
        """Manual edit of a component. Distance and time are clamped at 0.

        Raises:
            ValidationError: On a blank name or negative lifespan
        """
        if name is not None and not name.strip():
            raise ValidationError("Component name is required")
        if lifespan_km is not None and lifespan_km < 0:
            raise ValidationError("Lifespan must not be negative")

        async with entity_locks.hold_component(component_id):
            component = await self.get(component_id)
            if name is not None:
                component.name = name.strip()
            if make_model is not None:
                component.make_model = make_model
            if notes is not None:
                component.notes = notes
            if lifespan_km is not None:
                component.lifespan_km = lifespan_km
            if distance_used_km is not None:
                component.distance_used_km = max(0.0, distance_used_km)
            if total_time_seconds is not None:
                component.total_time_seconds = max(0, total_time_seconds)
            if position is not None:
                component.position = position.value
            if reset_speed_stats:
                component.avg_speed_kmh = 0.0
                component.max_speed_kmh = 0.0
                component.max_speed_bike_id = None
            await commit_or_conflict(self.session, "Component", component_id)
        return component

    async def snooze(
        self,
        component_id: str,
        km: float | None = None,
        until: datetime | None = None,
        duration: timedelta | None = None,
    ) -> Component:
        """Suppress alerts for a distance from now and/or until a time.

        With no arguments the alert is snoozed for DEFAULT_SNOOZE_KM.
        """
        if km is not None and km <= 0:
            raise ValidationError("Snooze distance must be positive")
        if duration is not None:
            until = utcnow() + duration
        if km is None and until is None:
            km = DEFAULT_SNOOZE_KM

        async with entity_locks.hold_component(component_id):
            component = await self.get(component_id)
            if km is not None:
                component.alert_snooze_until_km = component.distance_used_km + km
            if until is not None:
                component.alert_snooze_until_time = until
            await commit_or_conflict(self.session, "Component", component_id)

        self.logger.info(
            "Component alert snoozed",
            component_id=component_id,
            until_km=component.alert_snooze_until_km,
            until_time=until.isoformat() if until else None,
        )
        return component

    async def clear_snooze(self, component_id: str) -> Component:
        async with entity_locks.hold_component(component_id):
            component = await self.get(component_id)
            component.alert_snooze_until_km = None
            component.alert_snooze_until_time = None
            await commit_or_conflict(self.session, "Component", component_id)
        return component

    async def configure_alerts(
        self,
        component_id: str,
        enabled: bool | None = None,
        threshold_percent: int | None = None,
    ) -> Component:
        """Enable/disable alerts or change the threshold (clamped to 1..100)."""
        async with entity_locks.hold_component(component_id):
            component = await self.get(component_id)
            if enabled is not None:
                component.alerts_enabled = enabled
            if threshold_percent is not None:
                component.alert_threshold_percent = clamp_threshold(threshold_percent)
            await commit_or_conflict(self.session, "Component", component_id)
        return component

    # -- lifecycle -----------------------------------------------------------

    async def install(self, component_id: str, bike_id: str) -> Component:
        """Install a component on a bike, closing any previous stint.

        Raises:
            NotFoundError: If the component or bike does not exist
        """
        await self._require_bike(bike_id)
        async with entity_locks.hold_component(component_id):
            component = await self.get(component_id)
            now = utcnow()
            await self.swaps.close_open(component_id, at=now)
            await self.swaps.open(component_id, bike_id, at=now)
            component.bike_id = bike_id
            await commit_or_conflict(self.session, "Component", component_id)

        self.logger.info("Component installed", component_id=component_id, bike_id=bike_id)
        return component

    async def uninstall(self, component_id: str) -> Component:
        """Move a component to the garage, closing its open stint."""
        async with entity_locks.hold_component(component_id):
            component = await self.get(component_id)
            previous_bike_id = component.bike_id
            await self.swaps.close_open(component_id)
            component.bike_id = None
            await commit_or_conflict(self.session, "Component", component_id)

        self.logger.info(
            "Component uninstalled",
            component_id=component_id,
            previous_bike_id=previous_bike_id,
        )
        return component

    async def _current_bike_id(self, component_id: str) -> str | None:
        component = await self.get(component_id)
        return component.bike_id

    async def mark_replaced(self, component_id: str) -> Component:
        """Record that the part was swapped for a new one.

        Zeroes usage, restarts every interval, clears snoozes, and updates the
        bike's chain replacement counter for drivetrain parts.

        Raises:
            NotFoundError: If the component does not exist
            ConcurrencyConflict: If the component moved bikes mid-operation
        """
        bike_id = await self._current_bike_id(component_id)
        async with entity_locks.hold_bike(bike_id), entity_locks.hold_component(component_id):
            component = await self.get(component_id)
            if component.bike_id != bike_id:
                raise ConcurrencyConflict("Component", component_id)

            component.distance_used_km = 0.0
            component.total_time_seconds = 0
            component.installed_at = utcnow()
            component.alert_snooze_until_km = None
            component.alert_snooze_until_time = None
            await self.intervals.reset_types(component_id, ALL_TYPES)

            if bike_id is not None:
                await self._update_chain_counter(bike_id, ComponentType.parse(component.type))
            await commit_or_conflict(self.session, "Component", component_id)

        self.logger.info(
            "Component replaced",
            component_id=component_id,
            type=component.type,
            bike_id=bike_id,
        )
        return component

    async def _update_chain_counter(self, bike_id: str, component_type: ComponentType) -> None:
        if component_type is ComponentType.CHAIN:
            bike = await self._require_bike(bike_id)
            bike.chain_replacement_count += 1
        elif component_type in DRIVETRAIN_WEAR_RESET_TYPES:
            bike = await self._require_bike(bike_id)
            bike.chain_replacement_count = 0
        else:
            return
        await self.session.flush()
        self.logger.debug(
            "Chain replacement count updated",
            bike_id=bike_id,
            count=bike.chain_replacement_count,
        )

    async def mark_inspection_complete(self, component_id: str) -> int:
        """Restart the inspection and grease intervals; usage is untouched.

        Returns:
            Number of intervals reset
        """
        async with entity_locks.hold_component(component_id):
            await self.get(component_id)
            count = await self.intervals.reset_types(component_id, INSPECTION_TYPES)
            await commit_or_conflict(self.session, "Component", component_id)

        self.logger.info("Inspection complete", component_id=component_id, intervals=count)
        return count

    async def reset_interval_types(self, component_id: str, types: list[IntervalType]) -> int:
        """Restart the component's intervals of the given types."""
        async with entity_locks.hold_component(component_id):
            await self.get(component_id)
            count = await self.intervals.reset_types(component_id, types)
            await commit_or_conflict(self.session, "Component", component_id)
        return count

    async def delete(self, component_id: str) -> None:
        """Delete a component with its intervals, swap history and context."""
        async with entity_locks.hold_component(component_id):
            component = await self.get(component_id)
            await self.intervals.delete_for_component(component_id)
            await self.swaps.delete_for_component(component_id)
            await self.session.execute(
                delete(ComponentContext).where(ComponentContext.component_id == component_id)
            )
            await self.session.delete(component)
            await commit_or_conflict(self.session, "Component", component_id)

        self.logger.info("Component deleted", component_id=component_id)

"""Bike operations and the garage overview."""

from dataclasses import dataclass

import structlog
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from bike_wear_server.core.database import commit_or_conflict
from bike_wear_server.core.errors import NotFoundError, ValidationError
from bike_wear_server.core.locks import entity_locks
from bike_wear_server.models.bike import Bike
from bike_wear_server.models.component import Component
from bike_wear_server.models.ride import Ride
from bike_wear_server.services.components import ComponentStore
from bike_wear_server.services.preferences import PreferencesService
from bike_wear_server.services.swaps import SwapLedger
from bike_wear_server.services.wear import HEALTHY, component_health_percent

logger = structlog.get_logger()


@dataclass
class BikeOverview:
    """Garage card for one bike."""

    bike: Bike
    health: int
    needs_attention: bool
    component_count: int


@dataclass
class GarageOverview:
    bikes: list[BikeOverview]
    garage_components: list[Component]


class BikeService:
    """Bike CRUD, roll-up resets and the drivetrain wear counter."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize service.

        Args:
            session: Database session
        """
        self.session = session
        self.components = ComponentStore(session)
        self.logger = logger.bind(service="bikes")

    async def get(self, bike_id: str) -> Bike:
        """Load one bike.

        Raises:
            NotFoundError: If the bike does not exist
        """
        bike = await self.session.get(Bike, bike_id, populate_existing=True)
        if bike is None:
            raise NotFoundError("Bike", bike_id)
        return bike

    async def list_bikes(self) -> list[Bike]:
        stmt = select(Bike).order_by(Bike.created_at).execution_options(populate_existing=True)
        return list((await self.session.execute(stmt)).scalars().all())

    async def create(
        self,
        name: str,
        make: str | None = None,
        model: str | None = None,
        year: int | None = None,
        description: str | None = None,
        seed_defaults: bool = True,
    ) -> Bike:
        """Create a bike and give it the default parts list.

        Raises:
            ValidationError: If the name is blank
        """
        if not name or not name.strip():
            raise ValidationError("Bike name is required", field="name")

        bike = Bike(
            name=name.strip(),
            make=make,
            model=model,
            year=year,
            description=description,
        )
        self.session.add(bike)
        await self.session.commit()
        self.logger.info("Bike created", bike_id=bike.id, name=bike.name)

        if seed_defaults:
            await self.components.seed_defaults_if_empty(bike.id)
        return bike

    async def edit(
        self,
        bike_id: str,
        name: str | None = None,
        make: str | None = None,
        model: str | None = None,
        year: int | None = None,
        description: str | None = None,
    ) -> Bike:
        """Edit display fields only; roll-ups are not editable here."""
        if name is not None and not name.strip():
            raise ValidationError("Bike name is required", field="name")

        async with entity_locks.hold_bike(bike_id):
            bike = await self.get(bike_id)
            if name is not None:
                bike.name = name.strip()
            if make is not None:
                bike.make = make
            if model is not None:
                bike.model = model
            if year is not None:
                bike.year = year
            if description is not None:
                bike.description = description
            await commit_or_conflict(self.session, "Bike", bike_id)
        return bike

    async def reset_stats(self, bike_id: str) -> Bike:
        """Zero the bike's ride roll-ups. Components and rides are untouched."""
        async with entity_locks.hold_bike(bike_id):
            bike = await self.get(bike_id)
            bike.total_distance_km = 0.0
            bike.total_time_seconds = 0
            bike.avg_speed_kmh = 0.0
            bike.max_speed_kmh = 0.0
            bike.total_elev_gain_m = 0.0
            bike.total_elev_loss_m = 0.0
            bike.last_ride_at = None
            await commit_or_conflict(self.session, "Bike", bike_id)

        self.logger.info("Bike stats reset", bike_id=bike_id)
        return bike

    async def reset_chain_replacement_count(self, bike_id: str) -> Bike:
        """Manually clear the drivetrain advisory."""
        async with entity_locks.hold_bike(bike_id):
            bike = await self.get(bike_id)
            bike.chain_replacement_count = 0
            await commit_or_conflict(self.session, "Bike", bike_id)
        return bike

    async def delete(self, bike_id: str) -> None:
        """Delete a bike.

        Components are moved to the garage, rides lose their bike reference,
        and the bike's swap history is removed.
        """
        async with entity_locks.hold_bike(bike_id):
            bike = await self.get(bike_id)
            detached = await self.session.execute(
                update(Component)
                .where(Component.bike_id == bike_id)
                .values(bike_id=None, version=Component.version + 1)
                .execution_options(synchronize_session=False)
            )
            await self.session.execute(
                update(Ride)
                .where(Ride.bike_id == bike_id)
                .values(bike_id=None)
                .execution_options(synchronize_session=False)
            )
            await SwapLedger(self.session).delete_for_bike(bike_id)
            await self.session.delete(bike)
            await commit_or_conflict(self.session, "Bike", bike_id)

        self.logger.info("Bike deleted", bike_id=bike_id, detached_components=detached.rowcount)

    async def most_recently_ridden(self) -> Bike | None:
        stmt = (
            select(Bike)
            .where(Bike.last_ride_at.is_not(None))
            .order_by(Bike.last_ride_at.desc())
            .limit(1)
        )
        return (await self.session.execute(stmt)).scalars().first()

    async def overview(self) -> GarageOverview:
        """Per-bike health (worst component) plus unassigned components."""
        threshold = (await PreferencesService(self.session).get()).close_to_service_threshold
        components = await self.components.list_components()

        by_bike: dict[str, list[Component]] = {}
        garage: list[Component] = []
        for component in components:
            if component.bike_id is None:
                garage.append(component)
            else:
                by_bike.setdefault(component.bike_id, []).append(component)

        cards = []
        for bike in await self.list_bikes():
            bike_components = by_bike.get(bike.id, [])
            health = min((component_health_percent(c) for c in bike_components), default=HEALTHY)
            cards.append(
                BikeOverview(
                    bike=bike,
                    health=health,
                    needs_attention=health <= threshold,
                    component_count=len(bike_components),
                )
            )
        return GarageOverview(bikes=cards, garage_components=garage)

"""Ride aggregation.

Rolls a finished ride up into its bike's totals, the totals of every
component installed on that bike, and the tracked values of those
components' service intervals, then checks whether anything needs an alert.

A ride is persisted before anything else and is never lost. The roll-up runs
as a single transaction under the bike lock; if it fails the transaction is
rolled back, the ride stays with aggregated_at unset, and a PARTIAL result
tells the caller which step failed so it can retry. Aggregation is not
idempotent, so a ride that has been aggregated is refused on retry.
"""

import math
from contextlib import AsyncExitStack
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from bike_wear_server.core.errors import (
    BikeWearError,
    ConcurrencyConflict,
    NotFoundError,
    ValidationError,
)
from bike_wear_server.core.locks import EntityLocks, entity_locks
from bike_wear_server.models.base import as_utc, utcnow
from bike_wear_server.models.bike import Bike
from bike_wear_server.models.component import Component
from bike_wear_server.models.ride import Ride, RideSource
from bike_wear_server.services.alerts import AlertEvaluator, NeedsAlert, NotificationSink
from bike_wear_server.services.service_intervals import ServiceIntervalStore

logger = structlog.get_logger()


class AggregationStatus(str, Enum):
    """Outcome of applying a ride.

    Attributes:
        SUCCESS: Ride stored and rolled up
        PARTIAL: Ride stored, roll-up failed and was rolled back
        SKIPPED: Ride stored, not attributed to a bike so nothing to roll up
    """

    SUCCESS = "success"
    PARTIAL = "partial"
    SKIPPED = "skipped"


class AggregationStep(str, Enum):
    """Roll-up steps, in execution order."""

    LOAD_BIKE = "load_bike"
    BIKE_TOTALS = "bike_totals"
    COMPONENTS = "components"
    INTERVALS = "intervals"
    COMMIT = "commit"


@dataclass
class RideInput:
    """A finished ride summary handed over by a ride-capture collaborator."""

    distance_km: float
    duration_ms: int
    started_at: datetime
    ended_at: datetime
    bike_id: str | None = None
    avg_speed_kmh: float = 0.0
    max_speed_kmh: float = 0.0
    elev_gain_m: float = 0.0
    elev_loss_m: float = 0.0
    source: RideSource = RideSource.APP

    def validate(self) -> None:
        """Raise ValidationError for impossible values."""
        if self.distance_km < 0:
            raise ValidationError("Ride distance must not be negative", field="distance_km")
        if self.duration_ms < 0:
            raise ValidationError("Ride duration must not be negative", field="duration_ms")
        if self.max_speed_kmh < 0 or self.avg_speed_kmh < 0:
            raise ValidationError("Ride speeds must not be negative")
        if self.elev_gain_m < 0 or self.elev_loss_m < 0:
            raise ValidationError("Elevation gain and loss must not be negative")
        if as_utc(self.ended_at) < as_utc(self.started_at):
            raise ValidationError("Ride cannot end before it starts", field="ended_at")


@dataclass
class AggregationResult:
    """What happened to one ride."""

    status: AggregationStatus
    ride_id: str
    bike_id: str | None = None
    failed_step: AggregationStep | None = None
    errors: dict[str, str] = field(default_factory=dict)
    components_updated: int = 0
    alert: NeedsAlert | None = None

    @property
    def ok(self) -> bool:
        return self.status is not AggregationStatus.PARTIAL

    def to_log_dict(self) -> dict[str, Any]:
        """Convert to dict for structured logging."""
        return {
            "status": self.status.value,
            "ride_id": self.ride_id,
            "bike_id": self.bike_id,
            "failed_step": self.failed_step.value if self.failed_step else None,
            "components_updated": self.components_updated,
            **self.errors,
        }


@dataclass
class ImportResult:
    """Counts for a batch of imported rides."""

    imported: int = 0
    duplicates: int = 0
    aggregated: int = 0
    skipped: int = 0
    partial: int = 0
    results: list[AggregationResult] = field(default_factory=list)


def duration_seconds(duration_ms: int) -> int:
    """Ride duration in whole seconds, rounded half up, never negative."""
    return max(0, math.floor(duration_ms / 1000 + 0.5))


def cumulative_avg_speed(distance_km: float, time_seconds: int, previous: float) -> float:
    """Average speed from cumulative totals; keeps the previous value when no time has elapsed."""
    if time_seconds > 0:
        return distance_km / (time_seconds / 3600)
    return previous


class RideAggregator:
    """Applies finished rides to bike and component state."""

    def __init__(
        self,
        session: AsyncSession,
        sink: NotificationSink | None = None,
        locks: EntityLocks | None = None,
    ) -> None:
        """Initialize aggregator.

        Args:
            session: Database session
            sink: Where alert notifications go (configured default if None)
            locks: Lock registry (process-wide registry if None)
        """
        self.session = session
        self.locks = locks or entity_locks
        self.intervals = ServiceIntervalStore(session)
        self.alerts = AlertEvaluator(session, sink)
        self.logger = logger.bind(service="ride_aggregator")

    async def apply(self, ride_input: RideInput) -> AggregationResult:
        """Store a finished ride and roll it up.

        Raises:
            ValidationError: If the ride summary is invalid (nothing is stored)
            NotFoundError: If the ride names a bike that does not exist
        """
        ride_input.validate()
        bike_id = ride_input.bike_id
        if bike_id is not None and await self.session.get(Bike, bike_id) is None:
            raise NotFoundError("Bike", bike_id)

        ride = self._build_ride(ride_input)
        self.session.add(ride)
        await self.session.commit()
        ride_id = ride.id

        self.logger.info(
            "Ride recorded",
            ride_id=ride_id,
            bike_id=bike_id,
            distance_km=ride_input.distance_km,
            source=ride_input.source.value,
        )

        if bike_id is None:
            return AggregationResult(status=AggregationStatus.SKIPPED, ride_id=ride_id)
        return await self._aggregate(ride_id, bike_id)

    async def retry(self, ride_id: str) -> AggregationResult:
        """Re-run the roll-up for a ride whose aggregation failed.

        Raises:
            NotFoundError: If the ride does not exist
            ValidationError: If the ride was already aggregated
        """
        ride = await self.session.get(Ride, ride_id, populate_existing=True)
        if ride is None:
            raise NotFoundError("Ride", ride_id)
        if ride.aggregated_at is not None:
            raise ValidationError("Ride has already been aggregated", ride_id=ride_id)
        if ride.bike_id is None:
            return AggregationResult(status=AggregationStatus.SKIPPED, ride_id=ride_id)

        self.logger.info("Retrying ride aggregation", ride_id=ride_id, bike_id=ride.bike_id)
        return await self._aggregate(ride_id, ride.bike_id)

    async def import_rides(self, rides: list[RideInput]) -> ImportResult:
        """Apply a batch of rides, skipping ones already stored.

        A ride counts as already stored when a ride from the same source
        started at the same instant. The whole batch is validated before
        anything is stored.
        """
        for ride_input in rides:
            ride_input.validate()

        summary = ImportResult()
        for ride_input in rides:
            if await self._exists(ride_input):
                summary.duplicates += 1
                continue
            result = await self.apply(ride_input)
            summary.imported += 1
            summary.results.append(result)
            if result.status is AggregationStatus.SUCCESS:
                summary.aggregated += 1
            elif result.status is AggregationStatus.SKIPPED:
                summary.skipped += 1
            else:
                summary.partial += 1

        self.logger.info(
            "Ride import complete",
            imported=summary.imported,
            duplicates=summary.duplicates,
            partial=summary.partial,
        )
        return summary

    async def get(self, ride_id: str) -> Ride:
        ride = await self.session.get(Ride, ride_id, populate_existing=True)
        if ride is None:
            raise NotFoundError("Ride", ride_id)
        return ride

    async def list_rides(
        self,
        bike_id: str | None = None,
        pending_only: bool = False,
        limit: int = 100,
    ) -> list[Ride]:
        """Most recent rides first, optionally only those still awaiting roll-up."""
        stmt = select(Ride)
        if bike_id is not None:
            stmt = stmt.where(Ride.bike_id == bike_id)
        if pending_only:
            stmt = stmt.where(Ride.aggregated_at.is_(None), Ride.bike_id.is_not(None))
        stmt = stmt.order_by(Ride.ended_at.desc()).limit(limit)
        return list((await self.session.execute(stmt)).scalars().all())

    async def _exists(self, ride_input: RideInput) -> bool:
        stmt = select(Ride.id).where(
            Ride.source == ride_input.source.value,
            Ride.started_at == ride_input.started_at,
        )
        return (await self.session.execute(stmt)).first() is not None

    @staticmethod
    def _build_ride(ride_input: RideInput) -> Ride:
        return Ride(
            bike_id=ride_input.bike_id,
            distance_km=ride_input.distance_km,
            duration_ms=ride_input.duration_ms,
            avg_speed_kmh=ride_input.avg_speed_kmh,
            max_speed_kmh=ride_input.max_speed_kmh,
            elev_gain_m=ride_input.elev_gain_m,
            elev_loss_m=ride_input.elev_loss_m,
            started_at=ride_input.started_at,
            ended_at=ride_input.ended_at,
            source=ride_input.source.value,
        )

    async def _aggregate(self, ride_id: str, bike_id: str) -> AggregationResult:
        log = self.logger.bind(ride_id=ride_id, bike_id=bike_id)
        step = AggregationStep.LOAD_BIKE
        updated = 0

        try:
            async with self.locks.hold_bike(bike_id):
                ride = await self.session.get(Ride, ride_id, populate_existing=True)
                bike = await self.session.get(Bike, bike_id, populate_existing=True)
                if ride is None:
                    raise NotFoundError("Ride", ride_id)
                if bike is None:
                    raise NotFoundError("Bike", bike_id)
                # Another writer may have rolled this ride up while we waited
                if ride.aggregated_at is not None:
                    raise ValidationError("Ride has already been aggregated", ride_id=ride_id)
                seconds = duration_seconds(ride.duration_ms)

                step = AggregationStep.BIKE_TOTALS
                self._roll_up_bike(bike, ride, seconds)
                await self.session.flush()

                step = AggregationStep.COMPONENTS
                async with AsyncExitStack() as stack:
                    component_ids = await self._installed_component_ids(bike_id)
                    for component_id in component_ids:
                        await stack.enter_async_context(self.locks.hold_component(component_id))

                    for component_id in component_ids:
                        step = AggregationStep.COMPONENTS
                        component = await self.session.get(
                            Component, component_id, populate_existing=True
                        )
                        if component is None or component.bike_id != bike_id:
                            continue
                        self._roll_up_component(component, bike_id, ride, seconds)
                        await self.session.flush()

                        step = AggregationStep.INTERVALS
                        await self.intervals.advance(
                            component.id,
                            component.distance_used_km,
                            component.total_time_seconds,
                        )
                        updated += 1

                    step = AggregationStep.COMMIT
                    ride.aggregated_at = utcnow()
                    await self.session.commit()

        except ValidationError:
            await self.session.rollback()
            log.warning("Ride already aggregated, nothing applied")
            raise
        except Exception as e:
            await self.session.rollback()
            error = ConcurrencyConflict("Bike", bike_id) if isinstance(e, StaleDataError) else e
            message = error.message if isinstance(error, BikeWearError) else str(error)
            result = AggregationResult(
                status=AggregationStatus.PARTIAL,
                ride_id=ride_id,
                bike_id=bike_id,
                failed_step=step,
                errors={"error_type": type(error).__name__, "error": message},
            )
            log.error("Ride aggregation failed", **result.to_log_dict())
            return result

        result = AggregationResult(
            status=AggregationStatus.SUCCESS,
            ride_id=ride_id,
            bike_id=bike_id,
            components_updated=updated,
        )
        log.info("Ride aggregated", components_updated=updated)

        # Locks are released; alerting never changes the outcome
        try:
            result.alert = await self.alerts.evaluate_and_notify(bike_id)
        except Exception as e:
            log.error("Alert evaluation failed", error=str(e))
        return result

    async def _installed_component_ids(self, bike_id: str) -> list[str]:
        stmt = select(Component.id).where(Component.bike_id == bike_id).order_by(Component.id)
        return list((await self.session.execute(stmt)).scalars().all())

    @staticmethod
    def _roll_up_bike(bike: Bike, ride: Ride, seconds: int) -> None:
        bike.total_distance_km += ride.distance_km
        bike.total_time_seconds += seconds
        bike.avg_speed_kmh = cumulative_avg_speed(
            bike.total_distance_km, bike.total_time_seconds, bike.avg_speed_kmh
        )
        bike.max_speed_kmh = max(bike.max_speed_kmh, ride.max_speed_kmh)
        bike.total_elev_gain_m += ride.elev_gain_m
        bike.total_elev_loss_m += ride.elev_loss_m
        bike.last_ride_at = ride.ended_at

    @staticmethod
    def _roll_up_component(component: Component, bike_id: str, ride: Ride, seconds: int) -> None:
        component.distance_used_km += ride.distance_km
        component.total_time_seconds += seconds
        component.avg_speed_kmh = cumulative_avg_speed(
            component.distance_used_km, component.total_time_seconds, component.avg_speed_kmh
        )
        # Ties go to the newest ride
        if ride.max_speed_kmh >= component.max_speed_kmh:
            component.max_speed_kmh = ride.max_speed_kmh
            component.max_speed_bike_id = bike_id

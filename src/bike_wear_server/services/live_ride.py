"""In-progress ride state.

ActiveRideSignal is the process-wide record of which bike, if any, is being
ridden right now. LiveRideTracker accumulates samples for that ride and hands
a finished RideInput to the aggregator when it stops.

Live average speed is a running mean over samples. It is not the same
figure as the cumulative distance/time average computed when a ride is
aggregated, and the two must stay separate.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

import structlog

from bike_wear_server.core.errors import ValidationError
from bike_wear_server.models.base import utcnow
from bike_wear_server.models.ride import RideSource
from bike_wear_server.services.rides import RideInput

logger = structlog.get_logger()

Listener = Callable[["ActiveRide | None"], None]


@dataclass(frozen=True)
class ActiveRide:
    bike_id: str
    started_at: datetime


class ActiveRideSignal:
    """Observable "a ride is in progress" state.

    Set when a ride starts, cleared when it stops or when a crashed ride is
    recovered. Listeners are called synchronously on every change.
    """

    def __init__(self) -> None:
        self._current: ActiveRide | None = None
        self._listeners: list[Listener] = []

    @property
    def current(self) -> ActiveRide | None:
        return self._current

    @property
    def is_active(self) -> bool:
        return self._current is not None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that unsubscribes it."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def set(self, bike_id: str, started_at: datetime | None = None) -> ActiveRide:
        if self._current is not None:
            raise ValidationError("A ride is already in progress", bike_id=self._current.bike_id)
        self._current = ActiveRide(bike_id=bike_id, started_at=started_at or utcnow())
        self._emit()
        return self._current

    def clear(self) -> None:
        if self._current is None:
            return
        self._current = None
        self._emit()

    def recover(self) -> ActiveRide | None:
        """Clear a ride left behind by a crashed tracker; returns what was cleared."""
        stale = self._current
        if stale is not None:
            logger.warning("Clearing stale active ride", bike_id=stale.bike_id)
            self.clear()
        return stale

    def _emit(self) -> None:
        for listener in list(self._listeners):
            listener(self._current)


@dataclass
class LiveRideState:
    """Running totals of the ride in progress."""

    bike_id: str
    started_at: datetime
    distance_km: float = 0.0
    current_speed_kmh: float = 0.0
    avg_speed_kmh: float = 0.0
    max_speed_kmh: float = 0.0
    elev_gain_m: float = 0.0
    elev_loss_m: float = 0.0
    sample_count: int = 0
    last_altitude_m: float | None = None
    paused_at: datetime | None = None
    paused_total: timedelta = timedelta(0)

    @property
    def is_paused(self) -> bool:
        return self.paused_at is not None


class LiveRideTracker:
    """Accumulates location-derived samples for the active ride."""

    def __init__(self, signal: ActiveRideSignal) -> None:
        self.signal = signal
        self.state: LiveRideState | None = None
        self.logger = logger.bind(service="live_ride")

    def _require_state(self) -> LiveRideState:
        if self.state is None:
            raise ValidationError("No ride in progress")
        return self.state

    def start(self, bike_id: str, at: datetime | None = None) -> LiveRideState:
        active = self.signal.set(bike_id, at)
        self.state = LiveRideState(bike_id=bike_id, started_at=active.started_at)
        self.logger.info("Live ride started", bike_id=bike_id)
        return self.state

    def add_sample(
        self,
        distance_km: float,
        speed_kmh: float,
        altitude_m: float | None = None,
    ) -> LiveRideState:
        """Add one segment travelled since the previous sample.

        Samples arriving while paused are ignored.
        """
        state = self._require_state()
        if state.is_paused:
            return state
        if distance_km < 0:
            raise ValidationError("Sample distance must not be negative")

        speed = max(0.0, speed_kmh)
        state.distance_km += distance_km
        state.current_speed_kmh = speed
        state.max_speed_kmh = max(state.max_speed_kmh, speed)
        if altitude_m is not None:
            if state.last_altitude_m is not None:
                delta = altitude_m - state.last_altitude_m
                state.elev_gain_m += max(0.0, delta)
                state.elev_loss_m += max(0.0, -delta)
            state.last_altitude_m = altitude_m

        state.sample_count += 1
        state.avg_speed_kmh += (speed - state.avg_speed_kmh) / state.sample_count
        return state

    def pause(self, at: datetime | None = None) -> LiveRideState:
        state = self._require_state()
        if not state.is_paused:
            state.paused_at = at or utcnow()
            # Altitude after the pause is not compared against the old fix
            state.last_altitude_m = None
        return state

    def resume(self, at: datetime | None = None) -> LiveRideState:
        state = self._require_state()
        if state.paused_at is not None:
            state.paused_total += (at or utcnow()) - state.paused_at
            state.paused_at = None
        return state

    def stop(self, at: datetime | None = None) -> RideInput:
        """Finish the ride and return its summary; moving time excludes pauses."""
        state = self._require_state()
        ended_at = at or utcnow()
        if state.paused_at is not None:
            state.paused_total += ended_at - state.paused_at
            state.paused_at = None

        moving = ended_at - state.started_at - state.paused_total
        ride = RideInput(
            bike_id=state.bike_id,
            distance_km=state.distance_km,
            duration_ms=max(0, int(moving.total_seconds() * 1000)),
            avg_speed_kmh=state.avg_speed_kmh,
            max_speed_kmh=state.max_speed_kmh,
            elev_gain_m=state.elev_gain_m,
            elev_loss_m=state.elev_loss_m,
            started_at=state.started_at,
            ended_at=ended_at,
            source=RideSource.APP,
        )
        self.state = None
        self.signal.clear()
        self.logger.info("Live ride stopped", bike_id=ride.bike_id, distance_km=ride.distance_km)
        return ride

    def abandon(self) -> ActiveRide | None:
        """Drop the ride in progress without producing a summary."""
        self.state = None
        return self.signal.recover()


active_ride_signal = ActiveRideSignal()
live_tracker = LiveRideTracker(active_ride_signal)

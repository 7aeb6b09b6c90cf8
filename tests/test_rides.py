"""Tests for ride aggregation."""

from datetime import timedelta

import pytest
from sqlalchemy import select

from bike_wear_server.core.errors import NotFoundError, ValidationError
from bike_wear_server.models.ride import Ride, RideSource
from bike_wear_server.services.bikes import BikeService
from bike_wear_server.services.components import ComponentStore
from bike_wear_server.services.rides import (
    AggregationStatus,
    AggregationStep,
    RideAggregator,
    cumulative_avg_speed,
    duration_seconds,
)
from tests.fixtures.rides import RIDE_START, make_ride


def test_duration_seconds_rounds_half_up():
    assert duration_seconds(3_600_000) == 3600
    assert duration_seconds(1_500) == 2
    assert duration_seconds(1_499) == 1
    assert duration_seconds(-1_000) == 0


def test_cumulative_avg_speed():
    assert cumulative_avg_speed(15.0, 4800, 10.0) == pytest.approx(11.25)
    assert cumulative_avg_speed(0.0, 0, 12.5) == 12.5


@pytest.mark.asyncio
async def test_apply_rolls_up_bike_components_and_intervals(async_session, bike, chain, sink):
    bike.total_distance_km = 10.0
    bike.total_time_seconds = 1200
    await async_session.commit()

    result = await RideAggregator(async_session, sink).apply(
        make_ride(bike.id, distance_km=5.0, duration_ms=3_600_000, max_speed_kmh=42.0)
    )

    assert result.status is AggregationStatus.SUCCESS
    assert result.components_updated == 1

    bike = await BikeService(async_session).get(bike.id)
    assert bike.total_distance_km == 15.0
    assert bike.total_time_seconds == 4800
    assert bike.avg_speed_kmh == pytest.approx(11.25)
    assert bike.max_speed_kmh == 42.0
    assert bike.last_ride_at is not None

    store = ComponentStore(async_session)
    component = await store.get(chain.id)
    assert component.distance_used_km == 5.0
    assert component.total_time_seconds == 3600
    assert component.avg_speed_kmh == pytest.approx(5.0)
    assert component.max_speed_kmh == 42.0
    assert component.max_speed_bike_id == bike.id
    for interval in await store.intervals.list_for_component(chain.id):
        assert interval.tracked_km == 5.0

    ride = await RideAggregator(async_session, sink).get(result.ride_id)
    assert ride.aggregated_at is not None


@pytest.mark.asyncio
async def test_garage_components_are_not_worn(async_session, bike, chain, sink):
    store = ComponentStore(async_session)
    spare = await store.create(component_type="chain", name="Spare chain")

    await RideAggregator(async_session, sink).apply(make_ride(bike.id, distance_km=20.0))

    assert (await store.get(spare.id)).distance_used_km == 0.0
    assert (await store.get(chain.id)).distance_used_km == 20.0


@pytest.mark.asyncio
async def test_ride_without_bike_is_stored_but_skipped(async_session, bike, chain, sink):
    result = await RideAggregator(async_session, sink).apply(make_ride(None, distance_km=50.0))

    assert result.status is AggregationStatus.SKIPPED
    assert (await BikeService(async_session).get(bike.id)).total_distance_km == 0.0
    assert (await ComponentStore(async_session).get(chain.id)).distance_used_km == 0.0
    rides = (await async_session.execute(select(Ride))).scalars().all()
    assert len(rides) == 1
    sink.send.assert_not_awaited()


@pytest.mark.asyncio
async def test_invalid_ride_is_rejected_before_storing(async_session, bike, sink):
    ride = make_ride(bike.id)
    ride.ended_at = ride.started_at - timedelta(minutes=1)

    with pytest.raises(ValidationError):
        await RideAggregator(async_session, sink).apply(ride)

    assert (await async_session.execute(select(Ride))).scalars().all() == []


@pytest.mark.asyncio
async def test_ride_for_missing_bike(async_session, sink):
    with pytest.raises(NotFoundError):
        await RideAggregator(async_session, sink).apply(make_ride("missing"))


@pytest.mark.asyncio
async def test_max_speed_tie_goes_to_newest_ride(async_session, bike, chain, sink):
    other = await BikeService(async_session).create(name="Gravel", seed_defaults=False)
    aggregator = RideAggregator(async_session, sink)
    store = ComponentStore(async_session)

    await aggregator.apply(make_ride(bike.id, max_speed_kmh=40.0))
    await store.install(chain.id, other.id)
    await aggregator.apply(
        make_ride(other.id, max_speed_kmh=40.0, started_at=RIDE_START + timedelta(days=1))
    )

    assert (await store.get(chain.id)).max_speed_bike_id == other.id


@pytest.mark.asyncio
async def test_failed_roll_up_keeps_ride_and_reports_step(
    async_session, bike, chain, sink, monkeypatch
):
    aggregator = RideAggregator(async_session, sink)

    async def broken_advance(*args, **kwargs):
        raise RuntimeError("disk full")

    monkeypatch.setattr(aggregator.intervals, "advance", broken_advance)

    result = await aggregator.apply(make_ride(bike.id, distance_km=5.0))

    assert result.status is AggregationStatus.PARTIAL
    assert result.failed_step is AggregationStep.INTERVALS
    assert result.errors == {"error_type": "RuntimeError", "error": "disk full"}
    assert not result.ok

    # Nothing was half-applied, and the ride is still there
    assert (await BikeService(async_session).get(bike.id)).total_distance_km == 0.0
    assert (await ComponentStore(async_session).get(chain.id)).distance_used_km == 0.0
    pending = await aggregator.list_rides(pending_only=True)
    assert [r.id for r in pending] == [result.ride_id]

    monkeypatch.undo()
    retried = await RideAggregator(async_session, sink).retry(result.ride_id)

    assert retried.status is AggregationStatus.SUCCESS
    assert (await ComponentStore(async_session).get(chain.id)).distance_used_km == 5.0


@pytest.mark.asyncio
async def test_retry_refuses_aggregated_ride(async_session, bike, sink):
    aggregator = RideAggregator(async_session, sink)
    result = await aggregator.apply(make_ride(bike.id))

    with pytest.raises(ValidationError):
        await aggregator.retry(result.ride_id)
    with pytest.raises(NotFoundError):
        await aggregator.retry("missing")


@pytest.mark.asyncio
async def test_apply_raises_alert_for_worn_components(async_session, bike, chain, sink):
    chain.distance_used_km = 3300.0
    await async_session.commit()

    result = await RideAggregator(async_session, sink).apply(make_ride(bike.id, distance_km=50.0))

    assert result.alert.count == 1
    assert result.alert.names == ["Default chain"]
    sink.send.assert_awaited_once_with("1 component(s) need attention", "Default chain")


@pytest.mark.asyncio
async def test_alert_delivery_failure_does_not_fail_ride(async_session, bike, chain, sink):
    chain.distance_used_km = 3400.0
    await async_session.commit()
    sink.send.side_effect = ConnectionError("webhook down")

    result = await RideAggregator(async_session, sink).apply(make_ride(bike.id))

    assert result.status is AggregationStatus.SUCCESS


@pytest.mark.asyncio
async def test_import_skips_rides_already_stored(async_session, bike, sink):
    aggregator = RideAggregator(async_session, sink)
    first = make_ride(bike.id, source=RideSource.HEALTH_CONNECT)
    second = make_ride(
        bike.id, source=RideSource.HEALTH_CONNECT, started_at=RIDE_START + timedelta(days=1)
    )

    summary = await aggregator.import_rides([first, second])
    assert summary.imported == 2
    assert summary.aggregated == 2

    summary = await aggregator.import_rides([first, second])
    assert summary.imported == 0
    assert summary.duplicates == 2

    bike = await BikeService(async_session).get(bike.id)
    assert bike.total_distance_km == 20.0


@pytest.mark.asyncio
async def test_import_validates_whole_batch_first(async_session, bike, sink):
    bad = make_ride(bike.id, distance_km=-1.0, started_at=RIDE_START + timedelta(days=1))

    with pytest.raises(ValidationError):
        await RideAggregator(async_session, sink).import_rides([make_ride(bike.id), bad])

    assert (await async_session.execute(select(Ride))).scalars().all() == []

"""Tests for bike operations, the garage overview and the health summary."""

from datetime import timedelta

import pytest
from sqlalchemy import select

from bike_wear_server.core.errors import NotFoundError, ValidationError
from bike_wear_server.models.component_swap import ComponentSwap
from bike_wear_server.models.ride import Ride
from bike_wear_server.services.bikes import BikeService
from bike_wear_server.services.components import ComponentStore
from bike_wear_server.services.rides import RideAggregator
from bike_wear_server.services.summary import NO_BIKES, build_health_summary
from tests.fixtures.rides import RIDE_START, make_ride


@pytest.mark.asyncio
async def test_create_seeds_default_parts(async_session):
    bike = await BikeService(async_session).create(name="  Tourer ", make="Surly", year=2024)

    assert bike.name == "Tourer"
    assert bike.version == 1
    assert await ComponentStore(async_session).count_for_bike(bike.id) == 43


@pytest.mark.asyncio
async def test_create_requires_name(async_session):
    with pytest.raises(ValidationError):
        await BikeService(async_session).create(name=" ")


@pytest.mark.asyncio
async def test_edit_and_reset_stats(async_session, bike, sink):
    service = BikeService(async_session)
    await RideAggregator(async_session, sink).apply(make_ride(bike.id, distance_km=30.0))

    edited = await service.edit(bike.id, name="Daily", model="Disc Trucker")
    assert edited.name == "Daily"
    assert edited.total_distance_km == 30.0

    reset = await service.reset_stats(bike.id)
    assert reset.total_distance_km == 0.0
    assert reset.total_time_seconds == 0
    assert reset.last_ride_at is None


@pytest.mark.asyncio
async def test_delete_detaches_components_and_rides(async_session, bike, chain, sink):
    ride = await RideAggregator(async_session, sink).apply(make_ride(bike.id))

    await BikeService(async_session).delete(bike.id)

    component = await ComponentStore(async_session).get(chain.id)
    assert component.bike_id is None
    assert component.distance_used_km == 10.0
    stored_ride = await async_session.get(Ride, ride.ride_id, populate_existing=True)
    assert stored_ride.bike_id is None
    swaps = (await async_session.execute(select(ComponentSwap))).scalars().all()
    assert swaps == []
    with pytest.raises(NotFoundError):
        await BikeService(async_session).get(bike.id)


@pytest.mark.asyncio
async def test_deleted_bike_components_can_still_be_edited(async_session, bike, chain):
    await BikeService(async_session).delete(bike.id)

    component = await ComponentStore(async_session).edit(chain.id, name="Spare chain")

    assert component.name == "Spare chain"


@pytest.mark.asyncio
async def test_most_recently_ridden(async_session, bike, sink):
    service = BikeService(async_session)
    other = await service.create(name="Gravel", seed_defaults=False)
    aggregator = RideAggregator(async_session, sink)

    assert await service.most_recently_ridden() is None

    await aggregator.apply(make_ride(bike.id))
    await aggregator.apply(make_ride(other.id, started_at=RIDE_START + timedelta(days=2)))

    assert (await service.most_recently_ridden()).id == other.id


@pytest.mark.asyncio
async def test_overview(async_session, bike, chain):
    store = ComponentStore(async_session)
    spare = await store.create(component_type="tire", name="Spare tire")
    chain.distance_used_km = 3000.0
    await async_session.commit()

    overview = await BikeService(async_session).overview()

    assert [c.id for c in overview.garage_components] == [spare.id]
    card = overview.bikes[0]
    assert card.bike.id == bike.id
    assert card.component_count == 1
    assert card.health == 14
    assert card.needs_attention


@pytest.mark.asyncio
async def test_health_summary(async_session):
    assert await build_health_summary(async_session) == NO_BIKES

    service = BikeService(async_session)
    bike = await service.create(name="Commuter", seed_defaults=False)
    store = ComponentStore(async_session)
    chain = await store.create(component_type="chain", name="Default chain", bike_id=bike.id)
    await store.create(component_type="cassette", name="Default cassette", bike_id=bike.id)
    chain.distance_used_km = 1505.0
    bike.total_distance_km = 1520.7
    await async_session.commit()

    summary = await build_health_summary(async_session)

    assert summary == (
        "Commuter: 1520 km total\n"
        "  Default chain: 57%; Default cassette: 100%"
    )

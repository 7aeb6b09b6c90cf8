"""Tests for lost-update protection across sessions."""

import asyncio
from datetime import timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from bike_wear_server.core.database import commit_or_conflict
from bike_wear_server.core.errors import ConcurrencyConflict, ValidationError
from bike_wear_server.models.base import Base
from bike_wear_server.services.bikes import BikeService
from bike_wear_server.services.components import ComponentStore
from bike_wear_server.services.rides import AggregationStatus, RideAggregator
from tests.fixtures.rides import RIDE_START, make_ride


@pytest.fixture
async def session_maker(tmp_path):
    """Sessions on a file database, each with its own connection."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'wear.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.mark.asyncio
async def test_stale_write_raises_conflict(session_maker):
    async with session_maker() as setup:
        bike = await BikeService(setup).create(name="Commuter", seed_defaults=False)
        chain = await ComponentStore(setup).create(
            component_type="chain", name="Chain", bike_id=bike.id
        )

    async with session_maker() as first, session_maker() as second:
        stale = await ComponentStore(first).get(chain.id)
        await first.commit()

        await ComponentStore(second).edit(chain.id, name="Renamed elsewhere")

        stale.name = "Renamed here"
        with pytest.raises(ConcurrencyConflict):
            await commit_or_conflict(first, "Component", chain.id)

        fresh = await ComponentStore(first).get(chain.id)
        assert fresh.name == "Renamed elsewhere"


@pytest.mark.asyncio
async def test_concurrent_rides_on_one_bike_are_both_counted(session_maker, sink):
    async with session_maker() as setup:
        bike = await BikeService(setup).create(name="Commuter", seed_defaults=False)
        chain = await ComponentStore(setup).create(
            component_type="chain", name="Chain", bike_id=bike.id
        )

    async def ride(offset_days: int):
        async with session_maker() as session:
            return await RideAggregator(session, sink).apply(
                make_ride(
                    bike.id,
                    distance_km=5.0,
                    started_at=RIDE_START + timedelta(days=offset_days),
                )
            )

    results = await asyncio.gather(ride(0), ride(1))

    assert [r.status for r in results] == [AggregationStatus.SUCCESS] * 2
    async with session_maker() as check:
        assert (await BikeService(check).get(bike.id)).total_distance_km == 10.0
        assert (await ComponentStore(check).get(chain.id)).distance_used_km == 10.0


@pytest.mark.asyncio
async def test_concurrent_retries_count_a_ride_once(session_maker, sink):
    async with session_maker() as setup:
        bike = await BikeService(setup).create(name="Commuter", seed_defaults=False)
        chain = await ComponentStore(setup).create(
            component_type="chain", name="Chain", bike_id=bike.id
        )

        aggregator = RideAggregator(setup, sink)

        async def broken_advance(*args, **kwargs):
            raise RuntimeError("disk full")

        aggregator.intervals.advance = broken_advance
        failed = await aggregator.apply(make_ride(bike.id, distance_km=5.0))
        assert failed.status is AggregationStatus.PARTIAL

    async def retry():
        async with session_maker() as session:
            return await RideAggregator(session, sink).retry(failed.ride_id)

    results = await asyncio.gather(retry(), retry(), return_exceptions=True)

    statuses = [r.status for r in results if not isinstance(r, Exception)]
    refused = [r for r in results if isinstance(r, Exception)]
    assert statuses == [AggregationStatus.SUCCESS]
    assert len(refused) == 1
    assert isinstance(refused[0], ValidationError)
    async with session_maker() as check:
        assert (await BikeService(check).get(bike.id)).total_distance_km == 5.0
        assert (await ComponentStore(check).get(chain.id)).distance_used_km == 5.0

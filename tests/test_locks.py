"""Tests for the per-entity lock registry."""

import asyncio

import pytest

from bike_wear_server.core.locks import BIKE, COMPONENT, EntityLocks, entity_locks
from bike_wear_server.services.components import ComponentStore


@pytest.mark.asyncio
async def test_lock_entry_dropped_after_release():
    locks = EntityLocks()

    async with locks.hold_bike("b1"):
        assert locks.is_locked(BIKE, "b1")
        async with locks.hold_component("c1"):
            assert len(locks) == 2

    assert len(locks) == 0
    assert not locks.is_locked(BIKE, "b1")


@pytest.mark.asyncio
async def test_waiters_share_one_lock_until_the_last_leaves():
    locks = EntityLocks()
    order = []

    async def worker(name: str):
        async with locks.hold_component("c1"):
            order.append(f"{name} in")
            await asyncio.sleep(0)
            order.append(f"{name} out")

    await asyncio.gather(worker("a"), worker("b"), worker("c"))

    assert order == ["a in", "a out", "b in", "b out", "c in", "c out"]
    assert len(locks) == 0


@pytest.mark.asyncio
async def test_entry_dropped_when_body_raises():
    locks = EntityLocks()

    with pytest.raises(RuntimeError):
        async with locks.hold_component("c1"):
            raise RuntimeError("boom")

    assert len(locks) == 0
    assert not locks.is_locked(COMPONENT, "c1")


@pytest.mark.asyncio
async def test_registry_does_not_grow_with_deleted_components(async_session, bike):
    store = ComponentStore(async_session)

    for n in range(20):
        component = await store.create(component_type="chain", name=f"Chain {n}", bike_id=bike.id)
        await store.delete(component.id)

    assert len(entity_locks) == 0

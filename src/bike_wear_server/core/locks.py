"""Per-entity mutual exclusion for read-modify-write sequences."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

BIKE = "bike"
COMPONENT = "component"


class EntityLocks:
    """Registry of asyncio locks keyed by (kind, entity id).

    Ride aggregation and component operations take these locks around their
    read-modify-write of a row so concurrent callers in the same process
    cannot interleave. When both are needed the bike lock is taken first.

    A lock lives only while someone holds or waits for it; the entry is
    dropped when its last holder leaves.
    """

    def __init__(self) -> None:
        self._locks: dict[tuple[str, str], asyncio.Lock] = {}
        self._holders: dict[tuple[str, str], int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    def _acquire_entry(self, key: tuple[str, str]) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        self._holders[key] = self._holders.get(key, 0) + 1
        return lock

    def _release_entry(self, key: tuple[str, str], lock: asyncio.Lock) -> None:
        # Entry was replaced by reset() while we held it
        if self._locks.get(key) is not lock:
            return
        remaining = self._holders[key] - 1
        if remaining:
            self._holders[key] = remaining
        else:
            del self._holders[key]
            del self._locks[key]

    @asynccontextmanager
    async def hold(self, kind: str, entity_id: str) -> AsyncIterator[None]:
        """Hold the lock for one entity."""
        key = (kind, entity_id)
        lock = self._acquire_entry(key)
        try:
            async with lock:
                yield
        finally:
            self._release_entry(key, lock)

    @asynccontextmanager
    async def hold_bike(self, bike_id: str | None) -> AsyncIterator[None]:
        """Hold a bike lock; no-op for components sitting in the garage."""
        if bike_id is None:
            yield
            return
        async with self.hold(BIKE, bike_id):
            yield

    @asynccontextmanager
    async def hold_component(self, component_id: str) -> AsyncIterator[None]:
        """Hold a component lock."""
        async with self.hold(COMPONENT, component_id):
            yield

    def reset(self) -> None:
        """Forget every lock. Locks bind to the event loop they first wait on."""
        self._locks = {}
        self._holders = {}

    def is_locked(self, kind: str, entity_id: str) -> bool:
        """Whether the lock for an entity is currently held."""
        lock = self._locks.get((kind, entity_id))
        return lock is not None and lock.locked()


# Process-wide registry shared by all services
entity_locks = EntityLocks()

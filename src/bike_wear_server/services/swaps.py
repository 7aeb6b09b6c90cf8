"""Swap ledger: install/uninstall history of components on bikes."""

from datetime import datetime

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from bike_wear_server.models.base import utcnow
from bike_wear_server.models.component_swap import ComponentSwap

logger = structlog.get_logger()


class SwapLedger:
    """Append-only log of component stints.

    Rows are only ever appended or closed. The ledger is history: whether a
    component is installed is decided by Component.bike_id.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize ledger.

        Args:
            session: Database session
        """
        self.session = session
        self.logger = logger.bind(service="swap_ledger")

    async def open_swap(self, component_id: str) -> ComponentSwap | None:
        """The component's open stint, if any."""
        stmt = (
            select(ComponentSwap)
            .where(
                ComponentSwap.component_id == component_id,
                ComponentSwap.uninstalled_at.is_(None),
            )
            .order_by(ComponentSwap.installed_at.desc())
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def close_open(self, component_id: str, at: datetime | None = None) -> int:
        """Close every open stint of the component.

        Returns:
            Number of stints closed
        """
        at = at or utcnow()
        stmt = select(ComponentSwap).where(
            ComponentSwap.component_id == component_id,
            ComponentSwap.uninstalled_at.is_(None),
        )
        result = await self.session.execute(stmt)
        closed = 0
        for swap in result.scalars().all():
            swap.uninstalled_at = at
            closed += 1
        await self.session.flush()
        return closed

    async def open(self, component_id: str, bike_id: str, at: datetime | None = None) -> ComponentSwap:
        swap = ComponentSwap(component_id=component_id, bike_id=bike_id, installed_at=at or utcnow())
        self.session.add(swap)
        await self.session.flush()
        return swap

    async def history_for_component(self, component_id: str) -> list[ComponentSwap]:
        stmt = (
            select(ComponentSwap)
            .where(ComponentSwap.component_id == component_id)
            .order_by(ComponentSwap.installed_at)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def history_for_bike(self, bike_id: str) -> list[ComponentSwap]:
        stmt = (
            select(ComponentSwap)
            .where(ComponentSwap.bike_id == bike_id)
            .order_by(ComponentSwap.installed_at)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def delete_for_component(self, component_id: str) -> None:
        await self.session.execute(
            delete(ComponentSwap).where(ComponentSwap.component_id == component_id)
        )

    async def delete_for_bike(self, bike_id: str) -> int:
        """Remove every stint recorded against a bike.

        Returns:
            Number of stints removed
        """
        result = await self.session.execute(
            delete(ComponentSwap).where(ComponentSwap.bike_id == bike_id)
        )
        self.logger.debug("Swaps removed for bike", bike_id=bike_id, count=result.rowcount)
        return result.rowcount

"""Component context: purchase and service details for one component."""

from dataclasses import dataclass
from datetime import date

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from bike_wear_server.core.errors import NotFoundError, ValidationError
from bike_wear_server.formatting import is_valid_http_url
from bike_wear_server.models.component import Component
from bike_wear_server.models.component_context import ComponentContext

logger = structlog.get_logger()


@dataclass
class ContextPayload:
    """Values submitted for a component's context."""

    notes: str
    install_date: date | None = None
    purchase_link: str | None = None
    serial_number: str | None = None
    last_service_notes: str | None = None
    purchase_price: str | None = None
    purchase_date: date | None = None

    def validate(self) -> None:
        """Raise ValidationError for the first invalid field."""
        if not self.notes or not self.notes.strip():
            raise ValidationError("Notes are required", field="notes")
        link = (self.purchase_link or "").strip()
        if link and not is_valid_http_url(link):
            raise ValidationError("Purchase link must be a valid URL", field="purchase_link")


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


class ComponentContextService:
    """Reads and upserts component context rows."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, component_id: str) -> ComponentContext | None:
        if await self.session.get(Component, component_id) is None:
            raise NotFoundError("Component", component_id)
        return await self.session.get(ComponentContext, component_id, populate_existing=True)

    async def save(self, component_id: str, payload: ContextPayload) -> ComponentContext:
        """Validate and upsert the context for a component.

        Raises:
            ValidationError: If notes are blank or the purchase link is not http(s)
            NotFoundError: If the component does not exist
        """
        payload.validate()
        context = await self.get(component_id)
        if context is None:
            context = ComponentContext(component_id=component_id)
            self.session.add(context)

        context.notes = payload.notes.strip()
        context.install_date = payload.install_date
        context.purchase_link = _blank_to_none(payload.purchase_link)
        context.serial_number = _blank_to_none(payload.serial_number)
        context.last_service_notes = _blank_to_none(payload.last_service_notes)
        context.purchase_price = _blank_to_none(payload.purchase_price)
        context.purchase_date = payload.purchase_date
        await self.session.commit()

        logger.info("Component context saved", component_id=component_id)
        return context

"""Tests for component context."""

from datetime import date

import pytest

from bike_wear_server.core.errors import NotFoundError, ValidationError
from bike_wear_server.services.components import ComponentStore
from bike_wear_server.services.context import ComponentContextService, ContextPayload


@pytest.mark.asyncio
async def test_save_and_update_context(async_session, chain):
    service = ComponentContextService(async_session)
    assert await service.get(chain.id) is None

    saved = await service.save(
        chain.id,
        ContextPayload(
            notes=" Waxed before install ",
            purchase_link="https://shop.example.com/chain",
            purchase_price="$34.99",
            purchase_date=date(2026, 2, 14),
            serial_number="  ",
        ),
    )
    assert saved.notes == "Waxed before install"
    assert saved.serial_number is None

    updated = await service.save(chain.id, ContextPayload(notes="Rewaxed"))
    assert updated.notes == "Rewaxed"
    assert updated.purchase_link is None
    assert (await service.get(chain.id)).notes == "Rewaxed"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("payload", "message"),
    [
        (ContextPayload(notes="  "), "Notes are required"),
        (
            ContextPayload(notes="ok", purchase_link="shop.example.com"),
            "Purchase link must be a valid URL",
        ),
    ],
)
async def test_invalid_context(async_session, chain, payload, message):
    with pytest.raises(ValidationError) as exc_info:
        await ComponentContextService(async_session).save(chain.id, payload)

    assert exc_info.value.message == message


@pytest.mark.asyncio
async def test_context_for_missing_component(async_session):
    with pytest.raises(NotFoundError):
        await ComponentContextService(async_session).get("missing")


@pytest.mark.asyncio
async def test_component_delete_removes_context(async_session, chain):
    await ComponentContextService(async_session).save(chain.id, ContextPayload(notes="note"))

    await ComponentStore(async_session).delete(chain.id)

    with pytest.raises(NotFoundError):
        await ComponentContextService(async_session).get(chain.id)

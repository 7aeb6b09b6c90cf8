"""Bike and garage API endpoints."""

from typing import Any

from litestar import Router, delete, get, patch, post
from litestar.status_codes import HTTP_200_OK, HTTP_201_CREATED
from sqlalchemy.ext.asyncio import AsyncSession

from bike_wear_server.schemas.bikes import (
    BikeCreate,
    BikeOverviewResponse,
    BikeResponse,
    BikeUpdate,
    SeedResponse,
)
from bike_wear_server.schemas.components import ComponentResponse, SwapResponse
from bike_wear_server.schemas.rides import AlertSummary
from bike_wear_server.services.alerts import AlertEvaluator
from bike_wear_server.services.bikes import BikeService
from bike_wear_server.services.components import ComponentStore
from bike_wear_server.services.swaps import SwapLedger


@get("/bikes", status_code=HTTP_200_OK)
async def list_bikes(session: AsyncSession) -> list[BikeResponse]:
    """List all bikes with their ride roll-ups."""
    bikes = await BikeService(session).list_bikes()
    return [BikeResponse.model_validate(b) for b in bikes]


@post("/bikes", status_code=HTTP_201_CREATED)
async def create_bike(data: BikeCreate, session: AsyncSession) -> BikeResponse:
    """Create a bike. The default parts list is seeded unless disabled."""
    bike = await BikeService(session).create(
        name=data.name,
        make=data.make,
        model=data.model,
        year=data.year,
        description=data.description,
        seed_defaults=data.seed_defaults,
    )
    return BikeResponse.model_validate(bike)


@get("/bikes/{bike_id:str}", status_code=HTTP_200_OK)
async def get_bike(bike_id: str, session: AsyncSession) -> BikeResponse:
    bike = await BikeService(session).get(bike_id)
    return BikeResponse.model_validate(bike)


@patch("/bikes/{bike_id:str}", status_code=HTTP_200_OK)
async def update_bike(bike_id: str, data: BikeUpdate, session: AsyncSession) -> BikeResponse:
    """Edit display fields."""
    bike = await BikeService(session).edit(bike_id, **data.model_dump(exclude_unset=True))
    return BikeResponse.model_validate(bike)


@delete("/bikes/{bike_id:str}")
async def delete_bike(bike_id: str, session: AsyncSession) -> None:
    """Delete a bike. Its components move to the garage and its rides are kept."""
    await BikeService(session).delete(bike_id)


@post("/bikes/{bike_id:str}/seed-missing", status_code=HTTP_200_OK)
async def seed_missing(bike_id: str, session: AsyncSession) -> SeedResponse:
    """Add default parts the bike does not have yet (matched on type and position)."""
    created = await ComponentStore(session).seed_missing_defaults(bike_id)
    return SeedResponse(bike_id=bike_id, created=created)


@post("/bikes/{bike_id:str}/reset-chain-count", status_code=HTTP_200_OK)
async def reset_chain_count(bike_id: str, session: AsyncSession) -> BikeResponse:
    bike = await BikeService(session).reset_chain_replacement_count(bike_id)
    return BikeResponse.model_validate(bike)


@post("/bikes/{bike_id:str}/reset-stats", status_code=HTTP_200_OK)
async def reset_stats(bike_id: str, session: AsyncSession) -> BikeResponse:
    bike = await BikeService(session).reset_stats(bike_id)
    return BikeResponse.model_validate(bike)


@get("/bikes/{bike_id:str}/alerts", status_code=HTTP_200_OK)
async def bike_alerts(bike_id: str, session: AsyncSession) -> AlertSummary:
    """Components of the bike that currently need an alert (nothing is sent)."""
    await BikeService(session).get(bike_id)
    alert = await AlertEvaluator(session).evaluate(bike_id)
    return AlertSummary(count=alert.count, names=alert.names, title=alert.title, body=alert.body)


@get("/bikes/{bike_id:str}/swaps", status_code=HTTP_200_OK)
async def bike_swaps(bike_id: str, session: AsyncSession) -> list[SwapResponse]:
    await BikeService(session).get(bike_id)
    swaps = await SwapLedger(session).history_for_bike(bike_id)
    return [SwapResponse.model_validate(s) for s in swaps]


@get("/garage", status_code=HTTP_200_OK)
async def garage_overview(session: AsyncSession) -> dict[str, Any]:
    """Every bike with its worst component health, plus unassigned components."""
    overview = await BikeService(session).overview()
    return {
        "bikes": [
            BikeOverviewResponse(
                bike=BikeResponse.model_validate(card.bike),
                health=card.health,
                needs_attention=card.needs_attention,
                component_count=card.component_count,
            ).model_dump(mode="json")
            for card in overview.bikes
        ],
        "garage_components": [
            ComponentResponse.from_component(c).model_dump(mode="json")
            for c in overview.garage_components
        ],
    }


@get("/garage/last-ridden", status_code=HTTP_200_OK)
async def last_ridden_bike(session: AsyncSession) -> BikeResponse | None:
    bike = await BikeService(session).most_recently_ridden()
    return BikeResponse.model_validate(bike) if bike else None


bikes_router = Router(
    path="/",
    route_handlers=[
        list_bikes,
        create_bike,
        get_bike,
        update_bike,
        delete_bike,
        seed_missing,
        reset_chain_count,
        reset_stats,
        bike_alerts,
        bike_swaps,
        garage_overview,
        last_ridden_bike,
    ],
    tags=["Bikes"],
)

"""Component, service interval and context API endpoints."""

from typing import Any

from litestar import Router, delete, get, patch, post, put
from litestar.params import Parameter
from litestar.status_codes import HTTP_200_OK, HTTP_201_CREATED
from sqlalchemy.ext.asyncio import AsyncSession

from bike_wear_server.catalog.seed import SUGGESTED_TYPES
from bike_wear_server.catalog.taxonomy import ComponentCategory
from bike_wear_server.schemas.components import (
    AlertConfigRequest,
    ComponentCreate,
    ComponentResponse,
    ComponentUpdate,
    ContextRequest,
    ContextResponse,
    InstallRequest,
    IntervalCreate,
    IntervalResponse,
    IntervalUpdate,
    ResetIntervalsRequest,
    SnoozeRequest,
    SwapResponse,
)
from bike_wear_server.services.components import ComponentStore
from bike_wear_server.services.context import ComponentContextService, ContextPayload
from bike_wear_server.services.due_list import ComponentSortOrder, sort_components
from bike_wear_server.services.service_intervals import ServiceIntervalStore

# ==============================================================================
# Components
# ==============================================================================


@get("/components", status_code=HTTP_200_OK)
async def list_components(
    session: AsyncSession,
    bike_id: str | None = None,
    garage: bool = False,
    sort: ComponentSortOrder = ComponentSortOrder.TYPE_AZ,
) -> list[ComponentResponse]:
    """List components of a bike, of the garage (garage=true), or all of them."""
    store = ComponentStore(session)
    components = await store.list_components(bike_id=bike_id, garage_only=garage)
    intervals = None
    if sort is ComponentSortOrder.NEXT_SERVICE:
        intervals = await store.intervals.list_for_components(c.id for c in components)
    ordered = sort_components(components, sort, intervals)
    return [ComponentResponse.from_component(c) for c in ordered]


@post("/components", status_code=HTTP_201_CREATED)
async def create_component(data: ComponentCreate, session: AsyncSession) -> ComponentResponse:
    """Add a component with its default service intervals."""
    component = await ComponentStore(session).create(
        component_type=data.type,
        name=data.name,
        bike_id=data.bike_id,
        lifespan_km=data.lifespan_km,
        position=data.position,
        initial_distance_km=data.initial_distance_km,
        initial_time_seconds=data.initial_time_seconds,
        alert_threshold_percent=data.alert_threshold_percent,
        make_model=data.make_model,
        notes=data.notes,
    )
    return ComponentResponse.from_component(component)


@get("/components/{component_id:str}", status_code=HTTP_200_OK)
async def get_component(component_id: str, session: AsyncSession) -> ComponentResponse:
    component = await ComponentStore(session).get(component_id)
    return ComponentResponse.from_component(component)


@patch("/components/{component_id:str}", status_code=HTTP_200_OK)
async def update_component(
    component_id: str,
    data: ComponentUpdate,
    session: AsyncSession,
) -> ComponentResponse:
    component = await ComponentStore(session).edit(
        component_id, **data.model_dump(exclude_unset=True)
    )
    return ComponentResponse.from_component(component)


@delete("/components/{component_id:str}")
async def delete_component(component_id: str, session: AsyncSession) -> None:
    """Delete a component with its intervals, swap history and context."""
    await ComponentStore(session).delete(component_id)


@post("/components/{component_id:str}/install", status_code=HTTP_200_OK)
async def install_component(
    component_id: str,
    data: InstallRequest,
    session: AsyncSession,
) -> ComponentResponse:
    component = await ComponentStore(session).install(component_id, data.bike_id)
    return ComponentResponse.from_component(component)


@post("/components/{component_id:str}/uninstall", status_code=HTTP_200_OK)
async def uninstall_component(component_id: str, session: AsyncSession) -> ComponentResponse:
    component = await ComponentStore(session).uninstall(component_id)
    return ComponentResponse.from_component(component)


@post("/components/{component_id:str}/replace", status_code=HTTP_200_OK)
async def replace_component(component_id: str, session: AsyncSession) -> ComponentResponse:
    """Mark replaced: usage and every interval restart from zero."""
    component = await ComponentStore(session).mark_replaced(component_id)
    return ComponentResponse.from_component(component)


@post("/components/{component_id:str}/inspect", status_code=HTTP_200_OK)
async def inspect_component(component_id: str, session: AsyncSession) -> dict[str, Any]:
    """Mark inspection complete: inspection and grease intervals restart."""
    count = await ComponentStore(session).mark_inspection_complete(component_id)
    return {"component_id": component_id, "intervals_reset": count}


@post("/components/{component_id:str}/snooze", status_code=HTTP_200_OK)
async def snooze_component(
    component_id: str,
    data: SnoozeRequest,
    session: AsyncSession,
) -> ComponentResponse:
    component = await ComponentStore(session).snooze(
        component_id, km=data.km, until=data.until, duration=data.duration
    )
    return ComponentResponse.from_component(component)


@delete("/components/{component_id:str}/snooze", status_code=HTTP_200_OK)
async def clear_snooze(component_id: str, session: AsyncSession) -> ComponentResponse:
    component = await ComponentStore(session).clear_snooze(component_id)
    return ComponentResponse.from_component(component)


@put("/components/{component_id:str}/alerts", status_code=HTTP_200_OK)
async def configure_alerts(
    component_id: str,
    data: AlertConfigRequest,
    session: AsyncSession,
) -> ComponentResponse:
    component = await ComponentStore(session).configure_alerts(
        component_id, enabled=data.enabled, threshold_percent=data.threshold_percent
    )
    return ComponentResponse.from_component(component)


@get("/components/{component_id:str}/swaps", status_code=HTTP_200_OK)
async def component_swaps(component_id: str, session: AsyncSession) -> list[SwapResponse]:
    store = ComponentStore(session)
    await store.get(component_id)
    swaps = await store.swaps.history_for_component(component_id)
    return [SwapResponse.model_validate(s) for s in swaps]


# ==============================================================================
# Service intervals
# ==============================================================================


@get("/components/{component_id:str}/intervals", status_code=HTTP_200_OK)
async def list_intervals(component_id: str, session: AsyncSession) -> list[IntervalResponse]:
    await ComponentStore(session).get(component_id)
    intervals = await ServiceIntervalStore(session).list_for_component(component_id)
    return [IntervalResponse.from_interval(i) for i in intervals]


@post("/components/{component_id:str}/intervals", status_code=HTTP_201_CREATED)
async def add_interval(
    component_id: str,
    data: IntervalCreate,
    session: AsyncSession,
) -> IntervalResponse:
    """Add a custom interval; it starts from the component's current usage."""
    interval = await ServiceIntervalStore(session).add(
        component_id,
        name=data.name,
        interval_km=data.interval_km,
        interval_time_seconds=data.interval_time_seconds,
        interval_type=data.type,
    )
    return IntervalResponse.from_interval(interval)


@post("/components/{component_id:str}/intervals/reset", status_code=HTTP_200_OK)
async def reset_intervals(
    component_id: str,
    data: ResetIntervalsRequest,
    session: AsyncSession,
) -> dict[str, Any]:
    count = await ComponentStore(session).reset_interval_types(component_id, data.types)
    return {"component_id": component_id, "intervals_reset": count}


@patch("/intervals/{interval_id:str}", status_code=HTTP_200_OK)
async def update_interval(
    interval_id: str,
    data: IntervalUpdate,
    session: AsyncSession,
) -> IntervalResponse:
    interval = await ServiceIntervalStore(session).update(
        interval_id,
        name=data.name,
        interval_km=data.interval_km,
        interval_time_seconds=data.interval_time_seconds,
        clear_interval_time=data.clear_interval_time,
        interval_type=data.type,
    )
    return IntervalResponse.from_interval(interval)


@delete("/intervals/{interval_id:str}")
async def delete_interval(interval_id: str, session: AsyncSession) -> None:
    await ServiceIntervalStore(session).delete(interval_id)


# ==============================================================================
# Context
# ==============================================================================


@get("/components/{component_id:str}/context", status_code=HTTP_200_OK)
async def get_context(component_id: str, session: AsyncSession) -> ContextResponse | None:
    context = await ComponentContextService(session).get(component_id)
    return ContextResponse.model_validate(context) if context else None


@put("/components/{component_id:str}/context", status_code=HTTP_200_OK)
async def save_context(
    component_id: str,
    data: ContextRequest,
    session: AsyncSession,
) -> ContextResponse:
    """Create or replace the component's context (notes required, link must be http/https)."""
    context = await ComponentContextService(session).save(
        component_id, ContextPayload(**data.model_dump())
    )
    return ContextResponse.model_validate(context)


# ==============================================================================
# Catalog
# ==============================================================================


@get("/catalog/types", status_code=HTTP_200_OK, sync_to_thread=False)
def list_component_types(
    category: ComponentCategory | None = Parameter(default=None),
) -> list[dict[str, Any]]:
    """Suggested component types with default lifespans, in category display order."""
    types = sorted(SUGGESTED_TYPES, key=lambda t: t.type.category.display_order)
    return [
        {
            "type": t.type.value,
            "display_name": t.display_name,
            "category": t.type.category.value,
            "lifespan_km": t.lifespan_km,
        }
        for t in types
        if category is None or t.type.category is category
    ]


components_router = Router(
    path="/",
    route_handlers=[
        list_components,
        create_component,
        get_component,
        update_component,
        delete_component,
        install_component,
        uninstall_component,
        replace_component,
        inspect_component,
        snooze_component,
        clear_snooze,
        configure_alerts,
        component_swaps,
        list_intervals,
        add_interval,
        reset_intervals,
        update_interval,
        delete_interval,
        get_context,
        save_context,
        list_component_types,
    ],
    tags=["Components"],
)

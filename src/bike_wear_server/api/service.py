"""Service worklist, bulk actions, preferences and summary endpoints."""

from litestar import Router, get, post, put
from litestar.params import Parameter
from litestar.status_codes import HTTP_200_OK
from sqlalchemy.ext.asyncio import AsyncSession

from bike_wear_server.schemas.service import (
    BulkRequest,
    BulkResponse,
    DueItemResponse,
    HealthSummaryResponse,
    PreferencesResponse,
    PreferencesUpdate,
)
from bike_wear_server.services.due_list import ComponentSortOrder, DueFilters, DueListPlanner
from bike_wear_server.services.preferences import PreferencesService
from bike_wear_server.services.summary import build_health_summary


@get("/service/due", status_code=HTTP_200_OK)
async def due_list(
    session: AsyncSession,
    bike_id: str | None = None,
    component_type: str | None = Parameter(query="type", default=None),
    search: str | None = None,
    sort: ComponentSortOrder = ComponentSortOrder.NEXT_SERVICE,
    threshold: int | None = Parameter(default=None, ge=1, le=100),
) -> list[DueItemResponse]:
    """Components at or below the close-to-service threshold, across all bikes.

    Query Parameters:
        bike_id: Only this bike's components
        type: Only this component type
        search: Case-insensitive match on name, type or bike name
        sort: type_az, next_service (default) or health
        threshold: Override the stored close-to-service threshold
    """
    items = await DueListPlanner(session).build_due_list(
        DueFilters(bike_id=bike_id, component_type=component_type, search=search),
        sort=sort,
        threshold=threshold,
    )
    return [DueItemResponse.from_item(item) for item in items]


@post("/service/replace", status_code=HTTP_200_OK)
async def bulk_replace(data: BulkRequest, session: AsyncSession) -> BulkResponse:
    """Mark every selected component replaced; one failure does not stop the rest."""
    result = await DueListPlanner(session).replace_selected(data.component_ids)
    return BulkResponse.from_result(result)


@post("/service/inspect", status_code=HTTP_200_OK)
async def bulk_inspect(data: BulkRequest, session: AsyncSession) -> BulkResponse:
    result = await DueListPlanner(session).inspect_selected(data.component_ids)
    return BulkResponse.from_result(result)


@get("/summary", status_code=HTTP_200_OK)
async def health_summary(session: AsyncSession) -> HealthSummaryResponse:
    """Plain-text health summary of every bike, for sharing."""
    return HealthSummaryResponse(summary=await build_health_summary(session))


@get("/preferences", status_code=HTTP_200_OK)
async def get_preferences(session: AsyncSession) -> PreferencesResponse:
    prefs = await PreferencesService(session).get()
    return PreferencesResponse(
        close_to_service_threshold=prefs.close_to_service_threshold,
        default_alert_threshold_percent=prefs.default_alert_threshold_percent,
    )


@put("/preferences", status_code=HTTP_200_OK)
async def update_preferences(data: PreferencesUpdate, session: AsyncSession) -> PreferencesResponse:
    prefs = await PreferencesService(session).update(
        close_to_service_threshold=data.close_to_service_threshold,
        default_alert_threshold_percent=data.default_alert_threshold_percent,
    )
    return PreferencesResponse(
        close_to_service_threshold=prefs.close_to_service_threshold,
        default_alert_threshold_percent=prefs.default_alert_threshold_percent,
    )


service_router = Router(
    path="/",
    route_handlers=[
        due_list,
        bulk_replace,
        bulk_inspect,
        health_summary,
        get_preferences,
        update_preferences,
    ],
    tags=["Service"],
)

"""Ride and live ride API endpoints."""

from typing import Any

from litestar import Router, get, post
from litestar.params import Parameter
from litestar.status_codes import HTTP_200_OK, HTTP_201_CREATED
from sqlalchemy.ext.asyncio import AsyncSession

from bike_wear_server.core.errors import ValidationError
from bike_wear_server.schemas.rides import (
    AggregationResponse,
    ImportResponse,
    LiveRideResponse,
    LiveSampleRequest,
    LiveStartRequest,
    RideCreate,
    RideImportRequest,
    RideResponse,
)
from bike_wear_server.services.bikes import BikeService
from bike_wear_server.services.live_ride import live_tracker
from bike_wear_server.services.rides import RideAggregator

# ==============================================================================
# Rides
# ==============================================================================


@post("/rides", status_code=HTTP_201_CREATED)
async def record_ride(data: RideCreate, session: AsyncSession) -> AggregationResponse:
    """Store a finished ride and roll it up into bike, component and interval totals.

    The ride is always stored. A status of "partial" means the roll-up failed
    and can be retried with POST /rides/{ride_id}/retry.
    """
    result = await RideAggregator(session).apply(data.to_input())
    return AggregationResponse.from_result(result)


@get("/rides", status_code=HTTP_200_OK)
async def list_rides(
    session: AsyncSession,
    bike_id: str | None = None,
    pending: bool = False,
    limit: int = Parameter(default=100, ge=1, le=1000),
) -> list[RideResponse]:
    """Most recent rides first; pending=true lists rides still awaiting roll-up."""
    rides = await RideAggregator(session).list_rides(
        bike_id=bike_id, pending_only=pending, limit=limit
    )
    return [RideResponse.model_validate(r) for r in rides]


@get("/rides/{ride_id:str}", status_code=HTTP_200_OK)
async def get_ride(ride_id: str, session: AsyncSession) -> RideResponse:
    ride = await RideAggregator(session).get(ride_id)
    return RideResponse.model_validate(ride)


@post("/rides/{ride_id:str}/retry", status_code=HTTP_200_OK)
async def retry_ride(ride_id: str, session: AsyncSession) -> AggregationResponse:
    result = await RideAggregator(session).retry(ride_id)
    return AggregationResponse.from_result(result)


@post("/rides/import", status_code=HTTP_200_OK)
async def import_rides(data: RideImportRequest, session: AsyncSession) -> ImportResponse:
    """Import rides from an external source, skipping ones already stored."""
    result = await RideAggregator(session).import_rides([r.to_input() for r in data.rides])
    return ImportResponse.from_result(result)


# ==============================================================================
# Live ride
# ==============================================================================


def _live_response() -> LiveRideResponse:
    if live_tracker.state is None:
        raise ValidationError("No ride in progress")
    return LiveRideResponse.model_validate(live_tracker.state)


@get("/live", status_code=HTTP_200_OK, sync_to_thread=False)
def live_status() -> dict[str, Any]:
    """Whether a ride is in progress, and its running totals."""
    state = live_tracker.state
    return {
        "active": live_tracker.signal.is_active,
        "ride": LiveRideResponse.model_validate(state).model_dump(mode="json") if state else None,
    }


@post("/live/start", status_code=HTTP_201_CREATED)
async def start_live_ride(data: LiveStartRequest, session: AsyncSession) -> LiveRideResponse:
    await BikeService(session).get(data.bike_id)
    live_tracker.start(data.bike_id)
    return _live_response()


@post("/live/sample", status_code=HTTP_200_OK, sync_to_thread=False)
def add_live_sample(data: LiveSampleRequest) -> LiveRideResponse:
    live_tracker.add_sample(data.distance_km, data.speed_kmh, data.altitude_m)
    return _live_response()


@post("/live/pause", status_code=HTTP_200_OK, sync_to_thread=False)
def pause_live_ride() -> LiveRideResponse:
    live_tracker.pause()
    return _live_response()


@post("/live/resume", status_code=HTTP_200_OK, sync_to_thread=False)
def resume_live_ride() -> LiveRideResponse:
    live_tracker.resume()
    return _live_response()


@post("/live/stop", status_code=HTTP_200_OK)
async def stop_live_ride(session: AsyncSession) -> AggregationResponse:
    """Finish the ride in progress and apply it like any other ride."""
    ride_input = live_tracker.stop()
    result = await RideAggregator(session).apply(ride_input)
    return AggregationResponse.from_result(result)


@post("/live/recover", status_code=HTTP_200_OK, sync_to_thread=False)
def recover_live_ride() -> dict[str, Any]:
    """Discard a ride left behind by a crashed client."""
    stale = live_tracker.abandon()
    return {"cleared": stale is not None, "bike_id": stale.bike_id if stale else None}


rides_router = Router(
    path="/",
    route_handlers=[
        record_ride,
        list_rides,
        get_ride,
        retry_ride,
        import_rides,
        live_status,
        start_live_ride,
        add_live_sample,
        pause_live_ride,
        resume_live_ride,
        stop_live_ride,
        recover_live_ride,
    ],
    tags=["Rides"],
)

"""API routes."""

from litestar import Router

from bike_wear_server.api.bikes import bikes_router
from bike_wear_server.api.components import components_router
from bike_wear_server.api.health import health_router
from bike_wear_server.api.rides import rides_router
from bike_wear_server.api.service import service_router

# Versioned API routes under /api/v1
_v1_routers = [
    bikes_router,
    components_router,
    rides_router,
    service_router,
]

api_v1_router = Router(path="/api/v1", route_handlers=_v1_routers)

# Health stays at the root for load balancers
api_routers = [health_router, api_v1_router]

__all__ = ["api_routers", "api_v1_router", "health_router"]

"""Litestar application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from advanced_alchemy.config.asyncio import AsyncSessionConfig
from advanced_alchemy.extensions.litestar import SQLAlchemyAsyncConfig, SQLAlchemyPlugin
from litestar import Litestar, Request, Response
from litestar.openapi import OpenAPIConfig
from litestar.status_codes import (
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
)
from sqlalchemy.ext.asyncio import AsyncEngine

from bike_wear_server import __version__
from bike_wear_server.api import api_routers
from bike_wear_server.core.config import settings
from bike_wear_server.core.database import close_database, engine, init_database
from bike_wear_server.core.errors import (
    BikeWearError,
    ConcurrencyConflict,
    NotFoundError,
    ValidationError,
)
from bike_wear_server.core.locks import entity_locks
from bike_wear_server.services.live_ride import live_tracker

# Configure structured logging
logging.basicConfig(format="%(message)s", level=settings.log_level)
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()

_STATUS_BY_ERROR: dict[type[BikeWearError], int] = {
    ValidationError: HTTP_400_BAD_REQUEST,
    NotFoundError: HTTP_404_NOT_FOUND,
    ConcurrencyConflict: HTTP_409_CONFLICT,
}


def domain_error_handler(request: Request, exc: BikeWearError) -> Response:
    """Render a domain error as JSON with its mapped status code."""
    status_code = _STATUS_BY_ERROR.get(type(exc), HTTP_400_BAD_REQUEST)
    logger.info(
        "Request rejected",
        path=request.url.path,
        status_code=status_code,
        **exc.to_dict(),
    )
    return Response(content=exc.to_dict(), status_code=status_code)


def create_app(engine_instance: AsyncEngine | None = None) -> Litestar:
    """Create Litestar application.

    Args:
        engine_instance: Engine to use instead of the configured one (tests)

    Returns:
        Configured Litestar app instance
    """
    db_engine = engine_instance or engine

    @asynccontextmanager
    async def lifespan(app: Litestar) -> AsyncIterator[None]:
        """Verify the database on startup and release it on shutdown.

        A live ride left over from a previous process cannot be resumed, so
        it is cleared on both ends.
        """
        logger.info("Starting bike-wear-server", version=__version__)

        await init_database(db_engine)
        entity_locks.reset()
        live_tracker.abandon()
        logger.info("Database initialized")

        yield

        live_tracker.abandon()
        await close_database(db_engine)
        logger.info("Shutdown complete")

    return Litestar(
        route_handlers=api_routers,
        lifespan=[lifespan],
        openapi_config=OpenAPIConfig(
            title="bike-wear-server API",
            version=__version__,
            description="Bicycle component wear and maintenance tracking",
        ),
        plugins=[
            SQLAlchemyPlugin(
                config=SQLAlchemyAsyncConfig(
                    engine_instance=db_engine,
                    session_dependency_key="session",
                    session_config=AsyncSessionConfig(expire_on_commit=False),
                ),
            ),
        ],
        exception_handlers={BikeWearError: domain_error_handler},
        debug=settings.log_level == "DEBUG",
    )


# Application instance
app = create_app()

"""CLI entry point for bike-wear-server."""

import asyncio

import typer
import uvicorn

from bike_wear_server import __version__
from bike_wear_server.core.config import settings

app = typer.Typer(
    name="bike-wear-server",
    help="Bicycle component wear and maintenance tracking server",
    no_args_is_help=True,
)


@app.command()
def serve(
    host: str = typer.Option(None, help="Host to bind to (overrides config)"),
    port: int = typer.Option(None, help="Port to bind to (overrides config)"),
    reload: bool = typer.Option(False, help="Enable auto-reload for development"),
) -> None:
    """Start the API server.

    Example:
        bike-wear-server serve
        bike-wear-server serve --host 0.0.0.0 --port 8080 --reload
    """
    uvicorn.run(
        "bike_wear_server.app:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


@app.command()
def summary() -> None:
    """Print the health summary of every bike."""
    from bike_wear_server.core.database import close_database, get_session
    from bike_wear_server.services.summary import build_health_summary

    async def _run() -> str:
        try:
            async with get_session() as session:
                return await build_health_summary(session)
        finally:
            await close_database()

    typer.echo(asyncio.run(_run()))


@app.command()
def version() -> None:
    """Show version information."""
    typer.echo(f"bike-wear-server v{__version__}")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()

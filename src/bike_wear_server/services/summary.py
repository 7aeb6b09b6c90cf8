"""Plain-text component health summary for an external assistant."""

from sqlalchemy.ext.asyncio import AsyncSession

from bike_wear_server.services.bikes import BikeService
from bike_wear_server.services.components import ComponentStore
from bike_wear_server.services.wear import component_health_percent

NO_BIKES = "No bikes in garage."


async def build_health_summary(session: AsyncSession) -> str:
    """One line per bike, followed by its components' health.

    Example:
        Commuter: 1520 km total
          Default chain: 57%; Default cassette: 85%
    """
    bikes = await BikeService(session).list_bikes()
    if not bikes:
        return NO_BIKES

    components = await ComponentStore(session).list_components()
    by_bike: dict[str, list] = {}
    for component in components:
        if component.bike_id is not None:
            by_bike.setdefault(component.bike_id, []).append(component)

    lines = []
    for bike in bikes:
        line = f"{bike.name}: {int(bike.total_distance_km)} km total"
        bike_components = by_bike.get(bike.id, [])
        if bike_components:
            entries = "; ".join(
                f"{c.name}: {component_health_percent(c)}%" for c in bike_components
            )
            line += f"\n  {entries}"
        lines.append(line)
    return "\n".join(lines)

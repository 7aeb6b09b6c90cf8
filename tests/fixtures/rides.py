"""Ride summary builders for aggregation tests."""

from datetime import UTC, datetime, timedelta

from bike_wear_server.services.rides import RideInput

RIDE_START = datetime(2026, 5, 1, 8, 0, tzinfo=UTC)


def make_ride(
    bike_id: str | None,
    distance_km: float = 10.0,
    duration_ms: int = 1_800_000,
    max_speed_kmh: float = 30.0,
    started_at: datetime | None = None,
    **extra,
) -> RideInput:
    """Build a finished ride summary ending duration_ms after it starts."""
    started_at = started_at or RIDE_START
    return RideInput(
        bike_id=bike_id,
        distance_km=distance_km,
        duration_ms=duration_ms,
        max_speed_kmh=max_speed_kmh,
        started_at=started_at,
        ended_at=started_at + timedelta(milliseconds=duration_ms),
        **extra,
    )

"""Wear and health math.

Health is an integer percentage where 100 means new (or exempt) and 0 means
worn out or overdue. Service intervals run two clocks, distance and time, and
an interval is as healthy as its least healthy clock.
"""

import math
from collections.abc import Iterable

from bike_wear_server.formatting import format_remaining_seconds
from bike_wear_server.models.component import Component
from bike_wear_server.models.service_interval import ServiceInterval

HEALTHY = 100


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _clamp_percent(value: int) -> int:
    return max(0, min(HEALTHY, value))


def health_percent(used: float, capacity: float) -> int:
    """Remaining health for a usage against a budget.

    Args:
        used: Amount consumed (km or seconds)
        capacity: Budget; zero or negative means exempt

    Returns:
        Integer in [0, 100], 100 when exempt
    """
    if capacity <= 0:
        return HEALTHY
    return _clamp_percent(_round_half_up(100 - 100 * used / capacity))


def component_health_percent(component: Component) -> int:
    """Health of a component's overall lifespan."""
    return health_percent(component.distance_used_km, component.lifespan_km)


def distance_health_percent(interval: ServiceInterval) -> int:
    return health_percent(interval.tracked_km, interval.interval_km)


def time_health_percent(interval: ServiceInterval) -> int:
    """Health of the time clock; 100 when the interval is not time-tracked."""
    if interval.interval_time_seconds is None or interval.interval_time_seconds <= 0:
        return HEALTHY
    tracked = interval.tracked_time_seconds or 0
    return health_percent(tracked, interval.interval_time_seconds)


def interval_health_percent(interval: ServiceInterval) -> int:
    """Health of an interval: the minimum of its distance and time clocks."""
    return min(distance_health_percent(interval), time_health_percent(interval))


def min_interval_health(intervals: Iterable[ServiceInterval]) -> int:
    """Least healthy interval, 100 for a component without intervals."""
    return min((interval_health_percent(i) for i in intervals), default=HEALTHY)


def min_health(component: Component, intervals: Iterable[ServiceInterval]) -> int:
    """Combined health used for due lists."""
    return min(component_health_percent(component), min_interval_health(intervals))


def describe_interval(interval: ServiceInterval) -> str:
    """Remaining-budget text, e.g. "180km of 250km left · 2w left".

    Returns an empty string for a fully exempt interval.
    """
    parts = []
    if interval.interval_km > 0:
        remaining_km = max(0.0, interval.interval_km - interval.tracked_km)
        total_km = _round_half_up(interval.interval_km)
        parts.append(f"{_round_half_up(remaining_km)}km of {total_km}km left")
    if interval.interval_time_seconds is not None and interval.interval_time_seconds > 0:
        remaining = max(0, interval.interval_time_seconds - (interval.tracked_time_seconds or 0))
        parts.append(f"{format_remaining_seconds(remaining)} left")
    return " · ".join(parts)


def next_due_interval(intervals: Iterable[ServiceInterval]) -> ServiceInterval | None:
    """The least healthy interval (first one wins on ties)."""
    worst: ServiceInterval | None = None
    worst_health = HEALTHY + 1
    for interval in intervals:
        health = interval_health_percent(interval)
        if health < worst_health:
            worst, worst_health = interval, health
    return worst

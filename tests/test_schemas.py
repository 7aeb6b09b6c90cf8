"""Tests for request parsing and response building."""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from bike_wear_server.schemas.components import (
    ComponentResponse,
    IntervalCreate,
    IntervalUpdate,
    SnoozeRequest,
)


def test_interval_create_parses_text_time():
    interval = IntervalCreate(name="Wax", interval_time="2 weeks")

    assert interval.interval_time_seconds == 14 * 24 * 3600
    assert interval.interval_km == 0.0


def test_interval_create_prefers_explicit_seconds():
    interval = IntervalCreate(name="Wax", interval_time="2 weeks", interval_time_seconds=60)

    assert interval.interval_time_seconds == 60


def test_interval_create_needs_a_clock():
    with pytest.raises(ValidationError, match="Set a distance interval"):
        IntervalCreate(name="Nothing")


def test_interval_create_rejects_unknown_unit():
    with pytest.raises(ValidationError, match="Cannot parse interval time"):
        IntervalCreate(name="Wax", interval_time="2 fortnights ago")


def test_interval_update_cannot_clear_both_clocks():
    with pytest.raises(ValidationError):
        IntervalUpdate(interval_km=0, clear_interval_time=True)

    assert IntervalUpdate(interval_km=100, clear_interval_time=True).clear_interval_time


def test_snooze_days_become_duration():
    assert SnoozeRequest(days=3).duration == timedelta(days=3)
    assert SnoozeRequest(km=200).duration is None


async def test_component_response_includes_derived_fields(chain):
    chain.distance_used_km = 1750.0

    response = ComponentResponse.from_component(chain)

    assert response.health == 50
    assert response.type_display == "Chain"
    assert response.category == "drivetrain"
    assert response.bike_id == chain.bike_id

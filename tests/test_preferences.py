"""Tests for wear preferences."""

import pytest

from bike_wear_server.core.config import settings
from bike_wear_server.services.preferences import PreferencesService, clamp_threshold


def test_clamp_threshold():
    assert clamp_threshold(0) == 1
    assert clamp_threshold(50) == 50
    assert clamp_threshold(250) == 100


@pytest.mark.asyncio
async def test_defaults_come_from_settings(async_session):
    prefs = await PreferencesService(async_session).get()

    assert prefs.close_to_service_threshold == settings.close_to_service_threshold
    assert prefs.default_alert_threshold_percent == settings.default_alert_threshold_percent


@pytest.mark.asyncio
async def test_update_keeps_omitted_values(async_session):
    service = PreferencesService(async_session)

    await service.update(close_to_service_threshold=30)
    prefs = await service.update(default_alert_threshold_percent=-5)

    assert prefs.close_to_service_threshold == 30
    assert prefs.default_alert_threshold_percent == 1
    assert await service.get() == prefs

"""API endpoint tests."""

from collections.abc import AsyncIterator

import pytest
from litestar.status_codes import (
    HTTP_200_OK,
    HTTP_201_CREATED,
    HTTP_204_NO_CONTENT,
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
)
from litestar.testing import AsyncTestClient

from bike_wear_server.app import create_app

API = "/api/v1"

RIDE = {
    "distance_km": 5.0,
    "duration_ms": 3_600_000,
    "max_speed_kmh": 35.0,
    "started_at": "2026-05-01T08:00:00Z",
    "ended_at": "2026-05-01T09:00:00Z",
}


@pytest.fixture
async def client(async_engine) -> AsyncIterator[AsyncTestClient]:
    """Test client bound to the in-memory test database."""
    async with AsyncTestClient(app=create_app(async_engine)) as test_client:
        yield test_client


async def _create_bike(client: AsyncTestClient, **extra) -> dict:
    response = await client.post(f"{API}/bikes", json={"name": "Commuter", **extra})
    assert response.status_code == HTTP_201_CREATED
    return response.json()


async def _create_chain(client: AsyncTestClient, bike_id: str | None) -> dict:
    response = await client.post(
        f"{API}/components",
        json={"type": "chain", "name": "Default chain", "bike_id": bike_id},
    )
    assert response.status_code == HTTP_201_CREATED
    return response.json()


async def test_health_check(client: AsyncTestClient) -> None:
    """Test health check endpoint."""
    response = await client.get("/health")

    assert response.status_code == HTTP_200_OK
    data = response.json()
    assert data["status"] == "ok"
    assert "version" in data


async def test_create_bike_seeds_defaults(client: AsyncTestClient) -> None:
    bike = await _create_bike(client)

    response = await client.get(f"{API}/components", params={"bike_id": bike["id"]})

    assert response.status_code == HTTP_200_OK
    components = response.json()
    assert len(components) == 43
    assert [c["type"] for c in components] == sorted(c["type"] for c in components)


async def test_missing_bike_is_404(client: AsyncTestClient) -> None:
    response = await client.get(f"{API}/bikes/missing")

    assert response.status_code == HTTP_404_NOT_FOUND
    body = response.json()
    assert body["error"] == "NotFoundError"
    assert body["message"] == "Bike missing not found"


async def test_invalid_body_is_400(client: AsyncTestClient) -> None:
    response = await client.post(f"{API}/bikes", json={"name": ""})

    assert response.status_code == HTTP_400_BAD_REQUEST


async def test_component_lifecycle(client: AsyncTestClient) -> None:
    bike = await _create_bike(client, seed_defaults=False)
    chain = await _create_chain(client, bike["id"])
    assert chain["health"] == 100
    assert chain["type_display"] == "Chain"
    assert chain["category"] == "drivetrain"

    response = await client.post(f"{API}/rides", json={**RIDE, "bike_id": bike["id"]})
    assert response.status_code == HTTP_201_CREATED
    assert response.json()["status"] == "success"

    response = await client.get(f"{API}/components/{chain['id']}")
    assert response.json()["distance_used_km"] == 5.0

    response = await client.post(f"{API}/components/{chain['id']}/replace")
    assert response.status_code == HTTP_200_OK
    assert response.json()["distance_used_km"] == 0.0

    response = await client.get(f"{API}/bikes/{bike['id']}")
    assert response.json()["chain_replacement_count"] == 1
    assert response.json()["total_distance_km"] == 5.0

    response = await client.post(f"{API}/components/{chain['id']}/uninstall")
    assert response.json()["bike_id"] is None

    response = await client.get(f"{API}/components/{chain['id']}/swaps")
    swaps = response.json()
    assert len(swaps) == 1
    assert swaps[0]["uninstalled_at"] is not None

    response = await client.delete(f"{API}/components/{chain['id']}")
    assert response.status_code == HTTP_204_NO_CONTENT
    response = await client.get(f"{API}/components/{chain['id']}")
    assert response.status_code == HTTP_404_NOT_FOUND


async def test_custom_interval(client: AsyncTestClient) -> None:
    chain = await _create_chain(client, None)

    response = await client.post(
        f"{API}/components/{chain['id']}/intervals",
        json={"name": "Wax", "type": "grease", "interval_km": 300, "interval_time": "2 weeks"},
    )
    assert response.status_code == HTTP_201_CREATED
    interval = response.json()
    assert interval["interval_time_seconds"] == 14 * 24 * 3600
    assert interval["health"] == 100

    response = await client.post(
        f"{API}/components/{chain['id']}/intervals", json={"name": "Nothing"}
    )
    assert response.status_code == HTTP_400_BAD_REQUEST

    response = await client.patch(f"{API}/intervals/{interval['id']}", json={"interval_km": 500})
    assert response.json()["interval_km"] == 500

    response = await client.get(f"{API}/components/{chain['id']}/intervals")
    assert len(response.json()) == 3


async def test_snooze_and_alerts(client: AsyncTestClient) -> None:
    bike = await _create_bike(client, seed_defaults=False)
    chain = await _create_chain(client, bike["id"])
    await client.patch(f"{API}/components/{chain['id']}", json={"distance_used_km": 3400})

    response = await client.get(f"{API}/bikes/{bike['id']}/alerts")
    assert response.json()["count"] == 1

    response = await client.post(f"{API}/components/{chain['id']}/snooze", json={})
    assert response.json()["alert_snooze_until_km"] == 3900

    response = await client.get(f"{API}/bikes/{bike['id']}/alerts")
    assert response.json()["count"] == 0


async def test_ride_without_bike_is_skipped(client: AsyncTestClient) -> None:
    response = await client.post(f"{API}/rides", json=RIDE)

    assert response.status_code == HTTP_201_CREATED
    assert response.json()["status"] == "skipped"


async def test_ride_ending_before_start_is_400(client: AsyncTestClient) -> None:
    response = await client.post(
        f"{API}/rides", json={**RIDE, "ended_at": "2026-05-01T07:00:00Z"}
    )

    assert response.status_code == HTTP_400_BAD_REQUEST
    assert response.json()["message"] == "Ride cannot end before it starts"


async def test_due_list_and_bulk_replace(client: AsyncTestClient) -> None:
    bike = await _create_bike(client, seed_defaults=False)
    chain = await _create_chain(client, bike["id"])
    await client.patch(f"{API}/components/{chain['id']}", json={"distance_used_km": 3400})

    response = await client.get(f"{API}/service/due", params={"bike_id": bike["id"]})
    due = response.json()
    assert [item["component"]["id"] for item in due] == [chain["id"]]
    assert due[0]["bike_name"] == "Commuter"

    response = await client.post(
        f"{API}/service/replace", json={"component_ids": [chain["id"], "missing"]}
    )
    result = response.json()
    assert result["succeeded"] == [chain["id"]]
    assert "missing" in result["failed"]


async def test_context_roundtrip(client: AsyncTestClient) -> None:
    chain = await _create_chain(client, None)

    response = await client.put(
        f"{API}/components/{chain['id']}/context",
        json={"notes": "Bought on sale", "purchase_link": "not a url"},
    )
    assert response.status_code == HTTP_400_BAD_REQUEST
    assert response.json()["message"] == "Purchase link must be a valid URL"

    response = await client.put(
        f"{API}/components/{chain['id']}/context",
        json={"notes": "Bought on sale", "purchase_date": "2026-01-10"},
    )
    assert response.status_code == HTTP_200_OK

    response = await client.get(f"{API}/components/{chain['id']}/context")
    assert response.json()["purchase_date"] == "2026-01-10"


async def test_preferences(client: AsyncTestClient) -> None:
    response = await client.put(f"{API}/preferences", json={"close_to_service_threshold": 500})

    assert response.json()["close_to_service_threshold"] == 100
    response = await client.get(f"{API}/preferences")
    assert response.json()["close_to_service_threshold"] == 100


async def test_live_ride_flow(client: AsyncTestClient) -> None:
    bike = await _create_bike(client, seed_defaults=False)

    response = await client.post(f"{API}/live/start", json={"bike_id": bike["id"]})
    assert response.status_code == HTTP_201_CREATED

    response = await client.post(f"{API}/live/start", json={"bike_id": bike["id"]})
    assert response.status_code == HTTP_400_BAD_REQUEST

    response = await client.post(
        f"{API}/live/sample", json={"distance_km": 1.5, "speed_kmh": 24.0}
    )
    assert response.json()["distance_km"] == 1.5

    response = await client.get(f"{API}/live")
    assert response.json()["active"] is True

    response = await client.post(f"{API}/live/stop")
    assert response.json()["status"] == "success"

    response = await client.get(f"{API}/bikes/{bike['id']}")
    assert response.json()["total_distance_km"] == 1.5
    response = await client.get(f"{API}/live")
    assert response.json() == {"active": False, "ride": None}


async def test_summary_and_catalog(client: AsyncTestClient) -> None:
    response = await client.get(f"{API}/summary")
    assert response.json() == {"summary": "No bikes in garage."}

    response = await client.get(f"{API}/catalog/types", params={"category": "brakes"})
    types = response.json()
    assert types
    assert {t["category"] for t in types} == {"brakes"}


async def test_interval_edit_cannot_drop_last_clock(client: AsyncTestClient) -> None:
    chain = await _create_chain(client, None)
    intervals = (await client.get(f"{API}/components/{chain['id']}/intervals")).json()
    replace = next(i for i in intervals if i["type"] == "replace")

    response = await client.patch(f"{API}/intervals/{replace['id']}", json={"interval_km": 0})

    assert response.status_code == HTTP_400_BAD_REQUEST
    assert response.json()["message"] == "Set a distance interval, a time interval, or both"

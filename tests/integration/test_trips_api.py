"""Integration tests for the trip HTTP routes."""

import uuid

import pytest
from fastapi.testclient import TestClient

from backend.trips.api.dependencies import get_trip_service
from backend.trips.main import app
from backend.trips.services.trip_service import TripService


@pytest.fixture
def client(service: TripService):
    """Test client wired to an isolated in-memory service."""
    app.dependency_overrides[get_trip_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {uuid.uuid4()}"}


def create_trip(client: TestClient, headers: dict[str, str]) -> str:
    response = client.post(
        "/trips",
        json={"name": "Coast Run", "destination": "Galle", "dates": ["2025-12-01", "2025-12-02"]},
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()["trip_id"]


def test_missing_auth_is_401(client: TestClient) -> None:
    response = client.get("/trips")
    assert response.status_code == 401


def test_invalid_auth_is_401(client: TestClient) -> None:
    response = client.get("/trips", headers={"Authorization": "Bearer not-a-uuid"})
    assert response.status_code == 401


def test_create_and_get_trip(client: TestClient, auth_headers: dict[str, str]) -> None:
    trip_id = create_trip(client, auth_headers)

    response = client.get(f"/trips/{trip_id}", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Coast Run"
    assert data["dates"] == ["2025-12-01", "2025-12-02"]
    assert data["itinerary"] == []

    listing = client.get("/trips", headers=auth_headers).json()
    assert [t["trip_id"] for t in listing] == [trip_id]


def test_create_with_date_range(client: TestClient, auth_headers: dict[str, str]) -> None:
    response = client.post(
        "/trips",
        json={"name": "Trip", "destination": "Galle", "start_date": "2025-12-01", "end_date": "2025-12-03"},
        headers=auth_headers,
    )

    assert response.status_code == 201
    assert response.json()["dates"] == ["2025-12-01", "2025-12-02", "2025-12-03"]


def test_validation_error_is_422(client: TestClient, auth_headers: dict[str, str]) -> None:
    response = client.post(
        "/trips", json={"name": "Trip", "destination": "Galle", "dates": []}, headers=auth_headers
    )

    assert response.status_code == 422
    assert response.json()["error"] == "validation_error"


def test_foreign_trip_is_404(client: TestClient, auth_headers: dict[str, str]) -> None:
    trip_id = create_trip(client, auth_headers)
    stranger = {"Authorization": f"Bearer {uuid.uuid4()}"}

    response = client.get(f"/trips/{trip_id}", headers=stranger)

    assert response.status_code == 404
    assert response.json() == {"error": "not_found", "detail": "Trip not found"}


def test_itinerary_flow(client: TestClient, auth_headers: dict[str, str]) -> None:
    trip_id = create_trip(client, auth_headers)

    first = client.post(
        f"/trips/{trip_id}/itinerary",
        json={"day": 1, "activity": {"type": "place", "name": "Unawatuna Beach", "location": "6.0076,80.2476"}},
        headers=auth_headers,
    )
    assert first.status_code == 201
    second = client.post(
        f"/trips/{trip_id}/itinerary",
        json={"day": 1, "activity": {"type": "food", "name": "Beach Cafe", "location": "6.0100,80.2500"}},
        headers=auth_headers,
    )
    day = second.json()
    assert day["name"] == "Day 1: Galle"
    assert len(day["activities"]) == 2

    optimized = client.post(f"/trips/{trip_id}/itinerary/1/optimize", headers=auth_headers)
    assert optimized.status_code == 200
    assert "distance_before_km" in optimized.json()

    activity_id = day["activities"][0]["activity"]["activity_id"]
    removed = client.delete(
        f"/trips/{trip_id}/itinerary/1/activities/{activity_id}", headers=auth_headers
    )
    assert removed.status_code == 204

    trip = client.get(f"/trips/{trip_id}", headers=auth_headers).json()
    assert [a["activity"]["name"] for a in trip["itinerary"][0]["activities"]] == ["Beach Cafe"]


def test_bad_day_is_422(client: TestClient, auth_headers: dict[str, str]) -> None:
    trip_id = create_trip(client, auth_headers)

    response = client.post(
        f"/trips/{trip_id}/itinerary",
        json={"day": 7, "activity": {"type": "place", "name": "Fort"}},
        headers=auth_headers,
    )

    assert response.status_code == 422


def test_bucket_list_flow(client: TestClient, auth_headers: dict[str, str]) -> None:
    trip_id = create_trip(client, auth_headers)

    item = client.post(
        f"/trips/{trip_id}/bucket-list", json={"name": "Jungle Beach"}, headers=auth_headers
    ).json()
    confirmed = client.patch(
        f"/trips/{trip_id}/bucket-list/{item['item_id']}",
        json={"confirmed": True},
        headers=auth_headers,
    )
    assert confirmed.json()["confirmed"] is True

    moved = client.post(
        f"/trips/{trip_id}/bucket-list/{item['item_id']}/move",
        json={"day": 2},
        headers=auth_headers,
    )
    assert moved.status_code == 201
    assert moved.json()["activity"]["name"] == "Jungle Beach"

    trip = client.get(f"/trips/{trip_id}", headers=auth_headers).json()
    assert trip["bucket_list"] == []


def test_notes_and_checklists(client: TestClient, auth_headers: dict[str, str]) -> None:
    trip_id = create_trip(client, auth_headers)
    day = client.post(
        f"/trips/{trip_id}/itinerary",
        json={"day": 1, "activity": {"type": "place", "name": "Fort"}},
        headers=auth_headers,
    ).json()
    activity_id = day["activities"][0]["activity"]["activity_id"]

    note = client.post(
        f"/trips/{trip_id}/activities/{activity_id}/notes",
        json={"title": "Tickets", "content": "Free"},
        headers=auth_headers,
    )
    assert note.status_code == 201

    checklist = client.post(
        f"/trips/{trip_id}/activities/{activity_id}/checklists",
        json={"title": "Pack", "texts": ["Hat"]},
        headers=auth_headers,
    ).json()
    item_id = checklist["items"][0]["item_id"]

    updated = client.patch(
        f"/trips/{trip_id}/activities/{activity_id}/checklists/items/{item_id}",
        json={"checklist_title": "Pack", "completed": True},
        headers=auth_headers,
    )
    assert updated.status_code == 200
    assert updated.json()["completed"] is True


def test_share_and_read_shared(client: TestClient, auth_headers: dict[str, str]) -> None:
    trip_id = create_trip(client, auth_headers)

    token = client.post(f"/trips/{trip_id}/share", headers=auth_headers).json()["share_token"]
    again = client.post(f"/trips/{trip_id}/share", headers=auth_headers).json()["share_token"]
    assert token == again

    # No auth needed for shared reads
    shared = client.get(f"/shared/{token}")
    assert shared.status_code == 200
    assert shared.json()["name"] == "Coast Run"
    assert "owner_id" not in shared.json()

    assert client.delete(f"/trips/{trip_id}/share", headers=auth_headers).status_code == 204
    assert client.get(f"/shared/{token}").status_code == 404


def test_search_locations(client: TestClient, auth_headers: dict[str, str]) -> None:
    trip_id = create_trip(client, auth_headers)

    response = client.post(
        f"/trips/{trip_id}/locations/search", json={"query": "fort"}, headers=auth_headers
    )

    assert response.status_code == 200
    assert response.json()[0]["name"] == "Galle Fort"


def test_dependency_failure_is_503(
    make_service, fake_resolver, auth_headers: dict[str, str]
) -> None:
    service = make_service(fake_resolver(delay_s=1.0))
    app.dependency_overrides[get_trip_service] = lambda: service
    try:
        client = TestClient(app)
        trip_id = create_trip(client, auth_headers)

        response = client.post(
            f"/trips/{trip_id}/locations/search", json={"query": "fort"}, headers=auth_headers
        )

        assert response.status_code == 503
        assert response.json()["error"] == "dependency_error"
    finally:
        app.dependency_overrides.clear()


def test_delete_trip(client: TestClient, auth_headers: dict[str, str]) -> None:
    trip_id = create_trip(client, auth_headers)

    assert client.delete(f"/trips/{trip_id}", headers=auth_headers).status_code == 204
    assert client.get(f"/trips/{trip_id}", headers=auth_headers).status_code == 404


def test_omitted_budget_is_null(client: TestClient, auth_headers: dict[str, str]) -> None:
    trip_id = create_trip(client, auth_headers)

    assert client.get(f"/trips/{trip_id}", headers=auth_headers).json()["budget"] is None
    assert client.get("/trips", headers=auth_headers).json()[0]["budget"] is None


@pytest.mark.parametrize("budget", ["NaN", "Infinity", "-1"])
def test_non_finite_budget_is_422(
    client: TestClient, auth_headers: dict[str, str], budget: str
) -> None:
    body = '{"name": "Trip", "destination": "Galle", "dates": ["2025-12-01"], "budget": %s}' % budget

    response = client.post(
        "/trips", content=body, headers={**auth_headers, "Content-Type": "application/json"}
    )

    assert response.status_code == 422
    assert client.get("/trips", headers=auth_headers).json() == []


def test_create_ai_trip(client: TestClient, auth_headers: dict[str, str]) -> None:
    response = client.post(
        "/trips/ai",
        json={
            "name": "South Coast",
            "destination": "Galle",
            "dates": ["2025-12-01", "2025-12-02"],
            "interests": ["beaches"],
        },
        headers=auth_headers,
    )

    assert response.status_code == 201
    data = response.json()
    assert [d["day"] for d in data["itinerary"]] == [1, 2]
    assert all(len(d["activities"]) == 3 for d in data["itinerary"])
    assert [b["name"] for b in data["bucket_list"]] == ["Beaches in Galle"]

    listing = client.get("/trips", headers=auth_headers).json()
    assert [t["trip_id"] for t in listing] == [data["trip_id"]]


def test_create_ai_trip_without_interests_is_422(
    client: TestClient, auth_headers: dict[str, str]
) -> None:
    response = client.post(
        "/trips/ai", json={"name": "Trip", "destination": "Galle"}, headers=auth_headers
    )

    assert response.status_code == 422
    assert response.json() == {
        "error": "validation_error",
        "detail": "At least one interest is required",
    }


def test_update_trip_merges_fields(client: TestClient, auth_headers: dict[str, str]) -> None:
    trip_id = create_trip(client, auth_headers)

    response = client.patch(
        f"/trips/{trip_id}", json={"name": "South Coast", "budget": 750}, headers=auth_headers
    )

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "South Coast"
    assert data["budget"] == 750
    assert data["destination"] == "Galle"

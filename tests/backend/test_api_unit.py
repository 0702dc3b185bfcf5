"""Unit-level API tests for direct endpoint behavior and error handling."""

from __future__ import annotations

import asyncio

from fastapi.testclient import TestClient

from backend.api import STATE, create_app
from backend.config import RoutingSettings
from backend.data_access import BuildingRecord, InMemoryBuildingStore, InMemoryHistoryRecorder


class SlowStore(InMemoryBuildingStore):
    async def get_active_paths(self, building_id: str):
        await asyncio.sleep(1.0)
        return await super().get_active_paths(building_id)


def _client(store: InMemoryBuildingStore, **settings) -> TestClient:
    return TestClient(create_app(store=store, settings=RoutingSettings(**settings)))


def test_health_endpoint() -> None:
    """Health endpoint should report API availability and routing defaults."""
    client = _client(InMemoryBuildingStore(), floor_penalty=2.5)
    res = client.get("/health")

    assert res.status_code == 200
    assert res.json() == {
        "status": "ok",
        "version": "1.0.0",
        "default_algorithm": "dijkstra",
        "floor_penalty": 2.5,
        "history_enabled": True,
    }


def test_route_without_store_returns_503() -> None:
    """Handlers should refuse to route when no data store is configured."""
    client = _client(InMemoryBuildingStore())
    STATE.store = None

    res = client.post("/route", json={"building": "hq", "from": "lobby", "to": "cafe"})
    assert res.status_code == 503


def test_route_invalid_landmark_returns_400(sample_store: InMemoryBuildingStore) -> None:
    client = _client(sample_store)

    res = client.post("/route", json={"building": "hq", "from": "lobby", "to": "roof"})

    assert res.status_code == 400
    assert res.json()["detail"] == 'Invalid "to" landmark: roof'


def test_route_unknown_or_inactive_building_returns_400(sample_store: InMemoryBuildingStore) -> None:
    sample_store.add_building(BuildingRecord(id="closed", name="Closed Wing", is_active=False))
    client = _client(sample_store)

    for building in ("annex", "closed"):
        res = client.post("/route", json={"building": building, "from": "lobby", "to": "cafe"})
        assert res.status_code == 400
        assert res.json()["detail"] == "Building not found"


def test_route_no_path_returns_404(sample_store: InMemoryBuildingStore) -> None:
    client = _client(sample_store)

    res = client.post(
        "/route",
        json={"building": "hq", "from": "lobby", "to": "room-101", "preferences": {"maxDifficulty": "easy"}},
    )

    assert res.status_code == 404
    assert "No route found" in res.json()["detail"]


def test_route_request_validation_returns_422(sample_store: InMemoryBuildingStore) -> None:
    client = _client(sample_store)

    missing_from = client.post("/route", json={"building": "hq", "to": "cafe"})
    bad_algorithm = client.post("/route", json={"building": "hq", "from": "lobby", "to": "cafe", "algorithm": "bfs"})
    bad_difficulty = client.post(
        "/route",
        json={"building": "hq", "from": "lobby", "to": "cafe", "preferences": {"maxDifficulty": "extreme"}},
    )

    assert missing_from.status_code == 422
    assert bad_algorithm.status_code == 422
    assert bad_difficulty.status_code == 422


def test_route_records_navigation_for_user_header(sample_store: InMemoryBuildingStore) -> None:
    history = InMemoryHistoryRecorder()
    client = TestClient(create_app(store=sample_store, history=history, settings=RoutingSettings()))
    body = {"building": "hq", "from": "lobby", "to": "cafe"}

    anonymous = client.post("/route", json=body)
    tracked = client.post("/route", json=body, headers={"X-User-Id": "visitor-1"})

    assert "navigation_id" not in anonymous.json()["route"]
    assert tracked.json()["route"]["navigation_id"] == history.entries[0].id
    assert history.entries[0].user_id == "visitor-1"
    assert len(history.entries) == 1


def test_route_timeout_returns_504(sample_store: InMemoryBuildingStore) -> None:
    slow = SlowStore()
    slow.buildings = sample_store.buildings
    slow.landmarks = sample_store.landmarks
    slow.paths = sample_store.paths
    client = _client(slow, route_timeout_s=0.05)

    res = client.post("/route", json={"building": "hq", "from": "lobby", "to": "cafe"})

    assert res.status_code == 504
    assert res.json()["detail"] == "Route computation timed out"


def test_connections_unknown_landmark_returns_404(sample_store: InMemoryBuildingStore) -> None:
    client = _client(sample_store)

    res = client.get("/landmarks/nowhere/connections")
    assert res.status_code == 404
    assert res.json()["detail"] == "Landmark not found"


def test_building_landmarks_unknown_building_returns_404(sample_store: InMemoryBuildingStore) -> None:
    client = _client(sample_store)

    assert client.get("/buildings/annex/landmarks").status_code == 404
    assert client.get("/buildings/annex/graph-report").status_code == 404


def test_inactive_building_listings_return_404(sample_store: InMemoryBuildingStore) -> None:
    sample_store.add_building(BuildingRecord(id="closed", name="Closed Wing", is_active=False))
    client = _client(sample_store)

    assert client.get("/buildings/closed/landmarks").status_code == 404
    assert client.get("/buildings/closed/graph-report").status_code == 404


def test_route_string_false_flag_is_not_a_constraint(sample_store: InMemoryBuildingStore) -> None:
    client = _client(sample_store)

    res = client.post(
        "/route",
        json={"building": "hq", "from": "lobby", "to": "room-101", "preferences": {"avoidStairs": "false"}},
    )

    assert res.status_code == 200
    assert res.json()["route"]["preferences"]["avoid_stairs"] is False
    assert res.json()["route"]["total_distance"] == 46

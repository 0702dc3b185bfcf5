"""Unit tests for backend.route_assembly."""

from __future__ import annotations

import pytest

from backend.graph import Accessibility, EdgeData, Graph, NodeData
from backend.pathfinding import SearchResult, dijkstra
from backend.route_assembly import (
    ALREADY_AT_DESTINATION,
    assemble_route,
    same_location_route,
    serialize_route,
)


def test_same_location_route_is_single_zero_step() -> None:
    route = same_location_route(NodeData(id="lobby", name="Lobby"))

    assert len(route.steps) == 1
    assert route.steps[0].instructions == ALREADY_AT_DESTINATION == "You are already at your destination!"
    assert route.total_distance == 0
    assert route.total_time == 0


def test_assemble_route_from_square(square_graph: Graph) -> None:
    route = assemble_route(dijkstra(square_graph, "a", "c"))

    first, *rest = route.steps
    assert first.step_number == 1
    assert first.instructions == "Start at Corner A"
    assert first.distance == 0 and first.estimated_time == 0
    assert first.accessibility is None and first.images == []

    assert [step.step_number for step in rest] == [2, 3]
    assert all(step.distance == pytest.approx(10.0) for step in rest)
    assert route.total_distance == 20
    assert route.total_time == pytest.approx(16.0)
    assert route.landmark_ids[0] == "a" and route.landmark_ids[-1] == "c"


def test_assemble_route_copies_edge_metadata_and_rounds_half_up() -> None:
    graph = Graph()
    for node_id in ("a", "b", "c"):
        graph.add_node(node_id, NodeData(id=node_id, name=node_id))
    access = Accessibility(wheelchair_accessible=False, requires_stairs=True)
    graph.add_edge(
        "a",
        "b",
        10.25,
        EdgeData(path_id="ab", instructions="Up the stairs", difficulty="hard", accessibility=access,
                 estimated_time=30, images=[{"url": "stairs.jpg"}]),
    )
    graph.add_edge("b", "c", 10.25, EdgeData(path_id="bc", instructions="Along the hall", estimated_time=12))

    route = assemble_route(dijkstra(graph, "a", "c"))

    step = route.steps[1]
    assert step.instructions == "Up the stairs"
    assert step.difficulty == "hard"
    assert step.accessibility is access
    assert step.images == [{"url": "stairs.jpg"}]
    assert step.path_id == "ab"
    assert route.total_distance == 21
    assert route.total_time == pytest.approx(42.0)


def test_assemble_route_rejects_empty_result() -> None:
    with pytest.raises(ValueError, match="empty search result"):
        assemble_route(SearchResult())


def test_serialize_route_shape(square_graph: Graph) -> None:
    payload = serialize_route(assemble_route(dijkstra(square_graph, "a", "c")))

    assert payload["total_distance"] == 20
    assert payload["steps"][0]["landmark"]["id"] == "a"
    assert payload["steps"][0]["accessibility"] is None
    assert payload["steps"][1]["path_id"] is not None
    assert set(payload["steps"][1]) == {
        "step_number",
        "landmark",
        "path_id",
        "instructions",
        "distance",
        "estimated_time",
        "difficulty",
        "accessibility",
        "images",
    }

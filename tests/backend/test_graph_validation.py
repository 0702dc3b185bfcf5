"""Unit tests for backend.graph_validation."""

from __future__ import annotations

import asyncio

import pytest

from backend.data_access import InMemoryBuildingStore, LandmarkRecord, PathRecord
from backend.graph import EdgeData, Graph, NodeData
from backend.graph_validation import find_inadmissible_edges, validate_building_graph


def _landmark(landmark_id: str, floor: str = "0", xy: tuple[float, float] | None = (0.0, 0.0)) -> LandmarkRecord:
    return LandmarkRecord(id=landmark_id, building_id="b", name=landmark_id.title(), floor=floor, coordinates=xy)


def test_sample_building_is_admissible(sample_store: InMemoryBuildingStore) -> None:
    landmarks = asyncio.run(sample_store.get_active_landmarks("hq"))
    paths = asyncio.run(sample_store.get_active_paths("hq"))

    report = validate_building_graph(landmarks, paths)

    assert report["ok"] is True
    assert report["summary"]["landmarks"] == 8
    assert report["summary"]["errors"] == 0
    kinds = [issue["kind"] for issue in report["issues"]]
    assert kinds == ["malformed_floor"]
    assert report["issues"][0]["landmark_id"] == "archive"


def test_find_inadmissible_edges_flags_shortcuts() -> None:
    graph = Graph()
    graph.add_node("a", NodeData(id="a", floor="0", coordinates=(0.0, 0.0)))
    graph.add_node("b", NodeData(id="b", floor="0", coordinates=(30.0, 40.0)))
    graph.add_node("c", NodeData(id="c", floor="3"))
    graph.add_edge("a", "b", 10.0, EdgeData(path_id="short"))
    graph.add_edge("a", "c", 20.0, EdgeData(path_id="ok"))

    (violation,) = find_inadmissible_edges(graph)

    assert violation["path_id"] == "short"
    assert violation["lower_bound"] == pytest.approx(50.0)
    assert find_inadmissible_edges(graph, floor_penalty=10.0)[-1]["path_id"] == "ok"


def test_find_inadmissible_edges_empty_graph() -> None:
    assert find_inadmissible_edges(Graph()) == []


def test_validate_reports_each_issue_kind() -> None:
    landmarks = [
        _landmark("a"),
        _landmark("b", xy=(1.0, 0.0)),
        _landmark("lonely", floor="Roof"),
    ]
    paths = [
        PathRecord(id="ab", from_id="a", to_id="b", distance=0.5, instructions="x"),
        PathRecord(id="loop", from_id="a", to_id="a", distance=1, instructions="x"),
        PathRecord(id="dangling", from_id="b", to_id="gone", distance=1, instructions="x"),
    ]

    report = validate_building_graph(landmarks, paths)
    by_kind = {}
    for issue in report["issues"]:
        by_kind.setdefault(issue["kind"], []).append(issue)

    assert report["ok"] is False
    assert by_kind["dangling_reference"][0]["missing"] == ["gone"]
    assert by_kind["self_loop"][0]["path_id"] == "loop"
    assert by_kind["malformed_floor"][0]["landmark_id"] == "lonely"
    assert [i["landmark_id"] for i in by_kind["isolated_landmark"]] == ["lonely"]
    assert {i["path_id"] for i in by_kind["inadmissible_edge"]} == {"ab"}
    assert report["summary"]["errors"] == 1
    assert report["summary"]["warnings"] == len(report["issues"]) - 1

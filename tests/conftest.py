"""Pytest global fixtures and test isolation hooks."""

from __future__ import annotations

import math
from pathlib import Path

import pytest

from backend.api import STATE
from backend.config import RoutingSettings
from backend.data_access import InMemoryBuildingStore
from backend.graph import EdgeData, Graph, NodeData

SAMPLE_BUILDING_PATH = Path(__file__).resolve().parents[1] / "assets" / "sample_building.json"


@pytest.fixture(autouse=True)
def reset_service_state() -> None:
    """Reset shared API collaborators before each test."""
    STATE.store = None
    STATE.history = None
    STATE.settings = RoutingSettings()


@pytest.fixture()
def sample_store() -> InMemoryBuildingStore:
    """Two-floor sample building bundled with the repository."""
    return InMemoryBuildingStore.from_json_file(SAMPLE_BUILDING_PATH)


@pytest.fixture()
def square_graph() -> Graph:
    """Corners of a 10x10 square with every side and the b-d diagonal, but no a-c edge."""
    graph = Graph()
    corners = {"a": (0.0, 0.0), "b": (10.0, 0.0), "c": (10.0, 10.0), "d": (0.0, 10.0)}
    for node_id, xy in corners.items():
        graph.add_node(node_id, NodeData(id=node_id, floor="1", coordinates=xy, name=f"Corner {node_id.upper()}"))

    for src, dst in [("a", "b"), ("b", "c"), ("c", "d"), ("d", "a"), ("b", "d")]:
        (x1, y1), (x2, y2) = corners[src], corners[dst]
        graph.add_edge(
            src,
            dst,
            math.hypot(x2 - x1, y2 - y1),
            EdgeData(path_id=f"{src}{dst}", instructions=f"Walk from {src} to {dst}", bidirectional=True, estimated_time=8),
        )
    return graph

"""Quality checks for a building's landmark/path snapshot."""

from __future__ import annotations

from typing import Any, Iterable

import numpy as np

from backend.data_access import LandmarkRecord, PathRecord
from backend.graph import Graph, build_graph
from backend.heuristics import DEFAULT_FLOOR_PENALTY, is_numeric_floor, parse_floor_ordinal


def find_inadmissible_edges(
    graph: Graph,
    floor_penalty: float = DEFAULT_FLOOR_PENALTY,
    tolerance: float = 1e-9,
) -> list[dict[str, Any]]:
    """Return edges cheaper than the A* straight-line estimate between their endpoints.

    If no edge undercuts the estimate, the heuristic is consistent and A*
    returns the same distance as Dijkstra.
    """
    edges = list(graph.edges())
    if not edges:
        return []

    node_ids = list(graph.nodes.keys())
    index = {node_id: i for i, node_id in enumerate(node_ids)}

    coords = np.zeros((len(node_ids), 2), dtype=float)
    has_coords = np.zeros(len(node_ids), dtype=bool)
    floors = np.zeros(len(node_ids), dtype=float)
    for i, node_id in enumerate(node_ids):
        node = graph.nodes[node_id]
        floors[i] = parse_floor_ordinal(node.floor)
        if node.coordinates is not None:
            coords[i] = (float(node.coordinates[0]), float(node.coordinates[1]))
            has_coords[i] = True

    src = np.array([index[e.source] for e in edges], dtype=int)
    dst = np.array([index[e.target] for e in edges], dtype=int)
    weights = np.array([e.weight for e in edges], dtype=float)

    dz = (floors[src] - floors[dst]) * float(floor_penalty)
    planar = np.linalg.norm(coords[src] - coords[dst], axis=1)
    both = has_coords[src] & has_coords[dst]
    bounds = np.where(both, np.sqrt(planar * planar + dz * dz), np.abs(dz))

    violations = np.nonzero(weights + tolerance < bounds)[0]
    return [
        {
            "from": edges[i].source,
            "to": edges[i].target,
            "path_id": edges[i].data.path_id,
            "weight": float(weights[i]),
            "lower_bound": float(bounds[i]),
        }
        for i in violations
    ]


def validate_building_graph(
    landmarks: Iterable[LandmarkRecord],
    paths: Iterable[PathRecord],
    floor_penalty: float = DEFAULT_FLOOR_PENALTY,
) -> dict[str, Any]:
    """Report data problems that silently degrade routing."""
    landmarks = list(landmarks)
    paths = list(paths)
    issues: list[dict[str, Any]] = []

    known = {lm.id for lm in landmarks}
    for path in paths:
        missing = [ref for ref in (path.from_id, path.to_id) if ref not in known]
        if missing:
            issues.append(
                {
                    "kind": "dangling_reference",
                    "severity": "error",
                    "path_id": path.id,
                    "missing": missing,
                    "message": "Path references landmarks outside the active set and is ignored",
                }
            )
        elif path.from_id == path.to_id:
            issues.append(
                {
                    "kind": "self_loop",
                    "severity": "warning",
                    "path_id": path.id,
                    "message": "Path starts and ends at the same landmark",
                }
            )

    for landmark in landmarks:
        if not is_numeric_floor(landmark.floor):
            issues.append(
                {
                    "kind": "malformed_floor",
                    "severity": "warning",
                    "landmark_id": landmark.id,
                    "floor": landmark.floor,
                    "message": "Floor label is not numeric; A* treats it as floor 0",
                }
            )

    graph = build_graph(landmarks, paths)

    touched: set[str] = set()
    for edge in graph.edges():
        touched.add(edge.source)
        touched.add(edge.target)
    for landmark in landmarks:
        if landmark.id not in touched:
            issues.append(
                {
                    "kind": "isolated_landmark",
                    "severity": "warning",
                    "landmark_id": landmark.id,
                    "message": "Landmark has no usable paths and can only be reached as its own destination",
                }
            )

    for violation in find_inadmissible_edges(graph, floor_penalty):
        issues.append(
            {
                "kind": "inadmissible_edge",
                "severity": "warning",
                **violation,
                "message": (
                    f"Edge weight {violation['weight']:.2f} is below the A* estimate "
                    f"{violation['lower_bound']:.2f}; A* may return a longer route than Dijkstra"
                ),
            }
        )

    error_count = sum(1 for issue in issues if issue.get("severity") == "error")
    warning_count = sum(1 for issue in issues if issue.get("severity") == "warning")

    return {
        "ok": error_count == 0,
        "summary": {
            "landmarks": len(landmarks),
            "paths": len(paths),
            "edges": graph.edge_count,
            "errors": error_count,
            "warnings": warning_count,
        },
        "issues": issues,
    }

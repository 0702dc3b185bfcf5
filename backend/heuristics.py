"""A* cost estimates between landmarks.

Floor labels are free-form strings ("2", "B1", "Ground"). They are mapped to
an integer ordinal by reading a leading integer; anything else counts as
floor 0 so A* still runs, at the price of a less informed estimate.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Callable

from backend.graph import Graph, NodeData

logger = logging.getLogger(__name__)

DEFAULT_FLOOR_PENALTY = 5.0
DEFAULT_FLOOR_ORDINAL = 0

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

Heuristic = Callable[[str], float]


def parse_floor_ordinal(label: str | int | None, default: int = DEFAULT_FLOOR_ORDINAL) -> int:
    """Parse the leading integer of a floor label.

    Examples: "3" -> 3, "-1" -> -1, "2nd" -> 2, "B1" -> `default`,
    None -> `default`.
    """
    if label is None or isinstance(label, bool):
        return default
    if isinstance(label, int):
        return label
    match = _LEADING_INT.match(str(label))
    if match is None:
        return default
    return int(match.group(1))


def is_numeric_floor(label: str | int | None) -> bool:
    """True when `label` carries a leading integer usable as a floor ordinal."""
    if label is None or isinstance(label, bool):
        return False
    if isinstance(label, int):
        return True
    return _LEADING_INT.match(str(label)) is not None


def floor_distance_heuristic(node: NodeData, goal: NodeData, floor_penalty: float = DEFAULT_FLOOR_PENALTY) -> float:
    """Lower-bound distance estimate from `node` to `goal`.

    With planar coordinates on both nodes this is the straight-line distance
    in (x, y, floor * floor_penalty) space; otherwise only the vertical term
    |dfloor| * floor_penalty remains.
    """
    dz = (parse_floor_ordinal(node.floor) - parse_floor_ordinal(goal.floor)) * floor_penalty

    if node.coordinates is not None and goal.coordinates is not None:
        dx = float(node.coordinates[0]) - float(goal.coordinates[0])
        dy = float(node.coordinates[1]) - float(goal.coordinates[1])
        return math.sqrt(dx * dx + dy * dy + dz * dz)

    return abs(dz)


def make_heuristic(graph: Graph, goal_id: str, floor_penalty: float = DEFAULT_FLOOR_PENALTY) -> Heuristic:
    """Bind `floor_distance_heuristic` to a fixed goal node of `graph`."""
    if floor_penalty < 0:
        raise ValueError("floor_penalty must be >= 0")

    goal = graph.nodes[goal_id]

    def estimate(node_id: str) -> float:
        return floor_distance_heuristic(graph.nodes[node_id], goal, floor_penalty)

    return estimate


def zero_heuristic(_node_id: str) -> float:
    return 0.0


def warn_malformed_floors(graph: Graph) -> list[str]:
    """Log each distinct non-numeric floor label once and return them."""
    malformed = sorted({str(node.floor) for node in graph.nodes.values() if not is_numeric_floor(node.floor)})
    for label in malformed:
        logger.warning("Floor label %r is not numeric; treating it as floor %d for A* estimates", label, DEFAULT_FLOOR_ORDINAL)
    return malformed

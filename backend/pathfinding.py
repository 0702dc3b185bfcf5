"""Dijkstra and A* shortest-path search over the landmark graph.

Purpose:
- Find the cheapest preference-compliant route between two landmarks.
- Reconstruct the ordered landmark/edge sequence for the route assembler.

Both solvers share one best-first loop; Dijkstra is the zero-heuristic case.
Among several equal-cost routes the one returned depends on heap tie-breaking,
which follows insertion order and so is stable for a fixed input.

Usage example:
    >>> from backend.pathfinding import dijkstra
    >>> result = dijkstra(graph, "lobby", "room-101")
    >>> result.found, result.distance
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

from backend.graph import Edge, Graph, NodeData
from backend.heuristics import DEFAULT_FLOOR_PENALTY, Heuristic, make_heuristic, zero_heuristic
from backend.preferences import RoutePreferences, meets_preferences
from backend.priority_queue import MinHeap

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PathStep:
    """One landmark on a reconstructed path and the edge used to reach it."""

    node: NodeData
    edge: Edge | None = None


@dataclass(slots=True)
class SearchResult:
    """Solver output; `distance` is infinite and `steps` empty when no path exists."""

    steps: list[PathStep] = field(default_factory=list)
    distance: float = math.inf
    settled: int = 0

    @property
    def found(self) -> bool:
        return math.isfinite(self.distance)

    @property
    def node_ids(self) -> list[str]:
        return [step.node.id for step in self.steps]


def reconstruct_path(
    graph: Graph,
    goal: str,
    distances: dict[str, float],
    previous: dict[str, str],
    via_edge: dict[str, Edge],
) -> SearchResult:
    """Walk predecessor links back from `goal` and return a forward-ordered path.

    The first step is the origin and carries no edge.
    """
    distance = distances.get(goal, math.inf)
    if not math.isfinite(distance):
        return SearchResult()

    steps: list[PathStep] = []
    current: str | None = goal
    while current is not None:
        steps.append(PathStep(node=graph.nodes[current], edge=via_edge.get(current)))
        current = previous.get(current)
    steps.reverse()

    return SearchResult(steps=steps, distance=distance)


def _best_first_search(
    graph: Graph,
    start: str,
    goal: str,
    preferences: RoutePreferences,
    heuristic: Heuristic,
) -> SearchResult:
    g_score: dict[str, float] = {start: 0.0}
    previous: dict[str, str] = {}
    via_edge: dict[str, Edge] = {}
    closed: set[str] = set()

    open_heap: MinHeap[str] = MinHeap()
    open_heap.push(heuristic(start), start)

    while not open_heap.is_empty():
        _, current = open_heap.pop()

        if current in closed:
            continue
        closed.add(current)

        if current == goal:
            break

        for edge in graph.neighbors(current):
            if edge.target in closed:
                continue
            if not meets_preferences(edge.data, preferences):
                continue

            tentative = g_score[current] + edge.weight
            if tentative < g_score.get(edge.target, math.inf):
                g_score[edge.target] = tentative
                previous[edge.target] = current
                via_edge[edge.target] = edge
                open_heap.push(tentative + heuristic(edge.target), edge.target)

    result = reconstruct_path(graph, goal, g_score, previous, via_edge)
    result.settled = len(closed)
    logger.debug("Search %s -> %s settled %d of %d nodes", start, goal, len(closed), len(graph))
    return result


def dijkstra(
    graph: Graph,
    start: str,
    goal: str,
    preferences: RoutePreferences | None = None,
) -> SearchResult:
    """Compute the cheapest route with Dijkstra's algorithm.

    Args:
        graph: Landmark graph with non-negative edge weights.
        start: Origin node id.
        goal: Destination node id.
        preferences: Edge filter applied during relaxation.

    Returns:
        SearchResult; unknown endpoints or an unreachable goal give a result
        with `found == False`.
    """
    if start not in graph or goal not in graph:
        return SearchResult()
    return _best_first_search(graph, start, goal, preferences or RoutePreferences(), zero_heuristic)


def astar(
    graph: Graph,
    start: str,
    goal: str,
    preferences: RoutePreferences | None = None,
    floor_penalty: float = DEFAULT_FLOOR_PENALTY,
    heuristic: Heuristic | None = None,
) -> SearchResult:
    """Compute the cheapest route with A*.

    The default heuristic is `floor_distance_heuristic` toward `goal`. It is
    optimal only while edge weights never undercut that estimate (see
    `backend.graph_validation.find_inadmissible_edges`).
    """
    if start not in graph or goal not in graph:
        return SearchResult()
    if heuristic is None:
        heuristic = make_heuristic(graph, goal, floor_penalty)
    return _best_first_search(graph, start, goal, preferences or RoutePreferences(), heuristic)

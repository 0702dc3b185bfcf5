"""Route computation pipeline: fetch snapshot, build graph, solve, assemble.

`compute_route` is the synchronous core over an already built graph.
`plan_route` wraps it with the async data fetch, the request-level timeout
and optional history recording.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Mapping

from backend.config import ALGORITHMS, RoutingSettings
from backend.data_access import BuildingRecord, BuildingRepository, HistoryRecorder
from backend.graph import Graph, NodeData, build_graph
from backend.graph_validation import find_inadmissible_edges
from backend.heuristics import DEFAULT_FLOOR_PENALTY, warn_malformed_floors
from backend.pathfinding import SearchResult, astar, dijkstra
from backend.preferences import RoutePreferences
from backend.route_assembly import Route, assemble_route, same_location_route

logger = logging.getLogger(__name__)

NO_ROUTE_MESSAGE = "No route found. The destination may be unreachable with your selected preferences."


class RoutingError(ValueError):
    """Base class for route requests that cannot be answered."""


class InvalidEndpointError(RoutingError):
    """Building, origin or destination is not an active landmark of the building."""


class NoPathFoundError(RoutingError):
    """No preference-compliant edge sequence connects origin and destination."""


@dataclass(slots=True)
class RoutePlan:
    """Route plus the request context echoed back to callers."""

    route: Route
    building: BuildingRecord
    origin: NodeData
    destination: NodeData
    algorithm: str
    preferences: RoutePreferences
    navigation_id: str | None = None


def _normalize_preferences(preferences: RoutePreferences | Mapping[str, Any] | None) -> RoutePreferences:
    if isinstance(preferences, RoutePreferences):
        return preferences
    return RoutePreferences.from_mapping(preferences)


def solve(
    graph: Graph,
    from_id: str,
    to_id: str,
    preferences: RoutePreferences,
    algorithm: str = "dijkstra",
    floor_penalty: float = DEFAULT_FLOOR_PENALTY,
) -> SearchResult:
    """Dispatch to the requested solver."""
    if algorithm == "astar":
        return astar(graph, from_id, to_id, preferences, floor_penalty=floor_penalty)
    if algorithm == "dijkstra":
        return dijkstra(graph, from_id, to_id, preferences)
    raise ValueError(f"algorithm must be one of {', '.join(ALGORITHMS)} (got {algorithm!r})")


def compute_route(
    graph: Graph,
    from_id: str,
    to_id: str,
    preferences: RoutePreferences | Mapping[str, Any] | None = None,
    algorithm: str = "dijkstra",
    floor_penalty: float = DEFAULT_FLOOR_PENALTY,
) -> Route:
    """Compute a visitor route between two landmarks of `graph`.

    Raises:
        ValueError: If `algorithm` is unknown or preferences are malformed.
        InvalidEndpointError: If either landmark id is not in `graph`.
        NoPathFoundError: If the destination is unreachable under `preferences`.
    """
    if algorithm not in ALGORITHMS:
        raise ValueError(f"algorithm must be one of {', '.join(ALGORITHMS)} (got {algorithm!r})")
    prefs = _normalize_preferences(preferences)

    if from_id not in graph:
        raise InvalidEndpointError(f'Invalid "from" landmark: {from_id}')
    if to_id not in graph:
        raise InvalidEndpointError(f'Invalid "to" landmark: {to_id}')

    if from_id == to_id:
        return same_location_route(graph.nodes[from_id])

    if algorithm == "astar":
        warn_malformed_floors(graph)

    result = solve(graph, from_id, to_id, prefs, algorithm=algorithm, floor_penalty=floor_penalty)
    if not result.found:
        logger.info("No route %s -> %s with %s under %s", from_id, to_id, algorithm, prefs)
        raise NoPathFoundError(NO_ROUTE_MESSAGE)

    return assemble_route(result)


async def _plan_route(
    repository: BuildingRepository,
    building_id: str,
    from_id: str,
    to_id: str,
    preferences: RoutePreferences,
    algorithm: str,
    settings: RoutingSettings,
    history: HistoryRecorder | None,
    user_id: str | None,
) -> RoutePlan:
    building = await repository.get_building(building_id)
    if building is None or not building.is_active:
        raise InvalidEndpointError("Building not found")

    landmarks, paths = await asyncio.gather(
        repository.get_active_landmarks(building_id),
        repository.get_active_paths(building_id),
    )
    graph = build_graph(landmarks, paths)

    if algorithm == "astar" and from_id in graph and to_id in graph and from_id != to_id:
        violations = find_inadmissible_edges(graph, settings.floor_penalty)
        if violations:
            logger.warning(
                "Building %s has %d edges shorter than the A* estimate; route may be suboptimal",
                building_id,
                len(violations),
            )

    route = compute_route(
        graph,
        from_id,
        to_id,
        preferences,
        algorithm=algorithm,
        floor_penalty=settings.floor_penalty,
    )

    # Same-location answers are not navigations and are never recorded.
    navigation_id: str | None = None
    if history is not None and user_id and from_id != to_id:
        navigation_id = await history.record(
            user_id=user_id,
            building_id=building_id,
            from_id=from_id,
            to_id=to_id,
            landmark_ids=route.landmark_ids,
            total_distance=route.total_distance,
            total_time=route.total_time,
        )

    logger.info(
        "Route %s -> %s in building %s via %s: %d steps, distance %d",
        from_id,
        to_id,
        building_id,
        algorithm,
        len(route.steps),
        route.total_distance,
    )

    return RoutePlan(
        route=route,
        building=building,
        origin=graph.nodes[from_id],
        destination=graph.nodes[to_id],
        algorithm=algorithm,
        preferences=preferences,
        navigation_id=navigation_id,
    )


async def plan_route(
    repository: BuildingRepository,
    building_id: str,
    from_id: str,
    to_id: str,
    preferences: RoutePreferences | Mapping[str, Any] | None = None,
    algorithm: str | None = None,
    *,
    settings: RoutingSettings | None = None,
    history: HistoryRecorder | None = None,
    user_id: str | None = None,
) -> RoutePlan:
    """Fetch a building snapshot and compute a route within the configured timeout.

    Raises:
        asyncio.TimeoutError: If the whole pipeline exceeds `settings.route_timeout_s`.
        RoutingError: See `compute_route`; unknown buildings raise InvalidEndpointError.
    """
    settings = settings or RoutingSettings()
    algorithm = algorithm or settings.default_algorithm
    if algorithm not in ALGORITHMS:
        raise ValueError(f"algorithm must be one of {', '.join(ALGORITHMS)} (got {algorithm!r})")

    return await asyncio.wait_for(
        _plan_route(
            repository,
            building_id,
            from_id,
            to_id,
            _normalize_preferences(preferences),
            algorithm,
            settings,
            history,
            user_id,
        ),
        timeout=settings.route_timeout_s,
    )

"""In-memory landmark graph used by the route planner.

Purpose:
- Hold one node per active landmark and a directed adjacency list of paths.
- Synthesize reverse edges for bidirectional paths.

The graph is rebuilt from a building snapshot for every route query and is
never shared between queries.

Usage example:
    >>> from backend.graph import EdgeData, Graph, NodeData
    >>> graph = Graph()
    >>> graph.add_node("a", NodeData(id="a", floor="1"))
    >>> graph.add_node("b", NodeData(id="b", floor="1"))
    >>> graph.add_edge("a", "b", 12.0, EdgeData(instructions="Walk east", bidirectional=True))
    >>> [edge.target for edge in graph.neighbors("b")]
    ['a']
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Iterable, Iterator

if TYPE_CHECKING:
    from backend.data_access import LandmarkRecord, PathRecord

logger = logging.getLogger(__name__)

Coordinates = tuple[float, float]

REVERSE_INSTRUCTIONS_PREFIX = "Return via: "


@dataclass(slots=True)
class Accessibility:
    """Accessibility flags carried by a walkable path."""

    wheelchair_accessible: bool = True
    requires_elevator: bool = False
    requires_stairs: bool = False


@dataclass(slots=True)
class NodeData:
    """Landmark snapshot stored on a graph node.

    Only `floor` and `coordinates` are read by the solvers; the remaining
    fields are display attributes passed through to the route output.
    """

    id: str
    floor: str | None = None
    coordinates: Coordinates | None = None
    name: str = ""
    type: str = "other"
    room_number: str | None = None
    description: str | None = None
    images: list[dict[str, Any]] = field(default_factory=list)


@dataclass(slots=True)
class EdgeData:
    """Traversal metadata for one direction of a path."""

    path_id: str | None = None
    instructions: str = ""
    reverse_instructions: str | None = None
    difficulty: str = "easy"
    accessibility: Accessibility | None = None
    bidirectional: bool = False
    estimated_time: float = 0.0
    images: list[dict[str, Any]] = field(default_factory=list)
    is_reverse: bool = False


@dataclass(slots=True)
class Edge:
    """Directed adjacency entry `source -> target`."""

    source: str
    target: str
    weight: float
    data: EdgeData


def reverse_edge_data(data: EdgeData) -> EdgeData:
    """Return edge metadata for walking a bidirectional path backwards."""
    instructions = data.reverse_instructions or f"{REVERSE_INSTRUCTIONS_PREFIX}{data.instructions}"
    return replace(
        data,
        instructions=instructions,
        reverse_instructions=data.instructions,
        images=list(reversed(data.images)),
        is_reverse=not data.is_reverse,
    )


class Graph:
    """Node-id keyed landmark map plus outgoing adjacency lists."""

    def __init__(self) -> None:
        self.nodes: dict[str, NodeData] = {}
        self.adjacency: dict[str, list[Edge]] = {}

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.nodes

    def __len__(self) -> int:
        return len(self.nodes)

    def add_node(self, node_id: str, data: NodeData) -> None:
        """Insert or overwrite a node, keeping any existing adjacency entry."""
        self.nodes[node_id] = data
        self.adjacency.setdefault(node_id, [])

    def add_edge(self, source: str, target: str, weight: float, data: EdgeData) -> None:
        """Append `source -> target`, plus the reverse edge for bidirectional paths.

        References to unknown nodes are dropped without raising, since stale
        upstream data can point at landmarks that are no longer active.
        """
        if source not in self.nodes or target not in self.nodes:
            logger.debug("Dropping dangling edge %s -> %s (path %s)", source, target, data.path_id)
            return

        self.adjacency[source].append(Edge(source=source, target=target, weight=float(weight), data=data))

        if data.bidirectional:
            self.adjacency[target].append(
                Edge(source=target, target=source, weight=float(weight), data=reverse_edge_data(data))
            )

    def neighbors(self, node_id: str) -> list[Edge]:
        """Outgoing edges of `node_id` in insertion order (empty when unknown)."""
        return self.adjacency.get(node_id, [])

    def edges(self) -> Iterator[Edge]:
        """Iterate every directed edge, synthesized reverse edges included."""
        for outgoing in self.adjacency.values():
            yield from outgoing

    @property
    def edge_count(self) -> int:
        return sum(len(outgoing) for outgoing in self.adjacency.values())


def build_graph(landmarks: Iterable[LandmarkRecord], paths: Iterable[PathRecord]) -> Graph:
    """Build a fresh graph from a building snapshot."""
    graph = Graph()
    for landmark in landmarks:
        graph.add_node(landmark.id, landmark.to_node())
    for path in paths:
        graph.add_edge(path.from_id, path.to_id, path.distance, path.to_edge_data())
    return graph

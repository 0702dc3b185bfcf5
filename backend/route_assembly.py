"""Turn solver output into the step-by-step route shown to visitors."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from backend.graph import Accessibility, NodeData
from backend.pathfinding import SearchResult
from backend.utils import round_half_up, serialize_accessibility, serialize_node

ALREADY_AT_DESTINATION = "You are already at your destination!"
START_INSTRUCTION_TEMPLATE = "Start at {name}"


@dataclass(slots=True)
class RouteStep:
    """One visitor-facing step; the first step only marks the origin."""

    step_number: int
    landmark: NodeData
    instructions: str
    distance: float = 0.0
    estimated_time: float = 0.0
    difficulty: str = "easy"
    accessibility: Accessibility | None = None
    images: list[dict[str, Any]] = field(default_factory=list)
    path_id: str | None = None


@dataclass(slots=True)
class Route:
    """Ordered steps plus aggregate distance and time."""

    steps: list[RouteStep]
    total_distance: int
    total_time: float

    @property
    def landmark_ids(self) -> list[str]:
        return [step.landmark.id for step in self.steps]


def same_location_route(landmark: NodeData) -> Route:
    """Single-step, zero-cost route for origin == destination."""
    step = RouteStep(step_number=1, landmark=landmark, instructions=ALREADY_AT_DESTINATION)
    return Route(steps=[step], total_distance=0, total_time=0.0)


def assemble_route(result: SearchResult) -> Route:
    """Map a successful search result to a Route.

    Raises:
        ValueError: If `result` holds no path.
    """
    if not result.found or not result.steps:
        raise ValueError("Cannot assemble a route from an empty search result")

    origin = result.steps[0].node
    steps = [
        RouteStep(
            step_number=1,
            landmark=origin,
            instructions=START_INSTRUCTION_TEMPLATE.format(name=origin.name or origin.id),
        )
    ]

    total_weight = 0.0
    total_time = 0.0
    for index, path_step in enumerate(result.steps[1:], start=2):
        edge = path_step.edge
        if edge is None:
            raise ValueError(f"Step {index} has no incoming edge")

        total_weight += edge.weight
        total_time += edge.data.estimated_time
        steps.append(
            RouteStep(
                step_number=index,
                landmark=path_step.node,
                instructions=edge.data.instructions,
                distance=edge.weight,
                estimated_time=edge.data.estimated_time,
                difficulty=edge.data.difficulty,
                accessibility=edge.data.accessibility,
                images=list(edge.data.images),
                path_id=edge.data.path_id,
            )
        )

    return Route(steps=steps, total_distance=round_half_up(total_weight), total_time=total_time)


def serialize_route(route: Route) -> dict[str, Any]:
    """Convert a Route to JSON-friendly nested dictionaries."""
    return {
        "steps": [
            {
                "step_number": step.step_number,
                "landmark": serialize_node(step.landmark),
                "path_id": step.path_id,
                "instructions": step.instructions,
                "distance": step.distance,
                "estimated_time": step.estimated_time,
                "difficulty": step.difficulty,
                "accessibility": serialize_accessibility(step.accessibility),
                "images": step.images,
            }
            for step in route.steps
        ],
        "total_distance": route.total_distance,
        "total_time": route.total_time,
    }

"""Utility helpers shared across backend modules.

Purpose:
- Round route totals the way clients display them.
- Convert graph/route dataclasses to JSON-safe payload types.
"""

from __future__ import annotations

import math
from typing import Any

from backend.graph import Accessibility, NodeData


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    if not math.isfinite(value):
        raise ValueError("Cannot round a non-finite distance")
    return int(math.floor(value + 0.5))


def serialize_accessibility(access: Accessibility | None) -> dict[str, bool] | None:
    """Convert accessibility flags to a JSON-friendly dict (None stays None)."""
    if access is None:
        return None
    return {
        "wheelchair_accessible": access.wheelchair_accessible,
        "requires_elevator": access.requires_elevator,
        "requires_stairs": access.requires_stairs,
    }


def serialize_coordinates(coordinates: tuple[float, float] | None) -> dict[str, float] | None:
    if coordinates is None:
        return None
    return {"x": float(coordinates[0]), "y": float(coordinates[1])}


def serialize_node(node: NodeData) -> dict[str, Any]:
    """Convert a landmark node to the summary shape used in responses."""
    return {
        "id": node.id,
        "name": node.name,
        "type": node.type,
        "floor": node.floor,
        "room_number": node.room_number,
        "coordinates": serialize_coordinates(node.coordinates),
    }

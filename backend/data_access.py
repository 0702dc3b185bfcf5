"""Read-only building data access for the route planner.

The planner only needs a point-in-time snapshot of one building: its active
landmarks and the active paths whose endpoints both lie in that set. This
module defines the records exchanged at that boundary, the async repository
interface, and an in-memory implementation loaded from JSON.

Expected JSON schema:
  {
    "buildings": [
      {
        "id": "hq",
        "name": "Headquarters",
        "floors": ["0", "1"],
        "landmarks": [
          {"id": "lobby", "name": "Lobby", "floor": "0",
           "coordinates": {"x": 0, "y": 0}, "type": "entrance"}
        ],
        "paths": [
          {"id": "p1", "from": "lobby", "to": "lift", "distance": 12,
           "estimatedTime": 10, "instructions": "Walk to the lift",
           "reverseInstructions": "Walk back to the lobby",
           "difficulty": "easy", "isBidirectional": true,
           "accessibility": {"wheelchairAccessible": true,
                             "requiresElevator": false,
                             "requiresStairs": false}}
        ]
      }
    ]
  }
"""

from __future__ import annotations

import json
import math
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Protocol

from backend.graph import Accessibility, EdgeData, NodeData

LANDMARK_TYPES = ("room", "entrance", "elevator", "stairs", "restroom", "emergency_exit", "facility", "other")
DIFFICULTY_LEVELS = ("easy", "medium", "hard")


@dataclass(slots=True)
class BuildingRecord:
    id: str
    name: str
    floors: list[str] = field(default_factory=list)
    is_active: bool = True


@dataclass(slots=True)
class LandmarkRecord:
    """Stored landmark inside one building."""

    id: str
    building_id: str
    name: str
    floor: str | None = None
    coordinates: tuple[float, float] | None = None
    type: str = "other"
    room_number: str | None = None
    description: str | None = None
    images: list[dict[str, Any]] = field(default_factory=list)
    is_active: bool = True

    def to_node(self) -> NodeData:
        return NodeData(
            id=self.id,
            floor=self.floor,
            coordinates=self.coordinates,
            name=self.name,
            type=self.type,
            room_number=self.room_number,
            description=self.description,
            images=list(self.images),
        )


@dataclass(slots=True)
class PathRecord:
    """Stored walkable connection between two landmarks.

    Raises ValueError on negative or non-finite distance or time so such paths
    never reach the solver.
    """

    id: str
    from_id: str
    to_id: str
    distance: float
    instructions: str
    estimated_time: float = 0.0
    reverse_instructions: str | None = None
    difficulty: str = "easy"
    accessibility: Accessibility | None = field(default_factory=Accessibility)
    images: list[dict[str, Any]] = field(default_factory=list)
    is_bidirectional: bool = True
    is_active: bool = True

    def __post_init__(self) -> None:
        if not math.isfinite(self.distance):
            raise ValueError(f"Path {self.id} has non-finite distance {self.distance}")
        if self.distance < 0:
            raise ValueError(f"Path {self.id} has negative distance {self.distance}")
        if not math.isfinite(self.estimated_time):
            raise ValueError(f"Path {self.id} has non-finite estimated time {self.estimated_time}")
        if self.estimated_time < 0:
            raise ValueError(f"Path {self.id} has negative estimated time {self.estimated_time}")

    def to_edge_data(self) -> EdgeData:
        return EdgeData(
            path_id=self.id,
            instructions=self.instructions,
            reverse_instructions=self.reverse_instructions,
            difficulty=self.difficulty,
            accessibility=self.accessibility,
            bidirectional=self.is_bidirectional,
            estimated_time=self.estimated_time,
            images=list(self.images),
        )


@dataclass(slots=True)
class HistoryEntry:
    id: str
    user_id: str
    building_id: str
    from_id: str
    to_id: str
    landmark_ids: list[str]
    total_distance: float
    total_time: float
    status: str = "started"
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class BuildingRepository(Protocol):
    """Async read-only source of building snapshots."""

    async def get_building(self, building_id: str) -> BuildingRecord | None: ...

    async def get_landmark(self, landmark_id: str) -> LandmarkRecord | None: ...

    async def get_active_landmarks(self, building_id: str) -> list[LandmarkRecord]: ...

    async def get_active_paths(self, building_id: str) -> list[PathRecord]: ...

    async def get_paths_touching(self, landmark_id: str) -> list[PathRecord]: ...


class HistoryRecorder(Protocol):
    """Optional sink for completed route computations."""

    async def record(
        self,
        *,
        user_id: str,
        building_id: str,
        from_id: str,
        to_id: str,
        landmark_ids: list[str],
        total_distance: float,
        total_time: float,
    ) -> str: ...


class InMemoryBuildingStore:
    """Dictionary-backed BuildingRepository."""

    def __init__(self) -> None:
        self.buildings: dict[str, BuildingRecord] = {}
        self.landmarks: dict[str, LandmarkRecord] = {}
        self.paths: dict[str, PathRecord] = {}

    def add_building(self, building: BuildingRecord) -> None:
        self.buildings[building.id] = building

    def add_landmark(self, landmark: LandmarkRecord) -> None:
        if landmark.building_id not in self.buildings:
            raise KeyError(f"Unknown building '{landmark.building_id}' for landmark '{landmark.id}'")
        self.landmarks[landmark.id] = landmark

    def add_path(self, path: PathRecord) -> None:
        self.paths[path.id] = path

    async def get_building(self, building_id: str) -> BuildingRecord | None:
        return self.buildings.get(building_id)

    async def get_landmark(self, landmark_id: str) -> LandmarkRecord | None:
        return self.landmarks.get(landmark_id)

    async def get_active_landmarks(self, building_id: str) -> list[LandmarkRecord]:
        return [lm for lm in self.landmarks.values() if lm.building_id == building_id and lm.is_active]

    async def get_active_paths(self, building_id: str) -> list[PathRecord]:
        active_ids = {lm.id for lm in await self.get_active_landmarks(building_id)}
        return [
            p
            for p in self.paths.values()
            if p.is_active and p.from_id in active_ids and p.to_id in active_ids
        ]

    async def get_paths_touching(self, landmark_id: str) -> list[PathRecord]:
        return [
            p
            for p in self.paths.values()
            if p.is_active and (p.from_id == landmark_id or p.to_id == landmark_id)
        ]

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> InMemoryBuildingStore:
        """Build a store from the JSON schema in the module docstring."""
        if not isinstance(payload, dict):
            raise ValueError("Building data must be a JSON object")

        buildings = payload.get("buildings")
        if not isinstance(buildings, list):
            raise ValueError("Building data must contain a 'buildings' list")

        store = cls()
        for b_idx, raw_building in enumerate(buildings):
            if not isinstance(raw_building, dict):
                raise ValueError(f"buildings[{b_idx}] must be an object")
            if "id" not in raw_building or "name" not in raw_building:
                raise ValueError(f"buildings[{b_idx}] must include id and name")

            building_id = str(raw_building["id"])
            store.add_building(
                BuildingRecord(
                    id=building_id,
                    name=str(raw_building["name"]),
                    floors=[str(f) for f in raw_building.get("floors", [])],
                    is_active=bool(raw_building.get("isActive", True)),
                )
            )

            for l_idx, raw_landmark in enumerate(raw_building.get("landmarks", [])):
                store.add_landmark(_parse_landmark(raw_landmark, building_id, f"buildings[{b_idx}].landmarks[{l_idx}]"))

            for p_idx, raw_path in enumerate(raw_building.get("paths", [])):
                store.add_path(_parse_path(raw_path, f"buildings[{b_idx}].paths[{p_idx}]"))

        return store

    @classmethod
    def from_json_file(cls, path: str | Path) -> InMemoryBuildingStore:
        """Load a store from a JSON file on disk."""
        try:
            payload = json.loads(Path(path).read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ValueError(f"Building data file {path} is not valid JSON") from exc
        return cls.from_payload(payload)


class InMemoryHistoryRecorder:
    """HistoryRecorder keeping entries in a list."""

    def __init__(self) -> None:
        self.entries: list[HistoryEntry] = []

    async def record(
        self,
        *,
        user_id: str,
        building_id: str,
        from_id: str,
        to_id: str,
        landmark_ids: list[str],
        total_distance: float,
        total_time: float,
    ) -> str:
        entry = HistoryEntry(
            id=uuid.uuid4().hex,
            user_id=user_id,
            building_id=building_id,
            from_id=from_id,
            to_id=to_id,
            landmark_ids=list(landmark_ids),
            total_distance=total_distance,
            total_time=total_time,
        )
        self.entries.append(entry)
        return entry.id


def _parse_coordinates(raw: Any, where: str) -> tuple[float, float] | None:
    if raw is None:
        return None
    if isinstance(raw, dict):
        if "x" not in raw or "y" not in raw:
            raise ValueError(f"{where}.coordinates must include x and y")
        return float(raw["x"]), float(raw["y"])
    if isinstance(raw, (list, tuple)) and len(raw) == 2:
        return float(raw[0]), float(raw[1])
    raise ValueError(f"{where}.coordinates must be {{x, y}} or [x, y]")


def _parse_accessibility(raw: Any, where: str) -> Accessibility | None:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise ValueError(f"{where}.accessibility must be an object")
    return Accessibility(
        wheelchair_accessible=bool(raw.get("wheelchairAccessible", True)),
        requires_elevator=bool(raw.get("requiresElevator", False)),
        requires_stairs=bool(raw.get("requiresStairs", False)),
    )


def _parse_landmark(raw: Any, building_id: str, where: str) -> LandmarkRecord:
    if not isinstance(raw, dict):
        raise ValueError(f"{where} must be an object")
    if "id" not in raw or "name" not in raw:
        raise ValueError(f"{where} must include id and name")

    landmark_type = str(raw.get("type", "other"))
    if landmark_type not in LANDMARK_TYPES:
        raise ValueError(f"{where}.type must be one of {', '.join(LANDMARK_TYPES)}")

    floor = raw.get("floor")
    return LandmarkRecord(
        id=str(raw["id"]),
        building_id=building_id,
        name=str(raw["name"]),
        floor=None if floor is None else str(floor),
        coordinates=_parse_coordinates(raw.get("coordinates"), where),
        type=landmark_type,
        room_number=raw.get("roomNumber"),
        description=raw.get("description"),
        images=list(raw.get("images", [])),
        is_active=bool(raw.get("isActive", True)),
    )


def _parse_path(raw: Any, where: str) -> PathRecord:
    if not isinstance(raw, dict):
        raise ValueError(f"{where} must be an object")

    required = {"id", "from", "to", "distance", "instructions"}
    if not required.issubset(raw.keys()):
        raise ValueError(f"{where} must include id, from, to, distance, instructions")

    try:
        distance = float(raw["distance"])
        estimated_time = float(raw.get("estimatedTime", 0))
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{where}.distance and estimatedTime must be numbers") from exc

    difficulty = str(raw.get("difficulty", "easy"))
    if difficulty not in DIFFICULTY_LEVELS:
        raise ValueError(f"{where}.difficulty must be one of {', '.join(DIFFICULTY_LEVELS)}")

    accessibility = (
        _parse_accessibility(raw["accessibility"], where) if "accessibility" in raw else Accessibility()
    )

    return PathRecord(
        id=str(raw["id"]),
        from_id=str(raw["from"]),
        to_id=str(raw["to"]),
        distance=distance,
        instructions=str(raw["instructions"]),
        estimated_time=estimated_time,
        reverse_instructions=raw.get("reverseInstructions"),
        difficulty=difficulty,
        accessibility=accessibility,
        images=list(raw.get("images", [])),
        is_bidirectional=bool(raw.get("isBidirectional", True)),
        is_active=bool(raw.get("isActive", True)),
    )

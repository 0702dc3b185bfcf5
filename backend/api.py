"""FastAPI routes for landmark-to-landmark indoor route planning.

Endpoints:
- `/route` computes a stepwise route between two landmarks of a building.
- `/landmarks/{id}/connections` lists directly reachable landmarks.
- `/buildings/{id}/landmarks` lists active landmarks grouped by floor.
- `/buildings/{id}/graph-report` reports data problems that degrade routing.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Literal

from fastapi import FastAPI, Header, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field

from backend.config import RoutingSettings
from backend.data_access import (
    BuildingRepository,
    HistoryRecorder,
    InMemoryBuildingStore,
    InMemoryHistoryRecorder,
    LandmarkRecord,
    PathRecord,
)
from backend.graph import reverse_edge_data
from backend.graph_validation import validate_building_graph
from backend.preferences import PreferencesPayload
from backend.route_assembly import serialize_route
from backend.routing_service import InvalidEndpointError, NoPathFoundError, RoutePlan, plan_route
from backend.utils import serialize_accessibility, serialize_coordinates, serialize_node

API_VERSION = "1.0.0"


@dataclass
class ServiceState:
    """Collaborators shared by request handlers."""

    store: BuildingRepository | None = None
    history: HistoryRecorder | None = None
    settings: RoutingSettings = field(default_factory=RoutingSettings)


STATE = ServiceState()


class RouteRequest(BaseModel):
    """Request payload for landmark-to-landmark routing."""

    model_config = ConfigDict(populate_by_name=True)

    building: str = Field(..., min_length=1)
    from_id: str = Field(..., alias="from", min_length=1)
    to_id: str = Field(..., alias="to", min_length=1)
    preferences: PreferencesPayload = Field(default_factory=PreferencesPayload)
    algorithm: Literal["dijkstra", "astar"] | None = None


def _serialize_landmark(landmark: LandmarkRecord) -> dict[str, Any]:
    """Serialize a LandmarkRecord to a JSON-safe dictionary."""
    return {
        "id": landmark.id,
        "name": landmark.name,
        "description": landmark.description,
        "type": landmark.type,
        "floor": landmark.floor,
        "room_number": landmark.room_number,
        "coordinates": serialize_coordinates(landmark.coordinates),
        "images": landmark.images,
    }


def _serialize_plan(plan: RoutePlan) -> dict[str, Any]:
    payload = serialize_route(plan.route)
    payload.update(
        {
            "preferences": plan.preferences.to_payload(),
            "algorithm": plan.algorithm,
            "building": {"id": plan.building.id, "name": plan.building.name},
            "from": serialize_node(plan.origin),
            "to": serialize_node(plan.destination),
        }
    )
    if plan.navigation_id is not None:
        payload["navigation_id"] = plan.navigation_id
    return payload


def _serialize_connection(path: PathRecord, landmark_id: str, other: LandmarkRecord) -> dict[str, Any]:
    """Describe `path` as seen from `landmark_id` toward `other`."""
    data = path.to_edge_data()
    if path.from_id != landmark_id:
        data = reverse_edge_data(data)
    return {
        "path_id": path.id,
        "landmark": _serialize_landmark(other),
        "distance": path.distance,
        "estimated_time": path.estimated_time,
        "difficulty": path.difficulty,
        "instructions": data.instructions,
        "accessibility": serialize_accessibility(path.accessibility),
        "is_bidirectional": path.is_bidirectional,
    }


def _repository_or_503() -> BuildingRepository:
    """Get configured building repository or raise 503."""
    if STATE.store is None:
        raise HTTPException(status_code=503, detail="Building data store is not configured")
    return STATE.store


def create_app(
    store: BuildingRepository | None = None,
    history: HistoryRecorder | None = None,
    settings: RoutingSettings | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Without an explicit `store`, buildings are loaded from `WAYFINDER_DATA_FILE`
    when set, otherwise an empty in-memory store is used.
    """
    settings = settings or RoutingSettings.from_env()
    STATE.settings = settings

    if store is not None:
        STATE.store = store
    elif STATE.store is None:
        STATE.store = (
            InMemoryBuildingStore.from_json_file(settings.data_file)
            if settings.data_file
            else InMemoryBuildingStore()
        )

    if history is not None:
        STATE.history = history
    elif STATE.history is None:
        STATE.history = InMemoryHistoryRecorder()

    app = FastAPI(title="Wayfinder Route Planning API", version=API_VERSION)

    raw_origins = settings.cors_origins
    if raw_origins == "*":
        cors_origins = ["*"]
        allow_credentials = False
    else:
        cors_origins = [origin.strip() for origin in raw_origins.split(",") if origin.strip()]
        allow_credentials = True

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health() -> dict[str, Any]:
        """Health endpoint with routing defaults."""
        return {
            "status": "ok",
            "version": app.version,
            "default_algorithm": STATE.settings.default_algorithm,
            "floor_penalty": STATE.settings.floor_penalty,
            "history_enabled": STATE.history is not None,
        }

    @app.post("/route")
    async def compute_route_endpoint(
        payload: RouteRequest,
        x_user_id: str | None = Header(default=None),
    ) -> dict[str, Any]:
        """Compute a route between two landmarks of one building."""
        repository = _repository_or_503()

        try:
            plan = await plan_route(
                repository,
                payload.building,
                payload.from_id,
                payload.to_id,
                payload.preferences.to_preferences(),
                payload.algorithm,
                settings=STATE.settings,
                history=STATE.history,
                user_id=x_user_id,
            )
        except InvalidEndpointError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        except NoPathFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        except asyncio.TimeoutError as exc:
            raise HTTPException(status_code=504, detail="Route computation timed out") from exc
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=f"Invalid route query: {exc}") from exc
        except Exception as exc:  # pragma: no cover - safety net
            raise HTTPException(status_code=500, detail=f"Unexpected routing error: {exc}") from exc

        return {"route": _serialize_plan(plan)}

    @app.get("/landmarks/{landmark_id}/connections")
    async def get_landmark_connections(landmark_id: str) -> dict[str, Any]:
        """Return landmarks reachable in one step, with direction-aware instructions."""
        repository = _repository_or_503()

        landmark = await repository.get_landmark(landmark_id)
        if landmark is None or not landmark.is_active:
            raise HTTPException(status_code=404, detail="Landmark not found")

        connections: list[dict[str, Any]] = []
        for path in await repository.get_paths_touching(landmark_id):
            if path.from_id == landmark_id:
                other_id = path.to_id
            elif path.is_bidirectional:
                other_id = path.from_id
            else:
                continue

            other = await repository.get_landmark(other_id)
            if other is None or not other.is_active:
                continue
            connections.append(_serialize_connection(path, landmark_id, other))

        return {
            "landmark": _serialize_landmark(landmark),
            "connections": connections,
            "connections_count": len(connections),
        }

    @app.get("/buildings/{building_id}/landmarks")
    async def get_building_landmarks(
        building_id: str,
        floor: str | None = Query(default=None),
        landmark_type: str | None = Query(default=None, alias="type"),
    ) -> dict[str, Any]:
        """Return active landmarks of a building, optionally filtered, grouped by floor."""
        repository = _repository_or_503()

        building = await repository.get_building(building_id)
        if building is None or not building.is_active:
            raise HTTPException(status_code=404, detail="Building not found")

        landmarks = await repository.get_active_landmarks(building_id)
        if floor is not None:
            landmarks = [lm for lm in landmarks if lm.floor == floor]
        if landmark_type is not None:
            landmarks = [lm for lm in landmarks if lm.type == landmark_type]
        landmarks.sort(key=lambda lm: (lm.floor or "", lm.name))

        by_floor: dict[str, list[dict[str, Any]]] = {}
        for landmark in landmarks:
            by_floor.setdefault(landmark.floor or "", []).append(_serialize_landmark(landmark))

        return {
            "building": {"id": building.id, "name": building.name, "floors": building.floors},
            "landmarks": [_serialize_landmark(lm) for lm in landmarks],
            "landmarks_by_floor": by_floor,
            "total_count": len(landmarks),
        }

    @app.get("/buildings/{building_id}/graph-report")
    async def get_graph_report(building_id: str) -> dict[str, Any]:
        """Return routing data quality report for one building."""
        repository = _repository_or_503()

        building = await repository.get_building(building_id)
        if building is None or not building.is_active:
            raise HTTPException(status_code=404, detail="Building not found")

        landmarks = await repository.get_active_landmarks(building_id)
        paths: dict[str, PathRecord] = {}
        for landmark in landmarks:
            for path in await repository.get_paths_touching(landmark.id):
                paths.setdefault(path.id, path)

        report = validate_building_graph(landmarks, paths.values(), floor_penalty=STATE.settings.floor_penalty)
        return {"building_id": building.id, **report}

    return app

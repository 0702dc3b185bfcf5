"""Environment-driven settings for the route planning service."""

from __future__ import annotations

import os
from dataclasses import dataclass

from backend.heuristics import DEFAULT_FLOOR_PENALTY

ALGORITHMS = ("dijkstra", "astar")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number (got {raw!r})") from exc


@dataclass(slots=True, frozen=True)
class RoutingSettings:
    """Tunables for route computation and the HTTP layer."""

    floor_penalty: float = DEFAULT_FLOOR_PENALTY
    default_algorithm: str = "dijkstra"
    route_timeout_s: float = 5.0
    data_file: str | None = None
    cors_origins: str = "*"
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.floor_penalty < 0:
            raise ValueError("floor_penalty must be >= 0")
        if self.default_algorithm not in ALGORITHMS:
            raise ValueError(f"default_algorithm must be one of {', '.join(ALGORITHMS)}")
        if self.route_timeout_s <= 0:
            raise ValueError("route_timeout_s must be > 0")

    @classmethod
    def from_env(cls) -> RoutingSettings:
        """Read WAYFINDER_* environment variables, falling back to defaults."""
        return cls(
            floor_penalty=_env_float("WAYFINDER_FLOOR_PENALTY", DEFAULT_FLOOR_PENALTY),
            default_algorithm=os.getenv("WAYFINDER_DEFAULT_ALGORITHM", "dijkstra").strip().lower() or "dijkstra",
            route_timeout_s=_env_float("WAYFINDER_ROUTE_TIMEOUT_S", 5.0),
            data_file=os.getenv("WAYFINDER_DATA_FILE", "").strip() or None,
            cors_origins=os.getenv("WAYFINDER_CORS_ORIGINS", "*").strip() or "*",
            log_level=os.getenv("WAYFINDER_LOG_LEVEL", "INFO").strip().upper() or "INFO",
        )

"""Route preference model and the per-edge traversal filter."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Literal, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from backend.graph import EdgeData


class Difficulty(IntEnum):
    """Ordinal path difficulty: easy < medium < hard."""

    EASY = 1
    MEDIUM = 2
    HARD = 3

    @classmethod
    def parse(cls, value: str | Difficulty | None) -> Difficulty | None:
        """Map a difficulty label to its ordinal, or None when unrecognized."""
        if value is None:
            return None
        if isinstance(value, Difficulty):
            return value
        try:
            return cls[str(value).strip().upper()]
        except KeyError:
            return None

    @property
    def label(self) -> str:
        return self.name.lower()


class PreferencesPayload(BaseModel):
    """Route preferences as sent by clients; camelCase and snake_case keys are both accepted."""

    model_config = ConfigDict(populate_by_name=True)

    avoid_stairs: bool = Field(default=False, alias="avoidStairs")
    wheelchair_accessible: bool = Field(default=False, alias="wheelchairAccessible")
    avoid_elevators: bool = Field(default=False, alias="avoidElevators")
    max_difficulty: Literal["easy", "medium", "hard"] | None = Field(default=None, alias="maxDifficulty")

    def to_preferences(self) -> RoutePreferences:
        return RoutePreferences(
            avoid_stairs=self.avoid_stairs,
            wheelchair_accessible=self.wheelchair_accessible,
            avoid_elevators=self.avoid_elevators,
            max_difficulty=Difficulty.parse(self.max_difficulty),
        )


@dataclass(slots=True, frozen=True)
class RoutePreferences:
    """Caller constraints narrowing which edges a route may use.

    Unset fields impose no constraint.
    """

    avoid_stairs: bool = False
    wheelchair_accessible: bool = False
    avoid_elevators: bool = False
    max_difficulty: Difficulty | None = None

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any] | None) -> RoutePreferences:
        """Build preferences from a loosely-typed mapping.

        Keys are validated by `PreferencesPayload`, so camelCase and snake_case
        spellings are both accepted and unknown keys are ignored. Null values
        count as unset.

        Raises:
            ValueError: If a flag is not a boolean or `maxDifficulty` is not
                one of easy, medium, hard.
        """
        if not raw:
            return cls()

        values = {key: value for key, value in raw.items() if value is not None}
        try:
            payload = PreferencesPayload.model_validate(values)
        except ValidationError as exc:
            raise ValueError(f"Invalid route preferences: {exc}") from exc
        return payload.to_preferences()

    def to_payload(self) -> dict[str, Any]:
        return {
            "avoid_stairs": self.avoid_stairs,
            "wheelchair_accessible": self.wheelchair_accessible,
            "avoid_elevators": self.avoid_elevators,
            "max_difficulty": self.max_difficulty.label if self.max_difficulty else None,
        }


def meets_preferences(edge: EdgeData | None, preferences: RoutePreferences) -> bool:
    """Return True if `edge` may be traversed under `preferences`.

    Missing accessibility data never rejects an edge, and neither does an
    unrecognized difficulty label.
    """
    if edge is None:
        return True

    access = edge.accessibility
    if access is not None:
        if preferences.avoid_stairs and access.requires_stairs:
            return False
        if preferences.wheelchair_accessible and not access.wheelchair_accessible:
            return False
        if preferences.avoid_elevators and access.requires_elevator:
            return False

    if preferences.max_difficulty is not None:
        level = Difficulty.parse(edge.difficulty)
        if level is not None and level > preferences.max_difficulty:
            return False

    return True

"""Unit tests for the entry point's .env loader."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from backend.main import _load_local_env


def test_load_local_env_seeds_unset_keys_only(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    for key in ("WAYFINDER_FLOOR_PENALTY", "WAYFINDER_LOG_LEVEL", "API_PORT"):
        monkeypatch.setenv(key, "placeholder")
        monkeypatch.delenv(key)
    monkeypatch.setenv("API_PORT", "9000")

    backend_env = tmp_path / "backend.env"
    backend_env.write_text(
        "# local overrides\nWAYFINDER_FLOOR_PENALTY='3.5'\nAPI_PORT=8080\nnot a setting\n",
        encoding="utf-8",
    )
    root_env = tmp_path / "root.env"
    root_env.write_text('WAYFINDER_FLOOR_PENALTY=9\nWAYFINDER_LOG_LEVEL="debug"\n', encoding="utf-8")

    seeded = _load_local_env((backend_env, tmp_path / "missing.env", root_env))

    assert seeded == ["WAYFINDER_FLOOR_PENALTY", "WAYFINDER_LOG_LEVEL"]
    assert os.environ["WAYFINDER_FLOOR_PENALTY"] == "3.5"
    assert os.environ["WAYFINDER_LOG_LEVEL"] == "debug"
    assert os.environ["API_PORT"] == "9000"

"""Application entry point for the Wayfinder route planning backend.

Run locally:
    uvicorn backend.main:app --reload --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import uvicorn

from backend.api import create_app
from backend.config import RoutingSettings

ENV_FILES = (Path("backend/.env"), Path(".env"))


def _load_local_env(env_files: tuple[Path, ...] = ENV_FILES) -> list[str]:
    """Seed WAYFINDER_* and API_* settings from local .env files.

    Variables already set in the process environment are never overridden,
    and the first file defining a key wins: backend/.env, then .env.
    Returns the keys that were seeded.
    """
    seeded: list[str] = []
    for env_file in env_files:
        if not env_file.is_file():
            continue

        for raw in env_file.read_text(encoding="utf-8").splitlines():
            line = raw.strip()
            if line.startswith("#"):
                continue
            key, sep, value = line.partition("=")
            key = key.strip()
            if not sep or not key or key in os.environ:
                continue
            os.environ[key] = value.strip().strip("'\"")
            seeded.append(key)
    return seeded


def _configure_logging(level_name: str) -> None:
    level = logging.getLevelName(level_name.upper())
    logging.basicConfig(
        level=level if isinstance(level, int) else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


_load_local_env()
settings = RoutingSettings.from_env()
_configure_logging(settings.log_level)
app = create_app(settings=settings)


if __name__ == "__main__":
    host = os.getenv("API_HOST", "0.0.0.0")
    port = int(os.getenv("API_PORT", "8000"))
    reload_enabled = os.getenv("API_RELOAD", "true").lower() == "true"
    uvicorn.run("backend.main:app", host=host, port=port, reload=reload_enabled)

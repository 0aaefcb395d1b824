# Rev 0.1.0

"""Filesystem locations for roadmapZ (Rev 0.1.0)
- data, logs and config follow the XDG base directories
- the database defaults to $XDG_DATA_HOME/roadmapZ/roadmapz.db; ROADMAPZ_DB overrides it
- SQL migrations are package data (roadmapz/data/migrations)
"""
from __future__ import annotations
import os
from pathlib import Path


APP_NAME = "roadmapZ"


def _xdg(var: str, fallback: str) -> Path:
    raw = os.environ.get(var)
    return Path(raw) if raw else Path.home() / fallback


DATA_DIR = _xdg("XDG_DATA_HOME", ".local/share") / APP_NAME
LOGS_DIR = _xdg("XDG_STATE_HOME", ".local/state") / APP_NAME / "logs"
CONFIG_DIR = _xdg("XDG_CONFIG_HOME", ".config") / APP_NAME

MIGRATIONS_DIR = Path(__file__).resolve().parents[1] / "data" / "migrations"

DB_PATH = Path(os.environ.get("ROADMAPZ_DB") or DATA_DIR / "roadmapz.db")


def ensure_dirs() -> None:
    for p in (DATA_DIR, LOGS_DIR, CONFIG_DIR):
        p.mkdir(parents=True, exist_ok=True)


def config_dir() -> Path:
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    return CONFIG_DIR

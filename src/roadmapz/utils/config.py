# Rev 0.1.0
from __future__ import annotations

import copy
import getpass
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from .paths import config_dir

log = logging.getLogger(__name__)

SETTINGS_NAME = "settings.json"

_DEFAULTS: Dict[str, Any] = {
    "main_window": {
        "width": 1280,
        "height": 760,
        "is_maximized": False,
    },
    "user": {
        "id": None,          # falls back to the OS login name
        "email": None,
    },
    "timeline": {
        "scale": "month",
        "cell_width": 150,
        "row_height": 60,
        "header_height": 50,
        "row_padding": 10,
        "row_gap": 10,
        "padding_before_days": 7,
        "padding_after_days": 30,
        "fallback_before_days": 30,
        "fallback_after_days": 90,
        "undated_items": "today",
        "viewport_buffer_pct": 50,
        "zoom_step": 30,
        "min_cell_width": 60,
        "max_cell_width": 300,
        "scroll_idle_ms": 150,
        "scroll_throttle_ms": 16,
    },
}


def settings_file() -> Path:
    return config_dir() / SETTINGS_NAME


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    out = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = _merge(out[key], value)
        else:
            out[key] = value
    return out


def load_settings(path: Optional[Path] = None) -> Dict[str, Any]:
    path = path or settings_file()
    if path.exists():
        try:
            return _merge(_DEFAULTS, json.loads(path.read_text(encoding="utf-8")))
        except (OSError, ValueError) as exc:
            log.warning("Ignoring unreadable settings file %s: %s", path, exc)
    return _merge(_DEFAULTS, {})


def save_settings(data: Dict[str, Any], path: Optional[Path] = None) -> None:
    path = path or settings_file()
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


def current_user_id(settings: Dict[str, Any]) -> str:
    return (settings.get("user") or {}).get("id") or getpass.getuser()


@dataclass(frozen=True)
class TimelineSettings:
    """Typed view over the `timeline` section of settings.json."""
    scale: str = "month"
    cell_width: int = 150
    row_height: int = 60
    header_height: int = 50
    row_padding: int = 10
    row_gap: int = 10
    padding_before_days: int = 7
    padding_after_days: int = 30
    fallback_before_days: int = 30
    fallback_after_days: int = 90
    undated_items: str = "today"
    viewport_buffer_pct: float = 50
    zoom_step: int = 30
    min_cell_width: int = 60
    max_cell_width: int = 300
    scroll_idle_ms: int = 150
    scroll_throttle_ms: int = 16

    @classmethod
    def from_settings(cls, settings: Dict[str, Any]) -> "TimelineSettings":
        section = settings.get("timeline") or {}
        known = {k: section[k] for k in cls.__dataclass_fields__ if k in section}
        return cls(**known)

"""Workspace root, config, timezone and clock helpers for TaskStreak."""

from __future__ import annotations

import os
from datetime import datetime, tzinfo
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

from taskstreak.fileio import read_yaml
from taskstreak.models import THEMES

DEFAULT_THEME = "light"
STORAGE_KEY = "taskstreak_state"


def workspace_root() -> Path:
    """Get the workspace root directory (holds config.yaml and the state file)."""
    return Path(
        os.environ.get("TASKSTREAK_ROOT", str(Path.home() / "taskstreak"))
    ).expanduser().resolve()


# ── Path helpers ──────────────────────────────────────────────

def config_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "config.yaml"


def state_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / f"{STORAGE_KEY}.json"


def log_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "logs"


# ── Config ────────────────────────────────────────────────────

def load_config(root: Path | None = None) -> dict[str, Any]:
    """Read config.yaml; a missing or unreadable file means defaults."""
    try:
        return read_yaml(config_path(root))
    except (OSError, yaml.YAMLError):
        return {}


def get_timezone(root: Path | None = None) -> tzinfo:
    """Timezone that defines local calendar days.

    Uses ``timezone`` from config.yaml, falling back to the system local zone.
    """
    name = load_config(root).get("timezone")
    if isinstance(name, str) and name.strip():
        try:
            return ZoneInfo(name.strip())
        except (ZoneInfoNotFoundError, ValueError):
            pass
    return datetime.now().astimezone().tzinfo


def now_local(root: Path | None = None) -> datetime:
    """Get current datetime in the workspace timezone."""
    return datetime.now(get_timezone(root))


def today_str(root: Path | None = None) -> str:
    """Get today's date key (YYYY-MM-DD) in the workspace timezone."""
    return now_local(root).date().isoformat()


def preferred_theme(root: Path | None = None) -> str:
    """Platform light/dark preference, used only as a fallback theme.

    TASKSTREAK_THEME wins over config.yaml; anything unrecognised means light.
    """
    raw = os.environ.get("TASKSTREAK_THEME")
    if raw is None:
        raw = load_config(root).get("theme")
    if isinstance(raw, str) and raw.strip().lower() in THEMES:
        return raw.strip().lower()
    return DEFAULT_THEME


def log_level(root: Path | None = None) -> str:
    raw = load_config(root).get("log_level", "INFO")
    return str(raw).upper() if raw else "INFO"

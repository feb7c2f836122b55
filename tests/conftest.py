"""Shared test fixtures for TaskStreak tests."""

from __future__ import annotations

import itertools
import os
from datetime import datetime, timezone
from pathlib import Path

import pytest
import yaml


class FakeClock:
    """Settable clock; call it to get the current instant."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set(self, day: str, hour: int = 9, minute: int = 0) -> datetime:
        self.now = at(day, hour, minute)
        return self.now


def at(day: str, hour: int = 9, minute: int = 0) -> datetime:
    """UTC instant on *day* (YYYY-MM-DD)."""
    year, month, d = (int(p) for p in day.split("-"))
    return datetime(year, month, d, hour, minute, tzinfo=timezone.utc)


@pytest.fixture
def instant():
    """Factory for fixed UTC instants: instant("2024-01-03", 14)."""
    return at


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(at("2024-01-03"))


@pytest.fixture
def ids():
    """Deterministic id factory: task-1, task-2, ..."""
    counter = itertools.count(1)
    return lambda: f"task-{next(counter)}"


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Create a temporary workspace with a config.yaml pinned to UTC."""
    root = tmp_path / "workspace"
    root.mkdir(parents=True)

    config = {"timezone": "UTC", "theme": "dark", "log_level": "debug"}
    (root / "config.yaml").write_text(
        yaml.dump(config, default_flow_style=False), encoding="utf-8"
    )

    old_theme = os.environ.pop("TASKSTREAK_THEME", None)
    os.environ["TASKSTREAK_ROOT"] = str(root)
    yield root
    # Cleanup
    if "TASKSTREAK_ROOT" in os.environ:
        del os.environ["TASKSTREAK_ROOT"]
    if old_theme is not None:
        os.environ["TASKSTREAK_THEME"] = old_theme

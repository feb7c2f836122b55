"""Typed dataclasses for the TaskStreak data model.

Models are frozen: every reducer transition builds new values. to_dict()
emits the persisted camelCase shape; reading untrusted documents back is the
job of taskstreak.sanitize, not of these classes.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any

PRIORITIES = ("Low", "Medium", "High")
DEFAULT_PRIORITY = "Medium"
THEMES = ("light", "dark")


def new_id() -> str:
    return str(uuid.uuid4())


# ── Tasks ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class Task:
    id: str
    title: str
    created_at: str
    updated_at: str
    description: str = ""
    priority: str = DEFAULT_PRIORITY
    deadline: str | None = None  # date key
    done: bool = False
    completed_at: str | None = None  # most recent completion instant
    tags: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "priority": self.priority,
            "deadline": self.deadline,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "done": self.done,
            "completedAt": self.completed_at,
            "tags": list(self.tags),
        }


@dataclass(frozen=True)
class TaskInput:
    """User-editable task fields, as submitted by the presentation layer."""

    title: str
    description: str = ""
    priority: str = DEFAULT_PRIORITY
    deadline: str | None = None
    tags: tuple[str, ...] = ()


# ── Streak ────────────────────────────────────────────────────


@dataclass(frozen=True)
class StreakState:
    current: int = 0
    best: int = 0
    history_dates: tuple[str, ...] = ()
    last_date: str | None = None
    daily_completions: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "current": self.current,
            "best": self.best,
            "historyDates": list(self.history_dates),
            "lastDate": self.last_date,
            "dailyCompletions": dict(self.daily_completions),
        }


# ── Reviews ───────────────────────────────────────────────────


@dataclass(frozen=True)
class DailyReview:
    id: str
    date: str
    created_at: str
    updated_at: str
    wins: str = ""
    blockers: str = ""
    next_focus: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date,
            "wins": self.wins,
            "blockers": self.blockers,
            "nextFocus": self.next_focus,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


@dataclass(frozen=True)
class ReviewInput:
    date: str
    wins: str = ""
    blockers: str = ""
    next_focus: str = ""


# ── App state ─────────────────────────────────────────────────


@dataclass(frozen=True)
class Settings:
    theme: str = "light"

    def to_dict(self) -> dict[str, Any]:
        return {"theme": self.theme}


@dataclass(frozen=True)
class AppState:
    tasks: tuple[Task, ...] = ()  # newest first
    streak: StreakState = field(default_factory=StreakState)
    settings: Settings = field(default_factory=Settings)
    reviews: tuple[DailyReview, ...] = ()  # newest date first

    def find_task(self, task_id: str) -> Task | None:
        for t in self.tasks:
            if t.id == task_id:
                return t
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "tasks": [t.to_dict() for t in self.tasks],
            "streak": self.streak.to_dict(),
            "settings": self.settings.to_dict(),
            "reviews": [r.to_dict() for r in self.reviews],
        }


def create_default_state(theme: str = "light") -> AppState:
    return AppState(settings=Settings(theme=theme))

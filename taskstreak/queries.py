"""Read-only views over AppState: filtering, sorting, stats and history."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import tzinfo
from typing import Any

from taskstreak.dates import date_key_from_iso, deadline_status, is_overdue, parse_instant
from taskstreak.errors import FormatError
from taskstreak.models import AppState, DailyReview, Task
from taskstreak.streak import completions_for_last_days

STATUS_FILTERS = ("all", "active", "done")
SORT_KEYS = ("deadline", "priority", "createdAt")
PRIORITY_WEIGHT = {"Low": 1, "Medium": 2, "High": 3}


@dataclass(frozen=True)
class DashboardStats:
    completed_today: int
    completed_last_7_days: int
    active_count: int
    done_count: int
    current_streak: int
    best_streak: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "completedToday": self.completed_today,
            "completedLast7Days": self.completed_last_7_days,
            "activeCount": self.active_count,
            "doneCount": self.done_count,
            "currentStreak": self.current_streak,
            "bestStreak": self.best_streak,
        }


def _timestamp(value: str | None) -> float:
    parsed = parse_instant(value)
    return parsed.timestamp() if parsed else 0.0


def _deadline_key(task: Task) -> tuple:
    # Dated tasks first (earliest deadline first), then newest created.
    return (task.deadline is None, task.deadline or "", -_timestamp(task.created_at))


def _priority_key(task: Task) -> tuple:
    return (-PRIORITY_WEIGHT.get(task.priority, 2), *_deadline_key(task))


def _created_key(task: Task) -> tuple:
    return (-_timestamp(task.created_at),)


_SORTS = {"deadline": _deadline_key, "priority": _priority_key, "createdAt": _created_key}


def visible_tasks(
    tasks: tuple[Task, ...] | list[Task],
    status: str = "all",
    query: str = "",
    sort_by: str = "deadline",
) -> list[Task]:
    """Tasks matching *status* and a case-insensitive title *query*, sorted."""
    needle = (query or "").strip().lower()
    result = []
    for task in tasks:
        if status == "active" and task.done:
            continue
        if status == "done" and not task.done:
            continue
        if needle and needle not in task.title.lower():
            continue
        result.append(task)
    result.sort(key=_SORTS.get(sort_by, _deadline_key))
    return result


def dashboard_stats(state: AppState, today_key: str) -> DashboardStats:
    daily = state.streak.daily_completions
    active = sum(1 for t in state.tasks if not t.done)
    return DashboardStats(
        completed_today=daily.get(today_key, 0),
        completed_last_7_days=completions_for_last_days(daily, 7, today_key),
        active_count=active,
        done_count=len(state.tasks) - active,
        current_streak=state.streak.current,
        best_streak=state.streak.best,
    )


def completed_history(tasks: tuple[Task, ...] | list[Task], tz: tzinfo | None = None) -> list[tuple[str, list[Task]]]:
    """Tasks that were ever completed, grouped by local day, newest day first."""
    completed = sorted(
        (t for t in tasks if t.completed_at),
        key=lambda t: _timestamp(t.completed_at),
        reverse=True,
    )
    groups: dict[str, list[Task]] = {}
    for task in completed:
        try:
            day = date_key_from_iso(task.completed_at, tz)
        except (FormatError, OverflowError):
            continue
        groups.setdefault(day, []).append(task)
    return sorted(groups.items(), key=lambda item: item[0], reverse=True)


def task_view(task: Task, today_key: str) -> dict[str, Any]:
    """Task dict with computed deadline fields, for presentation layers."""
    d = task.to_dict()
    status = deadline_status(task.deadline, task.done, today_key)
    d["overdue"] = is_overdue(task.deadline, task.done, today_key)
    d["deadlineLabel"] = status.label
    d["deadlineTone"] = status.tone
    return d


def review_for(state: AppState, day: str) -> DailyReview | None:
    for review in state.reviews:
        if review.date == day:
            return review
    return None

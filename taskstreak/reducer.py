"""Pure state transitions for TaskStreak.

``reduce(state, action)`` returns a new AppState and never mutates its input.
Every transition is total: unknown ids and unusable input leave the state
unchanged instead of raising. The current instant is passed in explicitly so
tests can pin the clock.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime

from taskstreak.dates import date_key_from_iso, is_valid, today
from taskstreak.errors import FormatError
from taskstreak.models import (
    THEMES,
    AppState,
    DailyReview,
    ReviewInput,
    Task,
    TaskInput,
    new_id,
)
from taskstreak.sanitize import sanitize_priority, sanitize_tags
from taskstreak.streak import derive_streak, increment_daily_completions, refresh_streak


# ── Actions ───────────────────────────────────────────────────


@dataclass(frozen=True)
class AddTask:
    input: TaskInput


@dataclass(frozen=True)
class UpdateTask:
    task_id: str
    input: TaskInput


@dataclass(frozen=True)
class DeleteTask:
    task_id: str


@dataclass(frozen=True)
class ToggleTaskDone:
    task_id: str


@dataclass(frozen=True)
class SetTheme:
    theme: str


@dataclass(frozen=True)
class UpsertDailyReview:
    input: ReviewInput


Action = AddTask | UpdateTask | DeleteTask | ToggleTaskDone | SetTheme | UpsertDailyReview


# ── Helpers ───────────────────────────────────────────────────


def _timestamp(now: datetime) -> str:
    return now.isoformat(timespec="milliseconds")


def _editable_fields(data: TaskInput) -> dict[str, object] | None:
    """Cleaned user-editable fields, or None when the title is blank."""
    title = (data.title or "").strip()
    if not title:
        return None
    return {
        "title": title,
        "description": (data.description or "").strip(),
        "priority": sanitize_priority(data.priority),
        "deadline": data.deadline if is_valid(data.deadline) else None,
        "tags": sanitize_tags(data.tags or ()),
    }


def _with_refreshed_streak(state: AppState, tasks: tuple[Task, ...], today_key: str) -> AppState:
    return replace(state, tasks=tasks, streak=refresh_streak(state.streak, today_key))


def _completion_day(task: Task, now: datetime) -> str | None:
    if not task.completed_at:
        return None
    try:
        return date_key_from_iso(task.completed_at, now.tzinfo)
    except (FormatError, OverflowError):
        return None


# ── Transitions ───────────────────────────────────────────────


def _add_task(state: AppState, action: AddTask, now: datetime, make_id: Callable[[], str]) -> AppState:
    fields = _editable_fields(action.input)
    if fields is None:
        return state
    stamp = _timestamp(now)
    task = Task(id=make_id(), created_at=stamp, updated_at=stamp, **fields)
    return _with_refreshed_streak(state, (task, *state.tasks), today(now))


def _update_task(state: AppState, action: UpdateTask, now: datetime) -> AppState:
    if state.find_task(action.task_id) is None:
        return state
    fields = _editable_fields(action.input)
    if fields is None:
        return state
    stamp = _timestamp(now)
    tasks = tuple(
        replace(t, updated_at=stamp, **fields) if t.id == action.task_id else t
        for t in state.tasks
    )
    return _with_refreshed_streak(state, tasks, today(now))


def _delete_task(state: AppState, action: DeleteTask, now: datetime) -> AppState:
    if state.find_task(action.task_id) is None:
        return state
    tasks = tuple(t for t in state.tasks if t.id != action.task_id)
    return _with_refreshed_streak(state, tasks, today(now))


def _toggle_task_done(state: AppState, action: ToggleTaskDone, now: datetime) -> AppState:
    """Flip done; a first completion today adds today to the streak history.

    Undoing keeps completed_at and history: a day that was counted stays counted.
    """
    target = state.find_task(action.task_id)
    if target is None:
        return state

    stamp = _timestamp(now)
    today_key = today(now)
    next_done = not target.done
    streak = refresh_streak(state.streak, today_key)

    if next_done and _completion_day(target, now) != today_key:
        streak = derive_streak(
            increment_daily_completions(state.streak.daily_completions, today_key),
            (*state.streak.history_dates, today_key),
            state.streak.best,
            today_key,
        )

    updated = replace(
        target,
        done=next_done,
        completed_at=stamp if next_done else target.completed_at,
        updated_at=stamp,
    )
    tasks = tuple(updated if t.id == action.task_id else t for t in state.tasks)
    return replace(state, tasks=tasks, streak=streak)


def _set_theme(state: AppState, action: SetTheme) -> AppState:
    if action.theme not in THEMES or action.theme == state.settings.theme:
        return state
    return replace(state, settings=replace(state.settings, theme=action.theme))


def _upsert_daily_review(
    state: AppState, action: UpsertDailyReview, now: datetime, make_id: Callable[[], str]
) -> AppState:
    data = action.input
    if not is_valid(data.date):
        return state
    stamp = _timestamp(now)
    existing = next((r for r in state.reviews if r.date == data.date), None)
    review = DailyReview(
        id=existing.id if existing else make_id(),
        date=data.date,
        wins=(data.wins or "").strip(),
        blockers=(data.blockers or "").strip(),
        next_focus=(data.next_focus or "").strip(),
        created_at=existing.created_at if existing else stamp,
        updated_at=stamp,
    )
    others = [r for r in state.reviews if r.date != data.date]
    reviews = sorted([review, *others], key=lambda r: r.date, reverse=True)
    return replace(state, reviews=tuple(reviews))


def reduce(
    state: AppState,
    action: Action,
    *,
    now: datetime | None = None,
    make_id: Callable[[], str] = new_id,
) -> AppState:
    """Apply *action* to *state* and return the next snapshot."""
    if now is None:
        from taskstreak.workspace import now_local

        now = now_local()

    if isinstance(action, AddTask):
        return _add_task(state, action, now, make_id)
    if isinstance(action, UpdateTask):
        return _update_task(state, action, now)
    if isinstance(action, DeleteTask):
        return _delete_task(state, action, now)
    if isinstance(action, ToggleTaskDone):
        return _toggle_task_done(state, action, now)
    if isinstance(action, SetTheme):
        return _set_theme(state, action)
    if isinstance(action, UpsertDailyReview):
        return _upsert_daily_review(state, action, now, make_id)
    return state

"""Tracker: owns the current AppState snapshot and persists each change."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import datetime

from taskstreak.models import AppState, ReviewInput, TaskInput, new_id
from taskstreak.reducer import (
    Action,
    AddTask,
    DeleteTask,
    SetTheme,
    ToggleTaskDone,
    UpdateTask,
    UpsertDailyReview,
    reduce,
)
from taskstreak.storage import Store, load_state, save_state
from taskstreak.workspace import now_local

logger = logging.getLogger(__name__)


class Tracker:
    """Single owner of the application state.

    dispatch() runs the reducer, swaps in the new snapshot with one
    assignment, then saves it. Save failures are logged by save_state and
    never reach the caller.
    """

    def __init__(
        self,
        store: Store,
        *,
        clock: Callable[[], datetime] | None = None,
        make_id: Callable[[], str] = new_id,
        fallback_theme: str | None = None,
    ):
        self.store = store
        self.clock = clock or now_local
        self.make_id = make_id
        self.state: AppState = load_state(store, fallback_theme=fallback_theme, now=self.clock())
        self.last_save_ok = True

    def dispatch(self, action: Action) -> AppState:
        next_state = reduce(self.state, action, now=self.clock(), make_id=self.make_id)
        if next_state is self.state:
            logger.debug("No-op action: %r", action)
            return self.state
        self.state = next_state
        self.last_save_ok = save_state(self.store, next_state)
        return next_state

    # ── Convenience wrappers ──────────────────────────────────

    def add_task(
        self,
        title: str,
        *,
        description: str = "",
        priority: str = "Medium",
        deadline: str | None = None,
        tags: Iterable[str] = (),
    ) -> AppState:
        return self.dispatch(AddTask(TaskInput(title, description, priority, deadline, tuple(tags))))

    def update_task(
        self,
        task_id: str,
        title: str,
        *,
        description: str = "",
        priority: str = "Medium",
        deadline: str | None = None,
        tags: Iterable[str] = (),
    ) -> AppState:
        return self.dispatch(UpdateTask(task_id, TaskInput(title, description, priority, deadline, tuple(tags))))

    def delete_task(self, task_id: str) -> AppState:
        return self.dispatch(DeleteTask(task_id))

    def toggle_task_done(self, task_id: str) -> AppState:
        return self.dispatch(ToggleTaskDone(task_id))

    def set_theme(self, theme: str) -> AppState:
        return self.dispatch(SetTheme(theme))

    def save_daily_review(self, day: str, *, wins: str = "", blockers: str = "", next_focus: str = "") -> AppState:
        return self.dispatch(UpsertDailyReview(ReviewInput(day, wins, blockers, next_focus)))


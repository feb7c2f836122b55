"""TaskStreak JSON API.

Thin FastAPI layer over a Tracker. Run with ``uvicorn ui.app:app``; state is
kept in the workspace (TASKSTREAK_ROOT). Optional HTTP basic auth via
TASKSTREAK_USERNAME / TASKSTREAK_PASSWORD.
"""

from __future__ import annotations

import os
import secrets
from typing import Any

from fastapi import Body, Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from taskstreak import (
    PRIORITIES,
    THEMES,
    FileStore,
    Tracker,
    completed_history,
    dashboard_stats,
    is_valid,
    review_for,
    task_view,
    today,
    visible_tasks,
)
from taskstreak.logging_setup import setup_logging
from taskstreak.queries import SORT_KEYS, STATUS_FILTERS
from taskstreak.workspace import log_level, log_path

security = HTTPBasic(auto_error=False)


def get_current_user(credentials: HTTPBasicCredentials | None = Depends(security)) -> str:
    expected_username = os.environ.get("TASKSTREAK_USERNAME", "")
    expected_password = os.environ.get("TASKSTREAK_PASSWORD", "")

    if not expected_username or not expected_password:
        return "guest"

    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Basic"},
        )

    correct_username = secrets.compare_digest(credentials.username.encode("utf-8"), expected_username.encode("utf-8"))
    correct_password = secrets.compare_digest(credentials.password.encode("utf-8"), expected_password.encode("utf-8"))

    if not (correct_username and correct_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )

    return credentials.username


def get_tracker(request: Request) -> Tracker:
    tracker = request.app.state.tracker
    if tracker is None:
        setup_logging(log_dir=log_path(), level=log_level())
        tracker = request.app.state.tracker = Tracker(FileStore())
    return tracker


# ── Payload parsing ───────────────────────────────────────────


def _task_fields(payload: dict[str, Any]) -> dict[str, Any]:
    """Validate a task payload; the reducer would silently ignore bad input."""
    title = payload.get("title")
    if not isinstance(title, str) or not title.strip():
        raise HTTPException(status_code=400, detail="title must be a non-empty string")

    priority = payload.get("priority", "Medium")
    if priority not in PRIORITIES:
        raise HTTPException(status_code=400, detail=f"priority must be one of {', '.join(PRIORITIES)}")

    deadline = payload.get("deadline")
    if deadline is not None and not is_valid(deadline):
        raise HTTPException(status_code=400, detail=f"Invalid deadline: {deadline!r}")

    tags = payload.get("tags") or []
    if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
        raise HTTPException(status_code=400, detail="tags must be a list of strings")

    description = payload.get("description") or ""
    if not isinstance(description, str):
        raise HTTPException(status_code=400, detail="description must be a string")

    return {
        "title": title,
        "description": description,
        "priority": priority,
        "deadline": deadline,
        "tags": tags,
    }


def _require_task(tracker: Tracker, task_id: str) -> None:
    if tracker.state.find_task(task_id) is None:
        raise HTTPException(status_code=404, detail=f"Task not found: {task_id}")


def _today(tracker: Tracker) -> str:
    return today(tracker.clock())


# ── App ───────────────────────────────────────────────────────


def create_app(tracker: Tracker | None = None) -> FastAPI:
    app = FastAPI(title="TaskStreak API", version="0.1.0")
    app.state.tracker = tracker

    @app.get("/healthz")
    def healthz() -> dict[str, str]:
        return {"ok": "true"}

    @app.get("/api/state")
    def api_state(
        username: str = Depends(get_current_user), tracker: Tracker = Depends(get_tracker)
    ) -> dict[str, Any]:
        return tracker.state.to_dict()

    @app.get("/api/tasks")
    def api_list_tasks(
        status_filter: str = Query("all", alias="status"),
        q: str = "",
        sort: str = "deadline",
        username: str = Depends(get_current_user),
        tracker: Tracker = Depends(get_tracker),
    ) -> dict[str, Any]:
        """List tasks filtered by status/title and sorted."""
        if status_filter not in STATUS_FILTERS:
            raise HTTPException(status_code=400, detail=f"Invalid status filter: {status_filter}")
        if sort not in SORT_KEYS:
            raise HTTPException(status_code=400, detail=f"Invalid sort: {sort}")
        day = _today(tracker)
        tasks = visible_tasks(tracker.state.tasks, status=status_filter, query=q, sort_by=sort)
        return {"tasks": [task_view(t, day) for t in tasks]}

    @app.post("/api/tasks")
    def api_create_task(
        payload: dict[str, Any] = Body(...),
        username: str = Depends(get_current_user),
        tracker: Tracker = Depends(get_tracker),
    ) -> dict[str, Any]:
        fields = _task_fields(payload)
        state = tracker.add_task(**fields)
        return {"ok": True, "task": state.tasks[0].to_dict(), "saved": tracker.last_save_ok}

    @app.put("/api/tasks/{task_id}")
    def api_update_task(
        task_id: str,
        payload: dict[str, Any] = Body(...),
        username: str = Depends(get_current_user),
        tracker: Tracker = Depends(get_tracker),
    ) -> dict[str, Any]:
        _require_task(tracker, task_id)
        fields = _task_fields(payload)
        state = tracker.update_task(task_id, **fields)
        task = state.find_task(task_id)
        return {"ok": True, "task": task.to_dict() if task else None, "saved": tracker.last_save_ok}

    @app.delete("/api/tasks/{task_id}")
    def api_delete_task(
        task_id: str, username: str = Depends(get_current_user), tracker: Tracker = Depends(get_tracker)
    ) -> dict[str, Any]:
        _require_task(tracker, task_id)
        tracker.delete_task(task_id)
        return {"ok": True, "task_id": task_id, "saved": tracker.last_save_ok}

    @app.post("/api/tasks/{task_id}/toggle")
    def api_toggle_task(
        task_id: str, username: str = Depends(get_current_user), tracker: Tracker = Depends(get_tracker)
    ) -> dict[str, Any]:
        _require_task(tracker, task_id)
        state = tracker.toggle_task_done(task_id)
        task = state.find_task(task_id)
        return {
            "ok": True,
            "task": task.to_dict() if task else None,
            "streak": state.streak.to_dict(),
            "saved": tracker.last_save_ok,
        }

    @app.put("/api/settings/theme")
    def api_set_theme(
        payload: dict[str, Any] = Body(...),
        username: str = Depends(get_current_user),
        tracker: Tracker = Depends(get_tracker),
    ) -> dict[str, Any]:
        theme = payload.get("theme")
        if theme not in THEMES:
            raise HTTPException(status_code=400, detail=f"theme must be one of {', '.join(THEMES)}")
        state = tracker.set_theme(theme)
        return {"ok": True, "settings": state.settings.to_dict()}

    @app.get("/api/stats")
    def api_stats(
        username: str = Depends(get_current_user), tracker: Tracker = Depends(get_tracker)
    ) -> dict[str, Any]:
        return dashboard_stats(tracker.state, _today(tracker)).to_dict()

    @app.get("/api/history")
    def api_history(
        username: str = Depends(get_current_user), tracker: Tracker = Depends(get_tracker)
    ) -> dict[str, Any]:
        """Completed tasks grouped by the day they were last completed."""
        tz = tracker.clock().tzinfo
        groups = completed_history(tracker.state.tasks, tz)
        return {"days": [{"date": day, "tasks": [t.to_dict() for t in tasks]} for day, tasks in groups]}

    @app.put("/api/reviews/{day}")
    def api_save_review(
        day: str,
        payload: dict[str, Any] = Body(default={}),
        username: str = Depends(get_current_user),
        tracker: Tracker = Depends(get_tracker),
    ) -> dict[str, Any]:
        if not is_valid(day):
            raise HTTPException(status_code=400, detail=f"Invalid date: {day}")
        fields = {"wins": payload.get("wins"), "blockers": payload.get("blockers"), "next_focus": payload.get("nextFocus")}
        if any(v is not None and not isinstance(v, str) for v in fields.values()):
            raise HTTPException(status_code=400, detail="review fields must be strings")
        state = tracker.save_daily_review(day, **{k: v or "" for k, v in fields.items()})
        review = review_for(state, day)
        return {"ok": True, "review": review.to_dict() if review else None}

    return app


app = create_app()

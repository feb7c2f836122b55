"""Rebuild a valid AppState from an untrusted persisted document.

Persisted JSON is treated as adversarial: any field may be missing, have the
wrong type, or come from an older schema. Each field falls back on its own,
so one bad value never discards the whole document. Nothing here raises.

Document versions:
- 1: the raw state object, no envelope.
- 2: ``{"version": 2, "state": {...}}``.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from datetime import datetime, tzinfo
from typing import Any

from taskstreak.dates import date_key_from_iso, is_valid, parse_instant, today
from taskstreak.errors import FormatError
from taskstreak.models import (
    DEFAULT_PRIORITY,
    PRIORITIES,
    THEMES,
    AppState,
    DailyReview,
    Settings,
    Task,
    create_default_state,
    new_id,
)
from taskstreak.streak import coerce_count, derive_streak, normalize_daily_completions

STORAGE_VERSION = 2


@dataclass(frozen=True)
class Envelope:
    version: int
    state: Any


# ── Field helpers ─────────────────────────────────────────────


def sanitize_tags(tags: Iterable[object]) -> tuple[str, ...]:
    """Trim, drop empties and non-strings, dedupe keeping first occurrence."""
    seen: dict[str, None] = {}
    for tag in tags:
        if isinstance(tag, str) and tag.strip():
            seen.setdefault(tag.strip(), None)
    return tuple(seen)


def sanitize_priority(value: object) -> str:
    return value if value in PRIORITIES else DEFAULT_PRIORITY


def sanitize_theme(value: object, fallback: str) -> str:
    return value if value in THEMES else fallback


def _instant(value: object) -> str | None:
    return value if parse_instant(value) is not None else None


def _text(value: object) -> str:
    return value.strip() if isinstance(value, str) else ""


# ── Records ───────────────────────────────────────────────────


def sanitize_task(value: object, now_iso: str, make_id: Callable[[], str] = new_id) -> Task | None:
    """Rebuild one task; None when it has no usable title."""
    if not isinstance(value, dict):
        return None

    title = _text(value.get("title"))
    if not title:
        return None

    created_at = _instant(value.get("createdAt")) or now_iso
    updated_at = _instant(value.get("updatedAt")) or created_at

    raw_id = value.get("id")
    task_id = raw_id if isinstance(raw_id, str) and raw_id else make_id()

    deadline = value.get("deadline")
    raw_tags = value.get("tags")

    return Task(
        id=task_id,
        title=title,
        description=_text(value.get("description")),
        priority=sanitize_priority(value.get("priority")),
        deadline=deadline if is_valid(deadline) else None,
        created_at=created_at,
        updated_at=updated_at,
        done=bool(value.get("done")),
        completed_at=_instant(value.get("completedAt")),
        tags=sanitize_tags(raw_tags) if isinstance(raw_tags, list) else (),
    )


def sanitize_review(value: object, now_iso: str, make_id: Callable[[], str] = new_id) -> DailyReview | None:
    if not isinstance(value, dict):
        return None
    day = value.get("date")
    if not is_valid(day):
        return None
    created_at = _instant(value.get("createdAt")) or now_iso
    raw_id = value.get("id")
    return DailyReview(
        id=raw_id if isinstance(raw_id, str) and raw_id else make_id(),
        date=day,
        wins=_text(value.get("wins")),
        blockers=_text(value.get("blockers")),
        next_focus=_text(value.get("nextFocus")),
        created_at=created_at,
        updated_at=_instant(value.get("updatedAt")) or created_at,
    )


def daily_completions_from_tasks(tasks: Iterable[Task], tz: tzinfo | None = None) -> dict[str, int]:
    """One completion per task on the local day of its completedAt.

    Recovers streak data from documents written before dailyCompletions existed.
    """
    counts: dict[str, int] = {}
    for task in tasks:
        if not task.completed_at:
            continue
        try:
            day = date_key_from_iso(task.completed_at, tz)
        except (FormatError, OverflowError):
            continue
        counts[day] = counts.get(day, 0) + 1
    return counts


# ── State ─────────────────────────────────────────────────────


def migrate_state(
    raw_state: object,
    fallback_theme: str,
    *,
    now: datetime,
    make_id: Callable[[], str] = new_id,
) -> AppState:
    """Produce a structurally valid AppState from an untyped state object."""
    if not isinstance(raw_state, dict):
        return create_default_state(fallback_theme)

    now_iso = now.isoformat(timespec="milliseconds")

    tasks: list[Task] = []
    seen_ids: set[str] = set()
    raw_tasks = raw_state.get("tasks")
    for raw_task in raw_tasks if isinstance(raw_tasks, list) else []:
        task = sanitize_task(raw_task, now_iso, make_id)
        if task is None:
            continue
        if task.id in seen_ids:
            task = replace(task, id=make_id())
        seen_ids.add(task.id)
        tasks.append(task)

    streak_raw = raw_state.get("streak")
    if not isinstance(streak_raw, dict):
        streak_raw = {}
    raw_daily = streak_raw.get("dailyCompletions")
    daily = normalize_daily_completions(raw_daily) if isinstance(raw_daily, dict) else {}
    if not daily:
        daily = daily_completions_from_tasks(tasks, now.tzinfo)

    raw_history = streak_raw.get("historyDates")
    history = [d for d in raw_history if isinstance(d, str)] if isinstance(raw_history, list) else []

    settings_raw = raw_state.get("settings")
    if not isinstance(settings_raw, dict):
        settings_raw = {}

    reviews: dict[str, DailyReview] = {}
    raw_reviews = raw_state.get("reviews")
    for raw_review in raw_reviews if isinstance(raw_reviews, list) else []:
        review = sanitize_review(raw_review, now_iso, make_id)
        if review is not None:
            reviews.setdefault(review.date, review)

    return AppState(
        tasks=tuple(tasks),
        streak=derive_streak(daily, history, coerce_count(streak_raw.get("best")), today(now)),
        settings=Settings(theme=sanitize_theme(settings_raw.get("theme"), fallback_theme)),
        reviews=tuple(sorted(reviews.values(), key=lambda r: r.date, reverse=True)),
    )


# ── Envelope ──────────────────────────────────────────────────


def parse_envelope(raw: str | bytes | None) -> Envelope | None:
    """Decode a stored document; None when it is not a JSON object."""
    if raw is None:
        return None
    try:
        parsed = json.loads(raw)
    except (ValueError, TypeError, RecursionError):
        return None
    if not isinstance(parsed, dict):
        return None
    version = parsed.get("version")
    if isinstance(version, int) and not isinstance(version, bool) and "state" in parsed:
        return Envelope(version=version, state=parsed["state"])
    return Envelope(version=1, state=parsed)


def sanitize_document(
    raw: str | bytes | None,
    fallback_theme: str,
    *,
    now: datetime,
    make_id: Callable[[], str] = new_id,
) -> AppState:
    envelope = parse_envelope(raw)
    if envelope is None:
        return create_default_state(fallback_theme)
    return migrate_state(envelope.state, fallback_theme, now=now, make_id=make_id)


def serialize_state(state: AppState) -> str:
    """Versioned JSON document for *state*; identical states give identical text."""
    return json.dumps(
        {"version": STORAGE_VERSION, "state": state.to_dict()},
        ensure_ascii=False,
        sort_keys=True,
        separators=(",", ":"),
    )

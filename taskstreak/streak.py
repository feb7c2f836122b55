"""Streak engine: derives streak metrics from completion dates.

Current and best are recomputed from the full history on every call rather
than tracked incrementally. History is bounded by days of real usage, so the
linear scan stays cheap.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping

from taskstreak.dates import add_days, diff_days, is_valid
from taskstreak.models import StreakState


def coerce_count(value: object) -> int:
    """Floor a numeric count; 0 for anything non-numeric, non-finite or non-positive.

    Numeric strings count as numbers, booleans do not.
    """
    if isinstance(value, bool):
        return 0
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            return 0
    if not isinstance(value, (int, float)):
        return 0
    if isinstance(value, float) and not math.isfinite(value):
        return 0
    if value <= 0:
        return 0
    return int(math.floor(value))


def normalize_daily_completions(raw: Mapping[object, object]) -> dict[str, int]:
    """Keep entries with a valid date key and a positive count (floored)."""
    normalized: dict[str, int] = {}
    for key, count in raw.items():
        if not is_valid(key):
            continue
        safe = coerce_count(count)
        if safe > 0:
            normalized[key] = safe
    return normalized


def normalize_history_dates(dates: Iterable[object]) -> list[str]:
    return sorted({d for d in dates if is_valid(d)})


def calculate_best_streak(history: list[str]) -> int:
    """Longest run of consecutive days in a sorted history."""
    if not history:
        return 0
    best = run = 1
    for prev, cur in zip(history, history[1:]):
        run = run + 1 if diff_days(prev, cur) == 1 else 1
        best = max(best, run)
    return best


def calculate_current_streak(history: list[str], today_key: str) -> int:
    """Run of consecutive days ending at the last completion.

    Zero when the last completion is more than one day before *today_key*.
    """
    if not history:
        return 0
    if diff_days(history[-1], today_key) > 1:
        return 0
    run = 1
    for i in range(len(history) - 1, 0, -1):
        if diff_days(history[i - 1], history[i]) != 1:
            break
        run += 1
    return run


def derive_streak(
    daily_completions: Mapping[object, object],
    history_dates: Iterable[object],
    best: int,
    today_key: str,
) -> StreakState:
    """Build a StreakState from raw completion data.

    History is the union of *history_dates* and every day with a positive
    count; *best* never drops below the supplied value.
    """
    completions = normalize_daily_completions(daily_completions)
    history = normalize_history_dates([*history_dates, *completions])
    return StreakState(
        current=calculate_current_streak(history, today_key),
        best=max(best, calculate_best_streak(history)),
        history_dates=tuple(history),
        last_date=history[-1] if history else None,
        daily_completions=completions,
    )


def refresh_streak(streak: StreakState, today_key: str) -> StreakState:
    """Re-derive *streak* against *today_key* (current changes across day rollovers)."""
    return derive_streak(streak.daily_completions, streak.history_dates, streak.best, today_key)


def increment_daily_completions(daily_completions: Mapping[str, int], key: str) -> dict[str, int]:
    updated = dict(daily_completions)
    updated[key] = updated.get(key, 0) + 1
    return updated


def completions_for_last_days(daily_completions: Mapping[str, int], days: int, today_key: str) -> int:
    """Total completions over the *days* calendar days ending at *today_key*."""
    return sum(daily_completions.get(add_days(today_key, -offset), 0) for offset in range(days))

"""Calendar-day arithmetic over ``YYYY-MM-DD`` date keys.

A date key names a local calendar day with no time-of-day part. Keys are only
ever built by formatting a (year, month, day) triple, so plain string
comparison orders them chronologically.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo

from taskstreak.errors import FormatError

DATE_KEY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
DAY_SECONDS = 24 * 60 * 60
DEADLINE_LOOKBACK_DAYS = 365


def to_date_key(value: date | datetime) -> str:
    """Format a date (or the date part of a datetime) as a date key."""
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def parse_date_key(key: str) -> datetime:
    """Parse a date key into a naive datetime anchored at noon.

    Noon keeps day differences whole even when a DST shift lands in between.
    """
    if not isinstance(key, str) or not DATE_KEY_RE.match(key):
        raise FormatError(key)
    year, month, day = (int(part) for part in key.split("-"))
    try:
        return datetime(year, month, day, 12, 0, 0)
    except ValueError:
        raise FormatError(key) from None


def is_valid(candidate: object) -> bool:
    """True when *candidate* has the key shape and survives a parse/format round-trip."""
    if not isinstance(candidate, str) or not DATE_KEY_RE.match(candidate):
        return False
    try:
        return to_date_key(parse_date_key(candidate)) == candidate
    except FormatError:
        return False


def today(now: datetime | None = None) -> str:
    """Date key for the local calendar day of *now* (defaults to the workspace clock)."""
    if now is None:
        from taskstreak.workspace import now_local

        now = now_local()
    return to_date_key(now)


def diff_days(a: str, b: str) -> int:
    """Signed number of calendar days from *a* to *b* (positive if *b* is later)."""
    delta = parse_date_key(b) - parse_date_key(a)
    return round(delta.total_seconds() / DAY_SECONDS)


def add_days(key: str, n: int) -> str:
    return to_date_key(parse_date_key(key) + timedelta(days=n))


def parse_instant(value: object) -> datetime | None:
    """Parse an ISO-8601 instant, accepting a trailing ``Z``. None when unparseable."""
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def date_key_from_iso(instant: str, tz: tzinfo | None = None) -> str:
    """Local calendar day of an ISO instant.

    Aware instants are converted to *tz* (the workspace timezone when omitted);
    naive instants are already local.
    """
    parsed = parse_instant(instant)
    if parsed is None:
        raise FormatError(instant)
    if parsed.tzinfo is not None:
        if tz is None:
            from taskstreak.workspace import get_timezone

            tz = get_timezone()
        parsed = parsed.astimezone(tz)
    return to_date_key(parsed)


# ── Deadlines ─────────────────────────────────────────────────


@dataclass(frozen=True)
class DeadlineStatus:
    label: str
    tone: str  # neutral, warning, danger, positive


def _days(n: int) -> str:
    return f"{n} day" if n == 1 else f"{n} days"


def min_deadline_key(today_key: str) -> str:
    """Earliest deadline the tracker accepts when editing a task."""
    return add_days(today_key, -DEADLINE_LOOKBACK_DAYS)


def is_deadline_allowed(deadline: str, today_key: str) -> bool:
    if not is_valid(deadline):
        return False
    return diff_days(min_deadline_key(today_key), deadline) >= 0


def is_overdue(deadline: str | None, done: bool, today_key: str) -> bool:
    if not deadline or done:
        return False
    return diff_days(deadline, today_key) > 0


def deadline_status(deadline: str | None, done: bool, today_key: str) -> DeadlineStatus:
    """Human-readable deadline label and tone for a task."""
    if not deadline:
        return DeadlineStatus("No deadline", "neutral")

    diff = diff_days(today_key, deadline)
    if not done:
        if diff < 0:
            return DeadlineStatus(f"Overdue by {_days(-diff)}", "danger")
        if diff == 0:
            return DeadlineStatus("Due today", "warning")
        if diff == 1:
            return DeadlineStatus("Due tomorrow", "warning")
        return DeadlineStatus(f"Due in {_days(diff)}", "neutral")

    if diff < 0:
        return DeadlineStatus(f"Closed, deadline was {_days(-diff)} ago", "positive")
    if diff == 0:
        return DeadlineStatus("Closed on the deadline", "positive")
    return DeadlineStatus("Closed before the deadline", "positive")

"""Exception types for TaskStreak."""

from __future__ import annotations


class TaskStreakError(Exception):
    """Base class for all TaskStreak errors."""


class FormatError(TaskStreakError, ValueError):
    """A date key that is not a real ``YYYY-MM-DD`` calendar day."""

    def __init__(self, value: object):
        super().__init__(f"Invalid date key: {value!r}")
        self.value = value


class PersistenceError(TaskStreakError):
    """Storage is unavailable or holds something unusable."""


class PersistenceReadError(PersistenceError):
    pass


class PersistenceWriteError(PersistenceError):
    pass

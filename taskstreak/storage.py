"""Loading and saving AppState through an injected store.

A store is anything with ``read() -> str | None`` and ``write(text)``. Loading
always produces a usable state and saving never raises: storage trouble is
logged and otherwise ignored, and in-memory state is never touched by it.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Protocol

from taskstreak.errors import PersistenceError, PersistenceReadError, PersistenceWriteError
from taskstreak.fileio import read_text, write_text_atomic
from taskstreak.models import AppState, create_default_state
from taskstreak.sanitize import migrate_state, parse_envelope, serialize_state
from taskstreak.workspace import now_local, preferred_theme, state_path

logger = logging.getLogger(__name__)


class Store(Protocol):
    """Opaque string store holding one persisted document."""

    def read(self) -> str | None: ...

    def write(self, text: str) -> None: ...


class FileStore:
    """Store backed by a single JSON file, written atomically."""

    def __init__(self, path: Path | None = None):
        self.path = path if path is not None else state_path()

    def read(self) -> str | None:
        try:
            return read_text(self.path)
        except (OSError, UnicodeDecodeError) as e:
            raise PersistenceReadError(f"Cannot read {self.path}: {e}") from e

    def write(self, text: str) -> None:
        try:
            write_text_atomic(self.path, text)
        except (OSError, UnicodeEncodeError) as e:
            raise PersistenceWriteError(f"Cannot write {self.path}: {e}") from e


class MemoryStore:
    """In-memory store for tests and embedding."""

    def __init__(self, text: str | None = None, *, fail_reads: bool = False, fail_writes: bool = False):
        self.text = text
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes
        self.writes = 0

    def read(self) -> str | None:
        if self.fail_reads:
            raise PersistenceReadError("store unavailable")
        return self.text

    def write(self, text: str) -> None:
        if self.fail_writes:
            raise PersistenceWriteError("store full")
        self.text = text
        self.writes += 1


def _read(store: Store) -> str | None:
    try:
        return store.read()
    except PersistenceError as e:
        logger.warning("Falling back to a fresh state: %s", e)
        return None


def load_state(
    store: Store,
    *,
    fallback_theme: str | None = None,
    now: datetime | None = None,
) -> AppState:
    """Load the persisted state, or a default one. Never raises."""
    if fallback_theme is None:
        fallback_theme = preferred_theme()
    if now is None:
        now = now_local()

    raw = _read(store)
    if raw is None:
        return create_default_state(fallback_theme)
    envelope = parse_envelope(raw)
    if envelope is None:
        logger.warning("Stored document is not a JSON object; starting from a fresh state")
        return create_default_state(fallback_theme)
    return migrate_state(envelope.state, fallback_theme, now=now)


def save_state(store: Store, state: AppState) -> bool:
    """Persist *state*. Best effort: returns False on failure instead of raising."""
    try:
        store.write(serialize_state(state))
    except PersistenceError as e:
        logger.warning("Could not save state: %s", e)
        return False
    logger.debug("State saved (%d tasks)", len(state.tasks))
    return True


def load_persisted_theme(store: Store, fallback: str | None = None) -> str:
    """Theme stored in the document, for bootstrapping before a full load."""
    return load_state(store, fallback_theme=fallback).settings.theme

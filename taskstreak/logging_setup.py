"""Logging configuration for TaskStreak entry points."""

from __future__ import annotations

import logging
import sys
from pathlib import Path


def setup_logging(
    *,
    log_dir: str | Path | None = None,
    level: int | str = logging.INFO,
) -> None:
    """Configure root logging: stderr handler, plus a file handler when *log_dir* is given.

    Call once from an entry point, before the first log call.
    """
    root = logging.getLogger()
    root.setLevel(level)

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setFormatter(fmt)
    root.addHandler(ch)

    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(log_dir / "taskstreak.log"), encoding="utf-8")
        fh.setFormatter(fmt)
        root.addHandler(fh)

    logging.captureWarnings(True)

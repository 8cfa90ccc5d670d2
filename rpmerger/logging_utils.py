from __future__ import annotations

import sys
from typing import TextIO

# Levels a quiet run still prints.
ALWAYS_SHOWN = frozenset({"warn", "error"})

_quiet = False


def set_quiet(quiet: bool) -> None:
    """Hide informational output; warnings and errors still go to stderr."""

    global _quiet
    _quiet = quiet


def _stream_for(level: str) -> TextIO | None:
    if level in ALWAYS_SHOWN:
        return sys.stderr
    if _quiet:
        return None
    return sys.stdout


def log(message: str, level: str = "info", indent: int = 0) -> None:
    level = (level or "info").strip().lower() or "info"
    stream = _stream_for(level)
    if stream is None:
        return
    print(f"{' ' * max(indent, 0)}[{level}] {message}", file=stream)


def log_info(message: str, indent: int = 0) -> None:
    log(message, "info", indent)


def log_warn(message: str, indent: int = 0) -> None:
    log(message, "warn", indent)


def log_error(message: str, indent: int = 0) -> None:
    log(message, "error", indent)


def log_conflict(message: str, indent: int = 0) -> None:
    log(message, "conflict", indent)


def log_ok(message: str, indent: int = 0) -> None:
    log(message, "ok", indent)


def log_progress(label: str, percent: float, indent: int = 2) -> None:
    log(f"{label} {min(max(percent, 0), 100):.0f}%", "progress", indent)

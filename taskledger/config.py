"""
taskledger configuration: all environment variables in one place.

Read from environment at import time. Constructor arguments on DataStore
override these values for a single store.
"""

from __future__ import annotations

import os


def _env_bool(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: str) -> int:
    raw = os.environ.get(name, default)
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}") from None


class Settings:
    """Store settings from environment variables."""

    # Undo / redo
    MAX_UNDO_HISTORY: int = _env_int("TASKLEDGER_MAX_UNDO_HISTORY", "50")

    # Treat a dangling ancestor chain as an invariant violation in can_be_parent_of
    STRICT_PARENT_CHECK: bool = _env_bool("TASKLEDGER_STRICT_PARENT_CHECK", "false")

    # Items
    DEFAULT_COLOR: str = os.environ.get("TASKLEDGER_DEFAULT_COLOR", "#888888")


# Singleton instance
settings = Settings()

if settings.MAX_UNDO_HISTORY < 0:
    raise RuntimeError("TASKLEDGER_MAX_UNDO_HISTORY must not be negative")

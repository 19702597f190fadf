"""Project-wide settings and shared constants.

All environment-dependent values are read **lazily** on first access
(not at import time) and cached via ``functools.lru_cache``.  Call
``reset()`` in tests to clear the cache after changing env vars;
no ``importlib.reload`` required.
"""

from __future__ import annotations

import functools
import os
from pathlib import Path
from typing import TYPE_CHECKING

from ary import paths

_TRUTHY = {"1", "true", "yes", "on"}


def _int_env(name: str, default: int, minimum: int = 0) -> int:
    """Parse integer environment values with a safe fallback."""
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value >= minimum else default


def _bool_env(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


def _path_env(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    return Path(raw) if raw else default


# ── Lazy settings cache ──────────────────────────────────────────────────

@functools.lru_cache(maxsize=1)
def _load_settings() -> dict[str, object]:
    """Read env-dependent settings once and cache the result."""
    return {
        "MIN_ENTRIES_TO_FINISH": _int_env("ARY_MIN_ENTRIES_TO_FINISH", 5, minimum=1),
        "GRAPH_PATH": _path_env("ARY_GRAPH_PATH", paths.GRAPH_PATH),
        "PROFILES_PATH": _path_env("ARY_PROFILES_PATH", paths.PROFILES_PATH),
        "EXPORT_SESSIONS": _bool_env("ARY_EXPORT_SESSIONS"),
        "EXPORT_DIR": _path_env("ARY_EXPORT_DIR", paths.SESSIONS_DIR),
        "MAX_MESSAGE_CHARS": _int_env("ARY_MAX_MESSAGE_CHARS", 4000, minimum=1),
    }


def reset() -> None:
    """Clear the cached settings; call from tests after monkeypatching env vars."""
    _load_settings.cache_clear()


# Type declarations for static analysis (not set at runtime so
# ``__getattr__`` is invoked on attribute access).
if TYPE_CHECKING:
    MIN_ENTRIES_TO_FINISH: int
    GRAPH_PATH: Path
    PROFILES_PATH: Path
    EXPORT_SESSIONS: bool
    EXPORT_DIR: Path
    MAX_MESSAGE_CHARS: int


def __getattr__(name: str) -> object:
    """PEP 562 module-level ``__getattr__``: provides lazy env reads."""
    settings = _load_settings()
    if name in settings:
        return settings[name]
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

"""Environment-driven settings shared by the history manager and telemetry."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

ENV_PREFIX = "UNDO_ENGINE_"
DEFAULT_HISTORY_LIMIT = 100
DEFAULT_LOGGER_NAME = "undo_engine"
DEFAULT_BUFFER_SIZE = 2048

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True, slots=True)
class RuntimeSettings:
    """Resolved configuration for one process (or one test)."""

    history_limit: int = DEFAULT_HISTORY_LIMIT
    logger_name: str = DEFAULT_LOGGER_NAME
    log_level: str = "INFO"
    log_file: str = ""
    log_json: bool = False
    console: bool = True
    colored: bool = True
    buffered: bool = False
    buffer_size: int = DEFAULT_BUFFER_SIZE

    def __post_init__(self) -> None:
        if self.history_limit < 1:
            raise ValueError("history_limit must be positive")
        if self.buffer_size < 1:
            raise ValueError("buffer_size must be positive")


def _lookup(environ: Mapping[str, str], name: str) -> Optional[str]:
    return environ.get(f"{ENV_PREFIX}{name}")


def _flag(environ: Mapping[str, str], name: str, default: bool) -> bool:
    raw = _lookup(environ, name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


def _integer(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = _lookup(environ, name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{ENV_PREFIX}{name} must be an integer, got {raw!r}") from exc


def load_settings(environ: Optional[Mapping[str, str]] = None) -> RuntimeSettings:
    """Build settings from ``environ`` (defaults to ``os.environ``)."""

    env = os.environ if environ is None else environ
    return RuntimeSettings(
        history_limit=_integer(env, "HISTORY_LIMIT", DEFAULT_HISTORY_LIMIT),
        logger_name=_lookup(env, "LOGGER") or DEFAULT_LOGGER_NAME,
        log_level=(_lookup(env, "LOG_LEVEL") or "INFO").upper(),
        log_file=_lookup(env, "LOG_FILE") or "",
        log_json=_flag(env, "LOG_JSON", False),
        console=not _flag(env, "DISABLE_CONSOLE", False),
        colored=not _flag(env, "NO_COLOR", False),
        buffered=_flag(env, "LOG_BUFFERED", False),
        buffer_size=_integer(env, "LOG_BUFFER_SIZE", DEFAULT_BUFFER_SIZE),
    )


_ACTIVE: Optional[RuntimeSettings] = None


def current_settings() -> RuntimeSettings:
    """Return the active settings, reading the environment on first use."""

    global _ACTIVE
    if _ACTIVE is None:
        _ACTIVE = load_settings()
    return _ACTIVE


def use_settings(settings: Optional[RuntimeSettings]) -> None:
    """Install ``settings``; ``None`` re-reads the environment on next access."""

    global _ACTIVE
    _ACTIVE = settings


__all__ = [
    "DEFAULT_HISTORY_LIMIT",
    "DEFAULT_LOGGER_NAME",
    "ENV_PREFIX",
    "RuntimeSettings",
    "current_settings",
    "load_settings",
    "use_settings",
]

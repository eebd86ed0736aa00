"""Configuration loaded from environment variables.

Import :data:`settings` and use its attributes instead of calling
``os.getenv`` directly.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Callable


class ConfigError(RuntimeError):
    """Raised when configuration is missing or invalid."""


def _get_env(
    name: str,
    default: Any | None = None,
    cast: Callable[[str], Any] = str,
) -> Any:
    """Read and cast an environment variable."""
    value = os.getenv(name, None)
    if value is None or value == "":
        return default
    try:
        return cast(value)
    except Exception as exc:
        raise ConfigError(f"Invalid value for {name!r}: {exc}") from exc


def _bool(v: str) -> bool:
    value = v.strip().lower()
    if value in {"1", "true", "yes"}:
        return True
    if value in {"0", "false", "no"}:
        return False
    raise ValueError(f"expected a boolean, got {v!r}")


def _journal_mode(v: str) -> str:
    mode = v.strip().upper()
    if mode not in {"DELETE", "TRUNCATE", "PERSIST", "MEMORY", "WAL", "OFF"}:
        raise ValueError(f"unknown journal mode {v!r}")
    return mode


def _non_negative(v: str) -> int:
    n = int(v)
    if n < 0:
        raise ValueError("must be >= 0")
    return n


@dataclass(frozen=True)
class Settings:
    """Container for environment configuration."""

    db_path: str = field(
        default_factory=lambda: _get_env("LEXIVEC_DB_PATH", "vector_store.db")
    )
    reset_on_open: bool = field(
        default_factory=lambda: _get_env("LEXIVEC_RESET_ON_OPEN", True, _bool)
    )
    journal_mode: str = field(
        default_factory=lambda: _get_env("LEXIVEC_JOURNAL_MODE", "WAL", _journal_mode)
    )
    log_level: str = field(
        default_factory=lambda: _get_env("LEXIVEC_LOG_LEVEL", "INFO", str.upper)
    )
    default_top_n: int = field(
        default_factory=lambda: _get_env("LEXIVEC_TOP_N", 3, _non_negative)
    )


settings = Settings()

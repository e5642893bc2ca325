"""logweave: build named loggers from declarative appender/level configuration."""

from __future__ import annotations

from pathlib import Path

from logweave.config import LoggerConfig, LogweaveConfig
from logweave.core.backend import CoreLogger
from logweave.core.levels import AtomicLevel, parse_level
from logweave.core.registry import Registry, new
from logweave.errors import LogweaveError


def load(path: str | Path) -> Registry:
    """Build a Registry from a TOML config file (env overrides applied)."""
    return new(LogweaveConfig.load(path))


__all__ = [
    "AtomicLevel",
    "CoreLogger",
    "LoggerConfig",
    "LogweaveConfig",
    "LogweaveError",
    "Registry",
    "load",
    "new",
    "parse_level",
]

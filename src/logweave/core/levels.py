"""Severity levels: parse level names into adjustable thresholds."""

from __future__ import annotations

import logging

from logweave.errors import InvalidLevelError

# Text vocabulary -> stdlib level number. The empty string means info.
_LEVELS: dict[str, int] = {
    "": logging.INFO,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "dpanic": logging.CRITICAL,
    "panic": logging.CRITICAL,
    "critical": logging.CRITICAL,
    "fatal": logging.CRITICAL,
}

_CANONICAL_NAMES: dict[int, str] = {
    logging.DEBUG: "debug",
    logging.INFO: "info",
    logging.WARNING: "warn",
    logging.ERROR: "error",
    logging.CRITICAL: "critical",
}


def level_name(levelno: int) -> str:
    """Return the canonical lower-case name for a stdlib level number."""
    name = _CANONICAL_NAMES.get(levelno)
    if name is None:
        return logging.getLevelName(levelno).lower()
    return name


def _to_levelno(name: str) -> int:
    try:
        return _LEVELS[name.strip().lower()]
    except KeyError:
        raise InvalidLevelError(name) from None


class AtomicLevel:
    """A severity threshold that can be changed while loggers use it.

    Every core built from the same AtomicLevel sees a new threshold on its
    next enabled check.
    """

    __slots__ = ("_levelno",)

    def __init__(self, levelno: int = logging.INFO):
        self._levelno = levelno

    @property
    def level(self) -> int:
        return self._levelno

    @property
    def name(self) -> str:
        return level_name(self._levelno)

    def set_level(self, level: int | str) -> None:
        if isinstance(level, str):
            level = _to_levelno(level)
        self._levelno = level

    def enabled(self, levelno: int) -> bool:
        return levelno >= self._levelno

    def __repr__(self) -> str:
        return f"AtomicLevel({self.name})"


def parse_level(name: str) -> AtomicLevel:
    """Parse a severity name into a new AtomicLevel.

    Raises:
        InvalidLevelError: if ``name`` is not a recognized severity.
    """
    if not isinstance(name, str):
        raise InvalidLevelError(str(name))
    return AtomicLevel(_to_levelno(name))

"""Logging cores and the logger handle built on top of them.

A core decides whether a level is enabled and delivers records:

- ``LevelCore`` gates one appender with one AtomicLevel.
- ``TeeCore`` fans a record out to several cores, each applying its own gate.

``CoreLogger`` is a ``logging.Logger`` that asks its core instead of the
stdlib hierarchy. It is never registered with ``logging.getLogger``'s
manager, so building one touches no global state.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from logweave.core.appender import Appender
from logweave.core.levels import AtomicLevel


class LevelCore:
    """One appender gated by one level."""

    __slots__ = ("appender", "level")

    def __init__(self, appender: Appender, level: AtomicLevel):
        self.appender = appender
        self.level = level

    def enabled(self, levelno: int) -> bool:
        return self.level.enabled(levelno)

    def write(self, record: logging.LogRecord) -> None:
        if self.level.enabled(record.levelno):
            self.appender.writer.handle(record)

    def sync(self) -> None:
        self.appender.flush()


class TeeCore:
    """Duplicate each record to every wrapped core whose gate accepts it."""

    __slots__ = ("cores",)

    def __init__(self, cores: Iterable[LevelCore]):
        self.cores = tuple(cores)

    def enabled(self, levelno: int) -> bool:
        return any(core.enabled(levelno) for core in self.cores)

    def write(self, record: logging.LogRecord) -> None:
        for core in self.cores:
            core.write(record)

    def sync(self) -> None:
        for core in self.cores:
            core.sync()

    @property
    def appenders(self) -> tuple[Appender, ...]:
        return tuple(core.appender for core in self.cores)


class CoreLogger(logging.Logger):
    """A named logger handle backed by a TeeCore.

    Supports the usual ``debug``/``info``/``warning``/``error``/
    ``critical``/``exception`` calls; structured fields go through
    ``extra=``. Handlers added with ``addHandler`` are ignored.

    ``setLevel`` adjusts the AtomicLevel of every core, so it also moves any
    other handle sharing those levels (children, and implicit loggers that
    share the root level).
    """

    def __init__(self, name: str, core: TeeCore):
        super().__init__(name)
        self.core = core
        self.propagate = False

    def getChild(self, suffix: str) -> CoreLogger:
        """Return a handle named ``<name>.<suffix>`` writing through the same core."""
        return CoreLogger(f"{self.name}.{suffix}", self.core)

    def setLevel(self, level: int | str) -> None:
        for core_level in {id(c.level): c.level for c in self.core.cores}.values():
            core_level.set_level(level)

    def isEnabledFor(self, level: int) -> bool:
        if self.disabled or self.manager.disable >= level:
            return False
        return self.core.enabled(level)

    def callHandlers(self, record: logging.LogRecord) -> None:
        self.core.write(record)

    @property
    def appenders(self) -> tuple[Appender, ...]:
        return self.core.appenders

    def __repr__(self) -> str:
        names = ", ".join(a.name for a in self.appenders)
        return f"<CoreLogger {self.name} [{names}]>"

"""Registry: appender lookup, root fallback, and the named-logger cache.

Build order (see ``Registry.from_config``):

1. Appenders: create every configured appender and register it by name
2. Root: resolve the default level and appender set
3. Loggers: build each declared logger, rejecting duplicate names

After that, ``get_logger`` serves declared loggers and lazily builds a
root-configured logger for any other name.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass

from logweave.config import AppenderConfig, LoggerConfig, LogweaveConfig
from logweave.core.appender import Appender, create_appender
from logweave.core.backend import CoreLogger, LevelCore, TeeCore
from logweave.core.levels import AtomicLevel, parse_level
from logweave.errors import (
    AppenderNotFoundError,
    DuplicateAppenderError,
    DuplicateLoggerError,
    EmptyNameError,
    NilAppenderError,
    NoAppendersError,
)

logger = logging.getLogger(__name__)


class AppenderRegistry:
    """Name -> Appender mapping, filled once at startup and read-only after."""

    def __init__(self) -> None:
        self._appenders: dict[str, Appender] = {}

    @classmethod
    def from_config(cls, appenders: Mapping[str, Sequence[AppenderConfig]]) -> AppenderRegistry:
        """Create and register every appender block, grouped by type tag.

        The first failure aborts; no partially filled registry is returned.
        """
        registry = cls()
        for tag, blocks in appenders.items():
            for block in blocks:
                registry.register(block.name, create_appender(tag, block))
        return registry

    def register(self, name: str, appender: Appender | None) -> None:
        if not name:
            raise EmptyNameError()
        if appender is None:
            raise NilAppenderError()
        if name in self._appenders:
            raise DuplicateAppenderError(name)
        self._appenders[name] = appender
        logger.debug("Registered appender %r", name)

    def lookup(self, name: str) -> Appender:
        try:
            return self._appenders[name]
        except KeyError:
            raise AppenderNotFoundError(name) from None

    def resolve(self, names: Iterable[str]) -> dict[str, Appender]:
        """Look up each distinct name, in first-seen order. All or nothing."""
        return {name: self.lookup(name) for name in dict.fromkeys(names)}

    def names(self) -> list[str]:
        return list(self._appenders)

    def __contains__(self, name: object) -> bool:
        return name in self._appenders

    def __iter__(self) -> Iterator[Appender]:
        return iter(self._appenders.values())

    def __len__(self) -> int:
        return len(self._appenders)


@dataclass(frozen=True)
class RootResolution:
    """The resolved root logger settings."""

    level: AtomicLevel
    level_name: str
    appenders: Mapping[str, Appender]
    appender_refs: tuple[str, ...]


def build_root(level_name: str, appender_refs: Iterable[str], appenders: AppenderRegistry) -> RootResolution:
    """Resolve the root level and appender set.

    Raises:
        InvalidLevelError: ``level_name`` is not a known severity.
        AppenderNotFoundError: a referenced appender is not registered.
    """
    level = parse_level(level_name)
    resolved = appenders.resolve(appender_refs)
    return RootResolution(
        level=level,
        level_name=level_name,
        appenders=resolved,
        appender_refs=tuple(resolved),
    )


def _new_logger(name: str, level: AtomicLevel, appenders: Iterable[Appender]) -> CoreLogger:
    core = TeeCore(LevelCore(appender, level) for appender in appenders)
    return CoreLogger(name, core)


def build_logger(decl: LoggerConfig, root: RootResolution, appenders: AppenderRegistry) -> CoreLogger:
    """Build the handle for a declared logger.

    An empty level or an empty appender_refs list falls back to the root's
    value as a whole; a non-empty list is never merged with root's.

    Raises:
        InvalidLevelError: the effective level is not a known severity.
        AppenderNotFoundError: a referenced appender is not registered.
        NoAppendersError: the logger resolves to no appenders.
    """
    level_name = decl.level or root.level_name
    refs = decl.appender_refs or root.appender_refs

    level = parse_level(level_name)
    resolved = appenders.resolve(refs)
    if not resolved:
        raise NoAppendersError(decl.name)

    logger.debug("Built logger %r at %s -> %s", decl.name, level.name, list(resolved))
    return _new_logger(decl.name, level, resolved.values())


def build_implicit_logger(name: str, root: RootResolution) -> CoreLogger:
    """Build a root-configured handle for an undeclared name. Cannot fail."""
    return _new_logger(name, root.level, root.appenders.values())


class Registry:
    """Serves logger handles by name.

    Declared loggers are built up front. Any other name gets a handle built
    from the root configuration on first request; concurrent first requests
    may each build a candidate, but only one is published and every caller
    receives that one.
    """

    def __init__(self, appenders: AppenderRegistry, root: RootResolution):
        self._appenders = appenders
        self._root = root
        self._loggers: dict[str, CoreLogger] = {}
        self._publish_lock = threading.Lock()

    @classmethod
    def from_config(cls, config: LogweaveConfig) -> Registry:
        """Run the full build sequence, raising the first error encountered."""
        appenders = AppenderRegistry.from_config(config.appenders)

        root_config = config.loggers.root
        root = build_root(root_config.level, root_config.appender_refs, appenders)

        registry = cls(appenders, root)
        for decl in config.loggers.logger:
            registry._declare(decl)

        logger.debug(
            "Registry ready: %d appender(s), %d declared logger(s)",
            len(appenders),
            len(config.loggers.logger),
        )
        return registry

    @property
    def appenders(self) -> AppenderRegistry:
        return self._appenders

    @property
    def root(self) -> RootResolution:
        return self._root

    @property
    def loggers(self) -> list[str]:
        """Names of every published logger, declared or lazily created."""
        with self._publish_lock:
            return list(self._loggers)

    def _declare(self, decl: LoggerConfig) -> CoreLogger:
        """Build and publish a declared logger. Startup only.

        Raises:
            DuplicateLoggerError: a logger with this name is already published.
        """
        candidate = build_logger(decl, self._root, self._appenders)
        published, loaded = self._load_or_store(decl.name, candidate)
        if loaded:
            raise DuplicateLoggerError(decl.name)
        return published

    def get_logger(self, name: str) -> CoreLogger:
        """Return the handle for ``name``, creating it from root defaults if needed."""
        existing = self._loggers.get(name)
        if existing is not None:
            return existing

        candidate = build_implicit_logger(name, self._root)
        published, loaded = self._load_or_store(name, candidate)
        if loaded:
            logger.debug("Discarded duplicate candidate for logger %r", name)
        return published

    def _load_or_store(self, name: str, candidate: CoreLogger) -> tuple[CoreLogger, bool]:
        """Publish ``candidate`` unless ``name`` is taken.

        Returns the published handle and whether it was already present.
        Only the check-and-insert runs under the lock.
        """
        with self._publish_lock:
            existing = self._loggers.get(name)
            if existing is not None:
                return existing, True
            self._loggers[name] = candidate
            return candidate, False

    def sync(self) -> None:
        """Flush every appender."""
        for appender in self._appenders:
            appender.flush()

    def close(self) -> None:
        """Flush and close every appender."""
        for appender in self._appenders:
            appender.close()

    def __contains__(self, name: object) -> bool:
        return name in self._loggers

    def __enter__(self) -> Registry:
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def new(config: LogweaveConfig | Mapping) -> Registry:
    """Build a Registry from a typed config or a raw mapping.

    Raises:
        LogweaveError: the first configuration error encountered.
    """
    if not isinstance(config, LogweaveConfig):
        config = LogweaveConfig.from_dict(config)
    return Registry.from_config(config)

"""Exception hierarchy for logweave.

Every error raised while building a registry derives from LogweaveError, so
callers of ``logweave.new`` can catch one type.
"""

from __future__ import annotations


class LogweaveError(Exception):
    """Base class for all logweave configuration errors."""


class ConfigDecodeError(LogweaveError, ValueError):
    """The configuration structure could not be decoded."""


class UnknownAppenderTypeError(ConfigDecodeError):
    """No appender factory is registered for a type tag."""

    def __init__(self, tag: str):
        super().__init__(f"unknown appender type {tag!r}")
        self.tag = tag


class AppenderConfigError(ConfigDecodeError):
    """An appender block has invalid options for its type."""


class InvalidLevelError(LogweaveError, ValueError):
    """A severity name is not part of the level vocabulary."""

    def __init__(self, level: str):
        super().__init__(f"unrecognized level {level!r}")
        self.level = level


class EmptyNameError(LogweaveError, ValueError):
    def __init__(self) -> None:
        super().__init__("name should not be empty")


class NilAppenderError(LogweaveError, ValueError):
    def __init__(self) -> None:
        super().__init__("appender should not be None")


class DuplicateAppenderError(LogweaveError, ValueError):
    def __init__(self, name: str):
        super().__init__(f"duplicated appender name {name!r}")
        self.name = name


class AppenderNotFoundError(LogweaveError, LookupError):
    def __init__(self, name: str):
        super().__init__(f"not found appender {name!r}")
        self.name = name


class NoAppendersError(LogweaveError, ValueError):
    def __init__(self, logger_name: str):
        super().__init__(f"logger {logger_name!r} has no appenders")
        self.logger_name = logger_name


class DuplicateLoggerError(LogweaveError, ValueError):
    def __init__(self, name: str):
        super().__init__(f"duplicated logger {name!r}")
        self.name = name

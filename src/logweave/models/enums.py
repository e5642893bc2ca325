"""Enums used across logweave."""

from __future__ import annotations

from enum import Enum


class AppenderType(str, Enum):
    """Built-in appender type tags."""

    CONSOLE = "console"
    FILE = "file"


class EncoderType(str, Enum):
    """How an appender renders a record."""

    CONSOLE = "console"
    JSON = "json"


class ConsoleTarget(str, Enum):
    """Standard stream a console appender writes to."""

    STDOUT = "stdout"
    STDERR = "stderr"

"""Logging configuration for logweave's own diagnostics.

All logweave.* module loggers inherit from the "logweave" stdlib logger. Its
handlers are ordinary logweave appenders: a stderr console appender, plus a
file appender when ``diagnostics.file`` is set.
"""

from __future__ import annotations

import logging

from logweave.config import AppenderConfig, DiagnosticsConfig
from logweave.core.appender import create_appender
from logweave.core.levels import parse_level
from logweave.models.enums import AppenderType, ConsoleTarget


def setup_logging(diagnostics: DiagnosticsConfig, *, verbose: bool = False) -> None:
    """Configure the logweave logger hierarchy.

    Args:
        diagnostics: Diagnostics settings from LogweaveConfig.
        verbose: If True, overrides level to DEBUG.

    Raises:
        InvalidLevelError: ``diagnostics.level`` is not a known severity.
        AppenderConfigError: the diagnostics encoder is unknown.
    """
    root_logger = logging.getLogger("logweave")

    # Repeated calls keep the first configuration
    if root_logger.handlers:
        return

    level = logging.DEBUG if verbose else parse_level(diagnostics.level).level
    options = {"encoder": diagnostics.encoder, "format": diagnostics.format}

    blocks = [(AppenderType.CONSOLE, {"target": ConsoleTarget.STDERR.value})]
    if diagnostics.file:
        blocks.append((AppenderType.FILE, {"path": diagnostics.file}))

    for tag, extra in blocks:
        block = AppenderConfig(name=f"diagnostics-{tag.value}", options={**options, **extra})
        appender = create_appender(tag.value, block)
        appender.writer.setLevel(level)
        root_logger.addHandler(appender.writer)
    root_logger.setLevel(level)

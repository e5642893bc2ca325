"""Appenders: named output sinks bound to an encoder, plus the factory table.

An appender pairs a ``logging.Handler`` (the writer) with the
``logging.Formatter`` (the encoder) it renders records with. Appender types
are looked up by tag in an open table; ``console`` and ``file`` are built in.
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from logweave.config import DEFAULT_FORMAT, AppenderConfig
from logweave.core.levels import level_name
from logweave.errors import AppenderConfigError, UnknownAppenderTypeError
from logweave.models.enums import AppenderType, ConsoleTarget, EncoderType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Appender:
    """An output destination and the encoder bound to it."""

    name: str
    type: str
    encoder: logging.Formatter
    writer: logging.Handler

    def flush(self) -> None:
        self.writer.flush()

    def close(self) -> None:
        self.writer.flush()
        self.writer.close()


AppenderFactory = Callable[[AppenderConfig], Appender]

_FACTORIES: dict[str, AppenderFactory] = {}


def register_appender_type(tag: str, factory: AppenderFactory) -> None:
    """Make ``factory`` the constructor for appender blocks tagged ``tag``.

    Registering a tag twice replaces the earlier factory.
    """
    _FACTORIES[tag] = factory


def appender_types() -> list[str]:
    return sorted(_FACTORIES)


def create_appender(tag: str, config: AppenderConfig) -> Appender:
    """Build an appender of type ``tag`` from its config block.

    Raises:
        UnknownAppenderTypeError: no factory is registered for ``tag``.
        AppenderConfigError: the block's options are invalid for the type.
    """
    factory = _FACTORIES.get(tag)
    if factory is None:
        raise UnknownAppenderTypeError(tag)
    appender = factory(config)
    logger.debug("Created %s appender %r", tag, config.name)
    return appender


# ── Encoders ─────────────────────────────────────────────────────

_RESERVED_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Render each record as a single-line JSON object.

    Fields passed through ``extra=`` are copied into the object as-is,
    except ones that would replace a built-in key (``ts``, ``level``, ...);
    values JSON cannot encode are stringified.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, object] = {
            "ts": self.formatTime(record, self.datefmt),
            "level": level_name(record.levelno),
            "logger": record.name,
            "caller": f"{record.filename}:{record.lineno}",
            "msg": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                payload.setdefault(key, value)

        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        elif record.exc_text:
            payload["exc"] = record.exc_text
        if record.stack_info:
            payload["stack"] = self.formatStack(record.stack_info)

        return json.dumps(payload, default=str, ensure_ascii=False)


def _option(config: AppenderConfig, key: str, default: str | None = None) -> str | None:
    value = config.get(key, default)
    if value is not None and not isinstance(value, str):
        raise AppenderConfigError(f"appender {config.name!r}: {key!r} must be a string")
    return value


def build_encoder(config: AppenderConfig) -> logging.Formatter:
    """Build the encoder named by the block's ``encoder`` option."""
    raw = _option(config, "encoder", EncoderType.CONSOLE.value)
    try:
        kind = EncoderType(raw)
    except ValueError:
        raise AppenderConfigError(f"appender {config.name!r}: unknown encoder {raw!r}") from None

    datefmt = _option(config, "datefmt")
    if kind is EncoderType.JSON:
        return JsonFormatter(datefmt=datefmt)
    return logging.Formatter(_option(config, "format", DEFAULT_FORMAT), datefmt)


def _bind(config: AppenderConfig, tag: str, writer: logging.Handler) -> Appender:
    encoder = build_encoder(config)
    writer.setFormatter(encoder)
    return Appender(name=config.name, type=tag, encoder=encoder, writer=writer)


# ── Built-in appender types ──────────────────────────────────────


def console_appender(config: AppenderConfig) -> Appender:
    """Write to stdout or stderr (option ``target``, default stderr)."""
    raw = _option(config, "target", ConsoleTarget.STDERR.value)
    try:
        target = ConsoleTarget(raw)
    except ValueError:
        raise AppenderConfigError(f"appender {config.name!r}: unknown console target {raw!r}") from None

    stream = sys.stdout if target is ConsoleTarget.STDOUT else sys.stderr
    return _bind(config, AppenderType.CONSOLE.value, logging.StreamHandler(stream))


def file_appender(config: AppenderConfig) -> Appender:
    """Append to the file at option ``path``; the file is opened on first write."""
    path = _option(config, "path")
    if not path:
        raise AppenderConfigError(f"appender {config.name!r}: 'path' is required")
    mode = _option(config, "mode", "a")
    encoding = _option(config, "encoding", "utf-8")

    file_path = Path(path).expanduser()
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise AppenderConfigError(f"appender {config.name!r}: {exc}") from exc
    writer = logging.FileHandler(file_path, mode=mode, encoding=encoding, delay=True)
    return _bind(config, AppenderType.FILE.value, writer)


register_appender_type(AppenderType.CONSOLE.value, console_appender)
register_appender_type(AppenderType.FILE.value, file_appender)

"""Centralized configuration for logweave.

Loads from a TOML file -> env vars -> defaults.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from pathlib import Path

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:
    import tomli as tomllib  # type: ignore[no-redef]

from logweave.errors import ConfigDecodeError

DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DEFAULT_APPENDER_NAME = "console"


@dataclass(frozen=True)
class AppenderConfig:
    """One appender block: its registry name plus type-specific options."""

    name: str = ""
    options: Mapping[str, object] = field(default_factory=dict)

    def get(self, key: str, default: object = None) -> object:
        return self.options.get(key, default)


@dataclass(frozen=True)
class RootLoggerConfig:
    """Defaults applied to loggers that omit a level or appender refs."""

    level: str = "info"
    appender_refs: tuple[str, ...] = (DEFAULT_APPENDER_NAME,)


@dataclass(frozen=True)
class LoggerConfig:
    """A named logger declaration."""

    name: str
    level: str = ""
    appender_refs: tuple[str, ...] = ()


@dataclass(frozen=True)
class LoggersConfig:
    """The root defaults plus every declared logger, in file order."""

    root: RootLoggerConfig = RootLoggerConfig()
    logger: tuple[LoggerConfig, ...] = ()


@dataclass(frozen=True)
class DiagnosticsConfig:
    """Logging of logweave's own activity (the ``logweave`` stdlib logger)."""

    level: str = "WARNING"
    format: str = DEFAULT_FORMAT
    encoder: str = "console"
    file: str = ""


def _default_appenders() -> dict[str, tuple[AppenderConfig, ...]]:
    return {"console": (AppenderConfig(name=DEFAULT_APPENDER_NAME),)}


@dataclass(frozen=True)
class LogweaveConfig:
    """Top-level logweave configuration.

    ``appenders`` maps an appender type tag to the ordered blocks of that type.
    """

    appenders: Mapping[str, tuple[AppenderConfig, ...]] = field(default_factory=_default_appenders)
    loggers: LoggersConfig = LoggersConfig()
    diagnostics: DiagnosticsConfig = DiagnosticsConfig()

    @classmethod
    def from_dict(cls, data: Mapping) -> LogweaveConfig:
        """Decode a raw mapping (e.g. parsed TOML) into a typed config.

        Sections that are absent keep their defaults.

        Raises:
            ConfigDecodeError: if a section has the wrong shape.
        """
        if not isinstance(data, Mapping):
            raise ConfigDecodeError(f"configuration must be a table, got {type(data).__name__}")

        kwargs: dict = {}
        if "appenders" in data:
            kwargs["appenders"] = _decode_appenders(data["appenders"])
        if "loggers" in data:
            kwargs["loggers"] = _decode_loggers(data["loggers"])
        if "diagnostics" in data:
            kwargs["diagnostics"] = _decode_diagnostics(data["diagnostics"])
        return cls(**kwargs)

    @classmethod
    def load(cls, path: str | Path) -> LogweaveConfig:
        """Load config from a TOML file, env vars, and defaults.

        Priority: env vars > TOML file > defaults. A missing file yields the
        defaults.
        """
        config_file = Path(path)

        toml_data: dict = {}
        if config_file.exists():
            try:
                with open(config_file, "rb") as f:
                    toml_data = tomllib.load(f)
            except tomllib.TOMLDecodeError as exc:
                raise ConfigDecodeError(f"{config_file}: {exc}") from exc

        return cls.from_dict(toml_data).with_env_overrides()

    def with_env_overrides(self) -> LogweaveConfig:
        """Return a copy with LOGWEAVE_ROOT_* and LOGWEAVE_DIAGNOSTICS_* applied."""
        root = _apply_env(self.loggers.root, "LOGWEAVE_ROOT")
        return replace(
            self,
            loggers=replace(self.loggers, root=root),
            diagnostics=_apply_env(self.diagnostics, "LOGWEAVE_DIAGNOSTICS"),
        )


# ── Decoding ─────────────────────────────────────────────────────


def _table(value: object, where: str) -> Mapping:
    if not isinstance(value, Mapping):
        raise ConfigDecodeError(f"{where}: expected a table, got {type(value).__name__}")
    return value


def _string(value: object, where: str) -> str:
    if not isinstance(value, str):
        raise ConfigDecodeError(f"{where}: expected a string, got {type(value).__name__}")
    return value


def _string_list(value: object, where: str) -> tuple[str, ...]:
    if isinstance(value, str) or not isinstance(value, (list, tuple)):
        raise ConfigDecodeError(f"{where}: expected a list of strings, got {type(value).__name__}")
    return tuple(_string(item, f"{where}[{i}]") for i, item in enumerate(value))


def _decode_appenders(value: object) -> dict[str, tuple[AppenderConfig, ...]]:
    groups = _table(value, "appenders")
    appenders: dict[str, tuple[AppenderConfig, ...]] = {}
    for tag, blocks in groups.items():
        where = f"appenders.{tag}"
        if isinstance(blocks, Mapping):
            blocks = [blocks]
        if not isinstance(blocks, (list, tuple)):
            raise ConfigDecodeError(f"{where}: expected a list of tables, got {type(blocks).__name__}")
        decoded = []
        for i, block in enumerate(blocks):
            block = _table(block, f"{where}[{i}]")
            name = _string(block.get("name", ""), f"{where}[{i}].name")
            options = {k: v for k, v in block.items() if k != "name"}
            decoded.append(AppenderConfig(name=name, options=options))
        appenders[str(tag)] = tuple(decoded)
    return appenders


def _decode_loggers(value: object) -> LoggersConfig:
    section = _table(value, "loggers")

    root = RootLoggerConfig()
    if "root" in section:
        raw_root = _table(section["root"], "loggers.root")
        root = RootLoggerConfig(
            level=_string(raw_root.get("level", "info"), "loggers.root.level"),
            appender_refs=_string_list(raw_root.get("appender_refs", ()), "loggers.root.appender_refs"),
        )

    raw_loggers = section.get("logger", ())
    if not isinstance(raw_loggers, (list, tuple)):
        raise ConfigDecodeError(f"loggers.logger: expected a list of tables, got {type(raw_loggers).__name__}")

    declared = []
    for i, raw in enumerate(raw_loggers):
        where = f"loggers.logger[{i}]"
        raw = _table(raw, where)
        name = _string(raw.get("name", ""), f"{where}.name")
        if not name:
            raise ConfigDecodeError(f"{where}: logger name is required")
        declared.append(
            LoggerConfig(
                name=name,
                level=_string(raw.get("level", ""), f"{where}.level"),
                appender_refs=_string_list(raw.get("appender_refs", ()), f"{where}.appender_refs"),
            )
        )

    return LoggersConfig(root=root, logger=tuple(declared))


def _decode_diagnostics(value: object) -> DiagnosticsConfig:
    section = _table(value, "diagnostics")
    kwargs = {}
    for f in fields(DiagnosticsConfig):
        if f.name in section:
            kwargs[f.name] = _string(section[f.name], f"diagnostics.{f.name}")
    return DiagnosticsConfig(**kwargs)


# ── Env overrides ────────────────────────────────────────────────


def _apply_env(section, env_prefix: str):
    """Override a config section's fields from env vars named PREFIX_FIELD."""
    overrides = {}
    for f in fields(section):
        env_key = f"{env_prefix}_{f.name}".upper()
        env_val = os.environ.get(env_key)
        if env_val is not None:
            overrides[f.name] = _coerce(env_val, f.type)

    if not overrides:
        return section
    return replace(section, **overrides)


def _coerce(value: str, type_hint: str):
    """Coerce a string env var value to the appropriate type."""
    if type_hint.startswith("tuple"):
        return tuple(part.strip() for part in value.split(",") if part.strip())
    return value

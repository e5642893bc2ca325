"""Shared test fixtures for logweave."""

from __future__ import annotations

import logging

import pytest

from logweave.config import AppenderConfig
from logweave.core.appender import Appender, build_encoder, register_appender_type


class ListHandler(logging.Handler):
    """Handler that keeps every record it receives."""

    def __init__(self) -> None:
        super().__init__()
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)

    @property
    def messages(self) -> list[str]:
        return [r.getMessage() for r in self.records]


def memory_appender(config: AppenderConfig) -> Appender:
    encoder = build_encoder(config)
    writer = ListHandler()
    writer.setFormatter(encoder)
    return Appender(name=config.name, type="memory", encoder=encoder, writer=writer)


register_appender_type("memory", memory_appender)


def make_appender(name: str) -> Appender:
    return memory_appender(AppenderConfig(name=name))


@pytest.fixture(autouse=True)
def _reset_diagnostics_logger():
    """Drop handlers that setup_logging attached to the logweave logger."""
    yield
    root = logging.getLogger("logweave")
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(logging.NOTSET)


@pytest.fixture
def scenario_config() -> dict:
    """One memory appender "A", root at info, and "svc" declared at debug."""
    return {
        "appenders": {"memory": [{"name": "A"}]},
        "loggers": {
            "root": {"level": "info", "appender_refs": ["A"]},
            "logger": [{"name": "svc", "level": "debug", "appender_refs": ["A"]}],
        },
    }


@pytest.fixture
def config_file(tmp_path):
    """Write a TOML config with a JSON file appender and return its path."""
    log_path = tmp_path / "logs" / "app.log"
    path = tmp_path / "logweave.toml"
    path.write_text(
        "[[appenders.file]]\n"
        'name = "app"\n'
        f"path = {str(log_path)!r}\n"
        'encoder = "json"\n'
        "\n"
        "[loggers.root]\n"
        'level = "warn"\n'
        'appender_refs = ["app"]\n'
        "\n"
        "[[loggers.logger]]\n"
        'name = "svc"\n'
        'level = "debug"\n'
    )
    return path


@pytest.fixture
def appender_factory():
    """Return a callable building an in-memory appender by name."""
    return make_appender

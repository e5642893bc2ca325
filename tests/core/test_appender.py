"""Tests for the appender factory and encoders."""

from __future__ import annotations

import json
import logging
import sys

import pytest

from logweave.config import AppenderConfig
from logweave.core.appender import (
    Appender,
    JsonFormatter,
    appender_types,
    build_encoder,
    create_appender,
    register_appender_type,
)
from logweave.errors import AppenderConfigError, ConfigDecodeError, UnknownAppenderTypeError


def _record(msg: str = "hello %s", args: tuple = ("world",), level: int = logging.INFO, **extra) -> logging.LogRecord:
    record = logging.LogRecord("svc", level, __file__, 42, msg, args, None)
    record.__dict__.update(extra)
    return record


class TestFactoryTable:
    def test_builtin_types(self):
        assert {"console", "file"} <= set(appender_types())

    def test_unknown_type(self):
        with pytest.raises(UnknownAppenderTypeError) as exc_info:
            create_appender("kafka", AppenderConfig(name="k"))
        assert exc_info.value.tag == "kafka"
        assert isinstance(exc_info.value, ConfigDecodeError)

    def test_register_custom_type(self):
        seen = []

        def factory(config: AppenderConfig) -> Appender:
            seen.append(config.name)
            encoder = logging.Formatter()
            return Appender(name=config.name, type="null", encoder=encoder, writer=logging.NullHandler())

        register_appender_type("null", factory)
        appender = create_appender("null", AppenderConfig(name="n"))
        assert appender.name == "n"
        assert appender.type == "null"
        assert seen == ["n"]


class TestConsoleAppender:
    def test_defaults_to_stderr(self):
        appender = create_appender("console", AppenderConfig(name="c"))
        assert isinstance(appender.writer, logging.StreamHandler)
        assert appender.writer.stream is sys.stderr
        assert appender.writer.formatter is appender.encoder

    def test_stdout_target(self):
        appender = create_appender("console", AppenderConfig(name="c", options={"target": "stdout"}))
        assert appender.writer.stream is sys.stdout

    def test_bad_target(self):
        with pytest.raises(AppenderConfigError, match="console target"):
            create_appender("console", AppenderConfig(name="c", options={"target": "printer"}))

    def test_writes_formatted_record(self, capsys):
        appender = create_appender(
            "console",
            AppenderConfig(name="c", options={"target": "stdout", "format": "%(levelname)s|%(message)s"}),
        )
        appender.writer.handle(_record())
        assert capsys.readouterr().out == "INFO|hello world\n"


class TestFileAppender:
    def test_requires_path(self):
        with pytest.raises(AppenderConfigError, match="path"):
            create_appender("file", AppenderConfig(name="f"))

    def test_opens_lazily_and_creates_parents(self, tmp_path):
        log_path = tmp_path / "nested" / "dir" / "out.log"
        appender = create_appender("file", AppenderConfig(name="f", options={"path": str(log_path)}))
        assert log_path.parent.is_dir()
        assert not log_path.exists()

        appender.writer.handle(_record())
        appender.close()
        assert "hello world" in log_path.read_text()

    def test_non_string_option(self, tmp_path):
        with pytest.raises(AppenderConfigError, match="mode"):
            create_appender("file", AppenderConfig(name="f", options={"path": str(tmp_path / "x.log"), "mode": 1}))

    def test_parent_is_a_regular_file(self, tmp_path):
        blocker = tmp_path / "afile"
        blocker.write_text("")
        options = {"path": str(blocker / "sub" / "x.log")}
        with pytest.raises(AppenderConfigError, match="'f'"):
            create_appender("file", AppenderConfig(name="f", options=options))


class TestEncoders:
    def test_console_encoder_is_plain_formatter(self):
        encoder = build_encoder(AppenderConfig(name="c", options={"format": "%(message)s"}))
        assert type(encoder) is logging.Formatter
        assert encoder.format(_record()) == "hello world"

    def test_json_encoder_selected(self):
        encoder = build_encoder(AppenderConfig(name="j", options={"encoder": "json"}))
        assert isinstance(encoder, JsonFormatter)

    def test_unknown_encoder(self):
        with pytest.raises(AppenderConfigError, match="encoder"):
            build_encoder(AppenderConfig(name="x", options={"encoder": "xml"}))

    def test_json_payload(self):
        line = JsonFormatter().format(_record(request_id="r-1", attempt=3))
        payload = json.loads(line)
        assert payload["level"] == "info"
        assert payload["logger"] == "svc"
        assert payload["msg"] == "hello world"
        assert payload["caller"].endswith(":42")
        assert payload["request_id"] == "r-1"
        assert payload["attempt"] == 3
        assert "args" not in payload
        assert "\n" not in line

    def test_json_extra_cannot_replace_builtin_keys(self):
        record = _record(level=logging.ERROR)
        record.__dict__.update({"level": "debug", "logger": "x", "ts": "then", "caller": "elsewhere"})
        payload = json.loads(JsonFormatter().format(record))
        assert payload["level"] == "error"
        assert payload["logger"] == "svc"
        assert payload["ts"] != "then"
        assert payload["caller"].endswith(":42")

    def test_json_unserializable_extra(self):
        payload = json.loads(JsonFormatter().format(_record(obj=object())))
        assert payload["obj"].startswith("<object object")

    def test_json_exception(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = logging.LogRecord("svc", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())
        payload = json.loads(JsonFormatter().format(record))
        assert "RuntimeError: boom" in payload["exc"]

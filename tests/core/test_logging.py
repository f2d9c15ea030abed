from __future__ import annotations

import json
import logging
import sys

from edustats.core.logging import (
    _ContainerFormatter,
    _JsonFormatter,
    request_id_var,
    setup_logging,
)


def _record(level: int = logging.INFO, msg: str = "hello", args: tuple = ()):
    return logging.LogRecord(
        name="edustats.test",
        level=level,
        pathname="svc.py",
        lineno=42,
        msg=msg,
        args=args,
        exc_info=None,
    )


def test_setup_logging_sets_root_level() -> None:
    setup_logging("debug")
    assert logging.getLogger().level == logging.DEBUG

    setup_logging("warning")
    assert logging.getLogger().level == logging.WARNING


def test_setup_logging_defaults_to_info_for_unknown_level() -> None:
    setup_logging("nonexistent")
    assert logging.getLogger().level == logging.INFO


def test_setup_logging_caps_noisy_loggers() -> None:
    setup_logging("debug")
    assert logging.getLogger("uvicorn").level == logging.WARNING
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING

    setup_logging("error")
    assert logging.getLogger("uvicorn").level == logging.ERROR


def test_setup_logging_selects_json_formatter() -> None:
    setup_logging("info", json_format=True)
    handlers = logging.getLogger().handlers
    assert len(handlers) == 1
    assert isinstance(handlers[0].formatter, _JsonFormatter)

    setup_logging("info")
    assert isinstance(logging.getLogger().handlers[0].formatter, _ContainerFormatter)


def test_container_formatter_location_only_for_warning_and_up() -> None:
    fmt = _ContainerFormatter()
    assert "[svc.py:" not in fmt.format(_record(logging.INFO))
    assert "[svc.py:42]" in fmt.format(_record(logging.WARNING, "bad thing"))


def test_json_formatter_produces_valid_json() -> None:
    parsed = json.loads(_JsonFormatter().format(_record(msg="Hello %s", args=("w",))))
    assert parsed["level"] == "INFO"
    assert parsed["logger"] == "edustats.test"
    assert parsed["message"] == "Hello w"
    assert "timestamp" in parsed


def test_json_formatter_includes_context_fields() -> None:
    record = _record()
    record.request_id = "abc-123"  # type: ignore[attr-defined]
    record.path = "/statistics"  # type: ignore[attr-defined]
    record.event_type = "visit"  # type: ignore[attr-defined]
    record.duration_ms = 12.5  # type: ignore[attr-defined]

    parsed = json.loads(_JsonFormatter().format(record))
    assert parsed["request_id"] == "abc-123"
    assert parsed["path"] == "/statistics"
    assert parsed["event_type"] == "visit"
    assert parsed["duration_ms"] == 12.5
    assert "report" not in parsed


def test_json_formatter_includes_exception_info() -> None:
    try:
        raise ValueError("test error")
    except ValueError:
        record = _record(logging.ERROR, "Something failed")
        record.exc_info = sys.exc_info()
        output = _JsonFormatter().format(record)

    parsed = json.loads(output)
    assert "ValueError: test error" in parsed["exception"]


def test_handler_stamps_request_id_on_child_logger_records() -> None:
    setup_logging("info")
    handler = logging.getLogger().handlers[0]
    record = _record()

    token = request_id_var.set("req-77")
    try:
        handler.filter(record)
    finally:
        request_id_var.reset(token)

    assert record.request_id == "req-77"  # type: ignore[attr-defined]

"""Unit tests for the JSON log formatter."""

import json
import logging
import sys
import time

import pytest

from config.logging_config import JsonFormatter


def _record(created: float, exc_info=None) -> logging.LogRecord:
    record = logging.LogRecord(
        "ft.test", logging.INFO, __file__, 1, "hello %s", ("world",), exc_info
    )
    record.created = created
    return record


@pytest.mark.skipif(not hasattr(time, "tzset"), reason="needs time.tzset")
def test_timestamp_is_utc_whatever_the_local_zone(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TZ", "America/New_York")
    time.tzset()
    try:
        line = JsonFormatter().format(_record(0.0))
    finally:
        monkeypatch.undo()
        time.tzset()

    payload = json.loads(line)
    assert payload["ts"] == "1970-01-01T00:00:00Z"
    assert payload["level"] == "INFO"
    assert payload["message"] == "hello world"


def test_exception_is_included() -> None:
    try:
        raise ValueError("boom")
    except ValueError:
        record = _record(0.0, sys.exc_info())
    payload = json.loads(JsonFormatter().format(record))
    assert "ValueError: boom" in payload["exception"]

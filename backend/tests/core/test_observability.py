"""Structured Logging — JSON formatter output.

Tests:
    - Base keys always present
    - Known extra fields surfaced, unknown ones dropped
    - Exceptions rendered into the "exception" key
"""

import json
import logging

from app.infrastructure.observability import JSONFormatter


def _record(msg="hello", exc_info=None, **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "app.test", logging.INFO, __file__, 1, msg, None, exc_info,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_base_keys_present():
    out = json.loads(JSONFormatter().format(_record()))
    assert out["level"] == "INFO"
    assert out["logger"] == "app.test"
    assert out["message"] == "hello"
    assert "timestamp" in out


def test_known_extras_surfaced():
    out = json.loads(JSONFormatter().format(
        _record(user_id="u-1", cache_hit=True, total_count=3, secret="x"),
    ))
    assert out["user_id"] == "u-1"
    assert out["cache_hit"] is True
    assert out["total_count"] == 3
    assert "secret" not in out


def test_exception_rendered():
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        import sys
        record = _record(exc_info=sys.exc_info())
    out = json.loads(JSONFormatter().format(record))
    assert "RuntimeError: boom" in out["exception"]

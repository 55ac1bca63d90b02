"""Tests for JSON log formatting and request-id correlation."""

from __future__ import annotations

import json
import logging

from vidtube.core.logger import JSONFormatter, RequestIdFilter, ensure_request_id


def _record(msg: str = "hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord("vidtube.test", logging.INFO, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_emits_one_json_object():
    record = _record(user_id=3, elapsed_ms=1.5)
    record.request_id = "abc"
    payload = json.loads(JSONFormatter().format(record))
    assert payload["message"] == "hello"
    assert payload["level"] == "INFO"
    assert payload["request_id"] == "abc"
    assert payload["user_id"] == 3
    assert payload["elapsed_ms"] == 1.5


def test_filter_outside_request_sets_none():
    record = _record()
    assert RequestIdFilter().filter(record) is True
    assert record.request_id is None


def test_request_id_taken_from_header(app):
    with app.test_request_context(headers={"X-Correlation-ID": "corr-1"}):
        assert ensure_request_id() == "corr-1"
        assert ensure_request_id() == "corr-1"


def test_request_id_generated_once_per_request(app):
    with app.test_request_context():
        first = ensure_request_id()
        assert ensure_request_id() == first


def test_response_echoes_request_id(client):
    resp = client.get("/api/v1/health", headers={"X-Request-ID": "rid-42"})
    assert resp.headers["X-Request-ID"] == "rid-42"
    other = client.get("/api/v1/health")
    assert other.headers["X-Request-ID"] not in ("", "rid-42")

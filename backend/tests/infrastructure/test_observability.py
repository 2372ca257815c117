"""Structured Logging — JSON and text formatter output, span rendering."""

import json
import logging

from device_registry.infrastructure.observability import (
    JSONFormatter,
    TextFormatter,
    setup_logging,
    span_payload,
)
from device_registry.infrastructure.tracing import LoggingTracer


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("registry", logging.INFO, __file__, 1, "hello", None, None)
    record.__dict__.update(extra)
    return record


def test_json_formatter_base_fields():
    log = json.loads(JSONFormatter().format(_record()))
    assert log["level"] == "INFO"
    assert log["logger"] == "registry"
    assert log["message"] == "hello"
    assert "timestamp" in log
    assert "service" not in log
    assert "span" not in log


def test_json_formatter_includes_service_name():
    log = json.loads(JSONFormatter("device-registry").format(_record()))
    assert log["service"] == "device-registry"


def test_json_formatter_surfaces_known_extras_only():
    log = json.loads(JSONFormatter().format(
        _record(tenant_id="t", device_id="d", unrelated="x"),
    ))
    assert log["tenant_id"] == "t"
    assert log["device_id"] == "d"
    assert "unrelated" not in log


def test_span_payload_nests_span_fields():
    span = span_payload(_record(
        span_name="update_credentials", span_id="abc", status_code=412,
        span_tags={"http.status_code": 412}, span_errors=[], duration_ms=1.5,
    ))
    assert span == {
        "name": "update_credentials", "id": "abc", "status_code": 412,
        "tags": {"http.status_code": 412}, "duration_ms": 1.5,
    }


def test_span_payload_ignores_ordinary_records():
    assert span_payload(_record(tenant_id="t")) is None


def test_finished_span_renders_tags_as_json(caplog):
    span = LoggingTracer("svc").start_span("read_device", parent="00-abc-01")
    span.set_tag("tenant_id", "t")
    span.set_tag("http.status_code", 404)
    span.log_error("not found")
    with caplog.at_level(logging.DEBUG, logger="device_registry.infrastructure.tracing"):
        span.finish()
    [record] = caplog.records

    log = json.loads(JSONFormatter().format(record))

    assert log["message"] == "span finished: read_device"
    assert log["tenant_id"] == "t"
    assert log["span"]["parent"] == "00-abc-01"
    assert log["span"]["tags"] == {"tenant_id": "t", "http.status_code": 404, "error": True}
    assert log["span"]["errors"] == ["not found"]


def test_text_formatter_appends_span_details():
    line = TextFormatter().format(_record(
        span_name="op", span_tags={"tenant_id": "t"}, span_errors=["boom"], duration_ms=2.0,
    ))
    assert line.endswith("[tenant_id=t duration_ms=2.0 error='boom']")


def test_text_formatter_leaves_plain_records_alone():
    assert TextFormatter().format(_record()).endswith("registry: hello")


def test_setup_logging_replaces_its_own_handler():
    root_handlers = list(logging.root.handlers)
    level = logging.root.level
    try:
        first = setup_logging("DEBUG", "json", "svc")
        second = setup_logging("INFO", "text")
        assert first not in logging.root.handlers
        assert second in logging.root.handlers
        assert isinstance(second.formatter, TextFormatter)
        assert logging.root.level == logging.INFO
    finally:
        logging.root.handlers[:] = root_handlers
        logging.root.setLevel(level)

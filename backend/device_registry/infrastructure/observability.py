"""Structured Logging — JSON and text formatters for registry and span records.

Invariants:
    - All logs include timestamp, level, logger name, service and message
    - Request extras (tenant_id, device_id, error_code, path) surfaced when present
    - Span records (span_name set) render as one nested "span" object carrying
      id, parent, status, duration, tags and errors
    - setup_logging installs exactly one registry handler, repeated calls replace it

Design Decisions:
    - Spans hand their tags to the formatter through record extras; the log
      message stays a short human sentence
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any

REQUEST_FIELDS = ("tenant_id", "device_id", "error_code", "path")

SPAN_FIELDS = {
    "span_id": "id",
    "parent_span": "parent",
    "status_code": "status_code",
    "duration_ms": "duration_ms",
    "span_tags": "tags",
    "span_errors": "errors",
}


def span_payload(record: logging.LogRecord) -> dict[str, Any] | None:
    """Nested span object for a span record, None for ordinary records."""
    name = record.__dict__.get("span_name")
    if name is None:
        return None
    span: dict[str, Any] = {"name": name}
    for attr, key in SPAN_FIELDS.items():
        val = record.__dict__.get(attr)
        if val not in (None, {}, []):
            span[key] = val
    return span


class JSONFormatter(logging.Formatter):
    """Format logs as JSON for structured logging in production."""

    def __init__(self, service_name: str | None = None):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if self.service_name:
            log["service"] = self.service_name
        for key in REQUEST_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        span = span_payload(record)
        if span is not None:
            log["span"] = span
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable lines for development; span tags appended as key=value."""

    def __init__(self):
        super().__init__("%(asctime)s %(levelname)s %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        span = span_payload(record)
        if span is None:
            return line
        details = [f"{k}={v}" for k, v in span.get("tags", {}).items()]
        if "duration_ms" in span:
            details.append(f"duration_ms={span['duration_ms']}")
        details.extend(f"error={e!r}" for e in span.get("errors", []))
        return f"{line} [{' '.join(details)}]" if details else line


_handler: logging.Handler | None = None


def setup_logging(level: str = "INFO", fmt: str = "json", service_name: str | None = None):
    """Configure logging for the application."""
    global _handler
    if _handler is not None:
        logging.root.removeHandler(_handler)
    _handler = logging.StreamHandler()
    if fmt == "json":
        _handler.setFormatter(JSONFormatter(service_name))
    else:
        _handler.setFormatter(TextFormatter())
    logging.root.addHandler(_handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    return _handler

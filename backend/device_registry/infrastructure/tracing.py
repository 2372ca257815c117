"""Log-backed Tracing — Span/Tracer implementation that reports through logging.

Invariants:
    - finish() may be called once; a second call raises RuntimeError
    - Every finished span emits one log record with name, tags and duration
    - Spans that logged an error are emitted at WARNING, others at DEBUG

Design Decisions:
    - No tracing backend: spans end up in the structured log stream, the
      formatters in observability.py render their tags and errors
    - Singleton tracer initialized on startup, like the other infrastructure
"""

import logging
import time
import uuid
from typing import Any

logger = logging.getLogger(__name__)


class LoggingSpan:
    """Span that records tags and errors, then logs once on finish()."""

    def __init__(self, name: str, service_name: str, parent: str | None = None):
        self.name = name
        self.service_name = service_name
        self.parent = parent
        self.span_id = uuid.uuid4().hex[:16]
        self.tags: dict[str, Any] = {}
        self.errors: list[str] = []
        self.finished = False
        self._started = time.monotonic()

    def set_tag(self, key: str, value: Any) -> None:
        self.tags[key] = value

    def log_error(self, message: str, exc: BaseException | None = None) -> None:
        self.tags["error"] = True
        if exc is not None:
            message = f"{message}: {exc}"
        self.errors.append(message)

    def finish(self) -> None:
        if self.finished:
            raise RuntimeError(f"Span '{self.name}' already finished")
        self.finished = True
        duration_ms = round((time.monotonic() - self._started) * 1000, 3)
        level = logging.WARNING if self.errors else logging.DEBUG
        logger.log(
            level,
            "span finished: %s",
            self.name,
            extra={
                "span_name": self.name,
                "span_id": self.span_id,
                "parent_span": self.parent,
                "span_tags": dict(self.tags),
                "span_errors": list(self.errors),
                "duration_ms": duration_ms,
                "status_code": self.tags.get("http.status_code"),
                "tenant_id": self.tags.get("tenant_id"),
                "device_id": self.tags.get("device_id"),
            },
        )


class LoggingTracer:
    """Creates LoggingSpans for one component."""

    def __init__(self, service_name: str):
        self.service_name = service_name

    def start_span(self, name: str, parent: str | None = None) -> LoggingSpan:
        return LoggingSpan(name, self.service_name, parent)


# Singleton (initialized on startup)
tracer: LoggingTracer | None = None


def init_tracing(service_name: str) -> LoggingTracer:
    global tracer
    tracer = LoggingTracer(service_name)
    return tracer

"""Root conftest — shared test configuration and tracing doubles."""

import os

import pytest

# Human-readable logs in test output; never read a developer's .env values
os.environ.setdefault("LOG_FORMAT", "text")
os.environ.setdefault("MAX_PAYLOAD_SIZE", "2000")


class RecordingSpan:
    """Span double that counts finish() calls instead of rejecting the second one."""

    def __init__(self, name: str, parent: str | None = None):
        self.name = name
        self.parent = parent
        self.tags: dict = {}
        self.errors: list[str] = []
        self.finish_count = 0

    def set_tag(self, key, value):
        self.tags[key] = value

    def log_error(self, message, exc=None):
        self.errors.append(message)

    def finish(self):
        self.finish_count += 1


class RecordingTracer:
    def __init__(self):
        self.spans: list[RecordingSpan] = []

    def start_span(self, name, parent=None):
        span = RecordingSpan(name, parent)
        self.spans.append(span)
        return span


@pytest.fixture
def tracer():
    return RecordingTracer()


@pytest.fixture
def span():
    return RecordingSpan("test")

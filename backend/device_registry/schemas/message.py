"""Inbound Message Schema — the metadata part of a downstream message.

Only the routing/presence metadata is modelled; the payload is opaque here.
"""

from typing import Any

from pydantic import BaseModel, Field


class InboundMessage(BaseModel):
    """Application properties, annotations and creation time of a message."""
    application_properties: dict[str, Any] = Field(default_factory=dict)
    message_annotations: dict[str, Any] = Field(default_factory=dict)
    creation_time: int | None = None  # ms since epoch
    content_type: str | None = None

"""Time Until Disconnect — presence notifications decoded from message metadata.

Invariants:
    - No ttd property, or a non-numeric one → no notification
    - ttd == TTD_VALUE_UNLIMITED → notification without expiry (ready_until None)
    - ttd > 0 → notification only while creation_time + ttd is still in the future
    - ttd == 0 or other negative values → no notification
    - tenant_id / device_id copied unchanged from the message metadata
"""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from device_registry.core.domain_types import (
    PROPERTY_DEVICE_ID,
    PROPERTY_TENANT_ID,
    PROPERTY_TTD,
    TTD_VALUE_UNLIMITED,
)
from device_registry.schemas.message import InboundMessage


def _ttd_value(message: InboundMessage) -> int | None:
    value = message.application_properties.get(PROPERTY_TTD)
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _creation_time(message: InboundMessage, now: datetime) -> datetime:
    if message.creation_time is None:
        return now
    return datetime.fromtimestamp(message.creation_time / 1000, tz=timezone.utc)


@dataclass(frozen=True)
class TimeUntilDisconnectNotification:
    """A device announcing how long it stays reachable."""

    tenant_id: str | None
    device_id: str | None
    ttd: int
    creation_time: datetime
    ready_until: datetime | None  # None: reachable until further notice

    @property
    def is_unlimited(self) -> bool:
        return self.ready_until is None

    @property
    def tenant_and_device_id(self) -> str:
        return f"{self.tenant_id}/{self.device_id}"

    def milliseconds_until_expiry(self, now: datetime | None = None) -> float:
        """Remaining reachability in ms; math.inf without expiry, 0 once expired."""
        if self.ready_until is None:
            return math.inf
        now = now or datetime.now(timezone.utc)
        remaining = (self.ready_until - now) / timedelta(milliseconds=1)
        return max(0, int(remaining))

    @classmethod
    def from_message(
        cls, message: InboundMessage, now: datetime | None = None,
    ) -> "TimeUntilDisconnectNotification | None":
        """Decode a notification from a message, None if it carries no valid ttd."""
        ttd = _ttd_value(message)
        if ttd is None:
            return None
        now = now or datetime.now(timezone.utc)
        creation_time = _creation_time(message, now)

        if ttd == TTD_VALUE_UNLIMITED:
            ready_until = None
        elif ttd > 0:
            ready_until = creation_time + timedelta(seconds=ttd)
            if ready_until <= now:
                return None
        else:
            return None

        tenant_id = message.message_annotations.get(
            PROPERTY_TENANT_ID,
            message.application_properties.get(PROPERTY_TENANT_ID),
        )
        return cls(
            tenant_id=tenant_id,
            device_id=message.application_properties.get(PROPERTY_DEVICE_ID),
            ttd=ttd,
            creation_time=creation_time,
            ready_until=ready_until,
        )

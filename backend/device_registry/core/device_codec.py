"""Device Codec — JSON object <-> Device.

Invariants:
    - encode_device omits unset enabled, empty collections and missing mapper
    - Explicit enabled (True or False) is always encoded
    - decode_device raises DeviceValidationError, never pydantic.ValidationError
"""

import json
from typing import Any

from pydantic import ValidationError

from device_registry.core.errors import DeviceValidationError
from device_registry.schemas.device import Device


def encode_device(device: Device) -> dict[str, Any]:
    """Serialize a device, leaving out every default-valued field."""
    data = device.model_dump(by_alias=True, exclude_none=True, mode="json")
    return {key: value for key, value in data.items() if value not in ({}, [])}


def decode_device(raw: Any) -> Device:
    """Decode a device from a JSON object, or from its str/bytes text."""
    if isinstance(raw, (str, bytes, bytearray)):
        try:
            raw = json.loads(raw) if raw else {}
        except ValueError as e:
            raise DeviceValidationError("Device payload is not valid JSON", cause=e)
    if not isinstance(raw, dict):
        raise DeviceValidationError("Device payload must be a JSON object")
    try:
        return Device.model_validate(raw)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(loc) for loc in first["loc"]) or None
        raise DeviceValidationError(
            f"Invalid device: {first['msg']}", field=field, cause=e,
        )

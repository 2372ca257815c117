"""Device Routes — create, read, update and remove devices.

Invariants:
    - /{api_version}/devices/{tenant_id}/{device_id} for all four methods
    - PUT and DELETE accept If-Match; POST and PUT bodies are size limited
"""

from fastapi import APIRouter, Depends, Header, Response

from device_registry.api.deps import (
    get_device_handler,
    read_limited_body,
    to_http_response,
    trace_parent,
)
from device_registry.config import get_settings
from device_registry.services.management_handler import DeviceManagementHandler

router = APIRouter(prefix=f"/{get_settings().api_version}/devices", tags=["devices"])


@router.post("/{tenant_id}/{device_id}")
async def create_device(
    tenant_id: str,
    device_id: str,
    body: bytes = Depends(read_limited_body),
    parent: str | None = Depends(trace_parent),
    handler: DeviceManagementHandler = Depends(get_device_handler),
) -> Response:
    return to_http_response(
        await handler.create_device(tenant_id, device_id, body, parent),
    )


@router.get("/{tenant_id}/{device_id}")
async def get_device(
    tenant_id: str,
    device_id: str,
    parent: str | None = Depends(trace_parent),
    handler: DeviceManagementHandler = Depends(get_device_handler),
) -> Response:
    return to_http_response(await handler.read_device(tenant_id, device_id, parent))


@router.put("/{tenant_id}/{device_id}")
async def update_device(
    tenant_id: str,
    device_id: str,
    body: bytes = Depends(read_limited_body),
    if_match: str | None = Header(None),
    parent: str | None = Depends(trace_parent),
    handler: DeviceManagementHandler = Depends(get_device_handler),
) -> Response:
    return to_http_response(
        await handler.update_device(tenant_id, device_id, body, if_match, parent),
    )


@router.delete("/{tenant_id}/{device_id}")
async def delete_device(
    tenant_id: str,
    device_id: str,
    if_match: str | None = Header(None),
    parent: str | None = Depends(trace_parent),
    handler: DeviceManagementHandler = Depends(get_device_handler),
) -> Response:
    return to_http_response(
        await handler.delete_device(tenant_id, device_id, if_match, parent),
    )

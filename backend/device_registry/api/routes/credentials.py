"""Credentials Routes — read and replace the credentials of a device.

Invariants:
    - GET  /{api_version}/credentials/{tenant_id}/{device_id}
    - PUT  /{api_version}/credentials/{tenant_id}/{device_id}  (If-Match optional)
    - Body size limited before decoding; everything else delegated to the handler
"""

from fastapi import APIRouter, Depends, Header, Response

from device_registry.api.deps import (
    get_credentials_handler,
    read_limited_body,
    to_http_response,
    trace_parent,
)
from device_registry.config import get_settings
from device_registry.services.management_handler import CredentialsManagementHandler

router = APIRouter(
    prefix=f"/{get_settings().api_version}/credentials", tags=["credentials"],
)


@router.get("/{tenant_id}/{device_id}")
async def get_credentials_for_device(
    tenant_id: str,
    device_id: str,
    parent: str | None = Depends(trace_parent),
    handler: CredentialsManagementHandler = Depends(get_credentials_handler),
) -> Response:
    """Get all credentials of a device."""
    response = await handler.read_credentials(tenant_id, device_id, parent)
    return to_http_response(response)


@router.put("/{tenant_id}/{device_id}")
async def update_credentials(
    tenant_id: str,
    device_id: str,
    body: bytes = Depends(read_limited_body),
    if_match: str | None = Header(None),
    parent: str | None = Depends(trace_parent),
    handler: CredentialsManagementHandler = Depends(get_credentials_handler),
) -> Response:
    """Replace all credentials of a device."""
    response = await handler.update_credentials(
        tenant_id, device_id, body, if_match, parent,
    )
    return to_http_response(response)

"""Route Dependencies — service/tracer injection, handler wiring, body-size limit.

Invariants:
    - get_registry_service / get_tracer raise if startup did not initialize them
    - read_limited_body never buffers more than max_payload_size + one chunk
    - Responses are built from ManagementResponse only (no route-level logic)
"""

from fastapi import Depends, Request, Response
from fastapi.responses import JSONResponse

from device_registry.config import Settings, get_settings
from device_registry.core.errors import PayloadTooLargeError
from device_registry.core.service_protocols import (
    CredentialsManagementService,
    DeviceManagementService,
    Tracer,
)
from device_registry.services.management_handler import (
    CredentialsManagementHandler,
    DeviceManagementHandler,
    ManagementResponse,
)
import device_registry.infrastructure.tracing as tracing_module
import device_registry.services.in_memory_registry as registry_module


def get_registry_service():
    """FastAPI dependency for the management service."""
    if not registry_module.registry:
        raise RuntimeError("Registry not initialized")
    return registry_module.registry


def get_tracer() -> Tracer:
    """FastAPI dependency for the span provider."""
    if not tracing_module.tracer:
        raise RuntimeError("Tracing not initialized")
    return tracing_module.tracer


def get_credentials_handler(
    service: CredentialsManagementService = Depends(get_registry_service),
    tracer: Tracer = Depends(get_tracer),
    settings: Settings = Depends(get_settings),
) -> CredentialsManagementHandler:
    return CredentialsManagementHandler(
        service, tracer, settings.tenant_id_pattern, settings.device_id_pattern,
    )


def get_device_handler(
    service: DeviceManagementService = Depends(get_registry_service),
    tracer: Tracer = Depends(get_tracer),
    settings: Settings = Depends(get_settings),
) -> DeviceManagementHandler:
    return DeviceManagementHandler(
        service, tracer, settings.tenant_id_pattern, settings.device_id_pattern,
        base_path=f"/{settings.api_version}/devices",
    )


async def read_limited_body(
    request: Request, settings: Settings = Depends(get_settings),
) -> bytes:
    """Read the request body, 413 once it exceeds max_payload_size."""
    limit = settings.max_payload_size
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > limit:
        raise PayloadTooLargeError(limit)
    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > limit:
            raise PayloadTooLargeError(limit)
    return bytes(body)


def trace_parent(request: Request) -> str | None:
    """W3C traceparent of the incoming request, if any."""
    return request.headers.get("traceparent")


def to_http_response(response: ManagementResponse) -> Response:
    if response.body is None:
        return Response(status_code=response.status_code, headers=response.headers)
    return JSONResponse(
        content=response.body,
        status_code=response.status_code,
        headers=response.headers,
    )

"""Boundary Protocols — contracts between the handlers and their collaborators.

Invariants:
    - Handlers depend on these Protocols only, never on concrete services
    - Management services report outcomes as OperationResult (status codes),
      resource-version conflicts included
    - A Span is finished exactly once; finishing twice is an error

Design Decisions:
    - Protocol over ABC: structural subtyping, implementations need no base class
    - Service methods are async because implementations do IO; the span is
      passed along so implementations can attach their own tags
"""

from typing import Any, Protocol

from device_registry.core.operation_result import OperationResult
from device_registry.schemas.credentials import CommonCredential
from device_registry.schemas.device import Device


class Span(Protocol):
    """A unit of traced work opened by a handler."""
    name: str

    def set_tag(self, key: str, value: Any) -> None: ...
    def log_error(self, message: str, exc: BaseException | None = None) -> None: ...
    def finish(self) -> None: ...


class Tracer(Protocol):
    """Span provider, implemented by infrastructure/tracing."""
    def start_span(self, name: str, parent: str | None = None) -> Span: ...


class CredentialsManagementService(Protocol):
    """Contract for credentials management, implemented by services."""
    async def read_credentials(
        self, tenant_id: str, device_id: str, span: Span,
    ) -> OperationResult[list[CommonCredential]]: ...

    async def update_credentials(
        self,
        tenant_id: str,
        device_id: str,
        credentials: list[CommonCredential],
        resource_version: str | None,
        span: Span,
    ) -> OperationResult[None]: ...


class DeviceManagementService(Protocol):
    """Contract for device management, implemented by services."""
    async def create_device(
        self, tenant_id: str, device_id: str, device: Device, span: Span,
    ) -> OperationResult[str]: ...

    async def read_device(
        self, tenant_id: str, device_id: str, span: Span,
    ) -> OperationResult[Device]: ...

    async def update_device(
        self,
        tenant_id: str,
        device_id: str,
        device: Device,
        resource_version: str | None,
        span: Span,
    ) -> OperationResult[None]: ...

    async def delete_device(
        self, tenant_id: str, device_id: str, resource_version: str | None, span: Span,
    ) -> OperationResult[None]: ...

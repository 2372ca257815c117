"""Management Request Handlers — request → decode → service → response, traced.

Invariants:
    - A span is started per request and finished exactly once on every exit path
    - Payload validation failures respond 400 with an error body and the
      management service is never invoked
    - The client-asserted resource version (If-Match) reaches the service unmodified
    - Service outcomes are rendered verbatim: status, optional ETag, optional body
    - A ServiceInvocationError raised by the service is rendered as its status
      with an empty body; any other exception propagates after tagging the span

Design Decisions:
    - Handlers are transport-agnostic and return ManagementResponse; api/routes
      turn it into a FastAPI Response
    - No retries, no locking: version conflicts are the service's to detect
"""

import json
import logging
import re
from collections.abc import Awaitable
from dataclasses import dataclass, field
from typing import Any

from device_registry.core.credentials_codec import decode_credentials, encode_credentials
from device_registry.core.device_codec import decode_device, encode_device
from device_registry.core.domain_types import (
    DEFAULT_DEVICE_ID_PATTERN,
    DEFAULT_TENANT_ID_PATTERN,
)
from device_registry.core.errors import (
    ErrorContext,
    PayloadValidationError,
    ServiceInvocationError,
)
from device_registry.core.operation_result import OperationResult
from device_registry.core.service_protocols import (
    CredentialsManagementService,
    DeviceManagementService,
    Span,
    Tracer,
)

logger = logging.getLogger(__name__)

SPAN_NAME_GET_CREDENTIALS = "get Credentials from management API"
SPAN_NAME_UPDATE_CREDENTIALS = "update Credentials from management API"
SPAN_NAME_CREATE_DEVICE = "create Device from management API"
SPAN_NAME_GET_DEVICE = "get Device from management API"
SPAN_NAME_UPDATE_DEVICE = "update Device from management API"
SPAN_NAME_DELETE_DEVICE = "remove Device from management API"

HEADER_ETAG = "ETag"
HEADER_LOCATION = "Location"
TAG_HTTP_STATUS = "http.status_code"


@dataclass
class ManagementResponse:
    """What the transport layer writes back: status, headers, optional body."""
    status_code: int
    body: Any | None = None
    headers: dict[str, str] = field(default_factory=dict)


class ManagementHandler:
    """Shared request plumbing: id checks, JSON parsing, service calls, rendering."""

    def __init__(
        self,
        tracer: Tracer,
        tenant_id_pattern: str = DEFAULT_TENANT_ID_PATTERN,
        device_id_pattern: str = DEFAULT_DEVICE_ID_PATTERN,
    ):
        self._tracer = tracer
        self._id_patterns = {
            "tenant_id": re.compile(tenant_id_pattern),
            "device_id": re.compile(device_id_pattern),
        }

    def _check_ids(self, span: Span, **ids: str) -> None:
        """Validate path ids against the configured patterns and tag the span."""
        for name, value in ids.items():
            if not value or not self._id_patterns[name].fullmatch(value):
                raise PayloadValidationError(
                    f"'{name}' value : '{value}' does not match allowed pattern: "
                    f"{self._id_patterns[name].pattern}",
                    field=name,
                )
            span.set_tag(name, value)

    @staticmethod
    def _parse_json(raw_body: bytes, what: str) -> Any:
        try:
            return json.loads(raw_body)
        except ValueError as e:
            raise PayloadValidationError(f"{what} payload is not valid JSON", cause=e)

    @staticmethod
    def _reject(
        error: PayloadValidationError, span: Span, tenant_id: str, device_id: str,
    ) -> ManagementResponse:
        """Render a payload validation failure as a 400 response."""
        logger.debug(
            f"rejecting request: {error.message}",
            extra={"tenant_id": tenant_id, "device_id": device_id,
                   "error_code": error.code},
        )
        error.context = ErrorContext(tenant_id=tenant_id, device_id=device_id)
        span.log_error(error.message)
        span.set_tag(TAG_HTTP_STATUS, error.status_code)
        return ManagementResponse(error.status_code, error.to_response())

    @staticmethod
    async def _call_service(
        span: Span, call: Awaitable[OperationResult],
    ) -> OperationResult:
        """Await the service; classified failures become plain status outcomes."""
        try:
            return await call
        except ServiceInvocationError as e:
            logger.info(
                f"management service failed: {e.message}",
                extra={"error_code": e.code, "status_code": e.status_code},
            )
            span.log_error(e.message, e)
            return OperationResult.empty(e.status_code)
        except Exception as e:
            span.log_error("management service raised an unexpected error", e)
            span.set_tag(TAG_HTTP_STATUS, 500)
            raise

    @staticmethod
    def _render(
        result: OperationResult,
        span: Span,
        body: Any | None = None,
        headers: dict[str, str] | None = None,
    ) -> ManagementResponse:
        headers = dict(headers or {})
        if result.resource_version:
            headers[HEADER_ETAG] = result.resource_version
        span.set_tag(TAG_HTTP_STATUS, result.status)
        return ManagementResponse(result.status, body, headers)


class CredentialsManagementHandler(ManagementHandler):
    """Reads and replaces the credentials of a device."""

    def __init__(
        self,
        service: CredentialsManagementService,
        tracer: Tracer,
        tenant_id_pattern: str = DEFAULT_TENANT_ID_PATTERN,
        device_id_pattern: str = DEFAULT_DEVICE_ID_PATTERN,
    ):
        super().__init__(tracer, tenant_id_pattern, device_id_pattern)
        self._service = service

    async def read_credentials(
        self, tenant_id: str, device_id: str, trace_parent: str | None = None,
    ) -> ManagementResponse:
        span = self._tracer.start_span(SPAN_NAME_GET_CREDENTIALS, trace_parent)
        try:
            try:
                self._check_ids(span, tenant_id=tenant_id, device_id=device_id)
            except PayloadValidationError as e:
                return self._reject(e, span, tenant_id, device_id)

            logger.debug(
                "reading credentials",
                extra={"tenant_id": tenant_id, "device_id": device_id},
            )
            result = await self._call_service(
                span, self._service.read_credentials(tenant_id, device_id, span),
            )
            if result.status != 200:
                span.set_tag(TAG_HTTP_STATUS, result.status)
                return ManagementResponse(result.status)
            return self._render(result, span, encode_credentials(result.payload or []))
        finally:
            span.finish()

    async def update_credentials(
        self,
        tenant_id: str,
        device_id: str,
        raw_body: bytes,
        if_match: str | None = None,
        trace_parent: str | None = None,
    ) -> ManagementResponse:
        span = self._tracer.start_span(SPAN_NAME_UPDATE_CREDENTIALS, trace_parent)
        try:
            try:
                self._check_ids(span, tenant_id=tenant_id, device_id=device_id)
                credentials = decode_credentials(
                    self._parse_json(raw_body, "Credentials"),
                )
            except PayloadValidationError as e:
                return self._reject(e, span, tenant_id, device_id)

            logger.debug(
                f"updating {len(credentials)} credentials",
                extra={"tenant_id": tenant_id, "device_id": device_id},
            )
            result = await self._call_service(
                span,
                self._service.update_credentials(
                    tenant_id, device_id, credentials, if_match, span,
                ),
            )
            return self._render(result, span)
        finally:
            span.finish()


class DeviceManagementHandler(ManagementHandler):
    """Creates, reads, updates and removes devices."""

    def __init__(
        self,
        service: DeviceManagementService,
        tracer: Tracer,
        tenant_id_pattern: str = DEFAULT_TENANT_ID_PATTERN,
        device_id_pattern: str = DEFAULT_DEVICE_ID_PATTERN,
        base_path: str = "/v1/devices",
    ):
        super().__init__(tracer, tenant_id_pattern, device_id_pattern)
        self._service = service
        self._base_path = base_path.rstrip("/")

    async def create_device(
        self,
        tenant_id: str,
        device_id: str,
        raw_body: bytes,
        trace_parent: str | None = None,
    ) -> ManagementResponse:
        span = self._tracer.start_span(SPAN_NAME_CREATE_DEVICE, trace_parent)
        try:
            try:
                self._check_ids(span, tenant_id=tenant_id, device_id=device_id)
                device = decode_device(raw_body)
            except PayloadValidationError as e:
                return self._reject(e, span, tenant_id, device_id)

            result = await self._call_service(
                span, self._service.create_device(tenant_id, device_id, device, span),
            )
            if result.status != 201:
                return self._render(result, span)
            created_id = result.payload or device_id
            return self._render(
                result, span, {"id": created_id},
                {HEADER_LOCATION: f"{self._base_path}/{tenant_id}/{created_id}"},
            )
        finally:
            span.finish()

    async def read_device(
        self, tenant_id: str, device_id: str, trace_parent: str | None = None,
    ) -> ManagementResponse:
        span = self._tracer.start_span(SPAN_NAME_GET_DEVICE, trace_parent)
        try:
            try:
                self._check_ids(span, tenant_id=tenant_id, device_id=device_id)
            except PayloadValidationError as e:
                return self._reject(e, span, tenant_id, device_id)

            result = await self._call_service(
                span, self._service.read_device(tenant_id, device_id, span),
            )
            if result.status != 200:
                span.set_tag(TAG_HTTP_STATUS, result.status)
                return ManagementResponse(result.status)
            return self._render(result, span, encode_device(result.payload))
        finally:
            span.finish()

    async def update_device(
        self,
        tenant_id: str,
        device_id: str,
        raw_body: bytes,
        if_match: str | None = None,
        trace_parent: str | None = None,
    ) -> ManagementResponse:
        span = self._tracer.start_span(SPAN_NAME_UPDATE_DEVICE, trace_parent)
        try:
            try:
                self._check_ids(span, tenant_id=tenant_id, device_id=device_id)
                device = decode_device(raw_body)
            except PayloadValidationError as e:
                return self._reject(e, span, tenant_id, device_id)

            result = await self._call_service(
                span,
                self._service.update_device(tenant_id, device_id, device, if_match, span),
            )
            return self._render(result, span)
        finally:
            span.finish()

    async def delete_device(
        self,
        tenant_id: str,
        device_id: str,
        if_match: str | None = None,
        trace_parent: str | None = None,
    ) -> ManagementResponse:
        span = self._tracer.start_span(SPAN_NAME_DELETE_DEVICE, trace_parent)
        try:
            try:
                self._check_ids(span, tenant_id=tenant_id, device_id=device_id)
            except PayloadValidationError as e:
                return self._reject(e, span, tenant_id, device_id)

            result = await self._call_service(
                span, self._service.delete_device(tenant_id, device_id, if_match, span),
            )
            return self._render(result, span)
        finally:
            span.finish()

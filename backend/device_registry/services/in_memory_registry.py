"""In-Memory Registry — reference device & credentials management service.

Invariants:
    - Every device record and its credential set carry their own resource version
    - An asserted resource version that differs from the stored one → 412
    - Unknown device → 404, duplicate create → 409
    - (type, auth-id) is unique per tenant, within one update as well → 409 on conflict
    - Plain passwords are hashed (bcrypt by default) before storage; reads never
      expose secret material
    - Mutations are serialized by one asyncio.Lock

Design Decisions:
    - Module-level singleton initialized on startup (init_registry), state lost
      on restart; persistence lives behind the service protocols
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass, field

from device_registry.core.credentials_codec import strip_private_info
from device_registry.core.domain_types import HashFunction
from device_registry.core.operation_result import OperationResult
from device_registry.core.service_protocols import Span
from device_registry.schemas.credentials import CommonCredential
from device_registry.schemas.device import Device
from device_registry.services.password_encoder import (
    DEFAULT_BCRYPT_ROUNDS,
    encode_plain_passwords,
)

logger = logging.getLogger(__name__)


def _new_version() -> str:
    return str(uuid.uuid4())


@dataclass
class _DeviceRecord:
    device: Device
    version: str = field(default_factory=_new_version)
    credentials: list[CommonCredential] = field(default_factory=list)
    credentials_version: str = field(default_factory=_new_version)


class InMemoryRegistryService:
    """Implements CredentialsManagementService and DeviceManagementService."""

    def __init__(
        self,
        hash_function: HashFunction = HashFunction.BCRYPT,
        bcrypt_rounds: int = DEFAULT_BCRYPT_ROUNDS,
    ):
        self._hash_function = hash_function
        self._bcrypt_rounds = bcrypt_rounds
        self._tenants: dict[str, dict[str, _DeviceRecord]] = {}
        self._lock = asyncio.Lock()

    def _record(self, tenant_id: str, device_id: str) -> _DeviceRecord | None:
        return self._tenants.get(tenant_id, {}).get(device_id)

    @staticmethod
    def _version_mismatch(stored: str, asserted: str | None) -> bool:
        return asserted is not None and asserted != stored

    # ─── Devices ─────────────────────────────────────────────────

    async def create_device(
        self, tenant_id: str, device_id: str, device: Device, span: Span,
    ) -> OperationResult[str]:
        async with self._lock:
            devices = self._tenants.setdefault(tenant_id, {})
            if device_id in devices:
                span.log_error("device already exists")
                return OperationResult.empty(409)
            record = _DeviceRecord(device=device.model_copy(deep=True))
            devices[device_id] = record
        logger.info(
            "device created", extra={"tenant_id": tenant_id, "device_id": device_id},
        )
        return OperationResult.ok(201, device_id, record.version)

    async def read_device(
        self, tenant_id: str, device_id: str, span: Span,
    ) -> OperationResult[Device]:
        record = self._record(tenant_id, device_id)
        if record is None:
            return OperationResult.empty(404)
        return OperationResult.ok(200, record.device.model_copy(deep=True), record.version)

    async def update_device(
        self,
        tenant_id: str,
        device_id: str,
        device: Device,
        resource_version: str | None,
        span: Span,
    ) -> OperationResult[None]:
        async with self._lock:
            record = self._record(tenant_id, device_id)
            if record is None:
                return OperationResult.empty(404)
            if self._version_mismatch(record.version, resource_version):
                span.log_error("resource version mismatch")
                return OperationResult.empty(412)
            record.device = device.model_copy(deep=True)
            record.version = _new_version()
            return OperationResult.ok(204, None, record.version)

    async def delete_device(
        self, tenant_id: str, device_id: str, resource_version: str | None, span: Span,
    ) -> OperationResult[None]:
        async with self._lock:
            record = self._record(tenant_id, device_id)
            if record is None:
                return OperationResult.empty(404)
            if self._version_mismatch(record.version, resource_version):
                span.log_error("resource version mismatch")
                return OperationResult.empty(412)
            del self._tenants[tenant_id][device_id]
        logger.info(
            "device removed", extra={"tenant_id": tenant_id, "device_id": device_id},
        )
        return OperationResult.empty(204)

    # ─── Credentials ─────────────────────────────────────────────

    async def read_credentials(
        self, tenant_id: str, device_id: str, span: Span,
    ) -> OperationResult[list[CommonCredential]]:
        record = self._record(tenant_id, device_id)
        if record is None:
            return OperationResult.empty(404)
        return OperationResult.ok(
            200, strip_private_info(record.credentials), record.credentials_version,
        )

    async def update_credentials(
        self,
        tenant_id: str,
        device_id: str,
        credentials: list[CommonCredential],
        resource_version: str | None,
        span: Span,
    ) -> OperationResult[None]:
        async with self._lock:
            record = self._record(tenant_id, device_id)
            if record is None:
                return OperationResult.empty(404)
            if self._version_mismatch(record.credentials_version, resource_version):
                span.log_error("resource version mismatch")
                return OperationResult.empty(412)
            if self._auth_id_taken(tenant_id, device_id, credentials):
                span.log_error("credentials with same type and auth-id exist")
                return OperationResult.empty(409)
            record.credentials = encode_plain_passwords(
                credentials, self._hash_function, self._bcrypt_rounds,
            )
            record.credentials_version = _new_version()
            return OperationResult.ok(204, None, record.credentials_version)

    def _auth_id_taken(
        self, tenant_id: str, device_id: str, credentials: list[CommonCredential],
    ) -> bool:
        wanted = {(c.type, c.auth_id) for c in credentials}
        if len(wanted) != len(credentials):
            return True
        for other_id, other in self._tenants.get(tenant_id, {}).items():
            if other_id == device_id:
                continue
            if wanted & {(c.type, c.auth_id) for c in other.credentials}:
                return True
        return False


# Singleton (initialized on startup)
registry: InMemoryRegistryService | None = None


def init_registry(
    hash_function: HashFunction = HashFunction.BCRYPT,
    bcrypt_rounds: int = DEFAULT_BCRYPT_ROUNDS,
) -> InMemoryRegistryService:
    global registry
    registry = InMemoryRegistryService(hash_function, bcrypt_rounds)
    return registry

"""Service test fixtures — registry, fake management service, FastAPI test client.

Invariants:
    - Every test gets a fresh InMemoryRegistryService
    - get_registry_service / get_tracer overridden; lifespan is not run by ASGITransport
    - fake_service records calls and returns configurable OperationResults
"""

import pytest
from httpx import ASGITransport, AsyncClient

from device_registry.api.deps import get_registry_service, get_tracer
from device_registry.core.operation_result import OperationResult
from device_registry.main import app
from device_registry.services.in_memory_registry import InMemoryRegistryService


class FakeManagementService:
    """Records every call; results[name] is an OperationResult, an exception, or a callable."""

    def __init__(self):
        self.calls: list[tuple[str, tuple]] = []
        self.results: dict = {}

    async def _answer(self, name, *args):
        self.calls.append((name, args))
        result = self.results.get(name, OperationResult.empty(204))
        if isinstance(result, BaseException):
            raise result
        return result() if callable(result) else result

    async def read_credentials(self, tenant_id, device_id, span):
        return await self._answer("read_credentials", tenant_id, device_id)

    async def update_credentials(self, tenant_id, device_id, credentials, resource_version, span):
        return await self._answer(
            "update_credentials", tenant_id, device_id, credentials, resource_version,
        )

    async def create_device(self, tenant_id, device_id, device, span):
        return await self._answer("create_device", tenant_id, device_id, device)

    async def read_device(self, tenant_id, device_id, span):
        return await self._answer("read_device", tenant_id, device_id)

    async def update_device(self, tenant_id, device_id, device, resource_version, span):
        return await self._answer(
            "update_device", tenant_id, device_id, device, resource_version,
        )

    async def delete_device(self, tenant_id, device_id, resource_version, span):
        return await self._answer("delete_device", tenant_id, device_id, resource_version)


@pytest.fixture
def fake_service():
    return FakeManagementService()


@pytest.fixture
def registry():
    return InMemoryRegistryService(bcrypt_rounds=4)


@pytest.fixture
async def client(registry, tracer):
    """FastAPI test client backed by the in-memory registry."""
    app.dependency_overrides[get_registry_service] = lambda: registry
    app.dependency_overrides[get_tracer] = lambda: tracer

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
async def fake_client(fake_service, tracer):
    """FastAPI test client backed by the recording fake service."""
    app.dependency_overrides[get_registry_service] = lambda: fake_service
    app.dependency_overrides[get_tracer] = lambda: tracer

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()

"""Management Handlers — request protocol against a recording fake service.

Invariants:
    - Decode failures respond 400 with a body and never reach the service
    - If-Match is handed to the service unmodified
    - ETag rendered from the result's resource version
    - The span is finished exactly once on every exit path
"""

import json

import pytest

from device_registry.core.errors import ClientError, ServerError
from device_registry.core.operation_result import OperationResult
from device_registry.schemas.credentials import PasswordCredential, PasswordSecret
from device_registry.schemas.device import Device
from device_registry.services.management_handler import (
    SPAN_NAME_GET_CREDENTIALS,
    SPAN_NAME_UPDATE_CREDENTIALS,
    CredentialsManagementHandler,
    DeviceManagementHandler,
)

VALID_BODY = json.dumps([{
    "type": "hashed-password",
    "auth-id": "sensor1",
    "secrets": [{"pwd-plain": "hunter2"}],
}]).encode()


@pytest.fixture
def handler(fake_service, tracer):
    return CredentialsManagementHandler(fake_service, tracer)


@pytest.fixture
def device_handler(fake_service, tracer):
    return DeviceManagementHandler(fake_service, tracer)


# ─── read_credentials ────────────────────────────────────────────

async def test_read_renders_credentials_and_etag(handler, fake_service, tracer):
    credential = PasswordCredential(
        auth_id="sensor1",
        secrets=[PasswordSecret(password_hash="AQID", hash_function="sha-256")],
    )
    fake_service.results["read_credentials"] = OperationResult.ok(200, [credential], "v7")

    response = await handler.read_credentials("tenant", "4711")

    assert response.status_code == 200
    assert response.headers == {"ETag": "v7"}
    assert response.body == [{
        "type": "hashed-password",
        "auth-id": "sensor1",
        "secrets": [{"pwd-hash": "AQID", "hash-function": "sha-256"}],
    }]
    assert tracer.spans[0].name == SPAN_NAME_GET_CREDENTIALS
    assert tracer.spans[0].finish_count == 1


async def test_read_without_version_has_no_etag(handler, fake_service):
    fake_service.results["read_credentials"] = OperationResult.ok(200, [])
    response = await handler.read_credentials("tenant", "4711")
    assert response.headers == {}
    assert response.body == []


async def test_read_non_success_has_status_only(handler, fake_service, tracer):
    fake_service.results["read_credentials"] = OperationResult.ok(404, None, "v1")
    response = await handler.read_credentials("tenant", "4711")
    assert response.status_code == 404
    assert response.body is None
    assert response.headers == {}
    assert tracer.spans[0].tags["http.status_code"] == 404
    assert tracer.spans[0].finish_count == 1


async def test_read_rejects_invalid_tenant_id(handler, fake_service, tracer):
    response = await handler.read_credentials("bad tenant", "4711")
    assert response.status_code == 400
    assert fake_service.calls == []
    assert tracer.spans[0].finish_count == 1


# ─── update_credentials ──────────────────────────────────────────

async def test_update_passes_decoded_credentials_and_if_match(handler, fake_service):
    fake_service.results["update_credentials"] = OperationResult.ok(204, None, "v2")

    response = await handler.update_credentials("tenant", "4711", VALID_BODY, '"v1"')

    assert response.status_code == 204
    assert response.body is None
    assert response.headers == {"ETag": "v2"}
    name, (tenant_id, device_id, credentials, version) = fake_service.calls[0]
    assert name == "update_credentials"
    assert (tenant_id, device_id) == ("tenant", "4711")
    assert isinstance(credentials[0], PasswordCredential)
    assert version == '"v1"'


async def test_update_without_if_match_passes_none(handler, fake_service):
    await handler.update_credentials("tenant", "4711", VALID_BODY)
    assert fake_service.calls[0][1][3] is None


@pytest.mark.parametrize("body", [
    b"not json",
    b"",
    b'{"type": "psk"}',
    b'[{"type": "psk", "secrets": []}]',
    b'[{"type": "hashed-password", "auth-id": "a", "secrets": [{}]}]',
])
async def test_update_decode_failure_never_calls_service(handler, fake_service, tracer, body):
    response = await handler.update_credentials("tenant", "4711", body, "v1")

    assert response.status_code == 400
    assert response.body["error"]["code"] in ("VALIDATION_ERROR", "INVALID_CREDENTIALS")
    assert response.body["error"]["context"]["device_id"] == "4711"
    assert fake_service.calls == []
    span = tracer.spans[0]
    assert span.name == SPAN_NAME_UPDATE_CREDENTIALS
    assert span.errors
    assert span.tags["http.status_code"] == 400
    assert span.finish_count == 1


async def test_update_aborts_whole_batch_on_later_invalid_element(handler, fake_service):
    body = json.dumps([
        {"type": "psk", "auth-id": "ok", "secrets": [{"key": "c2VjcmV0"}]},
        {"type": "psk", "auth-id": "bad id", "secrets": []},
    ]).encode()
    response = await handler.update_credentials("tenant", "4711", body)
    assert response.status_code == 400
    assert fake_service.calls == []


async def test_update_passes_service_status_through(handler, fake_service, tracer):
    fake_service.results["update_credentials"] = OperationResult.empty(412)
    response = await handler.update_credentials("tenant", "4711", VALID_BODY, "stale")
    assert response.status_code == 412
    assert response.body is None
    assert tracer.spans[0].finish_count == 1


async def test_classified_service_failure_renders_its_status(handler, fake_service, tracer):
    fake_service.results["update_credentials"] = ServerError(503, "store offline")
    response = await handler.update_credentials("tenant", "4711", VALID_BODY)
    assert response.status_code == 503
    assert response.body is None
    assert tracer.spans[0].errors
    assert tracer.spans[0].finish_count == 1


async def test_unexpected_service_failure_propagates_after_finishing_span(
    handler, fake_service, tracer,
):
    fake_service.results["read_credentials"] = RuntimeError("boom")
    with pytest.raises(RuntimeError):
        await handler.read_credentials("tenant", "4711")
    assert tracer.spans[0].tags["http.status_code"] == 500
    assert tracer.spans[0].finish_count == 1


async def test_trace_parent_reaches_tracer(handler, tracer):
    await handler.update_credentials("tenant", "4711", VALID_BODY, trace_parent="00-abc-01")
    assert tracer.spans[0].parent == "00-abc-01"


# ─── Device handler ──────────────────────────────────────────────

async def test_create_device_renders_location_and_etag(device_handler, fake_service):
    fake_service.results["create_device"] = OperationResult.ok(201, "4711", "v1")
    response = await device_handler.create_device("tenant", "4711", b'{"enabled": false}')
    assert response.status_code == 201
    assert response.body == {"id": "4711"}
    assert response.headers == {"ETag": "v1", "Location": "/v1/devices/tenant/4711"}
    device = fake_service.calls[0][1][2]
    assert device.enabled is False


async def test_create_device_with_conflicting_relationships_is_rejected(
    device_handler, fake_service,
):
    body = json.dumps({"memberOf": ["g"], "viaGroups": ["gw"]}).encode()
    response = await device_handler.create_device("tenant", "4711", body)
    assert response.status_code == 400
    assert fake_service.calls == []


async def test_read_device_encodes_payload(device_handler, fake_service):
    fake_service.results["read_device"] = OperationResult.ok(
        200, Device(mapper="test"), "v3",
    )
    response = await device_handler.read_device("tenant", "4711")
    assert response.body == {"mapper": "test"}
    assert response.headers["ETag"] == "v3"


async def test_update_device_threads_if_match(device_handler, fake_service):
    await device_handler.update_device("tenant", "4711", b"{}", "v9")
    assert fake_service.calls[0][1][3] == "v9"


async def test_delete_device_threads_if_match(device_handler, fake_service, tracer):
    fake_service.results["delete_device"] = ClientError(404)
    response = await device_handler.delete_device("tenant", "4711", "v9")
    assert response.status_code == 404
    assert fake_service.calls[0][1][2] == "v9"
    assert tracer.spans[0].finish_count == 1

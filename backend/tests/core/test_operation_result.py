"""Operation Result — success classification and constructors."""

from device_registry.core.operation_result import OperationResult


def test_ok_carries_payload_and_version():
    result = OperationResult.ok(200, ["a"], "v1")
    assert result.payload == ["a"]
    assert result.resource_version == "v1"
    assert result.is_success


def test_empty_has_no_payload_or_version():
    result = OperationResult.empty(404)
    assert result.payload is None
    assert result.resource_version is None
    assert not result.is_success


def test_no_content_is_success():
    assert OperationResult.empty(204).is_success

"""Error Taxonomy — status-class ranges and the REST error envelope.

Tests cover:
    - validate_status_code accepts/rejects per class (pure)
    - ClientError / ServerError refuse out-of-range codes at construction
    - error_from_status picks the class from the code
    - to_response carries code, message, category and status class
"""

import pytest

from device_registry.core.errors import (
    ClientError,
    CredentialsValidationError,
    DeviceInvariantError,
    ErrorCategory,
    ErrorSeverity,
    PreconditionFailedError,
    ServerError,
    ServiceInvocationError,
    StatusClass,
    error_from_status,
    status_class_of,
    validate_status_code,
)


# ─── status_class_of / validate_status_code ──────────────────────

def test_status_class_of_boundaries():
    assert status_class_of(399) is None
    assert status_class_of(400) is StatusClass.CLIENT
    assert status_class_of(499) is StatusClass.CLIENT
    assert status_class_of(500) is StatusClass.SERVER
    assert status_class_of(599) is StatusClass.SERVER
    assert status_class_of(600) is None


def test_validate_status_code_for_client_class():
    assert validate_status_code(404, StatusClass.CLIENT) is None
    assert validate_status_code(399, StatusClass.CLIENT) is not None
    assert validate_status_code(500, StatusClass.CLIENT) is not None


def test_validate_status_code_without_class_accepts_any_error():
    assert validate_status_code(400) is None
    assert validate_status_code(503) is None
    assert validate_status_code(200) is not None


def test_validate_status_code_rejects_non_integers():
    assert validate_status_code(True) is not None
    assert validate_status_code("404") is not None


# ─── Construction guards ─────────────────────────────────────────

@pytest.mark.parametrize("code", [399, 500])
def test_client_error_rejects_out_of_range_code(code):
    with pytest.raises(ValueError):
        ClientError(code)


def test_client_error_with_404_reports_client_class():
    error = ClientError(404)
    assert error.status_code == 404
    assert error.classification is StatusClass.CLIENT
    assert error.message == "Not Found"


@pytest.mark.parametrize("code", [499, 600])
def test_server_error_rejects_out_of_range_code(code):
    with pytest.raises(ValueError):
        ServerError(code)


def test_server_error_reports_server_class_and_critical_severity():
    error = ServerError(503, "down")
    assert error.classification is StatusClass.SERVER
    assert error.severity is ErrorSeverity.CRITICAL


def test_service_invocation_error_rejects_success_code():
    with pytest.raises(ValueError):
        ServiceInvocationError(200)


def test_cause_is_chained():
    cause = KeyError("x")
    error = ClientError(400, "bad", cause)
    assert error.__cause__ is cause


# ─── error_from_status ───────────────────────────────────────────

def test_error_from_status_maps_client_codes():
    assert isinstance(error_from_status(409), ClientError)


def test_error_from_status_maps_server_codes():
    assert isinstance(error_from_status(502, "gateway"), ServerError)


# ─── Concrete errors ─────────────────────────────────────────────

def test_credentials_validation_error_is_client_400():
    error = CredentialsValidationError("'type' field must be set", field="type")
    assert error.status_code == 400
    assert error.code == "INVALID_CREDENTIALS"
    assert error.category is ErrorCategory.VALIDATION
    assert error.field == "type"


def test_device_invariant_error_code():
    error = DeviceInvariantError("conflict", "via")
    assert error.status_code == 400
    assert error.code == "DEVICE_INVARIANT_VIOLATION"


def test_precondition_failed_is_412():
    error = PreconditionFailedError("v1")
    assert error.status_code == 412
    assert error.resource_version == "v1"


def test_to_response_envelope():
    body = ClientError(404, "Device 'x' not found").to_response()
    assert body["error"]["message"] == "Device 'x' not found"
    assert body["error"]["status_class"] == "client"
    assert body["error"]["severity"] == "error"
    assert "timestamp" in body["error"]

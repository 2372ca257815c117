"""Credentials Codec — untyped JSON objects <-> typed credential variants.

Invariants:
    - Non-object elements (null, numbers, strings, arrays) are dropped silently
    - type and auth-id must be present, non-empty and match their patterns
    - Decoding is fail-fast: first invalid element aborts, no partial list
    - Every decode failure is a CredentialsValidationError (400)
    - Encoding is the structural inverse; unset optional fields are omitted

Design Decisions:
    - Explicit dispatch table keyed by discriminant, with DEFAULT_DECODER for
      unknown types, no subtype reflection
"""

import re
from collections.abc import Callable, Iterable
from typing import Any

from pydantic import ValidationError

from device_registry.core.domain_types import (
    AUTH_ID_PATTERN,
    CREDENTIAL_TYPE_PATTERN,
    FIELD_AUTH_ID,
    FIELD_TYPE,
    CredentialType,
)
from device_registry.core.errors import CredentialsValidationError
from device_registry.schemas.credentials import (
    CommonCredential,
    GenericCredential,
    PasswordCredential,
    PskCredential,
    X509CertificateCredential,
)

CredentialDecoder = Callable[[dict[str, Any]], CommonCredential]


def _model_decoder(model: type[CommonCredential]) -> CredentialDecoder:
    """Build a decoder that maps pydantic failures to CredentialsValidationError."""

    def decode(obj: dict[str, Any]) -> CommonCredential:
        try:
            return model.model_validate(obj)
        except ValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(loc) for loc in first["loc"]) or None
            raise CredentialsValidationError(
                f"Invalid {obj.get(FIELD_TYPE)} credential: {first['msg']}",
                field=field, cause=e,
            )

    return decode


CREDENTIAL_DECODERS: dict[str, CredentialDecoder] = {
    CredentialType.HASHED_PASSWORD.value: _model_decoder(PasswordCredential),
    CredentialType.PSK.value: _model_decoder(PskCredential),
    CredentialType.X509_CERT.value: _model_decoder(X509CertificateCredential),
}
DEFAULT_DECODER: CredentialDecoder = _model_decoder(GenericCredential)


def verify_field_pattern(obj: dict[str, Any], name: str, pattern: re.Pattern) -> str:
    """Return the field value if set and matching, else raise."""
    value = obj.get(name)
    if not isinstance(value, str) or not value:
        raise CredentialsValidationError(f"'{name}' field must be set", field=name)
    if not pattern.fullmatch(value):
        raise CredentialsValidationError(
            f"'{name}' value : '{value}' does not match allowed pattern: "
            f"{pattern.pattern}",
            field=name,
        )
    return value


def decode_credential(obj: dict[str, Any]) -> CommonCredential:
    """Decode one credential object, dispatching on its type."""
    credential_type = verify_field_pattern(obj, FIELD_TYPE, CREDENTIAL_TYPE_PATTERN)
    verify_field_pattern(obj, FIELD_AUTH_ID, AUTH_ID_PATTERN)
    decoder = CREDENTIAL_DECODERS.get(credential_type, DEFAULT_DECODER)
    return decoder(obj)


def decode_credentials(objects: Iterable[Any]) -> list[CommonCredential]:
    """Decode a JSON array of credentials. Raises on the first invalid one."""
    if not isinstance(objects, (list, tuple)):
        raise CredentialsValidationError("Credentials payload must be a JSON array")
    return [decode_credential(obj) for obj in objects if isinstance(obj, dict)]


def encode_credential(credential: CommonCredential) -> dict[str, Any]:
    return credential.model_dump(by_alias=True, exclude_none=True, mode="json")


def encode_credentials(credentials: Iterable[CommonCredential]) -> list[dict[str, Any]]:
    return [encode_credential(c) for c in credentials]


def strip_private_info(
    credentials: Iterable[CommonCredential],
) -> list[CommonCredential]:
    """Copies without pwd-hash, salt, pwd-plain and key."""
    return [c.without_private_info() for c in credentials]

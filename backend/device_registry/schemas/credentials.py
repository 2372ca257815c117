"""Credential Schemas — typed credential variants and their secrets.

Invariants:
    - Every credential carries type, auth-id and a list of secrets
    - Typed variants pin their discriminant with a Literal
    - GenericCredential keeps unknown fields and opaque secret objects unchanged
    - not-before must not be later than not-after; both carry an offset or neither does
    - enabled is a JSON boolean, no coercion from strings or numbers
    - Password secrets hold either pwd-plain or pwd-hash + hash-function, never both
    - PSK secrets hold a base64 key

Design Decisions:
    - Wire names via aliases (auth-id, pwd-hash, ...), Python names via
      populate_by_name: services construct models without touching the aliases
    - without_private_info() copies instead of mutating: values are request-scoped
"""

import binascii
import base64
from datetime import datetime
from typing import Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from device_registry.core.domain_types import HashFunction

# bcrypt input limit
MAX_PLAIN_PASSWORD_BYTES = 72


def _is_base64(value: str) -> bool:
    try:
        base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError):
        return False
    return True


# ─── Secrets ─────────────────────────────────────────────────────

class CommonSecret(BaseModel):
    """Fields shared by every secret kind."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    PRIVATE_FIELDS: ClassVar[tuple[str, ...]] = ()

    id: str | None = None
    enabled: bool | None = Field(None, strict=True)
    not_before: datetime | None = Field(None, alias="not-before")
    not_after: datetime | None = Field(None, alias="not-after")
    comment: str | None = None

    @model_validator(mode="after")
    def check_validity_period(self):
        if self.not_before is None or self.not_after is None:
            return self
        if (self.not_before.tzinfo is None) != (self.not_after.tzinfo is None):
            raise ValueError("not-before and not-after must both carry a UTC offset or neither")
        if self.not_before > self.not_after:
            raise ValueError("not-before must not be later than not-after")
        return self

    def without_private_info(self):
        """Copy without secret material, for read responses."""
        return self.model_copy(update={name: None for name in self.PRIVATE_FIELDS})


class PasswordSecret(CommonSecret):
    """Hashed password, or a plain one still to be hashed by the service."""

    PRIVATE_FIELDS: ClassVar[tuple[str, ...]] = ("password_hash", "salt", "password_plain")

    password_hash: str | None = Field(None, alias="pwd-hash")
    salt: str | None = None
    hash_function: HashFunction | None = Field(None, alias="hash-function")
    password_plain: str | None = Field(None, alias="pwd-plain")

    @model_validator(mode="after")
    def check_password_material(self):
        hashed = (self.password_hash, self.salt, self.hash_function)
        if self.password_plain is not None:
            if any(v is not None for v in hashed):
                raise ValueError(
                    "pwd-plain must not be combined with pwd-hash, salt or hash-function",
                )
            if not self.password_plain:
                raise ValueError("pwd-plain must not be empty")
            if len(self.password_plain.encode("utf-8")) > MAX_PLAIN_PASSWORD_BYTES:
                raise ValueError(
                    f"pwd-plain must not exceed {MAX_PLAIN_PASSWORD_BYTES} bytes",
                )
            return self
        if not self.password_hash or self.hash_function is None:
            raise ValueError("pwd-hash and hash-function must be set")
        if self.salt is not None and not _is_base64(self.salt):
            raise ValueError("salt must be base64 encoded")
        return self


class PskSecret(CommonSecret):
    """Pre-shared key secret."""

    PRIVATE_FIELDS: ClassVar[tuple[str, ...]] = ("key",)

    key: str | None = None

    @model_validator(mode="after")
    def check_key(self):
        if not self.key:
            raise ValueError("key must be set")
        if not _is_base64(self.key):
            raise ValueError("key must be base64 encoded")
        return self


class X509CertificateSecret(CommonSecret):
    """X.509 secrets carry validity and metadata only."""


# ─── Credentials ─────────────────────────────────────────────────

class CommonCredential(BaseModel):
    """Fields shared by every credential variant."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    type: str
    auth_id: str = Field(alias="auth-id")
    enabled: bool | None = Field(None, strict=True)
    extensions: dict[str, Any] | None = Field(None, alias="ext")
    secrets: list[Any]

    def without_private_info(self):
        """Copy with every secret stripped of its private fields."""
        return self.model_copy(update={
            "secrets": [s.without_private_info() for s in self.secrets],
        })


class PasswordCredential(CommonCredential):
    type: Literal["hashed-password"] = "hashed-password"
    secrets: list[PasswordSecret]


class PskCredential(CommonCredential):
    type: Literal["psk"] = "psk"
    secrets: list[PskSecret]


class X509CertificateCredential(CommonCredential):
    type: Literal["x509-cert"] = "x509-cert"
    secrets: list[X509CertificateSecret]


class GenericCredential(CommonCredential):
    """Catch-all for types without a dedicated variant."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    secrets: list[dict[str, Any]]

    def without_private_info(self):
        return self.model_copy()

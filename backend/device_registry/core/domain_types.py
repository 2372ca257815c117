"""Domain Types — identifiers, credential discriminants and wire constants.

Invariants:
    - TenantId, DeviceId, AuthId wrap str; never use bare str in signatures
    - CredentialType values are the literal discriminants on the wire
    - Patterns are matched with fullmatch (whole value, no trailing newline)

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

import re
from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

TenantId = NewType("TenantId", str)
DeviceId = NewType("DeviceId", str)
AuthId = NewType("AuthId", str)
ResourceVersion = NewType("ResourceVersion", str)


# ─── Enums ───────────────────────────────────────────────────────

class CredentialType(str, Enum):
    """Discriminants with a dedicated credential variant."""
    HASHED_PASSWORD = "hashed-password"
    PSK = "psk"
    X509_CERT = "x509-cert"


class HashFunction(str, Enum):
    """Hash functions accepted for hashed-password secrets."""
    SHA_256 = "sha-256"
    SHA_512 = "sha-512"
    BCRYPT = "bcrypt"


# ─── Patterns ────────────────────────────────────────────────────

CREDENTIAL_TYPE_PATTERN = re.compile(r"[a-z0-9_.-]+")
AUTH_ID_PATTERN = re.compile(r"[a-zA-Z0-9_=.-]+")

DEFAULT_TENANT_ID_PATTERN = r"[a-zA-Z0-9_.-]+"
DEFAULT_DEVICE_ID_PATTERN = r"[a-zA-Z0-9_.:=-]+"


# ─── Wire Field Names ────────────────────────────────────────────

FIELD_TYPE = "type"
FIELD_AUTH_ID = "auth-id"

# Message properties / annotations carrying presence information
PROPERTY_TTD = "ttd"
PROPERTY_TENANT_ID = "tenant_id"
PROPERTY_DEVICE_ID = "device_id"
TTD_VALUE_UNLIMITED = -1

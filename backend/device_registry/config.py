"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - get_settings() is cached (lru_cache): single instance per process
    - Id patterns compile; password_hash_function is one the service can compute

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for every setting: works out-of-the-box for local runs
"""

import re
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from device_registry.core.domain_types import (
    DEFAULT_DEVICE_ID_PATTERN,
    DEFAULT_TENANT_ID_PATTERN,
)


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # API
    api_version: str = "v1"
    cors_origins: list[str] = ["http://localhost:3000"]
    max_payload_size: int = 2000  # bytes

    # Identifiers accepted in request paths
    tenant_id_pattern: str = DEFAULT_TENANT_ID_PATTERN
    device_id_pattern: str = DEFAULT_DEVICE_ID_PATTERN

    @field_validator("tenant_id_pattern", "device_id_pattern")
    @classmethod
    def check_pattern_compiles(cls, v: str) -> str:
        try:
            re.compile(v)
        except re.error as e:
            raise ValueError(f"invalid pattern: {e}")
        return v

    # Credentials
    password_hash_function: str = "bcrypt"
    bcrypt_rounds: int = 10

    @field_validator("password_hash_function")
    @classmethod
    def check_hash_function(cls, v: str) -> str:
        if v not in ("bcrypt", "sha-256", "sha-512"):
            raise ValueError("password_hash_function must be bcrypt, sha-256 or sha-512")
        return v

    @field_validator("bcrypt_rounds")
    @classmethod
    def check_bcrypt_rounds(cls, v: int) -> int:
        if not 4 <= v <= 31:
            raise ValueError("bcrypt_rounds must be between 4 and 31")
        return v

    # Observability
    service_name: str = "device-registry"
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()

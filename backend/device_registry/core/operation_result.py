"""Operation Result — outcome of a management service call.

Invariants:
    - status is an HTTP-style status code
    - resource_version is opaque; it is rendered as the ETag header unchanged
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """Status, optional payload and optional resource version."""
    status: int
    payload: T | None = None
    resource_version: str | None = None

    @property
    def is_success(self) -> bool:
        return 200 <= self.status < 300

    @classmethod
    def ok(
        cls, status: int, payload: T | None = None, resource_version: str | None = None,
    ) -> "OperationResult[T]":
        return cls(status, payload, resource_version)

    @classmethod
    def empty(cls, status: int) -> "OperationResult[T]":
        return cls(status)

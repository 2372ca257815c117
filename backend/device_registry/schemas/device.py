"""Device Schema — relationship and behavior metadata of one registered device.

Invariants:
    - enabled is tri-state: None (unset, effectively enabled), True, False;
      only JSON booleans are accepted
    - memberOf is mutually exclusive with via and with viaGroups
    - set_via / set_via_groups / set_member_of fail at the mutation site
    - memberOf holds unique group ids (first-seen order kept)

Design Decisions:
    - Setters raise DeviceInvariantError (400) using the pure checks from
      core/enforce_device; decoding runs the same checks in a model_validator
    - validate_assignment=True: plain attribute assignment cannot bypass the checks
"""

from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from device_registry.core.enforce_device import (
    check_member_of_vs_via,
    check_member_of_vs_via_groups,
    validate_relationships,
)
from device_registry.core.errors import DeviceInvariantError


class Device(BaseModel):
    """A device's relationship fields, extensions and mapper."""

    model_config = ConfigDict(
        populate_by_name=True, validate_assignment=True, extra="ignore",
    )

    enabled: bool | None = Field(None, strict=True)
    extensions: dict[str, Any] = Field(default_factory=dict, alias="ext")
    via: list[str] = Field(default_factory=list)
    via_groups: list[str] = Field(default_factory=list, alias="viaGroups")
    member_of: list[str] = Field(default_factory=list, alias="memberOf")
    mapper: str | None = None

    @field_validator("member_of")
    @classmethod
    def dedupe_member_of(cls, v: list[str]) -> list[str]:
        return list(dict.fromkeys(v))

    @model_validator(mode="after")
    def check_relationships(self):
        problems = validate_relationships(self.member_of, self.via, self.via_groups)
        if problems:
            raise ValueError("; ".join(problems))
        return self

    @property
    def is_enabled(self) -> bool:
        """Effective enabled state, unset counts as enabled."""
        return self.enabled is not False

    def set_via(self, via: Iterable[str]) -> None:
        via = list(via)
        problem = check_member_of_vs_via(self.member_of, via)
        if problem:
            raise DeviceInvariantError(problem, "via")
        self.via = via

    def set_via_groups(self, via_groups: Iterable[str]) -> None:
        via_groups = list(via_groups)
        problem = check_member_of_vs_via_groups(self.member_of, via_groups)
        if problem:
            raise DeviceInvariantError(problem, "viaGroups")
        self.via_groups = via_groups

    def set_member_of(self, member_of: Iterable[str]) -> None:
        member_of = list(member_of)
        problem = (
            check_member_of_vs_via(member_of, self.via)
            or check_member_of_vs_via_groups(member_of, self.via_groups)
        )
        if problem:
            raise DeviceInvariantError(problem, "memberOf")
        self.member_of = member_of

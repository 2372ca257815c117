"""Device Relationship Enforcement — mutual exclusion of memberOf vs via/viaGroups.

Invariants:
    - All functions are PURE: no IO, no side effects
    - Return error message on violation, None on success
    - Empty sequences never conflict with anything

Design Decisions:
    - Returning messages (not raising) lets callers choose between failing fast
      (Device setters) and collecting every violation (validate_relationships)
"""

from collections.abc import Sequence


def check_member_of_vs_via(
    member_of: Sequence[str], via: Sequence[str],
) -> str | None:
    """memberOf and via must not both be non-empty."""
    if member_of and via:
        return "Property 'memberOf' and 'via' must not be set at the same time"
    return None


def check_member_of_vs_via_groups(
    member_of: Sequence[str], via_groups: Sequence[str],
) -> str | None:
    """memberOf and viaGroups must not both be non-empty."""
    if member_of and via_groups:
        return "Property 'memberOf' and 'viaGroups' must not be set at the same time"
    return None


def validate_relationships(
    member_of: Sequence[str], via: Sequence[str], via_groups: Sequence[str],
) -> list[str]:
    """Collect every relationship violation. Empty list when consistent."""
    return [
        problem
        for problem in (
            check_member_of_vs_via(member_of, via),
            check_member_of_vs_via_groups(member_of, via_groups),
        )
        if problem
    ]

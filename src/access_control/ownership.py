"""Ownership predicate used as the fallback path of access decisions."""

from typing import Any, Optional

from .principal import Principal


def is_owner(principal: Optional[Principal], owner_id: Any) -> bool:
    """Return True iff the principal's id equals the resource's owning id.

    Ids are compared in their string form so a UUID and its text match.
    """
    if principal is None or owner_id is None:
        return False
    return principal.id == str(owner_id)


__all__ = ["is_owner"]

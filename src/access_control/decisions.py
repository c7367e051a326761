"""Access decision engine.

``decide`` composes the role order and the ownership predicate into one
allow/deny outcome. It is pure: no storage access, no logging, no mutation.
Callers act on the returned ``Decision`` (log, raise, proceed).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from core.exceptions import AccountDisabled, InsufficientPermission, Unauthenticated
from .actions import Action
from .ownership import is_owner
from .principal import Principal
from .roles import meets_minimum


class DenialReason(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    ACCOUNT_DISABLED = "account_disabled"
    INSUFFICIENT_PERMISSION = "insufficient_permission"


_DENIAL_EXCEPTIONS = {
    DenialReason.UNAUTHENTICATED: Unauthenticated,
    DenialReason.ACCOUNT_DISABLED: AccountDisabled,
    DenialReason.INSUFFICIENT_PERMISSION: InsufficientPermission,
}


@dataclass(frozen=True)
class Decision:
    """Outcome of an access check: allowed, or denied with a reason."""

    allowed: bool
    reason: Optional[DenialReason] = None

    @classmethod
    def deny(cls, reason: DenialReason) -> "Decision":
        return cls(allowed=False, reason=reason)

    def raise_if_denied(self) -> None:
        """Raise the API error matching the denial reason, if any."""
        if not self.allowed:
            raise _DENIAL_EXCEPTIONS[self.reason]()


ALLOW = Decision(allowed=True)


def check_principal(principal: Optional[Principal]) -> Decision:
    """Steps shared by every protected action: present and enabled."""
    if principal is None:
        return Decision.deny(DenialReason.UNAUTHENTICATED)
    if not principal.active:
        return Decision.deny(DenialReason.ACCOUNT_DISABLED)
    return ALLOW


def decide(
    principal: Optional[Principal],
    action: Action,
    resource_owner_id: Any = None,
) -> Decision:
    """Decide whether ``principal`` may perform ``action``.

    Order matters: a satisfied role threshold allows immediately and the
    ownership predicate is only consulted for actions declaring a fallback.
    """
    decision = check_principal(principal)
    if not decision.allowed:
        return decision
    if meets_minimum(principal.role, action.minimum_role):
        return ALLOW
    if action.ownership_fallback and is_owner(principal, resource_owner_id):
        return ALLOW
    return Decision.deny(DenialReason.INSUFFICIENT_PERMISSION)


__all__ = ["ALLOW", "Decision", "DenialReason", "check_principal", "decide"]

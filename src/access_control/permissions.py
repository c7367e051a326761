"""DRF permission class routing view actions through the access decision engine."""

import logging

from rest_framework import permissions

from core.exceptions import InsufficientPermission
from .actions import Action, get_action
from .decisions import Decision, check_principal, decide

logger = logging.getLogger(__name__)


def enforce(decision: Decision, action: Action, principal) -> None:
    """Log a denial and raise its API error; no-op when allowed."""
    if not decision.allowed:
        logger.info(
            "Denied %s for principal %s: %s",
            action.name,
            getattr(principal, "id", None),
            decision.reason.value,
        )
    decision.raise_if_denied()


class ActionPermission(permissions.BasePermission):
    """Check access using the view's ``access_actions`` mapping.

    Views map each DRF action (``list``, ``create``, ...) or, for plain
    APIViews, each HTTP method to a catalog action name. ``None`` marks the
    operation as public. Operations missing from the mapping are denied.

    Actions with ownership fallback are settled at object level, where the
    owning id is known; ``has_permission`` then only requires an enabled
    principal. The owning id is read from ``view.owner_field`` on the object.
    """

    message = InsufficientPermission.default_detail

    def has_permission(self, request, view) -> bool:
        if getattr(view, "action_map", None) is not None and getattr(view, "action", None) is None:
            # Method not routed on this viewset; DRF answers 405.
            return True
        operation = self._operation(request, view)
        mapping = getattr(view, "access_actions", {})
        if operation not in mapping:
            logger.warning("%s has no access action for '%s'", type(view).__name__, operation)
            raise InsufficientPermission()

        action = self._get_action(request, view)
        if action is None:
            return True

        principal = getattr(request, "principal", None)
        if action.ownership_fallback:
            decision = check_principal(principal)
        else:
            decision = decide(principal, action)
        enforce(decision, action, principal)
        return True

    def has_object_permission(self, request, view, obj) -> bool:
        action = self._get_action(request, view)
        if action is None or not action.ownership_fallback:
            return True

        principal = getattr(request, "principal", None)
        owner_id = getattr(obj, getattr(view, "owner_field", "owner_id"), None)
        enforce(decide(principal, action, owner_id), action, principal)
        return True

    @staticmethod
    def _operation(request, view) -> str:
        return getattr(view, "action", None) or request.method.lower()

    def _get_action(self, request, view) -> Action | None:
        name = getattr(view, "access_actions", {}).get(self._operation(request, view))
        return get_action(name) if name else None


__all__ = ["ActionPermission", "enforce"]

"""Error taxonomy and the exception handler enforcing the API error envelope."""

import logging
from typing import Any

from django.conf import settings
from django.db import DatabaseError
from rest_framework import status
from rest_framework.exceptions import APIException, AuthenticationFailed, NotAuthenticated
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class Unauthenticated(APIException):
    """Missing, malformed, expired, or revoked credential."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Authentication credentials were not provided or are invalid."
    default_code = "unauthenticated"


class AccountDisabled(APIException):
    """The credential is valid but the account has been deactivated."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "This account has been disabled."
    default_code = "account_disabled"


class InsufficientPermission(APIException):
    """Role and ownership checks both failed."""

    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "You do not have permission to perform this action on this resource."
    default_code = "insufficient_permission"


class InvalidParameter(APIException):
    """Malformed listing, filter, or request parameter."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid parameter."
    default_code = "invalid_parameter"


class NotFound(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Resource not found."
    default_code = "not_found"


class ConflictingState(APIException):
    """The write would break a uniqueness or structural invariant."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = "The request conflicts with the current state of the resource."
    default_code = "conflicting_state"


class CycleDetected(APIException):
    """Stored category parent references form a loop.

    This is corrupted data, not a client mistake: the handler logs it at ERROR
    level and reports it as a server-side failure.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Category hierarchy is corrupted (cycle detected)."
    default_code = "cycle_detected"

    def __init__(self, detail=None, code=None, category_ids=()):
        super().__init__(detail, code)
        self.category_ids = tuple(category_ids)


class BlocklistUnavailable(Exception):
    """Raised when the Redis token blocklist cannot be reached (fail-closed)."""


def _normalize_errors(payload: Any) -> list[Any]:
    """Convert DRF's response.data into a list for the envelope."""

    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict) and "detail" in payload:
        # Common DRF pattern: {"detail": "..."}
        return [payload["detail"]]
    return [payload]


def custom_exception_handler(exc: Exception, context: dict[str, Any]) -> Response | None:
    """Wrap DRF errors in `{ "data": null, "errors": [...] }` shape.

    - Uses DRF's default handler to produce the base response.
    - Surfaces corrupted category graphs distinctly and always logs them.
    - Optionally exposes more detailed auth errors when DEBUG_AUTH_ERRORS is enabled.
    """

    if isinstance(exc, BlocklistUnavailable):
        return Response(
            {"data": None, "errors": ["Authentication service unavailable (blocklist)."]},
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    if isinstance(exc, DatabaseError):
        logger.exception("Database error while handling %s", _view_name(context))
        return Response(
            {"data": None, "errors": ["Service temporarily unavailable."]},
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    if isinstance(exc, CycleDetected):
        logger.error(
            "Category graph integrity violation in %s: ids=%s. Stored parent "
            "references must be repaired.",
            _view_name(context),
            list(exc.category_ids),
        )
        return Response(
            {"data": None, "errors": [str(exc.detail)], "code": exc.default_code},
            status=exc.status_code,
        )

    response = drf_exception_handler(exc, context)

    if response is None:
        return response

    if isinstance(exc, (AuthenticationFailed, NotAuthenticated)):
        response.status_code = status.HTTP_401_UNAUTHORIZED

    if response.status_code >= 400:
        base_errors = response.data

        if isinstance(exc, (AuthenticationFailed, NotAuthenticated, Unauthenticated)) and not getattr(
            settings, "DEBUG_AUTH_ERRORS", False
        ):
            errors = [Unauthenticated.default_detail]
        else:
            errors = _normalize_errors(base_errors)

        response.data = {"data": None, "errors": errors}

    return response


def _view_name(context: dict[str, Any]) -> str:
    view = context.get("view")
    return type(view).__name__ if view is not None else "unknown view"


__all__ = [
    "AccountDisabled",
    "BlocklistUnavailable",
    "ConflictingState",
    "CycleDetected",
    "InsufficientPermission",
    "InvalidParameter",
    "NotFound",
    "Unauthenticated",
    "custom_exception_handler",
]

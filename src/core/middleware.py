"""Middleware that verifies the bearer token and attaches the acting principal."""

import logging

from django.conf import settings
from django.contrib.auth.models import AnonymousUser
from django.http import JsonResponse
from django.utils.deprecation import MiddlewareMixin
from rest_framework import status

from authentication.services import IdentityVerifier
from .exceptions import AccountDisabled, BlocklistUnavailable, Unauthenticated

logger = logging.getLogger(__name__)


class JWTAuthMiddleware(MiddlewareMixin):
    """Resolve ``Authorization: Bearer`` into ``request.user`` and ``request.principal``.

    Requests without a bearer token continue anonymously (``principal`` is
    None). A token that is present but fails verification ends the request
    with 401; a blocklist outage ends it with 503.
    """

    def process_request(self, request):  # type: ignore[override]
        """Authenticate request using Bearer access token if present."""
        request.user = AnonymousUser()
        request.principal = None

        auth_header = request.META.get("HTTP_AUTHORIZATION", "")
        if not auth_header or not auth_header.startswith("Bearer "):
            return None

        token = auth_header.split(" ", 1)[1].strip()

        try:
            user, principal = IdentityVerifier.authenticate(token)
        except AccountDisabled as exc:
            logger.warning("Rejected token for disabled account on %s", request.path)
            return _unauthorized(str(exc.detail))
        except Unauthenticated as exc:
            logger.warning("Rejected bearer token on %s: %s", request.path, exc.detail)
            return _unauthorized(str(exc.detail))
        except BlocklistUnavailable:
            logger.error("Token blocklist unavailable; failing closed on %s", request.path)
            return _service_unavailable()

        request.user = user
        request.principal = principal
        return None


def _unauthorized(detail: str) -> JsonResponse:
    if not getattr(settings, "DEBUG_AUTH_ERRORS", False) and detail != AccountDisabled.default_detail:
        detail = Unauthenticated.default_detail
    return JsonResponse({"data": None, "errors": [detail]}, status=status.HTTP_401_UNAUTHORIZED)


def _service_unavailable() -> JsonResponse:
    return JsonResponse(
        {"data": None, "errors": ["Authentication service unavailable (blocklist)."]},
        status=status.HTTP_503_SERVICE_UNAVAILABLE,
    )


__all__ = ["JWTAuthMiddleware"]

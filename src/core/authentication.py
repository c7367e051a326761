"""Authentication helpers that bridge JWT middleware into DRF.

Token verification happens in ``JWTAuthMiddleware``. This authenticator only
surfaces the account the middleware already attached to the Django request,
so DRF's ``request.user`` and the middleware's ``request.principal`` always
describe the same identity.
"""

from typing import Any, Optional, Tuple

from django.contrib.auth.models import AnonymousUser
from rest_framework.authentication import BaseAuthentication


class MiddlewareUserAuthentication(BaseAuthentication):
    """Expose ``request._request.user`` (set by middleware) to DRF."""

    def authenticate(self, request) -> Optional[Tuple[Any, None]]:
        # DRF's Request wraps the original Django HttpRequest as ``._request``.
        django_request = getattr(request, "_request", None)
        if django_request is None:
            return None

        user = getattr(django_request, "user", None)
        if user is None or isinstance(user, AnonymousUser):
            return None

        return user, None

    def authenticate_header(self, request) -> str:
        """Advertise the bearer scheme so DRF answers 401 rather than 403."""
        return 'Bearer realm="api"'


__all__ = ["MiddlewareUserAuthentication"]

"""Response helpers and base classes for consistent API envelopes."""

from typing import Any

from django.http import Http404
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.viewsets import ModelViewSet

from .exceptions import NotFound
from .listing import QuerySpec, pagination_envelope


def api_response(data: Any, status: int = 200) -> Response:
    """Return data wrapped in the standard envelope.

    All successful JSON responses should use this helper to ensure the
    `{ "data": ..., "errors": [] }` shape.
    """

    return Response({"data": data, "errors": []}, status=status)


def listing_response(key: str, items: list[Any], spec: QuerySpec, total: int) -> Response:
    """Envelope a listed page: ``{key: items, "pagination": {...}}``."""

    return api_response({key: items, "pagination": pagination_envelope(spec, total)})


def _is_enveloped(payload: Any) -> bool:
    return isinstance(payload, dict) and "data" in payload and "errors" in payload


class EnvelopeMixin:
    """Mixin to wrap successful responses in the standard envelope."""

    def finalize_response(self, request, response, *args, **kwargs):  # type: ignore[override]
        """Ensure non-error responses include the `{data, errors}` envelope."""
        if hasattr(response, "data") and response.status_code and response.status_code < 400:
            if response.status_code != 204 and not _is_enveloped(response.data):
                response.data = {"data": response.data, "errors": []}
        # DRF's APIView/ModelViewSet provide finalize_response; mixin alone doesn't.
        return super().finalize_response(request, response, *args, **kwargs)  # type: ignore[attr-defined]


class ResourceLookupMixin:
    """Report missing detail-route objects as ``NotFound`` naming the resource."""

    def get_object(self):
        try:
            return super().get_object()  # type: ignore[misc]
        except Http404:
            name = self.get_queryset().model._meta.verbose_name  # type: ignore[attr-defined]
            raise NotFound(f"{name.capitalize()} not found.") from None


class BaseAPIView(EnvelopeMixin, APIView):
    """APIView that ensures successful responses use the standard envelope."""


class BaseViewSet(EnvelopeMixin, ResourceLookupMixin, ModelViewSet):
    """ModelViewSet variant that wraps successful responses in the envelope."""

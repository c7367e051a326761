"""Project-level endpoints that belong to no single resource."""

from typing import Any

from django.utils import timezone

from .response import BaseAPIView, api_response


class HealthView(BaseAPIView):
    """Liveness probe; does not touch the database or Redis."""

    permission_classes: list[Any] = []

    # noinspection PyMethodMayBeStatic
    def get(self, request):
        return api_response({"status": "ok", "timestamp": timezone.now().isoformat()})

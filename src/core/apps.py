"""App configuration for the core project utilities."""

from django.apps import AppConfig


class CoreConfig(AppConfig):
    """Core app holds settings, URLs, middleware, errors, and listing composition."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "core"

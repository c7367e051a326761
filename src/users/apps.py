"""App configuration for account administration endpoints."""

from django.apps import AppConfig


class UsersConfig(AppConfig):
    """Account management on top of ``authentication.User``; no models of its own."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "users"

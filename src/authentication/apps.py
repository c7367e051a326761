"""App configuration for authentication components."""

from django.apps import AppConfig


class AuthenticationConfig(AppConfig):
    """Authentication app holds the account model, tokens, and identity verification."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "authentication"

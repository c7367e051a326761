"""App configuration for posts."""

from django.apps import AppConfig


class PostsConfig(AppConfig):
    """Posts app holds authored content and its publication lifecycle."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "posts"

"""Custom account model using bcrypt-hashed passwords and a fixed role.

Django's groups/permissions (PermissionsMixin) are deliberately not used:
authorization goes through ``access_control`` and its static role order.
"""

import uuid
from typing import ClassVar, Optional

from django.contrib.auth.models import AbstractBaseUser
from django.core.validators import RegexValidator
from django.db import models

from access_control.roles import DEFAULT_ROLE, Role
from .managers import UserManager

username_validator = RegexValidator(
    r"^[A-Za-z0-9_]{3,30}$",
    "Username must be 3-30 characters: letters, digits, and underscores only.",
)


class User(AbstractBaseUser):
    """Account identified by email, with a unique username and a single role."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    username = models.CharField(max_length=30, unique=True, validators=[username_validator])
    email = models.EmailField(unique=True)
    password_hash = models.CharField(max_length=128)
    full_name = models.CharField(max_length=100)
    bio = models.CharField(max_length=500, blank=True)
    role = models.CharField(max_length=10, choices=Role.choices(), default=DEFAULT_ROLE.label)
    is_active = models.BooleanField(default=True)
    token_version = models.PositiveIntegerField(default=1)
    date_joined = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = "email"
    EMAIL_FIELD = "email"
    REQUIRED_FIELDS: ClassVar[list[str]] = ["username", "full_name"]

    objects = UserManager()

    class Meta:
        """Default ordering shows newest accounts first."""
        ordering = ["-date_joined"]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.username

    @property
    def role_level(self) -> Role:
        return Role.parse(self.role)

    def set_password(self, raw_password: Optional[str]) -> None:  # type: ignore[override]
        """Override to ensure bcrypt hashing via manager utility."""

        if raw_password is None:
            self.password_hash = ""
        else:
            self.password_hash = UserManager.hash_password(raw_password)

    def check_password(self, raw_password: Optional[str]) -> bool:  # type: ignore[override]
        """Delegate to bcrypt verification helper."""

        if raw_password is None:
            return False
        return UserManager.verify_password(self, raw_password)


__all__ = ["User", "username_validator"]

"""Serializers for authentication flows (register, login, profile, password)."""

import logging
from typing import cast

from django.contrib.auth import get_user_model
from rest_framework import serializers

from access_control.roles import DEFAULT_ROLE
from core.exceptions import AccountDisabled, Unauthenticated
from .managers import UserManager
from .models import username_validator

User = get_user_model()

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


class RegisterSerializer(serializers.Serializer):
    """Validate and create an account with the default ``user`` role."""

    username = serializers.CharField(validators=[username_validator])
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, min_length=MIN_PASSWORD_LENGTH)
    full_name = serializers.CharField(min_length=2, max_length=100)

    @staticmethod
    def validate_email(value):
        """Ensure email is unique (case-insensitively) before creation."""
        value = UserManager.normalize_email(value)
        if User.objects.filter(email=value).exists():
            raise serializers.ValidationError("Email already in use")
        return value

    @staticmethod
    def validate_username(value):
        if User.objects.filter(username__iexact=value).exists():
            raise serializers.ValidationError("Username already in use")
        return value

    def create(self, validated_data):
        """Create the account; role is never taken from the payload."""
        manager = cast(UserManager, User.objects)
        user = manager.create_user(role=DEFAULT_ROLE.label, **validated_data)
        logger.info("Registered account %s (%s)", user.pk, user.username)
        return user


class LoginSerializer(serializers.Serializer):
    """Authenticate an account via email/password using bcrypt verification."""

    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)

    def validate(self, attrs):
        """Authenticate credentials and attach the account to validated_data."""
        email = UserManager.normalize_email(attrs.get("email"))
        password = attrs.get("password")
        try:
            user = User.objects.get(email=email)
        except User.DoesNotExist:
            logger.warning("Login failed for unknown email")
            raise Unauthenticated("Invalid credentials")

        if not UserManager.verify_password(user, password):
            logger.warning("Login failed for account %s: bad password", user.pk)
            raise Unauthenticated("Invalid credentials")

        if not user.is_active:
            logger.warning("Login refused for disabled account %s", user.pk)
            raise AccountDisabled()

        attrs["user"] = user
        return attrs


class UserDetailSerializer(serializers.ModelSerializer):
    """Read-only account payload for responses."""

    class Meta:
        """Expose identity, profile and role fields; never the password hash."""
        model = User
        fields = [
            "id",
            "username",
            "email",
            "full_name",
            "bio",
            "role",
            "is_active",
            "date_joined",
            "updated_at",
        ]
        read_only_fields = fields


class ProfileUpdateSerializer(serializers.ModelSerializer):
    """Patchable fields for /auth/me updates."""

    class Meta:
        """Allow partial updates of profile fields."""
        model = User
        fields = ["full_name", "bio"]
        extra_kwargs = {"full_name": {"min_length": 2}}

    def validate(self, attrs):
        """Reject payloads that try to change email, role, or status here."""
        forbidden = {"email", "role", "is_active"} & set(getattr(self, "initial_data", {}))
        if forbidden:
            raise serializers.ValidationError(
                f"{', '.join(sorted(forbidden))} cannot be updated via this endpoint"
            )
        return super().validate(attrs)


class ChangePasswordSerializer(serializers.Serializer):
    current_password = serializers.CharField(write_only=True)
    new_password = serializers.CharField(write_only=True, min_length=MIN_PASSWORD_LENGTH)

    def validate_current_password(self, value):
        user = self.context["user"]
        if not UserManager.verify_password(user, value):
            raise serializers.ValidationError("Current password is incorrect")
        return value

    def save(self, **kwargs):
        user = self.context["user"]
        user.set_password(self.validated_data["new_password"])
        user.save(update_fields=["password_hash", "updated_at"])
        logger.info("Password changed for account %s", user.pk)
        return user


__all__ = [
    "ChangePasswordSerializer",
    "LoginSerializer",
    "ProfileUpdateSerializer",
    "RegisterSerializer",
    "UserDetailSerializer",
]

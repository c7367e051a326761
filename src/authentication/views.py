"""Authentication endpoints: register, login, refresh, logout, profile, password."""

import logging
from typing import Any

from django.contrib.auth import get_user_model
from rest_framework import status
from rest_framework.response import Response

from access_control.decisions import check_principal
from core.exceptions import AccountDisabled, Unauthenticated
from core.response import BaseAPIView, api_response
from .serializers import (
    ChangePasswordSerializer,
    LoginSerializer,
    ProfileUpdateSerializer,
    RegisterSerializer,
    UserDetailSerializer,
)
from .services import TokenService

User = get_user_model()

logger = logging.getLogger(__name__)


class RegisterView(BaseAPIView):
    permission_classes: list[Any] = []

    # noinspection PyMethodMayBeStatic
    def post(self, request):
        """Register a new account and return its profile."""
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        return api_response(UserDetailSerializer(user).data, status=status.HTTP_201_CREATED)


class LoginView(BaseAPIView):
    permission_classes: list[Any] = []

    # noinspection PyMethodMayBeStatic
    def post(self, request):
        """Authenticate and issue access + refresh tokens."""
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.validated_data["user"]
        access, refresh = TokenService.generate_tokens(user)
        logger.info("Account %s logged in", user.pk)
        return api_response(
            {"access": access, "refresh": refresh, "user": UserDetailSerializer(user).data}
        )


class RefreshView(BaseAPIView):
    permission_classes: list[Any] = []

    # noinspection PyMethodMayBeStatic
    def post(self, request):
        """Exchange a valid refresh token for new access/refresh tokens."""
        refresh_token = request.data.get("refresh")
        if not refresh_token:
            raise Unauthenticated("Refresh token required")

        payload = TokenService.decode_token(refresh_token, expected_type="refresh")
        user = _get_user(payload.get("sub"))
        if user is None:
            raise Unauthenticated("Account not found")
        if not user.is_active:
            raise AccountDisabled()

        # Refresh tokens minted before the last logout-all carry a stale version.
        if payload.get("ver") != user.token_version:
            logger.warning("Rejected stale refresh token for account %s", user.pk)
            raise Unauthenticated("Invalid or revoked refresh token")

        access, new_refresh = TokenService.generate_tokens(user)
        return api_response({"access": access, "refresh": new_refresh})


class LogoutView(BaseAPIView):
    """Invalidate the current access token by blocklisting its jti."""

    permission_classes: list[Any] = []

    # noinspection PyMethodMayBeStatic
    def post(self, request):
        """Blocklist the bearer access token and return 204 No Content."""
        check_principal(request.principal).raise_if_denied()
        _block_current_token(request)
        # 204 responses must not include a body.
        return Response(status=status.HTTP_204_NO_CONTENT)


class LogoutAllView(BaseAPIView):
    """Invalidate all existing tokens for the current account across devices."""

    permission_classes: list[Any] = []

    # noinspection PyMethodMayBeStatic
    def post(self, request):
        """Increment token_version and blocklist the current access token."""
        check_principal(request.principal).raise_if_denied()

        user = request.user
        user.token_version = (user.token_version or 1) + 1
        user.save(update_fields=["token_version"])
        _block_current_token(request)
        logger.info("Revoked all tokens for account %s", user.pk)
        return Response(status=status.HTTP_204_NO_CONTENT)


class MeView(BaseAPIView):
    permission_classes: list[Any] = []

    # noinspection PyMethodMayBeStatic
    def get(self, request):
        """Return the current account's profile."""
        check_principal(request.principal).raise_if_denied()
        return api_response(UserDetailSerializer(request.user).data)

    # noinspection PyMethodMayBeStatic
    def patch(self, request):
        """Update profile fields for the current account."""
        check_principal(request.principal).raise_if_denied()
        serializer = ProfileUpdateSerializer(request.user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return api_response(UserDetailSerializer(request.user).data)


class ChangePasswordView(BaseAPIView):
    permission_classes: list[Any] = []

    # noinspection PyMethodMayBeStatic
    def post(self, request):
        """Replace the password after verifying the current one."""
        check_principal(request.principal).raise_if_denied()
        serializer = ChangePasswordSerializer(data=request.data, context={"user": request.user})
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(status=status.HTTP_204_NO_CONTENT)


def _get_user(user_id):
    """Retrieve an account by id, or None if missing or malformed."""
    if not user_id:
        return None
    try:
        return User.objects.get(id=user_id)
    except (User.DoesNotExist, ValueError):
        return None


def _block_current_token(request) -> None:
    auth_header = request.META.get("HTTP_AUTHORIZATION", "")
    if not auth_header.startswith("Bearer "):
        return
    payload = TokenService.decode_token(auth_header.split(" ", 1)[1].strip(), expected_type="access")
    TokenService.block_token(payload["jti"], payload["exp"])

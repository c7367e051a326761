"""Shared helpers for tests (account creation, authenticated clients, fake Redis)."""

from __future__ import annotations

from typing import Dict
from unittest import mock

from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from authentication.managers import UserManager
from authentication.services import TokenService

User = get_user_model()

DEFAULT_PASSWORD = "StrongPass123"


class FakeRedis:
    """Minimal Redis stub supporting the commands used by TokenService."""

    def __init__(self):
        self._store: Dict[str, str] = {}

    def setex(self, key: str, ttl_seconds: int, value: str) -> None:
        """Mimic Redis SETEX; TTL is ignored in tests, value stored in-memory."""
        self._store[key] = value

    def get(self, key: str):
        """Return stored value for key or None, matching Redis GET semantics."""
        return self._store.get(key)


class FakeRedisMixin:
    """Patch the blocklist client with a FakeRedis for a whole TestCase class."""

    @classmethod
    def setUpClass(cls):
        """Patch Redis clients to use the in-memory fake."""
        super().setUpClass()
        cls.fake_redis = FakeRedis()
        cls.redis_patchers = [
            mock.patch("core.redis_client.get_redis_client", return_value=cls.fake_redis),
            mock.patch("authentication.services.get_redis_client", return_value=cls.fake_redis),
        ]
        for patcher in cls.redis_patchers:
            patcher.start()

    @classmethod
    def tearDownClass(cls):
        """Stop Redis patches after the suite finishes."""
        for patcher in cls.redis_patchers:
            patcher.stop()
        super().tearDownClass()


def create_user(username: str, role: str = "user", password: str = DEFAULT_PASSWORD, **extra):
    """Create an account with a bcrypt-hashed password for tests."""

    extra.setdefault("email", f"{username}@example.com")
    extra.setdefault("full_name", username.replace("_", " ").title())
    return User.objects.create(
        username=username,
        password_hash=UserManager.hash_password(password),
        role=role,
        **extra,
    )


def auth_client(user) -> APIClient:
    """Return an APIClient authenticated with a fresh access token."""
    token, _ = TokenService.generate_tokens(user)
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
    return client

"""Token service for JWT issuance/decoding and the identity verifier."""

import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Tuple

import jwt
from django.conf import settings
from django.core.exceptions import ValidationError

from access_control.principal import Principal
from core.exceptions import AccountDisabled, BlocklistUnavailable, Unauthenticated
from core.redis_client import get_redis_client
from .models import User


class TokenService:
    """Handle JWT issuance, decoding, and blocklist operations."""

    ALGORITHM = "HS256"
    BLOCKLIST_PREFIX = "blocklist:token:"

    @staticmethod
    def access_ttl() -> timedelta:
        return timedelta(minutes=settings.ACCESS_TOKEN_TTL_MINUTES)

    @staticmethod
    def refresh_ttl() -> timedelta:
        return timedelta(hours=settings.REFRESH_TOKEN_TTL_HOURS)

    @classmethod
    def generate_tokens(cls, user) -> Tuple[str, str]:
        """Generate signed access and refresh tokens for the given account."""

        now = datetime.now(timezone.utc)
        access_payload = cls._build_payload(user, "access", now, cls.access_ttl())
        refresh_payload = cls._build_payload(user, "refresh", now, cls.refresh_ttl())

        access_token = jwt.encode(access_payload, settings.SECRET_KEY, algorithm=cls.ALGORITHM)
        refresh_token = jwt.encode(refresh_payload, settings.SECRET_KEY, algorithm=cls.ALGORITHM)
        return access_token, refresh_token

    @classmethod
    def _build_payload(cls, user, token_type: str, issued_at: datetime, ttl: timedelta) -> dict[str, Any]:
        exp = issued_at + ttl
        return {
            "sub": str(user.id),
            "jti": str(uuid.uuid4()),
            "exp": int(exp.timestamp()),
            "iat": int(issued_at.timestamp()),
            "type": token_type,
            "ver": user.token_version,
        }

    @classmethod
    def decode_token(cls, token: str, expected_type: str | None = None) -> dict[str, Any]:
        """Decode and validate a JWT; optionally enforce token type."""

        try:
            payload = jwt.decode(
                token,
                settings.SECRET_KEY,
                algorithms=[cls.ALGORITHM],
                options={"require": ["sub", "exp", "iat", "jti"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise Unauthenticated("Token has expired") from exc
        except jwt.InvalidTokenError as exc:
            raise Unauthenticated("Invalid token") from exc

        if expected_type and payload.get("type") != expected_type:
            raise Unauthenticated("Invalid token type")

        return payload

    @classmethod
    def block_token(cls, jti: str, exp: int) -> None:
        """Add token jti to blocklist until its expiration timestamp."""

        client = get_redis_client()
        ttl_seconds = max(1, exp - int(time.time()))
        try:
            client.setex(f"{cls.BLOCKLIST_PREFIX}{jti}", ttl_seconds, "1")
        except Exception as exc:  # pragma: no cover - network failure
            raise BlocklistUnavailable("Redis unavailable while blocklisting") from exc

    @classmethod
    def is_token_blocked(cls, jti: str) -> bool:
        """Check if a token jti is present in the blocklist."""

        client = get_redis_client()
        try:
            return client.get(f"{cls.BLOCKLIST_PREFIX}{jti}") is not None
        except Exception as exc:  # pragma: no cover - network failure
            raise BlocklistUnavailable("Redis unavailable while checking blocklist") from exc


@dataclass(frozen=True)
class VerifiedToken:
    """Claims of a verified access token."""

    account_id: str
    issued_at: datetime
    expires_at: datetime
    jti: str
    version: Optional[int]


class IdentityVerifier:
    """Resolve a bearer token to an enabled account and its Principal.

    Failures raise ``Unauthenticated`` (bad, expired, revoked, or stale token;
    missing account) or ``AccountDisabled``. A blocklist outage raises
    ``BlocklistUnavailable`` so callers fail closed.
    """

    @staticmethod
    def verify_token(token: str) -> VerifiedToken:
        payload = TokenService.decode_token(token, expected_type="access")
        if TokenService.is_token_blocked(payload["jti"]):
            raise Unauthenticated("Token has been revoked")
        return VerifiedToken(
            account_id=str(payload["sub"]),
            issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            jti=payload["jti"],
            version=payload.get("ver"),
        )

    @classmethod
    def authenticate(cls, token: str):
        """Return ``(account, principal)`` for a valid access token."""
        verified = cls.verify_token(token)
        account = _get_account(verified.account_id)
        if account is None:
            raise Unauthenticated("Account no longer exists")
        if verified.version != account.token_version:
            raise Unauthenticated("Token has been revoked")
        if not account.is_active:
            raise AccountDisabled()
        return account, Principal.from_account(account)


def _get_account(account_id: str) -> Optional[User]:
    try:
        return User.objects.get(id=account_id)
    except (User.DoesNotExist, ValueError, ValidationError):
        return None


__all__ = ["BlocklistUnavailable", "IdentityVerifier", "TokenService", "VerifiedToken"]

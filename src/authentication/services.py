"""Session service: signed session tokens backed by a Redis registry."""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from django.conf import settings
from rest_framework.exceptions import AuthenticationFailed

from core.redis_client import get_redis_client


class SessionStoreUnavailable(Exception):
    """Raised when the Redis session registry cannot be reached (fail-closed)."""


@dataclass(frozen=True)
class IssuedSession:
    """A freshly minted session token and its expiry."""

    token: str
    session_id: str
    expires_at: datetime


class SessionService:
    """Issue, validate, and revoke cookie sessions.

    The token handed to the browser is a signed JWT, but signature and expiry
    alone are not enough: its ``sid`` must also be present in Redis, so that
    signing out revokes the session immediately.
    """

    ALGORITHM = "HS256"
    TOKEN_TYPE = "session"
    SESSION_PREFIX = "session:"

    @classmethod
    def ttl(cls) -> timedelta:
        return timedelta(seconds=settings.AUTH_SESSION_TTL_SECONDS)

    @classmethod
    def create_session(cls, user) -> IssuedSession:
        """Register a new session for ``user`` and return its signed token."""

        now = datetime.now(timezone.utc)
        expires_at = now + cls.ttl()
        session_id = str(uuid.uuid4())
        payload = {
            "sub": str(user.id),
            "sid": session_id,
            "iat": int(now.timestamp()),
            "exp": int(expires_at.timestamp()),
            "type": cls.TOKEN_TYPE,
        }

        client = get_redis_client()
        try:
            client.setex(f"{cls.SESSION_PREFIX}{session_id}", int(cls.ttl().total_seconds()), str(user.id))
        except Exception as exc:  # pragma: no cover - network failure
            raise SessionStoreUnavailable("Redis unavailable while creating session") from exc

        token = jwt.encode(payload, settings.SECRET_KEY, algorithm=cls.ALGORITHM)
        return IssuedSession(token=token, session_id=session_id, expires_at=expires_at)

    @classmethod
    def decode_token(cls, token: str) -> dict[str, Any]:
        """Decode and validate a session JWT without consulting Redis."""

        try:
            payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[cls.ALGORITHM])
        except jwt.ExpiredSignatureError as exc:  # pragma: no cover - simple mapping
            raise AuthenticationFailed("Session has expired") from exc
        except jwt.InvalidTokenError as exc:  # pragma: no cover - simple mapping
            raise AuthenticationFailed("Invalid session token") from exc

        if payload.get("type") != cls.TOKEN_TYPE or not payload.get("sid") or not payload.get("sub"):
            raise AuthenticationFailed("Invalid session token")

        return payload

    @classmethod
    def validate(cls, token: str) -> dict[str, Any]:
        """Decode the token and ensure its session is still registered."""

        payload = cls.decode_token(token)
        client = get_redis_client()
        try:
            owner = client.get(f"{cls.SESSION_PREFIX}{payload['sid']}")
        except Exception as exc:  # pragma: no cover - network failure
            raise SessionStoreUnavailable("Redis unavailable while checking session") from exc

        if owner is None or owner != payload["sub"]:
            raise AuthenticationFailed("Session expired or revoked")
        return payload

    @classmethod
    def revoke(cls, session_id: str) -> None:
        """Remove a session from the registry."""

        client = get_redis_client()
        try:
            client.delete(f"{cls.SESSION_PREFIX}{session_id}")
        except Exception as exc:  # pragma: no cover - network failure
            raise SessionStoreUnavailable("Redis unavailable while revoking session") from exc

    @staticmethod
    def expires_at(payload: dict[str, Any]) -> datetime:
        return datetime.fromtimestamp(payload["exp"], tz=timezone.utc)


def set_session_cookie(response, session: IssuedSession) -> None:
    """Attach the session token cookie to an outgoing response."""

    response.set_cookie(
        settings.AUTH_COOKIE_NAME,
        session.token,
        max_age=settings.AUTH_SESSION_TTL_SECONDS,
        httponly=True,
        secure=settings.AUTH_COOKIE_SECURE,
        samesite="Lax",
        path="/",
    )


def clear_session_cookie(response) -> None:
    response.delete_cookie(settings.AUTH_COOKIE_NAME, path="/", samesite="Lax")


__all__ = [
    "IssuedSession",
    "SessionService",
    "SessionStoreUnavailable",
    "clear_session_cookie",
    "set_session_cookie",
]

"""Shared helpers for tests (fake Redis, user/article factories, session clients)."""

from __future__ import annotations

from typing import Dict
from unittest import mock

from django.conf import settings
from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from articles.models import Article
from authentication.services import SessionService

User = get_user_model()

DEFAULT_PASSWORD = "StrongPass123"


class FakeRedis:
    """Minimal Redis stub supporting the commands used by SessionService."""

    def __init__(self):
        self._store: Dict[str, str] = {}

    def setex(self, key: str, ttl_seconds: int, value: str) -> None:
        """Mimic Redis SETEX; TTL is ignored in tests, value stored in-memory."""
        self._store[key] = value

    def get(self, key: str):
        """Return stored value for key or None, matching Redis GET semantics."""
        return self._store.get(key)

    def flushall(self) -> None:
        """Drop every key, as after a Redis restart without persistence."""
        self._store.clear()

    def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self._store.pop(key, None) is not None:
                removed += 1
        return removed


class FakeRedisTestCase(TestCase):
    """TestCase that swaps the session registry for an in-memory FakeRedis."""

    @classmethod
    def setUpClass(cls):
        """Patch Redis clients to use the in-memory fake for all tests."""
        super().setUpClass()
        cls.fake_redis = FakeRedis()
        cls.patchers = [
            mock.patch("core.redis_client.get_redis_client", return_value=cls.fake_redis),
            mock.patch("authentication.services.get_redis_client", return_value=cls.fake_redis),
        ]
        for patcher in cls.patchers:
            patcher.start()

    @classmethod
    def tearDownClass(cls):
        """Stop Redis patches after all tests complete."""
        for patcher in cls.patchers:
            patcher.stop()
        super().tearDownClass()


def create_user(email: str, password: str = DEFAULT_PASSWORD, name: str | None = None, **extra):
    return User.objects.create_user(
        email=email,
        password=password,
        name=name or email.split("@")[0].title(),
        **extra,
    )


def create_article(author, title: str = "A test article", content: str = "Some article content here.", **extra):
    return Article.objects.create(author=author, title=title, content=content, **extra)


def session_token(user) -> str:
    return SessionService.create_session(user).token


def auth_client(user) -> APIClient:
    """Return an APIClient carrying a fresh session cookie for ``user``."""
    client = APIClient()
    client.cookies[settings.AUTH_COOKIE_NAME] = session_token(user)
    return client

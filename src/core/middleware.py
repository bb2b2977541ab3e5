"""Middleware to authenticate requests via the Redis-backed session cookie."""

import logging
from typing import Optional

from django.conf import settings
from django.contrib.auth.models import AnonymousUser
from django.core.exceptions import ValidationError
from django.http import JsonResponse
from django.utils.deprecation import MiddlewareMixin
from rest_framework import status
from rest_framework.exceptions import AuthenticationFailed

from authentication.models import User
from authentication.services import SessionService, SessionStoreUnavailable, clear_session_cookie

logger = logging.getLogger(__name__)


class SessionAuthMiddleware(MiddlewareMixin):
    """Validate the session token, attach request.user, and drop stale cookies."""

    # The admin site keeps using Django's own session login.
    EXEMPT_PREFIXES = ("/admin/",)

    def process_request(self, request):  # type: ignore[override]
        """Authenticate request using the session cookie or a Bearer token."""
        if request.path.startswith(self.EXEMPT_PREFIXES):
            return None

        request.session_claims = None
        request.stale_session_cookie = False

        token = get_session_token(request)
        if not token:
            request.user = AnonymousUser()
            return None

        try:
            payload = SessionService.validate(token)
        except AuthenticationFailed as exc:
            logger.debug("Rejected session token: %s", exc.detail)
            return self._anonymous(request)
        except SessionStoreUnavailable:
            logger.error("Session store unavailable while authenticating %s", request.path)
            return _service_unavailable()

        user = self._get_user(payload.get("sub"))
        if not user or not user.is_active:
            return self._anonymous(request)

        request.user = user
        request.session_claims = payload
        return None

    def process_response(self, request, response):  # type: ignore[override]
        # A view that issued a fresh session (sign-in/sign-up) keeps its cookie.
        name = settings.AUTH_COOKIE_NAME
        if getattr(request, "stale_session_cookie", False) and name in request.COOKIES and name not in response.cookies:
            clear_session_cookie(response)
        return response

    @staticmethod
    def _anonymous(request) -> None:
        request.user = AnonymousUser()
        request.stale_session_cookie = True
        return None

    @staticmethod
    def _get_user(user_id: Optional[str]) -> Optional[User]:
        if not user_id:
            return None
        try:
            return User.objects.get(id=user_id)
        except (User.DoesNotExist, ValidationError, ValueError):
            return None


def get_session_token(request) -> Optional[str]:
    """Return the session token from the cookie, or from a Bearer header."""
    token = request.COOKIES.get(settings.AUTH_COOKIE_NAME)
    if token:
        return token
    auth_header = request.META.get("HTTP_AUTHORIZATION", "")
    if auth_header.startswith("Bearer "):
        return auth_header.split(" ", 1)[1]
    return None


def _service_unavailable() -> JsonResponse:
    return JsonResponse(
        {"data": None, "errors": [{"message": "Authentication service unavailable."}]},
        status=status.HTTP_503_SERVICE_UNAVAILABLE,
    )


__all__ = ["SessionAuthMiddleware", "get_session_token"]

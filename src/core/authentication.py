"""DRF authentication backed by ``SessionAuthMiddleware``.

Cookie and Bearer tokens are checked once, in the middleware, so the page
views and the API agree on who is signed in. The DRF side only reads the
result back off the Django request.
"""

from typing import Any, Optional, Tuple

from rest_framework.authentication import BaseAuthentication


class MiddlewareUserAuthentication(BaseAuthentication):
    """Report the middleware's user as ``request.user`` and its claims as ``request.auth``."""

    def authenticate(self, request) -> Optional[Tuple[Any, Any]]:
        django_request = getattr(request, "_request", None)
        user = getattr(django_request, "user", None)
        if user is None or not user.is_authenticated:
            return None
        return user, getattr(django_request, "session_claims", None)

    def authenticate_header(self, request) -> str:
        # Any value here makes DRF answer 401 rather than 403 when unauthenticated.
        return 'Session realm="api"'


__all__ = ["MiddlewareUserAuthentication"]

"""Session endpoints: sign up, sign in, sign out, and current session."""

import logging
from typing import Any

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from core.response import BaseAPIView, api_response
from .serializers import SessionUserSerializer, SignInSerializer, SignUpSerializer
from .services import SessionService, clear_session_cookie, set_session_cookie

logger = logging.getLogger(__name__)


def _session_payload(user, expires_at) -> dict[str, Any]:
    return {
        "user": SessionUserSerializer(user).data,
        "session": {"expiresAt": expires_at.isoformat()},
    }


class SignUpView(BaseAPIView):
    permission_classes: list[Any] = []

    # noinspection PyMethodMayBeStatic
    def post(self, request):
        """Create an account and start a session for it."""
        serializer = SignUpSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        session = SessionService.create_session(user)
        logger.info("Registered user %s", user.id)
        response = api_response(_session_payload(user, session.expires_at), status=status.HTTP_201_CREATED)
        set_session_cookie(response, session)
        return response


class SignInView(BaseAPIView):
    permission_classes: list[Any] = []

    # noinspection PyMethodMayBeStatic
    def post(self, request):
        """Verify credentials and issue a session cookie."""
        serializer = SignInSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.validated_data["user"]
        session = SessionService.create_session(user)
        response = api_response(_session_payload(user, session.expires_at))
        set_session_cookie(response, session)
        return response


class SignOutView(APIView):
    """Revoke the current session and clear its cookie."""

    # noinspection PyMethodMayBeStatic
    def post(self, request):
        """Remove the session from the registry and return 204 No Content."""
        claims = request.auth or {}
        if claims.get("sid"):
            SessionService.revoke(claims["sid"])
        # 204 responses must not include a body.
        response = Response(status=status.HTTP_204_NO_CONTENT)
        clear_session_cookie(response)
        return response


class GetSessionView(BaseAPIView):
    permission_classes: list[Any] = []

    # noinspection PyMethodMayBeStatic
    def get(self, request):
        """Return the current user and session expiry, or null when anonymous."""
        if not request.user.is_authenticated or not request.auth:
            return api_response(None)
        return api_response(_session_payload(request.user, SessionService.expires_at(request.auth)))

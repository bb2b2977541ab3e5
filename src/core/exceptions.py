"""Custom exception handling to enforce the API error envelope."""

import logging
from typing import Any

from django.db import DatabaseError
from rest_framework import status
from rest_framework.exceptions import AuthenticationFailed, NotAuthenticated, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from authentication.services import SessionStoreUnavailable
from uploads.services import ImageHostError

from .response import error_entry

logger = logging.getLogger(__name__)

NON_FIELD_KEYS = ("non_field_errors", "detail")


def _flatten_validation(payload: Any, field: str | None = None) -> list[dict[str, Any]]:
    """Turn DRF's nested validation detail into `{message, field}` entries."""

    if isinstance(payload, dict):
        errors: list[dict[str, Any]] = []
        for key, value in payload.items():
            nested = None if key in NON_FIELD_KEYS else (f"{field}.{key}" if field else key)
            errors.extend(_flatten_validation(value, nested))
        return errors
    if isinstance(payload, list):
        errors = []
        for item in payload:
            errors.extend(_flatten_validation(item, field))
        return errors
    return [error_entry(payload, field)]


def _normalize_errors(payload: Any) -> list[dict[str, Any]]:
    """Convert DRF's response.data into a list for the envelope."""

    if isinstance(payload, dict) and "detail" in payload:
        # Common DRF pattern: {"detail": "..."}
        return [error_entry(payload["detail"])]
    return _flatten_validation(payload)


def custom_exception_handler(exc: Exception, context: dict[str, Any]) -> Response | None:
    """Wrap DRF errors in `{ "data": null, "errors": [...] }` shape.

    - Uses DRF's default handler to produce the base response.
    - Validation errors become `{message, field}` entries.
    - Session store, database and image host outages map to 503/503/502.
    - Anything DRF does not know about is logged and returned as a generic 500.
    """

    # Session lookups are security-critical and must fail closed.
    if isinstance(exc, SessionStoreUnavailable):
        logger.error("Session store unavailable: %s", exc)
        return Response(
            {"data": None, "errors": [error_entry("Authentication service unavailable.")]},
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    # Treat database errors as a temporary service outage and still respect the
    # global envelope format instead of returning Django's HTML 500 page.
    if isinstance(exc, DatabaseError):
        logger.exception("Database error while handling request")
        return Response(
            {"data": None, "errors": [error_entry("Service temporarily unavailable.")]},
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    if isinstance(exc, ImageHostError):
        logger.error("Image host failure: %s", exc)
        return Response(
            {"data": None, "errors": [error_entry("Error uploading image")]},
            status=status.HTTP_502_BAD_GATEWAY,
        )

    response = drf_exception_handler(exc, context)

    if response is None:
        view = context.get("view")
        logger.exception(
            "Unhandled error in %s", type(view).__name__ if view is not None else "API view", exc_info=exc
        )
        return Response(
            {"data": None, "errors": [error_entry("Internal server error")]},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    # DRF maps NotAuthenticated to 403 when no authenticator supplies a
    # WWW-Authenticate header; sessions always answer 401.
    if isinstance(exc, (AuthenticationFailed, NotAuthenticated)):
        response.status_code = status.HTTP_401_UNAUTHORIZED

    # Successful responses are untouched here; BaseAPIView/BaseViewSet handle them.
    if response.status_code >= 400:
        if isinstance(exc, ValidationError):
            errors = _flatten_validation(response.data)
        else:
            errors = _normalize_errors(response.data)
        response.data = {"data": None, "errors": errors}

    return response

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class ApiError(Exception):
    """
    Base client-side API error.

    Mirrors the server-side envelope:
        {"data": null, "errors": [{"message": "...", "field": "title"}]}

    ``status_code`` is 0 when the request never produced a response
    (connection refused, timeout, ...).
    """

    status_code: int
    message: str = ""
    errors: List[Dict[str, Any]] = field(default_factory=list)
    response_body: Any = None

    def __post_init__(self) -> None:
        super().__init__(self.message or f"HTTP {self.status_code}")

    @property
    def retryable(self) -> bool:
        """Whether a retry might make sense (for client backoff logic)."""
        return self.status_code == 0 or self.status_code == 429 or 500 <= self.status_code < 600

    @property
    def field_errors(self) -> Dict[str, List[str]]:
        """Validation messages grouped by field name."""
        grouped: Dict[str, List[str]] = {}
        for item in self.errors:
            name = item.get("field")
            if name:
                grouped.setdefault(name, []).append(item.get("message", ""))
        return grouped


class ValidationError(ApiError):
    pass


class AuthenticationError(ApiError):
    pass


class PermissionDeniedError(ApiError):
    pass


class NotFoundError(ApiError):
    pass


class MethodNotAllowedError(ApiError):
    pass


class ServerError(ApiError):
    pass


_STATUS_TO_EXCEPTION = {
    400: ValidationError,
    401: AuthenticationError,
    403: PermissionDeniedError,
    404: NotFoundError,
    405: MethodNotAllowedError,
}


def _pick_exception_class(status_code: int) -> type[ApiError]:
    if status_code in _STATUS_TO_EXCEPTION:
        return _STATUS_TO_EXCEPTION[status_code]
    if 500 <= status_code < 600:
        return ServerError
    return ApiError


def error_from_response(response) -> ApiError:
    """
    Build a concrete ApiError subclass from a `requests.Response`.

    Non-JSON bodies (proxies, HTML error pages) still produce an error with
    the raw text as its message.
    """
    status_code = response.status_code
    exc_cls = _pick_exception_class(status_code)

    try:
        body = response.json()
    except ValueError:
        return exc_cls(status_code=status_code, message=(response.text or "").strip()[:200])

    errors: List[Dict[str, Any]] = []
    if isinstance(body, dict):
        raw = body.get("errors") or []
        for item in raw if isinstance(raw, list) else [raw]:
            errors.append(item if isinstance(item, dict) else {"message": str(item)})

    message = "; ".join(e.get("message", "") for e in errors if e.get("message")) or f"HTTP {status_code}"
    return exc_cls(status_code=status_code, message=message, errors=errors, response_body=body)


def raise_for_api_error(response) -> None:
    """Raise the matching ApiError for any 4xx/5xx response."""
    if response.status_code >= 400:
        raise error_from_response(response)


__all__ = [
    "ApiError",
    "AuthenticationError",
    "MethodNotAllowedError",
    "NotFoundError",
    "PermissionDeniedError",
    "ServerError",
    "ValidationError",
    "error_from_response",
    "raise_for_api_error",
]

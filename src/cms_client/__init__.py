"""cms_client - A small Python client for the Blog CMS API with an optimistic query cache."""

from .api import ApiClient
from .articles import ArticlesResource
from .cache import QueryCache
from .exceptions import (
    ApiError,
    AuthenticationError,
    MethodNotAllowedError,
    NotFoundError,
    PermissionDeniedError,
    ServerError,
    ValidationError,
)

__all__ = [
    "ApiClient",
    "ApiError",
    "ArticlesResource",
    "AuthenticationError",
    "MethodNotAllowedError",
    "NotFoundError",
    "PermissionDeniedError",
    "QueryCache",
    "ServerError",
    "ValidationError",
]
__version__ = "1.0.0"

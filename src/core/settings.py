"""Django settings for the Blog CMS project.

Environment-driven configuration for Postgres, Redis sessions, Cloudinary,
and security defaults.
"""
import os
from pathlib import Path
from urllib.parse import urlparse

from django.core.exceptions import ImproperlyConfigured

BASE_DIR = Path(__file__).resolve().parent.parent


def _get_env(name: str, default: str | None = None) -> str | None:
    """Read an environment variable with an optional fallback."""
    return os.environ.get(name, default)


def _get_int_env(name: str, default: int) -> int:
    """Read an integer environment variable, rejecting malformed values."""
    raw = _get_env(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ImproperlyConfigured(f"{name} must be an integer, got {raw!r}") from exc


def _parse_database_url(url: str) -> dict:
    """Parse a PostgreSQL-style DATABASE_URL into a Django DATABASES entry."""
    parsed = urlparse(url)
    return {
        "ENGINE": "django.db.backends.postgresql",
        "NAME": parsed.path.lstrip("/"),
        "USER": parsed.username,
        "PASSWORD": parsed.password,
        "HOST": parsed.hostname,
        "PORT": parsed.port or "5432",
        "CONN_MAX_AGE": _get_int_env("DB_CONN_MAX_AGE", 60),
    }


SECRET_KEY = _get_env("SECRET_KEY", "dev-secret-key-change-me")
DEBUG = _get_env("DEBUG", "True") == "True"
if not DEBUG and SECRET_KEY in ("change-me", "dev-secret-key-change-me"):
    raise ImproperlyConfigured("SECRET_KEY must be set in production")
ALLOWED_HOSTS = [
    h.strip()
    for h in _get_env("ALLOWED_HOSTS", "localhost,127.0.0.1,0.0.0.0").split(",")
    if h.strip()
]

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "rest_framework",
    "drf_spectacular",
    "core",
    "authentication",
    "articles",
    "uploads",
    "pages",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    # Session cookie authentication runs after Django's own auth middleware
    # so that request.user reflects the Redis-backed session.
    "core.middleware.SessionAuthMiddleware",
]

ROOT_URLCONF = "core.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "core.wsgi.application"
ASGI_APPLICATION = "core.asgi.application"

DATABASE_URL = _get_env("DATABASE_URL")
if DATABASE_URL:
    DATABASES = {"default": _parse_database_url(DATABASE_URL)}
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": _get_env("POSTGRES_DB", "blog_cms"),
            "USER": _get_env("POSTGRES_USER", "blog_cms"),
            "PASSWORD": _get_env("POSTGRES_PASSWORD", "blog_cms"),
            "HOST": _get_env("POSTGRES_HOST", "localhost"),
            "PORT": _get_env("POSTGRES_PORT", "5432"),
            "CONN_MAX_AGE": _get_int_env("DB_CONN_MAX_AGE", 60),
        }
    }

AUTH_MIN_PASSWORD_LENGTH = _get_int_env("AUTH_MIN_PASSWORD_LENGTH", 6)
AUTH_BCRYPT_ROUNDS = _get_int_env("AUTH_BCRYPT_ROUNDS", 12)

AUTH_PASSWORD_VALIDATORS = [
    {
        "NAME": "django.contrib.auth.password_validation.MinimumLengthValidator",
        "OPTIONS": {"min_length": AUTH_MIN_PASSWORD_LENGTH},
    },
]

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

AUTH_USER_MODEL = "authentication.User"
LOGIN_URL = "/auth/login/"
LOGIN_REDIRECT_URL = "/dashboard/"

REDIS_URL = _get_env("REDIS_URL", "redis://localhost:6379/0")
# Short timeouts so an unreachable session store fails requests quickly (503).
REDIS_SOCKET_TIMEOUT_SECONDS = _get_int_env("REDIS_SOCKET_TIMEOUT_SECONDS", 2)

# Session token carried by the browser cookie (or a Bearer header for API clients).
AUTH_COOKIE_NAME = _get_env("AUTH_COOKIE_NAME", "blog_cms.session_token")
AUTH_SESSION_TTL_SECONDS = _get_int_env("AUTH_SESSION_TTL_SECONDS", 7 * 24 * 60 * 60)
AUTH_COOKIE_SECURE = _get_env("AUTH_COOKIE_SECURE", str(not DEBUG)) == "True"

ARTICLES_PAGE_SIZE = _get_int_env("ARTICLES_PAGE_SIZE", 10)
ARTICLES_MAX_PAGE_SIZE = _get_int_env("ARTICLES_MAX_PAGE_SIZE", 100)
DASHBOARD_PAGE_SIZE = _get_int_env("DASHBOARD_PAGE_SIZE", 3)

CLOUDINARY_CLOUD_NAME = _get_env("CLOUDINARY_CLOUD_NAME", "")
CLOUDINARY_API_KEY = _get_env("CLOUDINARY_API_KEY", "")
CLOUDINARY_API_SECRET = _get_env("CLOUDINARY_API_SECRET", "")
CLOUDINARY_UPLOAD_FOLDER = _get_env("CLOUDINARY_UPLOAD_FOLDER", "uploads")
UPLOAD_MAX_BYTES = _get_int_env("UPLOAD_MAX_BYTES", 5 * 1024 * 1024)

LOG_LEVEL = _get_env("LOG_LEVEL", "INFO")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": LOG_LEVEL,
    },
    "loggers": {
        "django": {
            "handlers": ["console"],
            "level": _get_env("DJANGO_LOG_LEVEL", "WARNING"),
            "propagate": False,
        },
    },
}

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": ["core.authentication.MiddlewareUserAuthentication"],
    "DEFAULT_PERMISSION_CLASSES": ["rest_framework.permissions.IsAuthenticated"],
    "DEFAULT_PARSER_CLASSES": [
        "rest_framework.parsers.JSONParser",
        "rest_framework.parsers.FormParser",
        "rest_framework.parsers.MultiPartParser",
    ],
    "EXCEPTION_HANDLER": "core.exceptions.custom_exception_handler",
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
}

SPECTACULAR_SETTINGS = {
    "TITLE": "Blog CMS API",
    "DESCRIPTION": (
        "OpenAPI schema for the multi-user Blog CMS: cookie sessions backed by "
        "Redis, owner-scoped article CRUD, search, and Cloudinary image uploads."
    ),
    "VERSION": "1.0.0",
    "SERVE_INCLUDE_SCHEMA": False,
    "SERVE_PUBLIC": True,
    "APPEND_COMPONENTS": {
        "securitySchemes": {
            "sessionCookie": {
                "type": "apiKey",
                "in": "cookie",
                "name": AUTH_COOKIE_NAME,
            }
        }
    },
    "SECURITY": [{"sessionCookie": []}],
}

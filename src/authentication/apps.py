"""App configuration for authentication components."""

from django.apps import AppConfig


class AuthenticationConfig(AppConfig):
    """Authentication app holds the author User model and session utilities."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "authentication"

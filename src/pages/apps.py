"""App configuration for the server-rendered pages."""

from django.apps import AppConfig


class PagesConfig(AppConfig):
    """Pages app renders the dashboard, article editor, search and auth forms."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "pages"

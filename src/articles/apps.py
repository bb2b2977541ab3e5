"""App configuration for the articles app."""

from django.apps import AppConfig


class ArticlesConfig(AppConfig):
    """Articles app holds the Article model, its API and search."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "articles"

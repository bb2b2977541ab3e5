"""App configuration for image uploads."""

from django.apps import AppConfig


class UploadsConfig(AppConfig):
    """Uploads app forwards cover images to the image host."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "uploads"

"""Article model owned by a single author."""

from django.conf import settings
from django.db import models


class Article(models.Model):
    """Blog article with an optional externally hosted cover image."""

    title = models.CharField(max_length=255)
    content = models.TextField()
    cover_image = models.URLField(max_length=1024, blank=True, default="")
    author = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="articles")
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    # Stays null until the article is edited for the first time.
    updated_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.title

    def is_owned_by(self, user) -> bool:
        return bool(user and getattr(user, "is_authenticated", False) and self.author_id == user.pk)


__all__ = ["Article"]

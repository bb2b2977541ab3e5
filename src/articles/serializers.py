"""Serializers mapping Article rows to camelCase DTOs and validating input."""

from django.contrib.auth import get_user_model
from rest_framework import serializers

from .models import Article

User = get_user_model()


class AuthorSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ["id", "name"]
        read_only_fields = fields


class ArticleSerializer(serializers.ModelSerializer):
    """Read representation returned by every article endpoint."""

    coverImage = serializers.SerializerMethodField()
    author = AuthorSummarySerializer(read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        """Expose article fields with ownership and timestamps read-only."""
        model = Article
        fields = ["id", "title", "content", "coverImage", "author", "createdAt", "updatedAt"]
        read_only_fields = fields

    @staticmethod
    def get_coverImage(obj) -> str | None:
        return obj.cover_image or None


class SearchArticleSerializer(ArticleSerializer):
    """Search hit: the article plus whether the caller wrote it."""

    isOwner = serializers.SerializerMethodField()

    class Meta(ArticleSerializer.Meta):
        fields = ArticleSerializer.Meta.fields + ["isOwner"]
        read_only_fields = fields

    def get_isOwner(self, obj) -> bool:
        request = self.context.get("request")
        return obj.is_owned_by(getattr(request, "user", None))


class ArticleWriteSerializer(serializers.Serializer):
    """Validate create/update payloads.

    Pass ``partial=True`` for updates: every field becomes optional but keeps
    its rules when supplied. Unknown keys are ignored.
    """

    title = serializers.CharField(
        min_length=3,
        max_length=255,
        error_messages={"min_length": "Title must be at least 3 characters"},
    )
    content = serializers.CharField(
        min_length=10,
        trim_whitespace=False,
        error_messages={"min_length": "Content must be at least 10 characters"},
    )
    coverImage = serializers.URLField(
        required=False,
        allow_blank=True,
        allow_null=True,
        max_length=1024,
        source="cover_image",
        error_messages={"invalid": "Please enter a valid URL"},
    )


class AuthorStatsSerializer(serializers.ModelSerializer):
    articleCount = serializers.IntegerField(source="article_count", read_only=True)

    class Meta:
        model = User
        fields = ["id", "name", "articleCount"]
        read_only_fields = fields


__all__ = [
    "ArticleSerializer",
    "ArticleWriteSerializer",
    "AuthorStatsSerializer",
    "SearchArticleSerializer",
]

"""Article queries and mutations shared by the JSON API and the HTML pages.

Ownership is a plain equality check between ``article.author_id`` and the
session user; there is no locking, so concurrent edits are last-write-wins.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Optional

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.exceptions import PermissionDenied
from django.db.models import Count, Q, QuerySet
from django.http import Http404
from django.utils import timezone

from .models import Article

logger = logging.getLogger(__name__)

User = get_user_model()

UPDATABLE_FIELDS = ("title", "content", "cover_image")


@dataclass(frozen=True)
class PageRequest:
    """Validated 1-based page number and page size."""

    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass
class ArticlePage:
    """One page of articles plus the metadata needed to render pagination."""

    articles: list
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit)

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    def metadata(self) -> dict[str, int]:
        return {
            "total": self.total,
            "page": self.page,
            "limit": self.limit,
            "totalPages": self.total_pages,
        }


def _positive_int(raw: Any, default: int) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


def parse_page_request(page: Any = None, limit: Any = None, default_limit: Optional[int] = None) -> PageRequest:
    """Coerce raw query parameters into a PageRequest.

    Missing, non-numeric, or non-positive values fall back to the defaults and
    ``limit`` is capped at ``ARTICLES_MAX_PAGE_SIZE``.
    """
    if default_limit is None:
        default_limit = settings.ARTICLES_PAGE_SIZE
    size = min(_positive_int(limit, default_limit), settings.ARTICLES_MAX_PAGE_SIZE)
    return PageRequest(page=_positive_int(page, 1), limit=size)


def list_author_articles(user, page_request: PageRequest) -> ArticlePage:
    """Return the requested page of ``user``'s articles, newest first."""
    queryset = Article.objects.filter(author=user).select_related("author")
    total = queryset.count()
    start = page_request.offset
    articles = list(queryset[start:start + page_request.limit])
    return ArticlePage(articles=articles, total=total, page=page_request.page, limit=page_request.limit)


def get_article(article_id: Any) -> Article:
    """Fetch any article by id, raising Http404 when it does not exist."""
    try:
        return Article.objects.select_related("author").get(pk=article_id)
    except (Article.DoesNotExist, ValueError, TypeError):
        raise Http404("Article not found")


def get_owned_article(user, article_id: Any, action: str = "access") -> Article:
    """Fetch an article and ensure ``user`` wrote it.

    Raises Http404 when missing and PermissionDenied when owned by someone else.
    """
    article = get_article(article_id)
    if not article.is_owned_by(user):
        raise PermissionDenied(f"You don't have permission to {action} this article")
    return article


def create_article(user, *, title: str, content: str, cover_image: Optional[str] = None) -> Article:
    article = Article.objects.create(
        title=title,
        content=content,
        cover_image=cover_image or "",
        author=user,
    )
    logger.info("Article %s created by %s", article.pk, user.pk)
    return article


def update_article(article: Article, changes: dict[str, Any]) -> Article:
    """Apply the provided field changes and stamp ``updated_at``.

    Keys outside title/content/cover_image are ignored.
    """
    update_fields = []
    for field in UPDATABLE_FIELDS:
        if field in changes:
            value = changes[field]
            if field == "cover_image":
                value = value or ""
            setattr(article, field, value)
            update_fields.append(field)
    article.updated_at = timezone.now()
    update_fields.append("updated_at")
    article.save(update_fields=update_fields)
    logger.info("Article %s updated (%s)", article.pk, ", ".join(update_fields))
    return article


def delete_article(article: Article) -> None:
    article_id = article.pk
    article.delete()
    logger.info("Article %s deleted", article_id)


def search_articles(query: Optional[str]) -> QuerySet | list:
    """Case-insensitive substring search over title, content and author name.

    A missing or blank query matches nothing and does not hit the database.
    """
    term = (query or "").strip()
    if not term:
        return []
    return (
        Article.objects.select_related("author")
        .filter(Q(title__icontains=term) | Q(content__icontains=term) | Q(author__name__icontains=term))
        .order_by("-created_at", "-id")
    )


def authors_with_article_counts() -> QuerySet:
    """Every user annotated with ``article_count``, most prolific first."""
    return User.objects.annotate(article_count=Count("articles")).order_by("-article_count", "name")


__all__ = [
    "ArticlePage",
    "PageRequest",
    "authors_with_article_counts",
    "create_article",
    "delete_article",
    "get_article",
    "get_owned_article",
    "list_author_articles",
    "parse_page_request",
    "search_articles",
    "update_article",
]

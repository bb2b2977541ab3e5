"""Routing for the article API."""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import ArticleReadView, ArticleViewSet, AuthorListView, SearchView

router = DefaultRouter()
router.register(r"articles", ArticleViewSet, basename="article")

urlpatterns = [
    path("", include(router.urls)),
    path("article/<int:pk>/", ArticleReadView.as_view(), name="article-read"),
    path("search/", SearchView.as_view(), name="article-search"),
    path("author/", AuthorListView.as_view(), name="author-list"),
]

"""Article API: owner-scoped CRUD, a reader route, search, and author stats."""

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.response import BaseAPIView, BaseViewSet, api_response
from . import services
from .models import Article
from .permissions import IsArticleAuthor
from .serializers import (
    ArticleSerializer,
    ArticleWriteSerializer,
    AuthorStatsSerializer,
    SearchArticleSerializer,
)


class ArticleViewSet(BaseViewSet):
    """CRUD over the caller's own articles."""

    serializer_class = ArticleSerializer
    permission_classes = [IsAuthenticated, IsArticleAuthor]
    queryset = Article.objects.select_related("author")
    lookup_value_regex = r"\d+"
    http_method_names = ["get", "post", "put", "patch", "delete", "head", "options"]

    @extend_schema(
        parameters=[
            OpenApiParameter("page", int, description="1-based page number"),
            OpenApiParameter("limit", int, description="Page size"),
        ]
    )
    def list(self, request, *args, **kwargs):
        """Paginated list of the caller's articles, newest first."""
        page_request = services.parse_page_request(
            request.query_params.get("page"), request.query_params.get("limit")
        )
        page = services.list_author_articles(request.user, page_request)
        return api_response(
            {
                "articles": ArticleSerializer(page.articles, many=True).data,
                "metadata": page.metadata(),
            }
        )

    @extend_schema(request=ArticleWriteSerializer, responses={201: ArticleSerializer})
    def create(self, request, *args, **kwargs):
        """Create an article authored by the caller."""
        serializer = ArticleWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        article = services.create_article(request.user, **serializer.validated_data)
        return api_response(ArticleSerializer(article).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=ArticleWriteSerializer, responses={200: ArticleSerializer})
    def update(self, request, *args, **kwargs):
        """Apply a PUT or PATCH; both accept any subset of the fields."""
        article = self.get_object()
        serializer = ArticleWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        article = services.update_article(article, serializer.validated_data)
        return api_response(ArticleSerializer(article).data)

    def partial_update(self, request, *args, **kwargs):
        return self.update(request, *args, **kwargs)

    def destroy(self, request, *args, **kwargs):
        services.delete_article(self.get_object())
        return Response(status=status.HTTP_204_NO_CONTENT)


class ArticleReadView(BaseAPIView):
    """Read-only view of any article for signed-in readers."""

    @extend_schema(responses={200: ArticleSerializer})
    def get(self, request, pk):
        return api_response(ArticleSerializer(services.get_article(pk)).data)


class SearchView(BaseAPIView):
    """Search all articles by title, content, or author name."""

    @extend_schema(
        parameters=[OpenApiParameter("q", str, description="Case-insensitive search text")],
        responses={200: SearchArticleSerializer(many=True)},
    )
    def get(self, request):
        results = services.search_articles(request.query_params.get("q"))
        return api_response(SearchArticleSerializer(results, many=True, context={"request": request}).data)


class AuthorListView(BaseAPIView):
    """Authors with their article counts."""

    @extend_schema(responses={200: AuthorStatsSerializer(many=True)})
    def get(self, request):
        return api_response(AuthorStatsSerializer(services.authors_with_article_counts(), many=True).data)


__all__ = ["ArticleReadView", "ArticleViewSet", "AuthorListView", "SearchView"]

from datetime import timedelta
from unittest import mock

from django.db import DatabaseError
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from articles.models import Article
from tests.utils import FakeRedisTestCase, auth_client, create_article, create_user


class ArticleCreateTests(FakeRedisTestCase):
    def setUp(self):
        self.author = create_user("author@example.com", name="Author")
        self.client = auth_client(self.author)
        self.url = reverse("article-list")

    def test_create_returns_article_owned_by_caller(self):
        payload = {
            "title": "Hello world",
            "content": "Long enough content body",
            "coverImage": "https://img.example.com/a.png",
        }

        resp = self.client.post(self.url, payload, format="json")

        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        data = resp.json()["data"]
        self.assertEqual(data["title"], payload["title"])
        self.assertEqual(data["content"], payload["content"])
        self.assertEqual(data["coverImage"], payload["coverImage"])
        self.assertEqual(data["author"], {"id": str(self.author.id), "name": "Author"})
        self.assertIsNotNone(data["createdAt"])
        self.assertIsNone(data["updatedAt"])
        self.assertTrue(Article.objects.filter(pk=data["id"], author=self.author).exists())

    def test_cover_image_is_optional(self):
        resp = self.client.post(self.url, {"title": "No cover", "content": "Still a valid article"}, format="json")

        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertIsNone(resp.json()["data"]["coverImage"])

    def test_author_in_payload_is_ignored(self):
        other = create_user("other@example.com")

        resp = self.client.post(
            self.url,
            {"title": "Mine", "content": "Written by the caller", "author": str(other.id)},
            format="json",
        )

        self.assertEqual(resp.json()["data"]["author"]["id"], str(self.author.id))

    def test_validation_errors_are_reported_per_field(self):
        resp = self.client.post(
            self.url,
            {"title": "ab", "content": "short", "coverImage": "not a url"},
            format="json",
        )

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        errors = resp.json()["errors"]
        self.assertIn({"message": "Title must be at least 3 characters", "field": "title"}, errors)
        self.assertIn({"message": "Content must be at least 10 characters", "field": "content"}, errors)
        self.assertIn({"message": "Please enter a valid URL", "field": "coverImage"}, errors)
        self.assertFalse(Article.objects.exists())

    def test_requires_session(self):
        resp = APIClient().post(self.url, {"title": "Hello", "content": "Long enough content"}, format="json")

        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertIsNone(resp.json()["data"])


class ArticleListTests(FakeRedisTestCase):
    def setUp(self):
        self.author = create_user("author@example.com")
        self.other = create_user("other@example.com")
        self.client = auth_client(self.author)
        self.url = reverse("article-list")
        base = timezone.now()
        for index in range(12):
            article = create_article(self.author, title=f"Article {index}")
            Article.objects.filter(pk=article.pk).update(created_at=base + timedelta(minutes=index))
        create_article(self.other, title="Someone else's")

    def test_lists_only_own_articles_newest_first(self):
        resp = self.client.get(self.url)

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        data = resp.json()["data"]
        titles = [article["title"] for article in data["articles"]]
        self.assertEqual(len(titles), 10)
        self.assertEqual(titles[0], "Article 11")
        self.assertNotIn("Someone else's", titles)
        self.assertEqual(data["metadata"], {"total": 12, "page": 1, "limit": 10, "totalPages": 2})

    def test_pagination_metadata_uses_ceiling(self):
        resp = self.client.get(self.url, {"page": 3, "limit": 5})

        data = resp.json()["data"]
        self.assertEqual(data["metadata"], {"total": 12, "page": 3, "limit": 5, "totalPages": 3})
        self.assertEqual([a["title"] for a in data["articles"]], ["Article 1", "Article 0"])

    def test_page_beyond_range_is_empty(self):
        resp = self.client.get(self.url, {"page": 9})

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.json()["data"]["articles"], [])

    def test_invalid_paging_falls_back_to_defaults(self):
        resp = self.client.get(self.url, {"page": "abc", "limit": "-4"})

        metadata = resp.json()["data"]["metadata"]
        self.assertEqual((metadata["page"], metadata["limit"]), (1, 10))

    def test_limit_is_capped(self):
        resp = self.client.get(self.url, {"limit": 1000})

        self.assertEqual(resp.json()["data"]["metadata"]["limit"], 100)

    def test_empty_list_has_zero_pages(self):
        resp = auth_client(create_user("new@example.com")).get(self.url)

        self.assertEqual(resp.json()["data"]["metadata"], {"total": 0, "page": 1, "limit": 10, "totalPages": 0})


class ArticleDetailTests(FakeRedisTestCase):
    def setUp(self):
        self.author = create_user("author@example.com", name="Author")
        self.intruder = create_user("intruder@example.com")
        self.article = create_article(self.author, title="Original title", content="Original content body")
        self.url = reverse("article-detail", args=[self.article.pk])
        self.owner_client = auth_client(self.author)
        self.intruder_client = auth_client(self.intruder)

    def test_owner_can_read(self):
        resp = self.owner_client.get(self.url)

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.json()["data"]["title"], "Original title")

    def test_non_owner_read_is_forbidden(self):
        resp = self.intruder_client.get(self.url)

        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(resp.json()["errors"], [{"message": "You don't have permission to access this article"}])

    def test_missing_article_returns_404(self):
        resp = self.owner_client.get(reverse("article-detail", args=[999999]))

        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        self.assertIsNone(resp.json()["data"])

    def test_owner_update_sets_updated_at(self):
        resp = self.owner_client.put(
            self.url,
            {"title": "New title", "content": "Brand new content", "coverImage": "https://img.example.com/b.png"},
            format="json",
        )

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        data = resp.json()["data"]
        self.assertEqual(data["title"], "New title")
        self.assertEqual(data["coverImage"], "https://img.example.com/b.png")
        self.assertIsNotNone(data["updatedAt"])
        self.article.refresh_from_db()
        self.assertEqual(self.article.content, "Brand new content")
        self.assertGreaterEqual(self.article.updated_at, self.article.created_at)

    def test_partial_update_keeps_other_fields(self):
        resp = self.owner_client.patch(self.url, {"title": "Only the title"}, format="json")

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.article.refresh_from_db()
        self.assertEqual(self.article.title, "Only the title")
        self.assertEqual(self.article.content, "Original content body")

    def test_put_accepts_partial_payload(self):
        resp = self.owner_client.put(self.url, {"content": "Replacement content only"}, format="json")

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.json()["data"]["title"], "Original title")

    def test_clearing_cover_image(self):
        self.article.cover_image = "https://img.example.com/old.png"
        self.article.save()

        resp = self.owner_client.patch(self.url, {"coverImage": None}, format="json")

        self.assertIsNone(resp.json()["data"]["coverImage"])

    def test_update_validation_error(self):
        resp = self.owner_client.patch(self.url, {"title": "x"}, format="json")

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.json()["errors"][0]["field"], "title")
        self.article.refresh_from_db()
        self.assertEqual(self.article.title, "Original title")

    def test_non_owner_update_is_forbidden(self):
        resp = self.intruder_client.put(self.url, {"title": "Hijacked"}, format="json")

        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(resp.json()["errors"][0]["message"], "You don't have permission to update this article")
        self.article.refresh_from_db()
        self.assertEqual(self.article.title, "Original title")

    def test_owner_delete_removes_article(self):
        resp = self.owner_client.delete(self.url)

        self.assertEqual(resp.status_code, status.HTTP_204_NO_CONTENT)
        self.assertEqual(resp.content, b"")
        listing = self.owner_client.get(reverse("article-list")).json()["data"]
        self.assertEqual(listing["articles"], [])
        self.assertEqual(self.owner_client.get(self.url).status_code, status.HTTP_404_NOT_FOUND)

    def test_non_owner_delete_is_forbidden(self):
        resp = self.intruder_client.delete(self.url)

        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(resp.json()["errors"][0]["message"], "You don't have permission to delete this article")
        self.assertTrue(Article.objects.filter(pk=self.article.pk).exists())

    def test_reader_route_serves_any_article(self):
        resp = self.intruder_client.get(reverse("article-read", args=[self.article.pk]))

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.json()["data"]["author"]["name"], "Author")

    def test_reader_route_is_read_only(self):
        resp = self.intruder_client.delete(reverse("article-read", args=[self.article.pk]))

        self.assertEqual(resp.status_code, status.HTTP_405_METHOD_NOT_ALLOWED)
        self.assertTrue(Article.objects.filter(pk=self.article.pk).exists())

    def test_reader_route_missing_article(self):
        resp = self.intruder_client.get(reverse("article-read", args=[424242]))

        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)


class ArticleFailureTests(FakeRedisTestCase):
    def setUp(self):
        self.client = auth_client(create_user("author@example.com"))

    def test_database_error_maps_to_503(self):
        with mock.patch("articles.services.list_author_articles", side_effect=DatabaseError("gone")):
            resp = self.client.get(reverse("article-list"))

        self.assertEqual(resp.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertEqual(resp.json(), {"data": None, "errors": [{"message": "Service temporarily unavailable."}]})

    def test_unexpected_error_maps_to_500(self):
        with mock.patch("articles.services.list_author_articles", side_effect=RuntimeError("boom")):
            resp = self.client.get(reverse("article-list"))

        self.assertEqual(resp.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(resp.json()["errors"], [{"message": "Internal server error"}])

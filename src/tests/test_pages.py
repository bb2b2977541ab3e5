from unittest import mock

from cloudinary.exceptions import Error as CloudinaryError
from django.conf import settings
from django.core.files.uploadedfile import SimpleUploadedFile
from django.urls import reverse

from articles.models import Article
from authentication.models import User
from tests.utils import DEFAULT_PASSWORD, FakeRedisTestCase, create_article, create_user, session_token


class PageTestCase(FakeRedisTestCase):
    def sign_in(self, user):
        self.client.cookies[settings.AUTH_COOKIE_NAME] = session_token(user)


class AccessTests(PageTestCase):
    def test_anonymous_dashboard_redirects_to_login(self):
        resp = self.client.get(reverse("pages:dashboard"))

        self.assertRedirects(resp, f"{reverse('pages:login')}?next=/dashboard/", fetch_redirect_response=False)

    def test_index_redirects_to_dashboard(self):
        resp = self.client.get("/")

        self.assertRedirects(resp, reverse("pages:dashboard"), fetch_redirect_response=False)

    def test_signed_in_user_skips_login_page(self):
        self.sign_in(create_user("ada@example.com"))

        resp = self.client.get(reverse("pages:login"))

        self.assertRedirects(resp, reverse("pages:dashboard"), fetch_redirect_response=False)


class LoginPageTests(PageTestCase):
    def setUp(self):
        self.user = create_user("ada@example.com", name="Ada")

    def test_login_sets_session_cookie(self):
        resp = self.client.post(reverse("pages:login"), {"email": "ada@example.com", "password": DEFAULT_PASSWORD})

        self.assertRedirects(resp, reverse("pages:dashboard"), fetch_redirect_response=False)
        self.assertTrue(resp.cookies[settings.AUTH_COOKIE_NAME].value)

        dashboard = self.client.get(reverse("pages:dashboard"))
        self.assertEqual(dashboard.status_code, 200)
        self.assertContains(dashboard, "Ada")

    def test_login_honours_local_next(self):
        resp = self.client.post(
            reverse("pages:login"),
            {"email": "ada@example.com", "password": DEFAULT_PASSWORD, "next": "/search/?q=x"},
        )

        self.assertRedirects(resp, "/search/?q=x", fetch_redirect_response=False)

    def test_login_ignores_external_next(self):
        resp = self.client.post(
            reverse("pages:login"),
            {"email": "ada@example.com", "password": DEFAULT_PASSWORD, "next": "https://evil.example.com/"},
        )

        self.assertRedirects(resp, reverse("pages:dashboard"), fetch_redirect_response=False)

    def test_bad_credentials_rerender_form(self):
        resp = self.client.post(reverse("pages:login"), {"email": "ada@example.com", "password": "wrong-pass"})

        self.assertEqual(resp.status_code, 200)
        self.assertContains(resp, "Invalid email or password")
        self.assertNotIn(settings.AUTH_COOKIE_NAME, resp.cookies)

    def test_logout_revokes_session(self):
        token = session_token(self.user)
        self.client.cookies[settings.AUTH_COOKIE_NAME] = token

        resp = self.client.post(reverse("pages:logout"))

        self.assertRedirects(resp, reverse("pages:login"), fetch_redirect_response=False)
        self.client.cookies[settings.AUTH_COOKIE_NAME] = token
        again = self.client.get(reverse("pages:dashboard"))
        self.assertEqual(again.status_code, 302)

    def test_login_replaces_rejected_cookie(self):
        self.sign_in(self.user)
        self.fake_redis.flushall()

        resp = self.client.post(reverse("pages:login"), {"email": "ada@example.com", "password": DEFAULT_PASSWORD})

        self.assertRedirects(resp, reverse("pages:dashboard"), fetch_redirect_response=False)
        self.assertTrue(resp.cookies[settings.AUTH_COOKIE_NAME].value)
        self.assertEqual(self.client.get(reverse("pages:dashboard")).status_code, 200)


class RegisterPageTests(PageTestCase):
    def test_register_creates_user_and_signs_in(self):
        resp = self.client.post(
            reverse("pages:register"),
            {
                "name": "Grace Hopper",
                "email": "Grace@Example.com",
                "password": "secret123",
                "repeat_password": "secret123",
            },
        )

        self.assertRedirects(resp, reverse("pages:dashboard"), fetch_redirect_response=False)
        user = User.objects.get(email="grace@example.com")
        self.assertTrue(user.check_password("secret123"))
        self.assertTrue(resp.cookies[settings.AUTH_COOKIE_NAME].value)

    def test_register_replaces_rejected_cookie(self):
        self.sign_in(create_user("stale@example.com"))
        self.fake_redis.flushall()

        resp = self.client.post(
            reverse("pages:register"),
            {"name": "Grace", "email": "grace@example.com", "password": "secret123", "repeat_password": "secret123"},
        )

        self.assertRedirects(resp, reverse("pages:dashboard"), fetch_redirect_response=False)
        self.assertTrue(resp.cookies[settings.AUTH_COOKIE_NAME].value)
        self.assertContains(self.client.get(reverse("pages:dashboard")), "Grace")

    def test_register_password_mismatch(self):
        resp = self.client.post(
            reverse("pages:register"),
            {"name": "Grace", "email": "grace@example.com", "password": "secret123", "repeat_password": "other123"},
        )

        self.assertEqual(resp.status_code, 200)
        self.assertContains(resp, "Passwords do not match")
        self.assertFalse(User.objects.filter(email="grace@example.com").exists())


class DashboardPageTests(PageTestCase):
    def setUp(self):
        self.author = create_user("author@example.com", name="Author")
        self.other = create_user("other@example.com", name="Other")
        self.sign_in(self.author)

    def test_dashboard_paginates_three_per_page(self):
        for index in range(4):
            create_article(self.author, title=f"Post number {index}")
        create_article(self.other, title="Not mine at all")

        first = self.client.get(reverse("pages:dashboard"))
        second = self.client.get(reverse("pages:dashboard"), {"page": 2})

        self.assertEqual(len(first.context["page"].articles), 3)
        self.assertEqual(first.context["page"].total_pages, 2)
        self.assertEqual(len(second.context["page"].articles), 1)
        self.assertNotContains(first, "Not mine at all")

    def test_empty_dashboard(self):
        resp = self.client.get(reverse("pages:dashboard"))

        self.assertContains(resp, "You haven't written any articles yet.")

    def test_create_article_through_form(self):
        resp = self.client.post(
            reverse("pages:article-new"),
            {"title": "Form article", "content": "Created from the dashboard", "cover_image": ""},
        )

        article = Article.objects.get(title="Form article")
        self.assertEqual(article.author, self.author)
        self.assertRedirects(
            resp, reverse("pages:article-detail", args=[article.pk]), fetch_redirect_response=False
        )

    def test_cover_url_without_scheme_defaults_to_https(self):
        self.client.post(
            reverse("pages:article-new"),
            {"title": "Bare cover", "content": "Cover URL typed without scheme", "cover_image": "img.example.com/c.png"},
        )

        self.assertEqual(Article.objects.get(title="Bare cover").cover_image, "https://img.example.com/c.png")

    def test_create_article_with_cover_file(self):
        cover = SimpleUploadedFile("cover.png", b"\x89PNG\r\n\x1a\n", content_type="image/png")
        with mock.patch(
            "uploads.services.cloudinary.uploader.upload",
            return_value={"secure_url": "https://img.example.com/cover.png", "public_id": "uploads/cover"},
        ):
            self.client.post(
                reverse("pages:article-new"),
                {"title": "With cover", "content": "Has an uploaded cover", "cover_image_file": cover},
            )

        self.assertEqual(Article.objects.get(title="With cover").cover_image, "https://img.example.com/cover.png")

    def test_cover_upload_failure_keeps_form(self):
        cover = SimpleUploadedFile("cover.png", b"\x89PNG\r\n\x1a\n", content_type="image/png")
        with mock.patch("uploads.services.cloudinary.uploader.upload", side_effect=CloudinaryError("down")):
            resp = self.client.post(
                reverse("pages:article-new"),
                {"title": "With cover", "content": "Has an uploaded cover", "cover_image_file": cover},
            )

        self.assertEqual(resp.status_code, 200)
        self.assertContains(resp, "Error uploading image")
        self.assertFalse(Article.objects.exists())

    def test_invalid_form_shows_errors(self):
        resp = self.client.post(reverse("pages:article-new"), {"title": "ab", "content": "short"})

        self.assertEqual(resp.status_code, 200)
        self.assertContains(resp, "Title must be at least 3 characters")
        self.assertContains(resp, "Please fix the errors below")
        self.assertFalse(Article.objects.exists())

    def test_edit_article(self):
        article = create_article(self.author, title="Before edit")

        resp = self.client.post(
            reverse("pages:article-edit", args=[article.pk]),
            {"title": "After edit", "content": "Edited content body"},
        )

        self.assertRedirects(
            resp, reverse("pages:article-detail", args=[article.pk]), fetch_redirect_response=False
        )
        article.refresh_from_db()
        self.assertEqual(article.title, "After edit")
        self.assertIsNotNone(article.updated_at)

    def test_delete_article(self):
        article = create_article(self.author)

        resp = self.client.post(reverse("pages:article-delete", args=[article.pk]))

        self.assertRedirects(resp, reverse("pages:dashboard"), fetch_redirect_response=False)
        self.assertFalse(Article.objects.filter(pk=article.pk).exists())

    def test_other_authors_article_is_forbidden(self):
        article = create_article(self.other)

        self.assertEqual(self.client.get(reverse("pages:article-detail", args=[article.pk])).status_code, 403)
        self.assertEqual(self.client.get(reverse("pages:article-edit", args=[article.pk])).status_code, 403)
        self.assertEqual(self.client.post(reverse("pages:article-delete", args=[article.pk])).status_code, 403)
        self.assertTrue(Article.objects.filter(pk=article.pk).exists())

    def test_missing_article_is_404(self):
        resp = self.client.get(reverse("pages:article-detail", args=[98765]))

        self.assertEqual(resp.status_code, 404)

    def test_search_page_marks_own_articles(self):
        mine = create_article(self.author, title="Shared keyword mine")
        create_article(self.other, title="Shared keyword theirs")

        resp = self.client.get(reverse("pages:search"), {"q": "keyword"})

        results = resp.context["results"]
        self.assertEqual(len(results), 2)
        owned = [r["article"].pk for r in results if r["is_owner"]]
        self.assertEqual(owned, [mine.pk])

    def test_blank_search_page(self):
        resp = self.client.get(reverse("pages:search"), {"q": "  "})

        self.assertEqual(resp.context["results"], [])
        self.assertContains(resp, "Type something to search articles.")

"""Server-rendered pages built on the same article services as the API."""

import logging

from django.conf import settings
from django.contrib import messages
from django.contrib.auth import get_user_model
from django.contrib.auth.mixins import LoginRequiredMixin
from django.http import HttpResponseRedirect
from django.shortcuts import redirect
from django.urls import reverse
from django.utils.http import url_has_allowed_host_and_scheme
from django.views import View
from django.views.generic import FormView, TemplateView

from articles import services
from authentication.services import SessionService, clear_session_cookie, set_session_cookie
from uploads import services as upload_services
from .forms import ArticleForm, SignInForm, SignUpForm

logger = logging.getLogger(__name__)

User = get_user_model()


class DashboardView(LoginRequiredMixin, TemplateView):
    """The caller's articles, a few per page."""

    template_name = "pages/dashboard.html"

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        page_request = services.parse_page_request(
            self.request.GET.get("page"), default_limit=settings.DASHBOARD_PAGE_SIZE
        )
        # The dashboard page size is fixed; ignore any ?limit= in the URL.
        page = services.list_author_articles(self.request.user, page_request)
        context["page"] = page
        context["page_numbers"] = range(1, page.total_pages + 1)
        return context


class ArticleDetailView(LoginRequiredMixin, TemplateView):
    template_name = "pages/article_detail.html"

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["article"] = services.get_owned_article(self.request.user, kwargs["pk"])
        return context


class ArticleFormMixin:
    """Shared cover-image handling for the create and edit forms."""

    form_class = ArticleForm
    template_name = "pages/article_form.html"

    def resolve_fields(self, form):
        """Return the Article field values, uploading a cover file if one was chosen.

        Returns None after attaching a form error when the image host fails.
        """
        fields = form.article_fields()
        uploaded = form.cleaned_data.get("cover_image_file")
        if uploaded:
            try:
                fields["cover_image"] = upload_services.upload_image(uploaded, uploaded.name).url
            except upload_services.ImageHostError as exc:
                logger.error("Cover image upload failed: %s", exc)
                form.add_error("cover_image_file", "Error uploading image")
                return None
        return fields

    def form_invalid(self, form):
        messages.error(self.request, "Please fix the errors below")
        return super().form_invalid(form)


class ArticleCreateView(LoginRequiredMixin, ArticleFormMixin, FormView):
    extra_context = {"heading": "New article", "submit_label": "Create article"}

    def form_valid(self, form):
        fields = self.resolve_fields(form)
        if fields is None:
            return self.form_invalid(form)
        article = services.create_article(self.request.user, **fields)
        messages.success(self.request, "Article created successfully")
        return redirect("pages:article-detail", pk=article.pk)


class ArticleEditView(LoginRequiredMixin, ArticleFormMixin, FormView):
    extra_context = {"heading": "Edit article", "submit_label": "Save changes"}

    def dispatch(self, request, *args, **kwargs):
        if request.user.is_authenticated:
            self.article = services.get_owned_article(request.user, kwargs["pk"], action="update")
        return super().dispatch(request, *args, **kwargs)

    def get_initial(self):
        return {
            "title": self.article.title,
            "content": self.article.content,
            "cover_image": self.article.cover_image,
        }

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["article"] = self.article
        return context

    def form_valid(self, form):
        fields = self.resolve_fields(form)
        if fields is None:
            return self.form_invalid(form)
        services.update_article(self.article, fields)
        messages.success(self.request, "Article updated successfully")
        return redirect("pages:article-detail", pk=self.article.pk)


class ArticleDeleteView(LoginRequiredMixin, View):
    http_method_names = ["post"]

    def post(self, request, pk):
        article = services.get_owned_article(request.user, pk, action="delete")
        services.delete_article(article)
        messages.success(request, "Article deleted successfully")
        return redirect("pages:dashboard")


class SearchView(LoginRequiredMixin, TemplateView):
    template_name = "pages/search.html"

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        query = self.request.GET.get("q", "").strip()
        context["query"] = query
        context["results"] = [
            {"article": article, "is_owner": article.is_owned_by(self.request.user)}
            for article in services.search_articles(query)
        ]
        return context


class SessionFormView(FormView):
    """Base for the sign-in/sign-up pages: success starts a cookie session."""

    success_url = settings.LOGIN_REDIRECT_URL

    def dispatch(self, request, *args, **kwargs):
        if request.user.is_authenticated:
            return redirect(self.get_success_url())
        return super().dispatch(request, *args, **kwargs)

    def get_success_url(self):
        target = self.request.POST.get("next") or self.request.GET.get("next")
        if target and url_has_allowed_host_and_scheme(
            target, allowed_hosts={self.request.get_host()}, require_https=self.request.is_secure()
        ):
            return target
        return str(self.success_url)

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["next"] = self.request.GET.get("next", "")
        return context

    def start_session(self, user):
        session = SessionService.create_session(user)
        response = HttpResponseRedirect(self.get_success_url())
        set_session_cookie(response, session)
        return response


class LoginView(SessionFormView):
    template_name = "pages/login.html"
    form_class = SignInForm

    def form_valid(self, form):
        return self.start_session(form.cleaned_data["user"])


class RegisterView(SessionFormView):
    template_name = "pages/register.html"
    form_class = SignUpForm

    def form_valid(self, form):
        user = User.objects.create_user(
            email=form.cleaned_data["email"],
            password=form.cleaned_data["password"],
            name=form.cleaned_data["name"],
        )
        logger.info("Registered user %s", user.id)
        messages.success(self.request, "Account created successfully")
        return self.start_session(user)


class LogoutView(View):
    http_method_names = ["post"]

    def post(self, request):
        claims = getattr(request, "session_claims", None) or {}
        if claims.get("sid"):
            SessionService.revoke(claims["sid"])
        response = redirect(reverse("pages:login"))
        clear_session_cookie(response)
        return response

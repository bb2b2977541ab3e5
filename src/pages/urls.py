"""Routing for the server-rendered pages."""

from django.urls import path
from django.views.generic import RedirectView

from . import views

app_name = "pages"

urlpatterns = [
    path("", RedirectView.as_view(pattern_name="pages:dashboard", permanent=False), name="index"),
    path("dashboard/", views.DashboardView.as_view(), name="dashboard"),
    path("dashboard/articles/new/", views.ArticleCreateView.as_view(), name="article-new"),
    path("dashboard/articles/<int:pk>/", views.ArticleDetailView.as_view(), name="article-detail"),
    path("dashboard/articles/<int:pk>/edit/", views.ArticleEditView.as_view(), name="article-edit"),
    path("dashboard/articles/<int:pk>/delete/", views.ArticleDeleteView.as_view(), name="article-delete"),
    path("search/", views.SearchView.as_view(), name="search"),
    path("auth/login/", views.LoginView.as_view(), name="login"),
    path("auth/register/", views.RegisterView.as_view(), name="register"),
    path("auth/logout/", views.LogoutView.as_view(), name="logout"),
]

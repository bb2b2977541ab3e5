"""URL patterns for session endpoints."""

from django.urls import path

from .views import GetSessionView, SignInView, SignOutView, SignUpView

urlpatterns = [
    path("sign-up/email/", SignUpView.as_view(), name="auth-sign-up"),
    path("sign-in/email/", SignInView.as_view(), name="auth-sign-in"),
    path("sign-out/", SignOutView.as_view(), name="auth-sign-out"),
    path("get-session/", GetSessionView.as_view(), name="auth-get-session"),
]

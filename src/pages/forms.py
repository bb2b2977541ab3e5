"""HTML forms for the dashboard and the sign-in/sign-up pages."""

from django import forms
from django.conf import settings
from django.contrib.auth import get_user_model

from uploads import services as upload_services

User = get_user_model()


class ArticleForm(forms.Form):
    title = forms.CharField(
        min_length=3,
        max_length=255,
        error_messages={"min_length": "Title must be at least 3 characters"},
    )
    content = forms.CharField(
        min_length=10,
        strip=False,
        widget=forms.Textarea(attrs={"rows": 12}),
        error_messages={"min_length": "Content must be at least 10 characters"},
    )
    cover_image = forms.URLField(
        required=False,
        max_length=1024,
        assume_scheme="https",
        label="Cover image URL",
        error_messages={"invalid": "Please enter a valid URL"},
    )
    cover_image_file = forms.FileField(
        required=False,
        label="Or upload a cover image",
        widget=forms.ClearableFileInput(attrs={"accept": "image/*"}),
    )

    def clean_cover_image_file(self):
        uploaded = self.cleaned_data.get("cover_image_file")
        if uploaded:
            try:
                upload_services.validate_image(uploaded)
            except upload_services.InvalidImage as exc:
                raise forms.ValidationError(str(exc))
        return uploaded

    def article_fields(self) -> dict:
        """Cleaned values keyed by Article field names."""
        return {
            "title": self.cleaned_data["title"],
            "content": self.cleaned_data["content"],
            "cover_image": self.cleaned_data.get("cover_image") or "",
        }


class SignInForm(forms.Form):
    email = forms.CharField(error_messages={"required": "Required Field"})
    password = forms.CharField(
        strip=False,
        widget=forms.PasswordInput,
        error_messages={"required": "Required Field"},
    )

    def clean(self):
        cleaned = super().clean()
        email = cleaned.get("email")
        password = cleaned.get("password")
        if email and password:
            user = User.objects.authenticate(email, password)
            if user is None:
                raise forms.ValidationError("Invalid email or password")
            cleaned["user"] = user
        return cleaned


class SignUpForm(forms.Form):
    name = forms.CharField(label="Full name", max_length=150, error_messages={"required": "Required Field"})
    email = forms.EmailField(error_messages={"required": "Required Field", "invalid": "Invalid Email"})
    password = forms.CharField(
        strip=False,
        min_length=settings.AUTH_MIN_PASSWORD_LENGTH,
        widget=forms.PasswordInput,
        error_messages={
            "required": "Required Field",
            "min_length": f"Password too short (min {settings.AUTH_MIN_PASSWORD_LENGTH})",
        },
    )
    repeat_password = forms.CharField(
        label="Repeat password",
        strip=False,
        widget=forms.PasswordInput,
        error_messages={"required": "Required Field"},
    )

    def clean_email(self):
        email = self.cleaned_data["email"].lower()
        if User.objects.filter(email__iexact=email).exists():
            raise forms.ValidationError("Email already in use")
        return email

    def clean(self):
        cleaned = super().clean()
        password = cleaned.get("password")
        if password and password != cleaned.get("repeat_password"):
            self.add_error("repeat_password", "Passwords do not match")
        return cleaned

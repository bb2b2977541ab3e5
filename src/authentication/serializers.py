"""Serializers for the session flows (sign up, sign in, current user)."""

from typing import cast

from django.conf import settings
from django.contrib.auth import get_user_model
from rest_framework import serializers
from rest_framework.exceptions import AuthenticationFailed

from .managers import UserManager

User = get_user_model()


class SignUpSerializer(serializers.Serializer):
    """Validate and create an author account."""

    name = serializers.CharField(max_length=150, allow_blank=False, trim_whitespace=True)
    email = serializers.EmailField()
    password = serializers.CharField(
        write_only=True,
        min_length=settings.AUTH_MIN_PASSWORD_LENGTH,
        trim_whitespace=False,
        error_messages={"min_length": f"Password too short (min {settings.AUTH_MIN_PASSWORD_LENGTH})"},
    )
    repeatPassword = serializers.CharField(write_only=True, trim_whitespace=False)

    @staticmethod
    def validate_email(value):
        """Ensure email is unique before creation."""
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("Email already in use")
        return value.lower()

    def validate(self, attrs):
        """Ensure provided passwords match before creation."""
        if attrs.get("password") != attrs.get("repeatPassword"):
            raise serializers.ValidationError({"repeatPassword": "Passwords do not match"})
        return attrs

    def create(self, validated_data):
        """Create the user with a bcrypt-hashed password."""
        validated_data.pop("repeatPassword")
        manager = cast(UserManager, User.objects)
        return manager.create_user(**validated_data)


class SignInSerializer(serializers.Serializer):
    """Check email/password and attach the matching user to validated_data."""

    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)

    def validate(self, attrs):
        manager = cast(UserManager, User.objects)
        user = manager.authenticate(attrs.get("email"), attrs.get("password"))
        if user is None:
            raise AuthenticationFailed("Invalid email or password")
        attrs["user"] = user
        return attrs


class SessionUserSerializer(serializers.ModelSerializer):
    """Read-only user payload returned with sessions."""

    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        """Expose basic identity fields."""
        model = User
        fields = ["id", "name", "email", "createdAt"]
        read_only_fields = fields

"""Manager for author accounts: creation, bcrypt hashing and credential checks."""

import uuid

import bcrypt
from django.conf import settings
from django.contrib.auth.base_user import BaseUserManager


class UserManager(BaseUserManager):
    use_in_migrations = True

    def _create_user(self, email: str, password: str, name: str, **extra_fields):
        if not email:
            raise ValueError("An email address is required")
        if not name or not name.strip():
            raise ValueError("A display name is required")
        user = self.model(
            id=uuid.uuid4(),
            email=self.normalize_email(email).lower(),
            name=name.strip(),
            password_hash=self.hash_password(password),
            **extra_fields,
        )
        user.save(using=self._db)
        return user

    def create_user(self, email: str, password: str | None = None, name: str = "", **extra_fields):
        """Create a regular author account."""
        if password is None:
            raise ValueError("A password is required")
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        return self._create_user(email, password, name, **extra_fields)

    def create_superuser(self, email: str, password: str, name: str = "Administrator", **extra_fields):
        """Create an account that can sign in to the admin site."""
        extra_fields.update(is_staff=True, is_superuser=True, is_active=True)
        return self._create_user(email, password, name, **extra_fields)

    def get_by_natural_key(self, username):
        return self.get(email__iexact=username)

    def authenticate(self, email: str, raw_password: str):
        """Return the active user matching the credentials, or None.

        Unknown emails, inactive accounts and wrong passwords are not
        distinguished.
        """
        user = self.filter(email__iexact=(email or "").strip()).first()
        if user is None or not user.is_active:
            return None
        return user if self.verify_password(user, raw_password) else None

    @staticmethod
    def hash_password(raw_password: str) -> str:
        rounds = getattr(settings, "AUTH_BCRYPT_ROUNDS", 12)
        return bcrypt.hashpw(raw_password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")

    @staticmethod
    def verify_password(user, raw_password: str) -> bool:
        if not user.password_hash or raw_password is None:
            return False
        return bcrypt.checkpw(raw_password.encode("utf-8"), user.password_hash.encode("utf-8"))


__all__ = ["UserManager"]

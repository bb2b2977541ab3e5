"""Cloudinary-backed image hosting for article cover images."""

import logging
from dataclasses import dataclass
from typing import IO

import cloudinary
import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError
from django.conf import settings

logger = logging.getLogger(__name__)


class ImageHostError(Exception):
    """Raised when the image host rejects or fails an upload."""


class InvalidImage(ValueError):
    """Raised when an uploaded file is not an acceptable image."""


@dataclass(frozen=True)
class HostedImage:
    url: str
    public_id: str

    def to_dict(self) -> dict[str, str]:
        return {"url": self.url, "publicId": self.public_id}


def is_configured() -> bool:
    """Check if Cloudinary credentials are present in settings."""
    return bool(
        settings.CLOUDINARY_CLOUD_NAME and settings.CLOUDINARY_API_KEY and settings.CLOUDINARY_API_SECRET
    )


def _configure() -> None:
    if not is_configured():
        raise ImageHostError("Cloudinary credentials are not configured")
    cloudinary.config(
        cloud_name=settings.CLOUDINARY_CLOUD_NAME,
        api_key=settings.CLOUDINARY_API_KEY,
        api_secret=settings.CLOUDINARY_API_SECRET,
        secure=True,  # Always use HTTPS
    )


def validate_image(uploaded_file) -> None:
    """Reject non-image content types and files above UPLOAD_MAX_BYTES."""
    content_type = getattr(uploaded_file, "content_type", "") or ""
    if not content_type.startswith("image/"):
        raise InvalidImage("Only image files can be uploaded")
    size = getattr(uploaded_file, "size", 0) or 0
    if size > settings.UPLOAD_MAX_BYTES:
        limit_mb = settings.UPLOAD_MAX_BYTES / (1024 * 1024)
        raise InvalidImage(f"Image must be at most {limit_mb:g} MB")


def upload_image(file_obj: IO[bytes], filename: str = "") -> HostedImage:
    """Upload an image stream to the configured folder and return its URL."""
    _configure()
    try:
        result = cloudinary.uploader.upload(
            file_obj,
            folder=settings.CLOUDINARY_UPLOAD_FOLDER,
            resource_type="image",
            overwrite=False,
        )
    except CloudinaryError as exc:
        raise ImageHostError(f"Cloudinary rejected {filename or 'upload'}: {exc}") from exc

    url = result.get("secure_url") or result.get("url")
    if not url:
        raise ImageHostError("Cloudinary response missing URL")
    logger.info("Uploaded %s to %s", filename or "image", result.get("public_id"))
    return HostedImage(url=url, public_id=result.get("public_id", ""))


__all__ = ["HostedImage", "ImageHostError", "InvalidImage", "is_configured", "upload_image", "validate_image"]

"""Multipart image upload endpoint."""

from drf_spectacular.utils import OpenApiTypes, extend_schema
from rest_framework import status
from rest_framework.parsers import FormParser, MultiPartParser

from core.response import BaseAPIView, api_error, api_response
from . import services


class UploadView(BaseAPIView):
    """Store a cover image on the image host and return its public URL."""

    parser_classes = [MultiPartParser, FormParser]

    @extend_schema(
        request={"multipart/form-data": {"type": "object", "properties": {"file": {"type": "string", "format": "binary"}}}},
        responses={200: OpenApiTypes.OBJECT},
    )
    def post(self, request):
        uploaded = request.FILES.get("file")
        if uploaded is None:
            return api_error("No file uploaded", status.HTTP_400_BAD_REQUEST, field="file")
        try:
            services.validate_image(uploaded)
        except services.InvalidImage as exc:
            return api_error(exc, status.HTTP_400_BAD_REQUEST, field="file")

        hosted = services.upload_image(uploaded, uploaded.name)
        return api_response(hosted.to_dict())

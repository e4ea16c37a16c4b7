import logging
import os
import uuid

from django.conf import settings
from django.core.files.storage import default_storage
from rest_framework.exceptions import ValidationError

logger = logging.getLogger(__name__)


def store_image(request, field_name, folder="images"):
    """
    Validates the image sent in `field_name` and saves it to the default
    storage. Returns (absolute_url, stored_name).
    """
    upload = request.FILES.get(field_name)
    if upload is None:
        raise ValidationError("No file uploaded")

    if upload.content_type not in settings.UPLOAD_ALLOWED_TYPES:
        raise ValidationError(
            "Invalid file type. Only JPG, PNG, GIF, WebP, and SVG files are allowed."
        )
    if upload.size > settings.UPLOAD_MAX_BYTES:
        limit_mb = settings.UPLOAD_MAX_BYTES // (1024 * 1024)
        raise ValidationError(f"File too large. Maximum size is {limit_mb}MB.")

    extension = os.path.splitext(upload.name)[1].lower()
    filename = f"{field_name}-{uuid.uuid4().hex}{extension}"
    stored_name = default_storage.save(f"{folder}/{filename}", upload)
    url = request.build_absolute_uri(default_storage.url(stored_name))

    logger.info("User %s uploaded %s (%s bytes)", request.user.pk, stored_name, upload.size)
    return url, stored_name

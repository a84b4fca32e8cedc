"""Object storage for organizer photos, event banners and company logos."""

from .api import StorageClient
from .utils import DEFAULT_IMAGE_URL, object_path_for, resolve_image, upload_image

__all__ = [
    "DEFAULT_IMAGE_URL",
    "StorageClient",
    "object_path_for",
    "resolve_image",
    "upload_image",
]

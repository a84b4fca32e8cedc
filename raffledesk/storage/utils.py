import logging
import os
import re
import time
from typing import TYPE_CHECKING, Callable, Optional

import requests
from dotenv import load_dotenv

from ..errors import UploadError
from ..inputs import ImageField, ImageUpload

if TYPE_CHECKING:
    from .api import StorageClient

logger = logging.getLogger(__name__)

load_dotenv()

DEFAULT_IMAGE_URL = os.getenv(
    "DEFAULT_IMAGE_URL",
    "https://aisfizoyfpcisykarrnt.supabase.co/storage/v1/object/public/"
    "prospectaifeedback/WhatsApp%20Image%202025-09-12%20at%2000.14.26.jpeg",
)

_WHITESPACE = re.compile(r"\s+")


def object_path_for(filename: str, now_ms: Optional[int] = None) -> str:
    """Return ``public/<epoch millis>_<filename>`` with whitespace runs as ``_``."""
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"public/{stamp}_{_WHITESPACE.sub('_', filename)}"


def upload_image(
    client: "StorageClient",
    image: ImageUpload,
    *,
    clock_ms: Callable[[], int] = lambda: int(time.time() * 1000),
) -> str:
    """Upload ``image`` and return the public URL.

    Raises
    ------
    UploadError
        If the storage service rejects the upload or cannot be reached.
    """
    path = object_path_for(image.filename, clock_ms())
    try:
        return client.upload(path, image.content, image.content_type)
    except requests.RequestException as exc:
        logger.error(f"Error uploading image to '{path}': {exc}")
        raise UploadError("Photo upload failed.") from exc


def resolve_image(
    client: Optional["StorageClient"],
    image: ImageField,
    *,
    creating: bool,
) -> Optional[str]:
    """Turn an image field into the URL string that gets written.

    Raw uploads are stored first. A missing image on creation becomes
    :data:`DEFAULT_IMAGE_URL`; on update ``None`` means "leave unchanged".
    """
    if isinstance(image, ImageUpload):
        if client is None:
            logger.error("Image upload requested but no storage client is configured")
            raise UploadError("Photo upload failed.")
        return upload_image(client, image)
    if image:
        return image
    return DEFAULT_IMAGE_URL if creating else None

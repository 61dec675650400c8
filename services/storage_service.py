# catalog_dashboard/services/storage_service.py
import logging
import re
import secrets
import string
import time

from connectors.base import BackendError
from services.errors import UploadError

logger = logging.getLogger(__name__)

MAX_IMAGE_BYTES = 5 * 1024 * 1024
_ALPHABET = string.ascii_lowercase + string.digits


def validate_image(data, content_type, max_bytes=MAX_IMAGE_BYTES):
    """Local pre-check done before any network call."""
    if not data:
        raise UploadError("The file is empty or unreadable.")
    if len(data) > max_bytes:
        raise UploadError(
            f"File is too large ({len(data) / 1024 / 1024:.1f}MB). Maximum is {max_bytes / 1024 / 1024:.0f}MB."
        )
    if not (content_type or "").lower().startswith("image/"):
        raise UploadError(f"Format {content_type or 'unknown'} is not supported. Use JPG, PNG or WebP.")


def generate_image_name(filename, now=None) -> str:
    """-> product_<epoch ms>_<8 random chars>.<ext>"""
    timestamp = int((now if now is not None else time.time()) * 1000)
    random_part = "".join(secrets.choice(_ALPHABET) for _ in range(8))
    safe_name = re.sub(r"[^a-zA-Z0-9.]", "_", filename or "")
    ext = safe_name.rsplit(".", 1)[-1].lower() if "." in safe_name else ""
    return f"product_{timestamp}_{random_part}.{ext or 'jpg'}"


def upload_product_image(backend, data, filename, content_type, max_bytes=MAX_IMAGE_BYTES) -> str:
    """Validates, stores the image under a unique name and returns its public URL."""
    validate_image(data, content_type, max_bytes)
    key = generate_image_name(filename)
    try:
        backend.upload_object(key, data, content_type)
    except BackendError as e:
        message = str(e)
        if "bucket" in message.lower():
            message = f'Bucket "{backend.bucket}" was not found. Create it in the storage dashboard.'
        elif e.status_code == 403:
            message = f'Access denied. Enable public uploads on the "{backend.bucket}" bucket.'
        raise UploadError(f"Upload failed: {message}") from e

    url = backend.public_url(key)
    if not url:
        raise UploadError("Could not resolve the image URL.")
    return url


def extract_object_key(url, bucket):
    """'.../product-images/a/b.jpg' -> 'a/b.jpg'; None when the URL is not in the bucket."""
    if not url:
        return None
    parts = re.split(r"[\\/]", url.split("?", 1)[0])
    if bucket not in parts:
        return None
    key = "/".join(parts[parts.index(bucket) + 1:])
    return key.strip() or None


def delete_product_image(backend, url) -> bool:
    """
    Removes a product's stored image. Never raises: a failed image delete
    must not block deleting the product itself.
    """
    key = extract_object_key(url, backend.bucket)
    if not key:
        logger.info(f"No stored image to delete for {url!r}.")
        return False
    try:
        backend.delete_objects([key])
        logger.info(f"Deleted image {key}.")
        return True
    except BackendError as e:
        logger.error(f"Failed to delete image {key}: {e}")
        return False


def find_orphaned_images(keys, used_urls, public_url):
    used = set(u for u in used_urls if u)
    return [key for key in keys if public_url(key) not in used]


def cleanup_orphaned_images(backend, keep_urls=()) -> list:
    """
    Deletes stored images no product points to. Returns the deleted keys.

    :param backend: the catalog backend; product URLs are read from it directly
        so products saved by other sessions are never treated as orphans.
    :param keep_urls: extra URLs to keep, e.g. a photo uploaded into a form
        that has not been saved yet.
    """
    used_urls = [p.get("image_url") for p in backend.list_products()] + list(keep_urls)
    orphaned = find_orphaned_images(backend.list_objects(), used_urls, backend.public_url)
    if not orphaned:
        logger.info("No orphaned images found.")
        return []
    logger.info(f"Found {len(orphaned)} orphaned images to delete.")
    backend.delete_objects(orphaned)
    return orphaned

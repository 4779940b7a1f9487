"""Image upload storage returning the editor's upload response shape"""

import logging
import random
import re
import time
from pathlib import Path
from typing import Any, Optional


logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 5 * 1024 * 1024
URL_PREFIX = "/uploads/images"
SUFFIX_RE = re.compile(r"^\.[A-Za-z0-9]{1,10}$")


def _failure(message: str) -> dict[str, Any]:
    return {"success": 0, "message": message}


def unique_name(filename: str) -> str:
    """`image-{millis}-{random}{ext}`; the original extension is kept only if it is plain."""
    suffix = Path(filename or "").suffix.lower()
    if not SUFFIX_RE.match(suffix):
        suffix = ""
    return f"image-{int(time.time() * 1000)}-{random.randint(0, 10**9)}{suffix}"


def save_image(
    data: bytes,
    filename: str,
    content_type: Optional[str],
    upload_dir: Path,
    max_bytes: int = MAX_UPLOAD_BYTES,
    url_prefix: str = URL_PREFIX,
    ) -> dict[str, Any]:
    """Store an uploaded image and return `{success: 1, file: {url}}`.

    Non-image content types, empty payloads, oversize payloads, and write
    errors return `{success: 0, message}` instead of raising.
    """
    if not data:
        return _failure("No image file uploaded")
    if not content_type or not content_type.startswith("image/"):
        logger.warning("Rejected upload %s: content type %s", filename, content_type)
        return _failure("Only image files are allowed")
    if len(data) > max_bytes:
        logger.warning("Rejected upload %s: %d bytes exceeds %d", filename, len(data), max_bytes)
        return _failure(f"Image exceeds the {max_bytes} byte limit")

    name = unique_name(filename)
    try:
        upload_dir.mkdir(parents=True, exist_ok=True)
        (upload_dir / name).write_bytes(data)
    except OSError as e:
        logger.warning("Failed to store upload %s: %s", filename, e)
        return _failure("Failed to upload image")

    logger.info("Stored upload %s as %s", filename, name)
    return {"success": 1, "file": {"url": f"{url_prefix.rstrip('/')}/{name}"}}

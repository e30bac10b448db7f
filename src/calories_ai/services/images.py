"""Image encoding helpers shared by the client and the analysis handler."""

import base64
import logging
from pathlib import Path

from calories_ai.domain.meals import MAX_IMAGE_BYTES, strip_data_uri_prefix
from calories_ai.errors import EncodingError

logger = logging.getLogger(__name__)


def encode_image_file(path: str | Path, max_bytes: int = MAX_IMAGE_BYTES) -> str:
    """Read an image file and return its bytes as base64 text."""
    try:
        image_bytes = Path(path).read_bytes()
    except OSError as exc:
        logger.warning("Failed to read image file", extra={"path": str(path)})
        raise EncodingError("Couldn't read the selected image") from exc
    return encode_image_bytes(image_bytes, max_bytes=max_bytes)


def encode_image_bytes(image_bytes: bytes, max_bytes: int = MAX_IMAGE_BYTES) -> str:
    """Return base64 text for raw image bytes."""
    if not image_bytes:
        raise EncodingError("The selected image is empty")
    if len(image_bytes) > max_bytes:
        limit_mb = max_bytes // (1024 * 1024)
        raise EncodingError(f"Images must be {limit_mb} MB or smaller")
    return base64.b64encode(image_bytes).decode("utf-8")


def to_data_url(encoded: str) -> str:
    """Convert base64 image text to a data URL for model input."""
    encoded = strip_data_uri_prefix(encoded)
    head = base64.b64decode(encoded[:16])
    return f"data:{detect_mime_type(head)};base64,{encoded}"


def detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    if image_bytes[:6] in {b"GIF87a", b"GIF89a"}:
        return "image/gif"
    return "image/jpeg"

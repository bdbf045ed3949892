"""Image encoding for multimodal requests.

Images are sent inline as ``image_url`` content parts whose URL is a base64
data URL (``data:image/png;base64,...``).  Pillow is used to check that the
input really is an image and to find its MIME type when the caller does not
know it (Gradio hands us file paths).
"""

from __future__ import annotations

import base64
import io
import logging
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from .errors import InvalidImageError

logger = logging.getLogger(__name__)


def _detect_mime_type(data: bytes) -> str:
    try:
        with Image.open(io.BytesIO(data)) as img:
            image_format = img.format
    except (UnidentifiedImageError, OSError) as e:
        raise InvalidImageError("Please select a valid image file (PNG, JPG, etc.).") from e

    mime_type = Image.MIME.get(image_format or "")
    if not mime_type:
        raise InvalidImageError(f"Unsupported image format: {image_format}")
    return mime_type


def image_to_data_url(
    source: bytes | str | Path | Image.Image, mime_type: str | None = None
) -> str:
    """Encode an image as a base64 data URL.

    Args:
        source: Raw image bytes, a path to an image file, or a PIL image.
            PIL images are re-encoded as PNG.
        mime_type: MIME type of *source* when already known.  Must start
            with ``image/``; detected with Pillow when omitted.

    Returns:
        ``data:<mime>;base64,<payload>``

    Raises:
        InvalidImageError: If the input is not a readable image or the given
            MIME type is not an image type.
    """
    if isinstance(source, Image.Image):
        buffer = io.BytesIO()
        source.save(buffer, format="PNG")
        data = buffer.getvalue()
        mime_type = "image/png"
    elif isinstance(source, (str, Path)):
        try:
            data = Path(source).read_bytes()
        except OSError as e:
            raise InvalidImageError(f"Cannot read image file: {source}") from e
    else:
        data = source

    if mime_type is None:
        mime_type = _detect_mime_type(data)
    elif not mime_type.startswith("image/"):
        raise InvalidImageError("Please select a valid image file (PNG, JPG, etc.).")

    encoded = base64.b64encode(data).decode("ascii")
    logger.debug(f"Encoded {len(data)} bytes of {mime_type} as data URL")
    return f"data:{mime_type};base64,{encoded}"

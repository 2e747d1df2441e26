"""Conversion between raw image bytes and base64 data URIs.

Every image the session holds, uploaded or generated, is kept as a data URI.
The same string is sent to the API and decoded for display or export.
"""

import base64
import io
import logging
import re

from PIL import Image

from .errors import FileDecodeError

logger = logging.getLogger(__name__)

_DATA_URI_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?P<base64>;base64)?,(?P<data>.*)$", re.DOTALL)

# Modes Pillow can write to PNG without conversion
_PNG_MODES = {"1", "L", "LA", "P", "RGB", "RGBA", "I", "I;16"}


def detect_image_format(data: bytes) -> str:
    """Return the Pillow format name of an encoded image.

    Args:
        data: Raw file bytes

    Returns:
        Format name such as ``"PNG"`` or ``"JPEG"``

    Raises:
        FileDecodeError: If the bytes are empty or not a readable image
    """
    if not data:
        raise FileDecodeError("Failed to read uploaded image: file is empty")

    try:
        with Image.open(io.BytesIO(data)) as img:
            img.verify()
            image_format = img.format
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
        raise FileDecodeError(f"Failed to read uploaded image: {e}") from e

    if not image_format or image_format not in Image.MIME:
        raise FileDecodeError(f"Failed to read uploaded image: unsupported format {image_format}")

    return image_format


def encode_image_bytes(data: bytes) -> str:
    """Encode image bytes as a ``data:<mime>;base64,...`` URI.

    Args:
        data: Raw file bytes

    Returns:
        Data URI carrying the original bytes unchanged

    Raises:
        FileDecodeError: If the bytes are not a readable image
    """
    mime = Image.MIME[detect_image_format(data)]
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime};base64,{encoded}"


def parse_data_uri(uri: str) -> tuple[str, bytes]:
    """Split a base64 data URI into its MIME type and decoded bytes.

    Raises:
        ValueError: If ``uri`` is not a base64 data URI
    """
    match = _DATA_URI_RE.match(uri or "")
    if match is None or not match.group("base64"):
        raise ValueError("Not a base64 data URI")

    mime = match.group("mime") or "application/octet-stream"
    return mime, base64.b64decode(match.group("data"), validate=True)


def decode_data_uri(uri: str) -> bytes:
    """Return the raw bytes of a base64 data URI."""
    return parse_data_uri(uri)[1]


def data_uri_to_image(uri: str) -> Image.Image:
    """Decode a data URI into a fully loaded PIL image for display."""
    img = Image.open(io.BytesIO(decode_data_uri(uri)))
    img.load()
    return img


def to_png_bytes(uri: str) -> bytes:
    """Return PNG bytes for a data URI, converting non-PNG images.

    Raises:
        ValueError: If the URI is malformed
        OSError: If the payload is not a readable image
    """
    mime, raw = parse_data_uri(uri)
    if mime == "image/png":
        return raw

    logger.debug(f"Converting {mime} payload to PNG for export")
    with Image.open(io.BytesIO(raw)) as img:
        if img.mode not in _PNG_MODES:
            img = img.convert("RGBA")
        buffer = io.BytesIO()
        img.save(buffer, format="PNG")
    return buffer.getvalue()

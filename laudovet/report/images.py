"""Image sizing and appendix layout.

Images arrive as base64 data URLs (``data:image/png;base64,...``) or bare
base64. Only the header is read to learn the intrinsic size; pixels are never
re-encoded.
"""

import base64
import binascii
import io
import logging
import re
from dataclasses import dataclass

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

LETTERHEAD_WIDTH = 600
THUMBNAIL_WIDTH = 250
FALLBACK_RATIO = 0.75
ROW_SIZE = 2

_DATA_URL = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?:;[\w=.-]+)*;base64,(?P<payload>.*)$", re.DOTALL)


@dataclass(frozen=True)
class ImageBox:
    data: bytes
    mime_type: str
    width: float
    height: float
    caption: str | None = None
    filename: str | None = None

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{base64.b64encode(self.data).decode('ascii')}"


def decode_data_url(data: str) -> tuple[bytes, str]:
    """Return (payload bytes, mime type). Raises ValueError on bad base64."""
    m = _DATA_URL.match(data.strip())
    if m:
        mime = m.group("mime") or "application/octet-stream"
        payload = m.group("payload")
    else:
        mime = "application/octet-stream"
        payload = data.strip()
    try:
        return base64.b64decode(payload, validate=False), mime
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Invalid base64 image payload: {e}") from e


def intrinsic_size(raw: bytes) -> tuple[int, int]:
    with Image.open(io.BytesIO(raw)) as img:
        return img.size


def render_size(raw: bytes, target_width: float) -> tuple[float, float]:
    """Scale to ``target_width`` keeping the source aspect ratio.

    Falls back to a 4:3 box when the image cannot be decoded.
    """
    try:
        width, height = intrinsic_size(raw)
        if width <= 0 or height <= 0:
            raise ValueError(f"Degenerate image size {width}x{height}")
    except (UnidentifiedImageError, OSError, ValueError) as e:
        logger.warning("Could not read image dimensions (%s); using %.2f ratio", e, FALLBACK_RATIO)
        return target_width, target_width * FALLBACK_RATIO
    return target_width, target_width * (height / width)


def layout_image(data: str, target_width: float, caption: str | None = None,
                 filename: str | None = None) -> ImageBox:
    try:
        raw, mime = decode_data_url(data)
    except ValueError as e:
        logger.warning("Image %s has an unreadable payload: %s", filename or "<unnamed>", e)
        raw, mime = b"", "application/octet-stream"
    width, height = render_size(raw, target_width)
    return ImageBox(data=raw, mime_type=mime, width=width, height=height, caption=caption, filename=filename)


def group_rows(items: list, size: int = ROW_SIZE) -> list[tuple]:
    """Group items into rows of ``size`` in original order; last row may be short."""
    return [tuple(items[i:i + size]) for i in range(0, len(items), size)]

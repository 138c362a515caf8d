"""
Inline media helpers.

Assets travel through the studio as ``data:`` URLs. The model service wants
base64 payloads with a mime type, so conversion happens at the service edge.
"""

import base64
import binascii
import io
from dataclasses import dataclass
from typing import Optional, Tuple

from PIL import Image

from remixstudio.core.exceptions import ModelServiceError
from remixstudio.core.logging_config import get_logger

logger = get_logger("llm.media")


@dataclass(frozen=True)
class InlineMedia:
    """Base64 payload plus mime type (image or video)."""
    data: str
    mime_type: str

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"

    @property
    def raw_bytes(self) -> bytes:
        return base64.b64decode(self.data)

    def to_part(self) -> dict:
        """Request part in the generateContent wire shape."""
        return {"inline_data": {"mime_type": self.mime_type, "data": self.data}}

    @classmethod
    def from_bytes(cls, payload: bytes, mime_type: str) -> 'InlineMedia':
        return cls(data=base64.b64encode(payload).decode("ascii"), mime_type=mime_type)

    @classmethod
    def from_data_url(cls, data_url: str) -> 'InlineMedia':
        header, sep, data = data_url.partition(",")
        if not sep or not header.startswith("data:"):
            raise ModelServiceError("Invalid data URL", {"prefix": data_url[:32]})
        mime_type = header[5:].split(";")[0] or "application/octet-stream"
        return cls(data=data, mime_type=mime_type)


def inline_media_from_part(part: dict) -> Optional[InlineMedia]:
    """Extract inline media from a response part (camelCase or snake_case keys)."""
    inline = part.get("inlineData") or part.get("inline_data")
    if not inline:
        return None
    data = inline.get("data")
    mime_type = inline.get("mimeType") or inline.get("mime_type")
    if not data or not mime_type:
        return None
    return InlineMedia(data=data, mime_type=mime_type)


def image_dimensions(media: InlineMedia) -> Optional[Tuple[int, int]]:
    """Pixel size of an inline image, or None when it cannot be decoded."""
    try:
        with Image.open(io.BytesIO(media.raw_bytes)) as img:
            return img.size
    except (OSError, ValueError, binascii.Error) as e:
        logger.debug(f"Could not read image dimensions: {e}")
        return None


def fit_within(size: Optional[Tuple[int, int]], box: int) -> Tuple[float, float]:
    """Scale ``size`` to fit a ``box`` x ``box`` square, preserving aspect ratio."""
    if not size or size[0] <= 0 or size[1] <= 0:
        return float(box), float(box)
    width, height = size
    scale = box / max(width, height)
    return round(width * scale, 2), round(height * scale, 2)

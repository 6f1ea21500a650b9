# backend/checkin/services/capture/photo.py
from __future__ import annotations

import base64
import binascii
import io
import re

from PIL import Image, UnidentifiedImageError

from checkin.errors import ValidationError

_DATA_URI = re.compile(r"^data:(?P<mime>image/[\w.+-]+);base64,(?P<data>.+)$", re.DOTALL)

# Pillow format name -> MIME type stored in the data URI
_MIME_BY_FORMAT = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
    "WEBP": "image/webp",
    "GIF": "image/gif",
}


def normalize_photo(photo: str, max_bytes: int) -> str:
    """Return ``photo`` as a ``data:image/...;base64,`` URI.

    Accepts a data URI or bare base64 (the browser canvas sends either).
    The bytes must decode as one of the supported image formats; the MIME
    type in the result is the one Pillow detects, not the one claimed.
    """
    m = _DATA_URI.match(photo.strip())
    payload = m.group("data") if m else photo.strip()
    try:
        raw = base64.b64decode(payload, validate=False)
    except (binascii.Error, ValueError):
        raise ValidationError("photo is not valid base64")
    if not raw:
        raise ValidationError("photo is empty")
    if len(raw) > max_bytes:
        raise ValidationError("photo is too large")

    try:
        with Image.open(io.BytesIO(raw)) as img:
            fmt = img.format
            img.verify()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError):
        raise ValidationError("photo is not a valid image")

    mime = _MIME_BY_FORMAT.get(fmt or "")
    if mime is None:
        raise ValidationError(f"unsupported photo format: {fmt}")
    return f"data:{mime};base64,{base64.b64encode(raw).decode('ascii')}"

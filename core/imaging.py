"""
core/imaging.py
────────────────────────────────────────────────────────────────────────
Upload preprocessing for meal photos.

Every photo leaves the client with its longer edge at most 512 px and
re-encoded as JPEG at a fixed quality, whatever its source format.
"""
from __future__ import annotations

import base64
import binascii
import io

from PIL import Image, UnidentifiedImageError

MAX_EDGE = 512
JPEG_QUALITY = 70
UPLOAD_MIME = "image/jpeg"


def compress_for_upload(raw: bytes) -> bytes:
    try:
        image = Image.open(io.BytesIO(raw))
        image.load()
    except (UnidentifiedImageError, OSError) as exc:
        raise ValueError("not a readable image") from exc

    image = image.convert("RGB")
    if max(image.size) > MAX_EDGE:
        # thumbnail keeps the aspect ratio and never upsizes
        image.thumbnail((MAX_EDGE, MAX_EDGE), Image.Resampling.LANCZOS)

    out = io.BytesIO()
    image.save(out, format="JPEG", quality=JPEG_QUALITY)
    return out.getvalue()


def to_data_uri(data: bytes, mime: str = UPLOAD_MIME) -> str:
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


def decode_data_uri(value: str) -> tuple[bytes, str]:
    """Accept a `data:` URI or bare base64; return (bytes, mime)."""
    mime = UPLOAD_MIME
    payload = value
    if "," in value:
        header, payload = value.split(",", 1)
        if header.startswith("data:"):
            mime = header[5:].split(";", 1)[0] or UPLOAD_MIME
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError("image payload is not valid base64") from exc
    if not data:
        raise ValueError("image payload is empty")
    return data, mime

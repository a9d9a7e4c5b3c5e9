# tools/media/assets.py
from __future__ import annotations
import base64
import binascii
import io
import re
import time
from typing import Optional, Tuple

from PIL import Image, UnidentifiedImageError

from backend.src.core.constants import DEFAULT_MIME_TYPE, IMAGE_FILE_PREFIX

_DATA_URL = re.compile(r"^data:([^;,]*)((?:;[^;,]*)*?);base64,(.*)$", re.DOTALL)


def split_data_url(data_url: str) -> Tuple[str, str]:
    """Return (mime, base64 payload) of a base64 data URL."""
    m = _DATA_URL.match(data_url or "")
    if not m:
        raise ValueError("dataUrl must be a base64-encoded image data URL")
    return m.group(1) or "", m.group(3).strip()


def decode_data_url(data_url: str) -> Tuple[bytes, str]:
    mime, payload = split_data_url(data_url)
    try:
        blob = base64.b64decode(payload, validate=False)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"dataUrl payload is not valid base64: {e}") from e
    return blob, mime


def to_data_url(b64: str, mime: Optional[str]) -> str:
    return f"data:{mime or DEFAULT_MIME_TYPE};base64,{b64}"


def measure_image(blob: bytes) -> Tuple[int, int]:
    try:
        with Image.open(io.BytesIO(blob)) as img:
            w, h = img.size
    except (UnidentifiedImageError, OSError) as e:
        raise ValueError(f"Unreadable image bytes: {e}") from e
    return int(w), int(h)


def file_extension(mime: str) -> str:
    ext = (mime or "").split("/")[1] if "/" in (mime or "") else ""
    return ext.split("+")[0] or "png"


def asset_file_name(mime: str) -> str:
    ts_ms = int(time.time() * 1000)
    return f"{IMAGE_FILE_PREFIX}-{ts_ms}.{file_extension(mime)}"

# tools/media/image_tool.py
from __future__ import annotations
import base64
import binascii
import os
from typing import Any, Dict, List, Optional

from backend.src.core.constants import DEFAULT_MIME_TYPE, IMAGE_MODEL
from backend.src.core.logging import get_logger
from backend.src.core.errors import ProviderError
from backend.src.llm.gemini_llm import generate_content, response_parts
from backend.src.tools.media.assets import measure_image, to_data_url

logger = get_logger("canvasagent.media.image")


def generate_image(
    mode: str,
    prompt: str,
    edit_prompt: Optional[str] = None,
    reference: Optional[Dict[str, str]] = None,
    target_mime_type: Optional[str] = None,
    api_key: Optional[str] = None,
) -> Dict[str, Any]:
    if mode == "edit" and not reference:
        raise ProviderError("Edit requests must include `reference` image data.", status_code=400)
    model = os.getenv("IMAGE_MODEL", IMAGE_MODEL)
    effective_prompt = (edit_prompt or prompt) if mode == "edit" else prompt

    parts: List[Dict[str, Any]] = []
    if mode == "edit" and reference:
        parts.append({"inlineData": {"data": reference["base64"], "mimeType": reference.get("mimeType") or DEFAULT_MIME_TYPE}})
    parts.append({"text": effective_prompt})

    logger.info("IMAGE_REQUEST model=%s mode=%s prompt_len=%s reference=%s", model, mode, len(effective_prompt), bool(reference))
    status, body, text = generate_content(model, parts, api_key=api_key)
    if not 200 <= status < 300:
        logger.error("IMAGE_PROVIDER_ERROR status=%s body=%r", status, text[:300])
        message = ((body.get("error") or {}) if isinstance(body.get("error"), dict) else {}).get("message")
        raise ProviderError(message or "Image generation failed.", status_code=status)

    image_part = next((p for p in response_parts(body) if "inlineData" in p), None)
    inline = (image_part or {}).get("inlineData") or {}
    if not inline.get("data"):
        logger.error("IMAGE_RESPONSE_EMPTY model=%s", model)
        raise ProviderError("Image generation did not return inline image data.", status_code=502)

    mime = inline.get("mimeType") or target_mime_type or DEFAULT_MIME_TYPE
    out: Dict[str, Any] = {"dataUrl": to_data_url(inline["data"], mime)}
    try:
        w, h = measure_image(base64.b64decode(inline["data"]))
        out.update(width=w, height=h)
    except (ValueError, binascii.Error):
        logger.warning("IMAGE_UNMEASURED model=%s mime=%s", model, mime)
    logger.info("IMAGE_OK model=%s mime=%s width=%s height=%s", model, mime, out.get("width"), out.get("height"))
    return out

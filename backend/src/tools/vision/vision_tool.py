# tools/vision/vision_tool.py
from __future__ import annotations
import os
from typing import Any, Dict, Optional

from backend.src.core.constants import DEFAULT_ANALYSIS_PROMPT, VISION_MODEL
from backend.src.core.logging import get_logger
from backend.src.core.errors import ProviderError
from backend.src.llm.gemini_llm import generate_content, response_parts
from backend.src.tools.media.assets import split_data_url

logger = get_logger("canvasagent.vision")


def analyze_image(data_url: str, prompt: Optional[str] = None, api_key: Optional[str] = None) -> Dict[str, Any]:
    try:
        mime, b64 = split_data_url(data_url)
    except ValueError as e:
        raise ProviderError(str(e), status_code=400) from e
    model = os.getenv("VISION_MODEL", VISION_MODEL)
    text_prompt = (prompt or "").strip() or DEFAULT_ANALYSIS_PROMPT
    parts = [{"inlineData": {"data": b64, "mimeType": mime}}, {"text": text_prompt}]
    status, body, raw = generate_content(model, parts, api_key=api_key)
    if not 200 <= status < 300:
        logger.error("VISION_PROVIDER_ERROR status=%s", status)
        raise ProviderError("Image analysis failed", status_code=502, details=raw)
    description = next(
        (p["text"].strip() for p in response_parts(body) if isinstance(p.get("text"), str) and p["text"].strip()),
        "No analysis available.",
    )
    return {"description": description}

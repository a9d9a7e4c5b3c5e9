# llm/gemini_llm.py
from __future__ import annotations
from typing import Any, Dict, List, Optional, Tuple

import requests

from backend.src.core.config import google_api_key, provider_timeout
from backend.src.core.constants import GEMINI_API_BASE
from backend.src.core.logging import get_logger

logger = get_logger("canvasagent.llm.gemini")


def generate_content(model: str, parts: List[Dict[str, Any]], api_key: Optional[str] = None) -> Tuple[int, Dict[str, Any], str]:
    """POST one user turn to Gemini's generateContent; returns (status, json body, raw text)."""
    key = api_key or google_api_key()
    url = f"{GEMINI_API_BASE}/{model}:generateContent"
    payload = {"contents": [{"role": "user", "parts": parts}]}
    logger.info("GEMINI_REQUEST model=%s parts=%s", model, len(parts))
    r = requests.post(
        url,
        headers={"Content-Type": "application/json", "x-goog-api-key": key},
        json=payload,
        timeout=provider_timeout(),
    )
    text = r.text or ""
    try:
        body = r.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}
    logger.info("GEMINI_RESPONSE model=%s status=%s bytes=%s", model, r.status_code, len(text))
    return r.status_code, body, text


def response_parts(body: Dict[str, Any]) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    for cand in body.get("candidates") or []:
        for part in ((cand or {}).get("content") or {}).get("parts") or []:
            if isinstance(part, dict):
                out.append(part)
    return out

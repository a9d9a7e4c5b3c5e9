# tools/web/inspiration_tool.py
from __future__ import annotations
from typing import Any, Dict

import requests

from backend.src.core.config import provider_timeout
from backend.src.core.constants import INSPIRATION_USER_AGENT, LEXICA_API, MAX_INSPIRATIONS
from backend.src.core.logging import get_logger
from backend.src.core.errors import ProviderError

logger = get_logger("canvasagent.web.inspiration")


def inspiration_search(query: str) -> Dict[str, Any]:
    r = requests.get(
        LEXICA_API,
        params={"q": query},
        headers={"User-Agent": INSPIRATION_USER_AGENT},
        timeout=provider_timeout(),
    )
    if not r.ok:
        logger.warning("INSPIRATION_PROVIDER_ERROR status=%s query=%r", r.status_code, query)
        raise ProviderError(f"Inspiration provider returned {r.status_code}", status_code=502)
    try:
        data = r.json() or {}
    except ValueError as e:
        raise ProviderError("Inspiration provider returned malformed JSON", status_code=502) from e

    inspirations = [
        {
            "id": img.get("id"),
            "prompt": img.get("prompt"),
            "thumbnail": img.get("srcSmall") or img.get("srcTiny") or img.get("src"),
            "src": img.get("src"),
            "width": img.get("width"),
            "height": img.get("height"),
        }
        for img in (data.get("images") or [])[:MAX_INSPIRATIONS]
    ]
    return {"query": query, "inspirations": inspirations}

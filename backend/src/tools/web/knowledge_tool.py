# tools/web/knowledge_tool.py
from __future__ import annotations
from typing import Any, Dict, List

import requests

from backend.src.core.config import provider_timeout
from backend.src.core.constants import DUCKDUCKGO_API, KNOWLEDGE_USER_AGENT, MAX_RELATED_TOPICS
from backend.src.core.logging import get_logger
from backend.src.core.errors import ProviderError

logger = get_logger("canvasagent.web.knowledge")


def knowledge_search(query: str) -> Dict[str, Any]:
    params = {"q": query, "format": "json", "no_redirect": 1, "no_html": 1}
    headers = {"User-Agent": KNOWLEDGE_USER_AGENT}
    r = requests.get(DUCKDUCKGO_API, params=params, headers=headers, timeout=provider_timeout())
    if not r.ok:
        logger.warning("KNOWLEDGE_PROVIDER_ERROR status=%s query=%r", r.status_code, query)
        raise ProviderError(f"Knowledge provider returned {r.status_code}", status_code=502)
    try:
        data = r.json() or {}
    except ValueError as e:
        raise ProviderError("Knowledge provider returned malformed JSON", status_code=502) from e

    abstract = data.get("AbstractText") or data.get("Abstract") or ""
    heading = data.get("Heading") or query

    related: List[Dict[str, Any]] = []
    for topic in data.get("RelatedTopics") or []:
        if topic.get("Text"):
            related.append({"text": topic["Text"], "url": topic.get("FirstURL")})
        for sub in topic.get("Topics") or []:
            if sub.get("Text"):
                related.append({"text": sub["Text"], "url": sub.get("FirstURL")})

    summary = abstract or (related[0]["text"] if related else "") or f'No summary found for "{query}".'
    return {
        "query": query,
        "heading": heading,
        "summary": summary,
        "sourceUrl": data.get("AbstractURL") or None,
        "related": related[:MAX_RELATED_TOPICS],
    }

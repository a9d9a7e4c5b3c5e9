# api/routes_knowledge.py
from __future__ import annotations
from typing import Callable, Dict, Any, Optional

import requests
from fastapi import APIRouter
from fastapi.responses import JSONResponse

from backend.src.core.errors import ProviderError
from backend.src.core.logging import get_logger
from backend.src.tools.web.inspiration_tool import inspiration_search
from backend.src.tools.web.knowledge_tool import knowledge_search

router = APIRouter()
logger = get_logger("canvasagent.api.knowledge")


def _lookup(q: Optional[str], fn: Callable[[str], Dict[str, Any]], name: str):
    query = (q or "").strip()
    if not query:
        return JSONResponse({"error": 'Missing query parameter "q"'}, status_code=400)
    logger.info("LOOKUP kind=%s query=%r", name, query)
    try:
        return fn(query)
    except ProviderError as e:
        return JSONResponse(e.to_body(), status_code=e.status_code)
    except requests.RequestException as e:
        logger.error("LOOKUP_UNREACHABLE kind=%s error=%s", name, e)
        return JSONResponse({"error": f"{name.capitalize()} provider unreachable"}, status_code=502)


@router.get("/knowledge")
def knowledge(q: Optional[str] = None):
    return _lookup(q, knowledge_search, "knowledge")


@router.get("/inspiration")
def inspiration(q: Optional[str] = None):
    return _lookup(q, inspiration_search, "inspiration")

# api/routes_analyze.py
from __future__ import annotations
from typing import Optional

import requests
from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from backend.src.core.errors import ProviderError
from backend.src.core.logging import get_logger
from backend.src.tools.vision.vision_tool import analyze_image

router = APIRouter()
logger = get_logger("canvasagent.api.analyze")


class AnalyzeIn(BaseModel):
    data_url: str = Field(..., alias="dataUrl", min_length=1)
    prompt: Optional[str] = None


@router.post("/analyze-image")
def analyze(inp: AnalyzeIn):
    try:
        return analyze_image(inp.data_url, inp.prompt)
    except ProviderError as e:
        return JSONResponse(e.to_body(), status_code=e.status_code)
    except requests.RequestException as e:
        logger.error("ANALYZE_UNREACHABLE error=%s", e)
        return JSONResponse({"error": "Image analysis failed", "details": str(e)}, status_code=502)

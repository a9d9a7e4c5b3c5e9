# api/routes_images.py
from __future__ import annotations
from typing import Literal, Optional

import requests
from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from backend.src.core.constants import DEFAULT_MIME_TYPE
from backend.src.core.errors import ProviderError
from backend.src.core.logging import get_logger
from backend.src.schemas.actions import GeneratorMode, MaxOutputSize
from backend.src.tools.media.image_tool import generate_image

router = APIRouter()
logger = get_logger("canvasagent.api.images")


class ReferenceIn(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    base64: str = Field(..., min_length=1)
    mime_type: str = DEFAULT_MIME_TYPE


class GenerateImageIn(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    provider: Literal["google-gemini"] = "google-gemini"
    mode: GeneratorMode = "generate"
    prompt: str = Field(..., min_length=1)
    edit_prompt: Optional[str] = None
    reference: Optional[ReferenceIn] = None
    target_mime_type: Optional[str] = None
    max_output_size: Optional[MaxOutputSize] = None


@router.post("/images/generate")
def images_generate(inp: GenerateImageIn):
    logger.info("GENERATE_REQUEST mode=%s reference=%s", inp.mode, bool(inp.reference))
    reference = inp.reference.model_dump(by_alias=True) if inp.reference else None
    try:
        out = generate_image(
            inp.mode,
            inp.prompt,
            edit_prompt=inp.edit_prompt,
            reference=reference,
            target_mime_type=inp.target_mime_type,
        )
    except ProviderError as e:
        return JSONResponse(e.to_body(), status_code=e.status_code)
    except requests.RequestException as e:
        logger.error("GENERATE_UNREACHABLE error=%s", e)
        return JSONResponse({"error": "Unexpected error generating image."}, status_code=500)
    except Exception:
        logger.exception("GENERATE_UNEXPECTED mode=%s", inp.mode)
        return JSONResponse({"error": "Unexpected error generating image."}, status_code=500)
    return out

# schemas/actions.py
from __future__ import annotations
from typing import Annotated, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from backend.src.core.constants import DEFAULT_IMAGE_PROVIDER, MAX_OUTPUT_DIMENSION

GeneratorMode = Literal["generate", "edit"]


class BaseAction(BaseModel):
    """Streaming envelope shared by every action kind."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    type: str = Field(..., alias="_type", description="action discriminator")
    time: float = 0
    complete: bool = False


class MessageAction(BaseAction):
    type: Literal["message"] = Field("message", alias="_type")
    text: str


class PlanAction(BaseAction):
    type: Literal["plan"] = Field("plan", alias="_type")
    steps: List[Annotated[str, Field(min_length=1)]] = Field(..., min_length=1)
    objective: Optional[str] = None


class DesignDirectionAction(BaseAction):
    type: Literal["designDirection"] = Field("designDirection", alias="_type")
    title: Optional[str] = None
    summary: str = Field(..., min_length=1)
    pillars: Optional[List[Annotated[str, Field(min_length=1)]]] = None


class DesignGuidanceAction(BaseAction):
    type: Literal["designGuidance"] = Field("designGuidance", alias="_type")
    recommendations: List[Annotated[str, Field(min_length=1)]] = Field(..., min_length=1)
    notes: Optional[str] = None


class MaxOutputSize(BaseModel):
    width: Optional[float] = Field(None, gt=0, le=MAX_OUTPUT_DIMENSION)
    height: Optional[float] = Field(None, gt=0, le=MAX_OUTPUT_DIMENSION)


class ImageGenerator(BaseModel):
    """Asks the runtime to obtain image bytes from the generation endpoint."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    provider: Literal["google-gemini"] = DEFAULT_IMAGE_PROVIDER
    mode: GeneratorMode = "generate"
    prompt: str = Field(..., min_length=1)
    edit_prompt: Optional[str] = None
    reference_shape_id: Optional[str] = None
    reference_asset_id: Optional[str] = None
    mime_type: Optional[str] = None
    target_mime_type: Optional[str] = None
    max_output_size: Optional[MaxOutputSize] = None

    @property
    def reference(self) -> Optional[str]:
        return self.reference_asset_id or self.reference_shape_id


class CreateImageAction(BaseAction):
    type: Literal["createImage"] = Field("createImage", alias="_type")
    intent: str
    shape_id: str
    data_url: Optional[str] = None
    generator: Optional[ImageGenerator] = None
    x: float
    y: float
    w: Optional[float] = Field(None, gt=0)
    h: Optional[float] = Field(None, gt=0)
    alt_text: Optional[str] = None

    @field_validator("data_url")
    @classmethod
    def _data_url_is_image(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.startswith("data:image/"):
            raise ValueError("dataUrl must be a base64-encoded image data URL")
        return v

    @model_validator(mode="after")
    def _has_image_source(self) -> "CreateImageAction":
        if not self.data_url and not self.generator:
            raise ValueError(
                "Provide either `dataUrl` or a `generator` description so the runtime can obtain image bytes."
            )
        if self.generator and self.generator.mode == "edit" and not self.generator.reference:
            raise ValueError(
                "Edits must specify `referenceShapeId` or `referenceAssetId` so the runtime can fetch the source image."
            )
        return self


class AnalyzeImageAction(BaseAction):
    type: Literal["analyzeImage"] = Field("analyzeImage", alias="_type")
    shape_id: str
    prompt: Optional[str] = None


class KnowledgeAction(BaseAction):
    type: Literal["knowledge"] = Field("knowledge", alias="_type")
    query: str = Field(..., min_length=1)


class InspirationAction(BaseAction):
    type: Literal["inspiration"] = Field("inspiration", alias="_type")
    query: str = Field(..., min_length=1)


class DeleteAction(BaseAction):
    type: Literal["delete"] = Field("delete", alias="_type")
    intent: str = ""
    shape_id: str

# schemas/canvas.py
from __future__ import annotations
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Vec(BaseModel):
    x: float
    y: float


class Asset(CamelModel):
    id: str
    type: str = "image"
    type_name: str = "asset"
    props: Dict[str, Any] = Field(default_factory=dict)
    meta: Dict[str, Any] = Field(default_factory=dict)


class Shape(CamelModel):
    id: str
    type: str
    type_name: str = "shape"
    x: float = 0
    y: float = 0
    rotation: float = 0
    opacity: float = 1
    props: Dict[str, Any] = Field(default_factory=dict)


class ImagePreview(CamelModel):
    data_url: str
    alt_text: str = ""


class ActionInfo(CamelModel):
    """Transcript projection of one (possibly partial) action."""
    icon: Optional[str] = None
    description: str = ""
    image_preview: Optional[ImagePreview] = None
    can_group: bool = False


class ScheduledRequest(BaseModel):
    messages: List[str] = Field(default_factory=list)
    data: List[Dict[str, Any]] = Field(default_factory=list)

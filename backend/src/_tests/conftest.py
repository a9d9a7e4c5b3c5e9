# _tests/conftest.py
from __future__ import annotations
import base64
import io
from typing import Any, Dict, List, Optional, Tuple

import pytest
from PIL import Image

from backend.src.canvas.document import InMemoryDocument
from backend.src.engine.agent import CanvasAgent
from backend.src.engine.api_client import ApiError, ApiResponse
from backend.src.engine.helpers import AgentHelpers
from backend.src.schemas.canvas import Asset, Shape


def png_bytes(w: int = 4, h: int = 3) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (w, h), (250, 210, 40)).save(buf, format="PNG")
    return buf.getvalue()


def png_b64(w: int = 4, h: int = 3) -> str:
    return base64.b64encode(png_bytes(w, h)).decode("ascii")


def png_data_url(w: int = 4, h: int = 3) -> str:
    return f"data:image/png;base64,{png_b64(w, h)}"


class FakeApi:
    """Records calls and answers from a queue of canned responses."""

    def __init__(self, *responses: Any):
        self.responses: List[Any] = list(responses)
        self.calls: List[Tuple[str, str, Optional[Dict[str, Any]]]] = []

    def _next(self) -> ApiResponse:
        r = self.responses.pop(0) if self.responses else ApiResponse(status_code=200, body={})
        if isinstance(r, Exception):
            raise r
        return r

    def post_json(self, path: str, body: Dict[str, Any]) -> ApiResponse:
        self.calls.append(("POST", path, body))
        return self._next()

    def get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> ApiResponse:
        self.calls.append(("GET", path, params))
        return self._next()


def ok(body: Any, status_code: int = 200) -> ApiResponse:
    return ApiResponse(status_code=status_code, body=body, text="x")


def unreachable(msg: str = "connection refused") -> ApiError:
    return ApiError(msg)


def add_image(doc: InMemoryDocument, shape_id: str, data_url: str, asset_id: str = "asset:seed") -> Shape:
    doc.create_assets([Asset(id=asset_id, props={"src": data_url, "mimeType": "image/png", "w": 4, "h": 3})])
    shape = Shape(id=shape_id, type="image", props={"assetId": asset_id, "w": 4, "h": 3})
    doc.create_shape(shape)
    return shape


@pytest.fixture
def doc() -> InMemoryDocument:
    return InMemoryDocument()


@pytest.fixture
def api() -> FakeApi:
    return FakeApi()


@pytest.fixture
def agent(doc, api) -> CanvasAgent:
    return CanvasAgent(doc, api=api)


@pytest.fixture
def helpers(doc) -> AgentHelpers:
    return AgentHelpers(doc)

# engine/api_client.py
from __future__ import annotations
from typing import Any, Dict, Optional

import requests
from pydantic import BaseModel

from backend.src.core.config import api_base_url, api_timeout
from backend.src.core.logging import get_logger

logger = get_logger("canvasagent.engine.api")


class ApiError(RuntimeError):
    """The backend could not be reached or did not answer."""


class ApiResponse(BaseModel):
    status_code: int
    body: Any = None
    text: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class CanvasApiClient:
    """Thin JSON client for the backend helper routes.

    `session` only needs requests-style `get`/`post`, so tests can hand in a
    FastAPI TestClient and talk to the app in-process.
    """

    def __init__(self, base_url: Optional[str] = None, session: Any = None, timeout: Optional[float] = None):
        self.base_url = (api_base_url() if base_url is None else base_url).rstrip("/")
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout if timeout is not None else api_timeout()

    def post_json(self, path: str, body: Dict[str, Any]) -> ApiResponse:
        return self._call("POST", path, json=body)

    def get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> ApiResponse:
        return self._call("GET", path, params=params)

    def _call(self, method: str, path: str, **kwargs: Any) -> ApiResponse:
        url = f"{self.base_url}{path}"
        if self.timeout is not None:
            kwargs["timeout"] = self.timeout
        try:
            fn = self.session.post if method == "POST" else self.session.get
            r = fn(url, **kwargs)
        except requests.RequestException as e:
            logger.error("API_UNREACHABLE method=%s url=%s error=%s", method, url, e)
            raise ApiError(str(e)) from e
        text = r.text or ""
        try:
            body = r.json() if text else None
        except ValueError:
            body = None
        logger.info("API_RESPONSE method=%s path=%s status=%s bytes=%s", method, path, r.status_code, len(text))
        return ApiResponse(status_code=r.status_code, body=body, text=text)

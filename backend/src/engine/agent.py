# engine/agent.py
from __future__ import annotations
from typing import Any, Dict, List, Optional

from backend.src.canvas.document import CanvasDocument
from backend.src.core.logging import get_logger
from backend.src.engine.api_client import CanvasApiClient
from backend.src.schemas.canvas import ScheduledRequest

logger = get_logger("canvasagent.engine.agent")


class CanvasAgent:
    """Long-lived handle on the document and backend; outlives individual turns."""

    def __init__(self, document: CanvasDocument, api: Optional[CanvasApiClient] = None):
        self.document = document
        self.api = api or CanvasApiClient()
        self._scheduled: List[ScheduledRequest] = []

    def schedule(self, messages: Optional[List[str]] = None, data: Optional[List[Dict[str, Any]]] = None) -> ScheduledRequest:
        req = ScheduledRequest(messages=list(messages or []), data=list(data or []))
        logger.info("SCHEDULE messages=%s data=%s", len(req.messages), len(req.data))
        self._scheduled.append(req)
        return req

    def drain_scheduled(self) -> List[ScheduledRequest]:
        out, self._scheduled = self._scheduled, []
        return out

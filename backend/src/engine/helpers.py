# engine/helpers.py
from __future__ import annotations
import logging
import re
from typing import Optional, Set, Tuple

from backend.src.canvas.document import CanvasDocument, bare_shape_id, to_shape_id
from backend.src.core.logging import get_logger
from backend.src.schemas.canvas import Vec

_IMAGE_HINT = re.compile(
    r"\b(image|images|picture|pictures|photo|photos|illustration|visual|visuals|artwork|render|moodboard)\b",
    re.IGNORECASE,
)


class AgentHelpers:
    """Per-turn state shared by action handlers.

    Owns the shape-id ledger, the single retry slot, the model/canvas offset
    transform and the image bookkeeping used to decide whether an image
    follow-up is still worth suggesting. A new instance is created for every
    turn and is never shared across turns.
    """

    def __init__(
        self,
        document: CanvasDocument,
        offset: Tuple[float, float] = (0.0, 0.0),
        logger: Optional[logging.Logger] = None,
    ):
        self.document = document
        self.offset = Vec(x=offset[0], y=offset[1])
        self.logger = logger or get_logger("canvasagent.engine.helpers")
        self._shape_ids: Set[str] = set()
        self._retry_message: Optional[str] = None
        self._image_created = False
        self._followup_query: Optional[str] = None

    # ids

    def ensure_shape_id_is_unique(self, shape_id: str) -> str:
        base = bare_shape_id(shape_id)
        candidate, n = base, 0
        while candidate in self._shape_ids or self.document.get_shape(to_shape_id(candidate)) is not None:
            n += 1
            candidate = f"{base}-{n}"
        self._shape_ids.add(candidate)
        return candidate

    # coordinates

    def apply_offset_to_vec(self, v: Vec) -> Vec:
        return Vec(x=v.x - self.offset.x, y=v.y - self.offset.y)

    def remove_offset_from_vec(self, v: Vec) -> Vec:
        return Vec(x=v.x + self.offset.x, y=v.y + self.offset.y)

    # retry channel

    def schedule_image_retry(self, message: str) -> None:
        if self._retry_message and self._retry_message != message:
            self.logger.info("IMAGE_RETRY_REPLACED previous=%r", self._retry_message[:80])
        self.logger.warning("IMAGE_RETRY_SCHEDULED message=%r", message[:160])
        self._retry_message = message

    @property
    def retry_message(self) -> Optional[str]:
        return self._retry_message

    def take_retry_message(self) -> Optional[str]:
        msg, self._retry_message = self._retry_message, None
        return msg

    # image bookkeeping

    def mark_image_created(self) -> None:
        self._image_created = True

    @property
    def image_created(self) -> bool:
        return self._image_created

    def observe_message_for_image_followup(self, text: str) -> None:
        t = (text or "").strip()
        if t and _IMAGE_HINT.search(t):
            self._followup_query = t

    def pending_image_followup(self) -> Optional[str]:
        if self._image_created:
            return None
        return self._followup_query

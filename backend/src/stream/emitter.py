# stream/emitter.py
from __future__ import annotations
import time
from typing import Any, Callable, Dict, Optional

from backend.src.core.config import env_flag
from backend.src.core.logging import get_logger
from backend.src.schemas.events import SSEEvent

logger = get_logger("canvasagent.stream.emitter")

# partial previews repeat for every streamed delta
QUIET_TYPES = frozenset({"action"})


class Emitter:
    """Numbers and forwards transcript events for one turn."""

    def __init__(self, run_id: str, trace_id: Optional[str], send: Callable[[Dict[str, Any]], None]):
        self.run_id, self.trace_id, self.send = run_id, trace_id, send
        self.seq = 0

    def emit(self, type_: str, data: Dict[str, Any]) -> SSEEvent:
        self.seq += 1
        ev = SSEEvent(
            type=type_,
            run_id=self.run_id,
            seq=self.seq,
            trace_id=self.trace_id,
            ts_ms=int(time.time() * 1000),
            data=data,
        )
        if type_ not in QUIET_TYPES or env_flag("LOG_SSE_EVENTS"):
            logger.info("SSE_EMIT type=%s run_id=%s seq=%s keys=%s", type_, self.run_id, self.seq, ",".join(sorted(data)))
        self.send(ev.model_dump())
        return ev

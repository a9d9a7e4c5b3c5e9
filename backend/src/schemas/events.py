# schemas/events.py
from __future__ import annotations
from typing import Any, Dict, Literal, Optional
from pydantic import BaseModel, Field


EventType = Literal[
    "turn_start", "action", "retry", "scheduled",
    "error", "turn_end",
]


class SSEEvent(BaseModel):
    """One transcript event of a turn; `seq` orders events within the turn."""
    type: EventType
    run_id: str
    seq: int
    trace_id: Optional[str] = None
    ts_ms: int
    data: Dict[str, Any] = Field(default_factory=dict)

# engine/runner.py
from __future__ import annotations
import itertools
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, Union
from uuid import uuid4

import requests
from pydantic import BaseModel, Field

from backend.src.actions.router import ActionRouter
from backend.src.core.logging import get_logger
from backend.src.engine.agent import CanvasAgent
from backend.src.engine.helpers import AgentHelpers
from backend.src.schemas.canvas import ActionInfo, ScheduledRequest
from backend.src.stream.accumulator import accumulate
from backend.src.stream.emitter import Emitter
from backend.src.stream.sse import iter_sse_data

logger = get_logger("canvasagent.engine.runner")


class TurnResult(BaseModel):
    run_id: str
    infos: List[ActionInfo] = Field(default_factory=list)
    scheduled: List[ScheduledRequest] = Field(default_factory=list)
    retry_message: Optional[str] = None
    image_followup: Optional[str] = None
    image_created: bool = False
    applied: int = 0
    disconnected: bool = False

    @property
    def next_messages(self) -> List[str]:
        """Messages to feed back to the producer as the next turn; the retry hint comes first."""
        out = [self.retry_message] if self.retry_message else []
        for req in self.scheduled:
            out.extend(req.messages)
        return out


def _envelopes(source: Union[str, Iterable[Union[str, Dict[str, Any]]]], log: logging.Logger):
    if isinstance(source, str):
        source = [source]
    it = iter(source)
    first = next(it, None)
    if first is None:
        return
    items = itertools.chain([first], it)
    if isinstance(first, dict):
        yield from items
    else:
        yield from iter_sse_data(items, logger=log)


def run_turn(
    agent: CanvasAgent,
    source: Union[str, Iterable[Union[str, Dict[str, Any]]]],
    send: Optional[Callable[[Dict[str, Any]], None]] = None,
    offset: Tuple[float, float] = (0.0, 0.0),
    run_id: Optional[str] = None,
    trace_id: Optional[str] = None,
    log: Optional[logging.Logger] = None,
) -> TurnResult:
    """Consume one turn of the action stream and apply it to the agent's document.

    `source` is an SSE body, an iterable of SSE text chunks (e.g. requests'
    `iter_content(decode_unicode=True)`), or already decoded envelopes. A
    fresh helpers context is created for the turn; the document and the
    scheduled-request queue live on the agent. A transport disconnect ends
    the turn early but keeps whatever was already committed.
    """
    log = log or logger
    run_id = run_id or str(uuid4())[:8]
    em = Emitter(run_id=run_id, trace_id=trace_id, send=send or (lambda ev: None))
    helpers = AgentHelpers(agent.document, offset=offset, logger=log)
    router = ActionRouter(agent, em=em)
    result = TurnResult(run_id=run_id)

    em.emit("turn_start", {"offset": list(offset)})
    try:
        for key, snapshot in accumulate(_envelopes(source, log), logger=log):
            info = router.handle(key, snapshot, helpers)
            if info is not None and snapshot.get("complete"):
                result.infos.append(info)
    except (requests.RequestException, ConnectionError) as e:
        log.error("TURN_DISCONNECTED run_id=%s error=%s", run_id, e)
        result.disconnected = True

    result.retry_message = helpers.take_retry_message()
    if result.retry_message:
        em.emit("retry", {"message": result.retry_message})
    result.scheduled = agent.drain_scheduled()
    for req in result.scheduled:
        em.emit("scheduled", req.model_dump())
    result.image_created = helpers.image_created
    result.image_followup = helpers.pending_image_followup()
    result.applied = router.applied
    em.emit("turn_end", {"ok": not result.disconnected, "applied": result.applied, "retry": bool(result.retry_message)})
    log.info(
        "TURN_END run_id=%s applied=%s scheduled=%s retry=%s image_created=%s",
        run_id,
        result.applied,
        len(result.scheduled),
        bool(result.retry_message),
        result.image_created,
    )
    return result

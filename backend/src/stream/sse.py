# stream/sse.py
from __future__ import annotations
import json
import logging
from typing import Any, Dict, Iterable, Iterator, List, Optional

from backend.src.core.logging import get_logger

_logger = get_logger("canvasagent.stream.sse")


def sse_pack(ev: Dict[str, Any]) -> str:
    return "data: " + json.dumps(ev, ensure_ascii=False) + "\n\n"


def iter_sse_data(chunks: Iterable[str], logger: Optional[logging.Logger] = None) -> Iterator[Dict[str, Any]]:
    """Yield each JSON object carried by `data:` frames.

    `chunks` is raw response text in arbitrary pieces (e.g. requests'
    `iter_content(decode_unicode=True)`); a line split across two chunks is
    stitched back together. Frames that are not JSON objects are dropped
    with a warning.
    """
    log = logger or _logger
    buf: List[str] = []
    tail = ""

    def flush() -> Optional[Dict[str, Any]]:
        if not buf:
            return None
        raw = "\n".join(buf)
        buf.clear()
        try:
            ev = json.loads(raw)
        except ValueError:
            log.warning("SSE_DROP reason=bad_json sample=%r", raw[:80])
            return None
        if not isinstance(ev, dict):
            log.warning("SSE_DROP reason=not_object type=%s", type(ev).__name__)
            return None
        return ev

    def feed(line: str) -> Optional[Dict[str, Any]]:
        line = line.rstrip("\r")
        if not line:
            return flush()
        if line.startswith("data:"):
            buf.append(line[5:].lstrip(" "))
        # event:, id:, retry: and comments carry nothing for the engine
        return None

    for chunk in chunks:
        lines = (tail + (chunk or "")).split("\n")
        tail = lines.pop()
        for line in lines:
            ev = feed(line)
            if ev is not None:
                yield ev
    if tail:
        feed(tail)
    ev = flush()
    if ev is not None:
        yield ev

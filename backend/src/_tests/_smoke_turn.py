# _tests/_smoke_turn.py
# Replays a recorded SSE action stream against a running backend (CANVAS_API_BASE_URL).
from __future__ import annotations
import json
import sys

from backend.src.core.config import bootstrap_env
bootstrap_env()

from backend.src.canvas.document import InMemoryDocument
from backend.src.engine.agent import CanvasAgent
from backend.src.engine.runner import run_turn

if __name__ == "__main__":
    path = sys.argv[1] if len(sys.argv) > 1 else "turn.sse"
    doc = InMemoryDocument()
    agent = CanvasAgent(doc)
    with open(path, encoding="utf-8") as f:
        result = run_turn(agent, f, send=lambda ev: print(json.dumps(ev)[:200]))
    print(result.model_dump_json(indent=2))
    print(json.dumps([s.model_dump(by_alias=True) for s in doc.shapes], indent=2)[:2000])

# stream/accumulator.py
from __future__ import annotations
import logging
from typing import Any, Dict, Iterable, Iterator, Optional, Set, Tuple

from backend.src.core.logging import get_logger

ActionKey = Tuple[str, int]


def merge(prior: Optional[Dict[str, Any]], delta: Dict[str, Any]) -> Dict[str, Any]:
    """Deep-merge `delta` over `prior` without touching either input.

    None leaves are treated as absent. Nested dicts merge key by key; lists
    and scalars from the delta replace what was there.
    """
    out: Dict[str, Any] = dict(prior or {})
    for k, v in delta.items():
        if v is None:
            continue
        cur = out.get(k)
        if isinstance(v, dict) and isinstance(cur, dict):
            out[k] = merge(cur, v)
        elif isinstance(v, dict):
            out[k] = merge(None, v)
        else:
            out[k] = v
    return out


class StreamAccumulator:
    """Folds partial action envelopes into one evolving snapshot per action.

    Identity is (kind, index). The transport may number actions with an
    explicit `index`; otherwise a delta continues the head action while it is
    incomplete and of the same kind, and starts the next index otherwise.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or get_logger("canvasagent.stream.accumulator")
        self._snapshots: Dict[ActionKey, Dict[str, Any]] = {}
        self._completed: Set[ActionKey] = set()
        self._head: Optional[ActionKey] = None
        self._next_index = 0

    def _identify(self, kind: str, delta: Dict[str, Any]) -> ActionKey:
        idx = delta.get("index")
        if isinstance(idx, int) and not isinstance(idx, bool):
            self._next_index = max(self._next_index, idx + 1)
            return (kind, idx)
        head = self._head
        if head is not None and head[0] == kind and head not in self._completed:
            return head
        key = (kind, self._next_index)
        self._next_index += 1
        return key

    def push(self, delta: Dict[str, Any]) -> Optional[Tuple[ActionKey, Dict[str, Any]]]:
        kind = delta.get("_type")
        if not isinstance(kind, str) or not kind:
            self.logger.warning("STREAM_DROP reason=missing_type keys=%s", ",".join(sorted(delta.keys())))
            return None
        key = self._identify(kind, delta)
        if key in self._completed:
            self.logger.warning("STREAM_DROP reason=already_complete kind=%s index=%s", kind, key[1])
            return None

        prior = self._snapshots.get(key)
        t, prior_t = delta.get("time"), (prior or {}).get("time")
        if isinstance(t, (int, float)) and isinstance(prior_t, (int, float)) and t < prior_t:
            self.logger.warning("STREAM_DROP reason=out_of_order kind=%s index=%s time=%s prior=%s", kind, key[1], t, prior_t)
            return None

        snap = merge(prior, {k: v for k, v in delta.items() if k != "index"})
        snap["complete"] = bool((prior or {}).get("complete")) or bool(delta.get("complete"))
        self._head = key
        if snap["complete"]:
            self._completed.add(key)
            self._snapshots.pop(key, None)
        else:
            self._snapshots[key] = snap
        return key, snap

    @property
    def in_flight(self) -> int:
        return len(self._snapshots)


def accumulate(
    envelopes: Iterable[Dict[str, Any]],
    logger: Optional[logging.Logger] = None,
) -> Iterator[Tuple[ActionKey, Dict[str, Any]]]:
    acc = StreamAccumulator(logger=logger)
    for env in envelopes:
        out = acc.push(env)
        if out is not None:
            yield out

# actions/base.py
from __future__ import annotations
import logging
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Dict, Generic, Optional, Type, TypeVar

from pydantic import ValidationError

from backend.src.core.logging import get_logger
from backend.src.engine.agent import CanvasAgent
from backend.src.engine.helpers import AgentHelpers
from backend.src.schemas.actions import BaseAction
from backend.src.schemas.canvas import ActionInfo

A = TypeVar("A", bound=BaseAction)


def text_of(value: Any) -> str:
    """Streamed string field, or "" when the producer sent something else."""
    return value if isinstance(value, str) else ""


def validation_message(err: ValidationError) -> str:
    """First human readable reason in a pydantic error."""
    for e in err.errors():
        msg = str(e.get("msg") or "")
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        loc = ".".join(str(p) for p in e.get("loc") or ())
        return f"{loc}: {msg}" if loc else msg
    return str(err)


class ActionUtil(ABC, Generic[A]):
    """Capability set every action kind implements.

    `get_info` must stay pure: it runs on partial snapshots as they stream
    in. `sanitize_action` may rewrite fields but never does I/O.
    `apply_action` is the only step that touches the document or the
    network, and it does nothing for incomplete actions.
    """

    type: ClassVar[str] = ""
    schema: ClassVar[Type[BaseAction]] = BaseAction

    def __init__(self, agent: Optional[CanvasAgent] = None, logger: Optional[logging.Logger] = None):
        self.agent = agent
        self.logger = logger or get_logger(f"canvasagent.actions.{self.type or 'base'}")

    @classmethod
    def get_schema(cls) -> Type[BaseAction]:
        return cls.schema

    def validate(self, snapshot: Dict[str, Any]) -> A:
        return self.get_schema().model_validate(snapshot)  # type: ignore[return-value]

    @staticmethod
    def dump(action: BaseAction) -> Dict[str, Any]:
        return action.model_dump(by_alias=True, exclude_none=True)

    @abstractmethod
    def get_info(self, action: Dict[str, Any]) -> ActionInfo:
        """Transcript projection; works on partial or complete snapshots."""

    def sanitize_action(self, action: A, helpers: AgentHelpers) -> A:
        return action

    @abstractmethod
    def apply_action(self, action: A, helpers: AgentHelpers) -> None:
        ...

    def on_invalid(self, snapshot: Dict[str, Any], err: ValidationError, helpers: AgentHelpers) -> None:
        self.logger.warning("ACTION_INVALID type=%s reason=%s", self.type, validation_message(err))

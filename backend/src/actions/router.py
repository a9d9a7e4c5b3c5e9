# actions/router.py
from __future__ import annotations
import logging
from typing import Any, Dict, Optional, Set, Tuple, Type

from pydantic import ValidationError

from backend.src.actions.base import ActionUtil
from backend.src.actions.analyze_image_action import AnalyzeImageActionUtil
from backend.src.actions.create_image_action import CreateImageActionUtil
from backend.src.actions.delete_action import DeleteActionUtil
from backend.src.actions.lookup_action import InspirationActionUtil, KnowledgeActionUtil
from backend.src.actions.message_action import MessageActionUtil
from backend.src.actions.plan_action import DesignDirectionActionUtil, DesignGuidanceActionUtil, PlanActionUtil
from backend.src.core.logging import get_logger
from backend.src.engine.agent import CanvasAgent
from backend.src.engine.helpers import AgentHelpers
from backend.src.schemas.canvas import ActionInfo
from backend.src.stream.accumulator import ActionKey
from backend.src.stream.emitter import Emitter

ACTION_UTILS: Tuple[Type[ActionUtil], ...] = (
    MessageActionUtil,
    PlanActionUtil,
    DesignDirectionActionUtil,
    DesignGuidanceActionUtil,
    CreateImageActionUtil,
    AnalyzeImageActionUtil,
    KnowledgeActionUtil,
    InspirationActionUtil,
    DeleteActionUtil,
)


def build_registry(agent: Optional[CanvasAgent], utils: Tuple[Type[ActionUtil], ...] = ACTION_UTILS) -> Dict[str, ActionUtil]:
    registry: Dict[str, ActionUtil] = {}
    for cls in utils:
        if not cls.type:
            raise ValueError(f"{cls.__name__} has no action type")
        if cls.type in registry:
            raise ValueError(f"Duplicate action type: {cls.type}")
        registry[cls.type] = cls(agent)
    return registry


class ActionRouter:
    """Routes merged envelopes to their handler and applies each completed action once."""

    def __init__(
        self,
        agent: Optional[CanvasAgent],
        em: Optional[Emitter] = None,
        utils: Tuple[Type[ActionUtil], ...] = ACTION_UTILS,
        logger: Optional[logging.Logger] = None,
    ):
        self.agent = agent
        self.em = em
        self.utils = build_registry(agent, utils)
        self.logger = logger or get_logger("canvasagent.actions.router")
        self._handled: Set[ActionKey] = set()
        self._unknown: Set[ActionKey] = set()
        self.applied = 0

    def get_util(self, kind: str) -> Optional[ActionUtil]:
        return self.utils.get(kind)

    def _emit(self, type_: str, data: Dict[str, Any]) -> None:
        if self.em is not None:
            self.em.emit(type_, data)

    def _emit_info(self, key: ActionKey, info: ActionInfo, complete: bool) -> None:
        self._emit("action", {"kind": key[0], "index": key[1], "complete": complete, "info": info.model_dump(by_alias=True)})

    def _project(self, util: ActionUtil, key: ActionKey, snapshot: Dict[str, Any], complete: bool) -> ActionInfo:
        try:
            info = util.get_info(snapshot)
        except Exception:
            # projections read raw streamed values
            self.logger.exception("ACTION_INFO_FAILED kind=%s index=%s", key[0], key[1])
            info = ActionInfo(description="")
        self._emit_info(key, info, complete)
        return info

    def handle(self, key: ActionKey, snapshot: Dict[str, Any], helpers: AgentHelpers) -> Optional[ActionInfo]:
        kind = key[0]
        util = self.get_util(kind)
        if util is None:
            if key not in self._unknown:
                self._unknown.add(key)
                self.logger.warning("ACTION_UNKNOWN kind=%s index=%s", kind, key[1])
                self._emit("error", {"kind": kind, "index": key[1], "error": f"No handler registered for action type {kind}"})
            return None

        if not snapshot.get("complete"):
            return self._project(util, key, snapshot, False)

        if key in self._handled:
            self.logger.warning("ACTION_ALREADY_APPLIED kind=%s index=%s", kind, key[1])
            return None
        self._handled.add(key)

        try:
            action = util.validate(snapshot)
        except ValidationError as e:
            util.on_invalid(snapshot, e, helpers)
            return self._project(util, key, snapshot, True)

        action = util.sanitize_action(action, helpers)
        self._project(util, key, util.dump(action), True)
        try:
            util.apply_action(action, helpers)
            self.applied += 1
        except Exception as e:
            # one failing action must not end the turn
            self.logger.exception("ACTION_APPLY_FAILED kind=%s index=%s", kind, key[1])
            self._emit("error", {"kind": kind, "index": key[1], "error": str(e)})
        # re-project: image previews read the committed shape
        info = self._project(util, key, util.dump(action), True)
        self.logger.info("ACTION_APPLIED kind=%s index=%s", kind, key[1])
        return info

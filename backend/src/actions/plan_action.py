# actions/plan_action.py
from __future__ import annotations
from typing import Any, Dict

from backend.src.actions.base import ActionUtil, text_of
from backend.src.engine.helpers import AgentHelpers
from backend.src.schemas.actions import DesignDirectionAction, DesignGuidanceAction, PlanAction
from backend.src.schemas.canvas import ActionInfo


def _strings(value) -> list:
    return [s for s in value if isinstance(s, str) and s] if isinstance(value, list) else []


def _numbered(items) -> str:
    return "\n".join(f"{i + 1}. {s}" for i, s in enumerate(items))


class PlanActionUtil(ActionUtil[PlanAction]):
    type = "plan"
    schema = PlanAction

    def get_info(self, action: Dict[str, Any]) -> ActionInfo:
        steps = _strings(action.get("steps"))
        if not steps:
            return ActionInfo(icon="note", description="Planning next steps…")
        objective = text_of(action.get("objective"))
        header = f"Objective: {objective}\n" if objective else ""
        return ActionInfo(icon="note", description=f"{header}Smart plan:\n{_numbered(steps)}")

    def apply_action(self, action: PlanAction, helpers: AgentHelpers) -> None:
        # recorded in the transcript only
        return None


class DesignDirectionActionUtil(ActionUtil[DesignDirectionAction]):
    type = "designDirection"
    schema = DesignDirectionAction

    def get_info(self, action: Dict[str, Any]) -> ActionInfo:
        title = text_of(action.get("title"))
        header = f"Design direction • {title}" if title else "Design direction"
        pillars = "\n".join(f"• {p}" for p in _strings(action.get("pillars")))
        lines = [header, text_of(action.get("summary")), pillars]
        return ActionInfo(icon="target", description="\n".join(x for x in lines if x))

    def apply_action(self, action: DesignDirectionAction, helpers: AgentHelpers) -> None:
        return None


class DesignGuidanceActionUtil(ActionUtil[DesignGuidanceAction]):
    type = "designGuidance"
    schema = DesignGuidanceAction

    def get_info(self, action: Dict[str, Any]) -> ActionInfo:
        bullets = _numbered(_strings(action.get("recommendations")))
        notes = text_of(action.get("notes"))
        notes = f"\nNotes: {notes}" if notes else ""
        return ActionInfo(icon="pencil", description=f"Design guidance:\n{bullets}{notes}")

    def apply_action(self, action: DesignGuidanceAction, helpers: AgentHelpers) -> None:
        return None

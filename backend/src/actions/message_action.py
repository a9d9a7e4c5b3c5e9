# actions/message_action.py
from __future__ import annotations
from typing import Any, Dict

from backend.src.actions.base import ActionUtil, text_of
from backend.src.engine.helpers import AgentHelpers
from backend.src.schemas.actions import MessageAction
from backend.src.schemas.canvas import ActionInfo


class MessageActionUtil(ActionUtil[MessageAction]):
    type = "message"
    schema = MessageAction

    def get_info(self, action: Dict[str, Any]) -> ActionInfo:
        return ActionInfo(description=text_of(action.get("text")))

    def apply_action(self, action: MessageAction, helpers: AgentHelpers) -> None:
        if action.complete and action.text:
            helpers.observe_message_for_image_followup(action.text)

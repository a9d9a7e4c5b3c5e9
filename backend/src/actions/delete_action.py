# actions/delete_action.py
from __future__ import annotations
from typing import Any, Dict

from backend.src.actions.base import ActionUtil, text_of
from backend.src.canvas.document import to_shape_id
from backend.src.engine.helpers import AgentHelpers
from backend.src.schemas.actions import DeleteAction
from backend.src.schemas.canvas import ActionInfo


class DeleteActionUtil(ActionUtil[DeleteAction]):
    type = "delete"
    schema = DeleteAction

    def get_info(self, action: Dict[str, Any]) -> ActionInfo:
        return ActionInfo(icon="trash", description=text_of(action.get("intent")), can_group=True)

    def apply_action(self, action: DeleteAction, helpers: AgentHelpers) -> None:
        if not action.complete or not self.agent:
            return
        doc = self.agent.document
        shape_id = to_shape_id(action.shape_id)
        if doc.get_shape(shape_id) is None:
            self.logger.warning("DELETE_SKIP reason=missing shape_id=%s", shape_id)
            return
        with doc.transaction():
            doc.delete_shapes([shape_id])
        self.logger.info("DELETE_OK shape_id=%s", shape_id)

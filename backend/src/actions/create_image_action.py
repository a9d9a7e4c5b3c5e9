# actions/create_image_action.py
from __future__ import annotations
from typing import Any, Dict, Optional

from pydantic import ValidationError

from backend.src.actions.base import ActionUtil, text_of, validation_message
from backend.src.canvas.document import to_shape_id
from backend.src.engine.helpers import AgentHelpers
from backend.src.engine.image_pipeline import ImagePipeline
from backend.src.schemas.actions import CreateImageAction
from backend.src.schemas.canvas import ActionInfo, ImagePreview


class CreateImageActionUtil(ActionUtil[CreateImageAction]):
    type = "createImage"
    schema = CreateImageAction

    def get_info(self, action: Dict[str, Any]) -> ActionInfo:
        preview = None
        if action.get("complete"):
            alt = text_of(action.get("altText"))
            data_url = text_of(action.get("dataUrl"))
            if data_url:
                preview = ImagePreview(data_url=data_url, alt_text=alt)
            else:
                preview = self._preview_from_canvas(text_of(action.get("shapeId")), alt)
        return ActionInfo(icon="note", description=text_of(action.get("intent")), image_preview=preview)

    def _preview_from_canvas(self, shape_id: Optional[str], alt: str) -> Optional[ImagePreview]:
        if not self.agent or not shape_id:
            return None
        doc = self.agent.document
        shape = doc.get_shape(to_shape_id(shape_id))
        if shape is None or shape.type != "image":
            return None
        asset_id = shape.props.get("assetId")
        asset = doc.get_asset(asset_id) if asset_id else None
        src = asset.props.get("src") if asset else None
        if not isinstance(src, str) or not src.startswith("data:image/"):
            return None
        return ImagePreview(data_url=src, alt_text=alt)

    def sanitize_action(self, action: CreateImageAction, helpers: AgentHelpers) -> CreateImageAction:
        if not action.complete:
            return action
        original = action.shape_id
        action.shape_id = helpers.ensure_shape_id_is_unique(original)
        if action.shape_id != original:
            self.logger.info("SHAPE_ID_REMAPPED original=%s sanitized=%s", original, action.shape_id)
        return action

    def apply_action(self, action: CreateImageAction, helpers: AgentHelpers) -> None:
        if not action.complete or not self.agent:
            return
        ImagePipeline(self.agent, logger=self.logger).run(action, helpers)

    def on_invalid(self, snapshot: Dict[str, Any], err: ValidationError, helpers: AgentHelpers) -> None:
        reason = validation_message(err)
        self.logger.warning("ACTION_INVALID type=%s reason=%s", self.type, reason)
        helpers.schedule_image_retry(
            f"The `createImage` action was rejected: {reason} Please resend it with a base64 `dataUrl` "
            "or a valid `generator` description."
        )

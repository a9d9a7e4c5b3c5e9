# actions/analyze_image_action.py
from __future__ import annotations
from typing import Any, Dict

from backend.src.actions.base import ActionUtil
from backend.src.canvas.document import to_shape_id
from backend.src.engine.api_client import ApiError
from backend.src.engine.helpers import AgentHelpers
from backend.src.schemas.actions import AnalyzeImageAction
from backend.src.schemas.canvas import ActionInfo

ANALYZE_PATH = "/analyze-image"
FAILURE_MESSAGE = "I was unable to analyze the selected image due to an error."


class AnalyzeImageActionUtil(ActionUtil[AnalyzeImageAction]):
    type = "analyzeImage"
    schema = AnalyzeImageAction

    def get_info(self, action: Dict[str, Any]) -> ActionInfo:
        desc = "Analyzed selected image" if action.get("complete") else "Analyzing selected image…"
        return ActionInfo(icon="eye", description=desc)

    def apply_action(self, action: AnalyzeImageAction, helpers: AgentHelpers) -> None:
        if not action.complete or not self.agent:
            return
        doc = self.agent.document
        shape = doc.get_shape(to_shape_id(action.shape_id))
        if shape is None or shape.type != "image":
            self.logger.warning("ANALYZE_SKIP reason=not_image shape_id=%s", action.shape_id)
            return
        asset_id = shape.props.get("assetId")
        asset = doc.get_asset(asset_id) if asset_id else None
        data_url = asset.props.get("src") if asset else None
        if not isinstance(data_url, str) or not data_url.startswith("data:image/"):
            self.logger.warning("ANALYZE_SKIP reason=no_inline_data shape_id=%s", action.shape_id)
            return

        body = {"dataUrl": data_url}
        if action.prompt:
            body["prompt"] = action.prompt
        try:
            r = self.agent.api.post_json(ANALYZE_PATH, body)
        except ApiError as e:
            self.logger.error("ANALYZE_FAILED shape_id=%s error=%s", action.shape_id, e)
            self.agent.schedule(messages=[FAILURE_MESSAGE])
            return
        if not r.ok or not isinstance(r.body, dict):
            self.logger.error("ANALYZE_FAILED shape_id=%s status=%s", action.shape_id, r.status_code)
            self.agent.schedule(messages=[FAILURE_MESSAGE])
            return

        description = str(r.body.get("description") or "").strip()
        message = f"Image analysis results:\n{description}" if description else "Image analysis returned no insights."
        self.agent.schedule(messages=[message])

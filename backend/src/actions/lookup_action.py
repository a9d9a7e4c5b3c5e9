# actions/lookup_action.py
from __future__ import annotations
from typing import Any, Dict

from backend.src.actions.base import ActionUtil, text_of
from backend.src.engine.api_client import ApiError
from backend.src.engine.helpers import AgentHelpers
from backend.src.schemas.actions import InspirationAction, KnowledgeAction
from backend.src.schemas.canvas import ActionInfo


def _shaped(body: Dict[str, Any], kind: type, *keys: str) -> bool:
    return all(body.get(k) is None or isinstance(body.get(k), kind) for k in keys)


class KnowledgeActionUtil(ActionUtil[KnowledgeAction]):
    type = "knowledge"
    schema = KnowledgeAction

    def get_info(self, action: Dict[str, Any]) -> ActionInfo:
        q = text_of(action.get("query"))
        desc = f"Knowledge lookup: {q}" if action.get("complete") else f"Looking up: {q}"
        return ActionInfo(icon="search", description=desc)

    def apply_action(self, action: KnowledgeAction, helpers: AgentHelpers) -> None:
        if not action.complete or not self.agent:
            return
        try:
            r = self.agent.api.get_json("/knowledge", params={"q": action.query})
            if not r.ok or not isinstance(r.body, dict):
                raise ApiError(f"Knowledge route returned {r.status_code}")
            result = r.body
            if not _shaped(result, str, "summary", "heading", "sourceUrl") or not _shaped(result, list, "related"):
                raise ApiError("Knowledge route returned a malformed body")
            summary = (result.get("summary") or "").strip()
            heading = result.get("heading") or action.query
            message = (
                f'Knowledge findings for "{heading}":\n{summary}'
                if summary
                else f'No relevant knowledge found for "{heading}".'
            )
            details = {
                "type": "knowledge",
                "query": action.query,
                "heading": heading,
                "summary": summary or None,
                "sourceUrl": result.get("sourceUrl"),
                "related": result.get("related"),
            }
            self.agent.schedule(messages=[message], data=[details])
        except ApiError as e:
            self.logger.error("KNOWLEDGE_FAILED query=%r error=%s", action.query, e)
            self.agent.schedule(
                messages=[
                    f'I tried to look up "{action.query}" but the request failed. '
                    "I'll continue with the available information."
                ]
            )
        helpers.observe_message_for_image_followup(action.query)


class InspirationActionUtil(ActionUtil[InspirationAction]):
    type = "inspiration"
    schema = InspirationAction

    def get_info(self, action: Dict[str, Any]) -> ActionInfo:
        q = text_of(action.get("query"))
        desc = f"Collected inspiration: {q}" if action.get("complete") else f"Searching inspiration: {q}"
        return ActionInfo(icon="eye", description=desc)

    def apply_action(self, action: InspirationAction, helpers: AgentHelpers) -> None:
        if not action.complete or not self.agent:
            return
        try:
            r = self.agent.api.get_json("/inspiration", params={"q": action.query})
            if not r.ok or not isinstance(r.body, dict):
                raise ApiError(f"Inspiration route returned {r.status_code}")
            items = r.body.get("inspirations") or []
            if not isinstance(items, list):
                raise ApiError("Inspiration route returned a malformed body")
            n = len(items)
            message = (
                f'Collected {n} inspiration reference{"" if n == 1 else "s"} for "{action.query}".'
                if n
                else f'No inspiration references found for "{action.query}".'
            )
            self.agent.schedule(messages=[message], data=[r.body])
        except ApiError as e:
            self.logger.error("INSPIRATION_FAILED query=%r error=%s", action.query, e)
            self.agent.schedule(
                messages=[
                    f'I tried to find inspiration for "{action.query}" but the request failed. '
                    "I'll continue with the current references."
                ]
            )
        helpers.observe_message_for_image_followup(action.query)

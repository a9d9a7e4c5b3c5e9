# _tests/test_router.py
from __future__ import annotations
from typing import Any, Dict, List

import pytest

from backend.src.actions.base import ActionUtil
from backend.src.actions.message_action import MessageActionUtil
from backend.src.actions.router import ActionRouter, build_registry
from backend.src.schemas.actions import MessageAction
from backend.src.schemas.canvas import ActionInfo
from backend.src.stream.emitter import Emitter


class CountingMessageUtil(MessageActionUtil):
    applied: List[str] = []

    def apply_action(self, action: MessageAction, helpers) -> None:
        CountingMessageUtil.applied.append(action.text)


class ExplodingUtil(ActionUtil[MessageAction]):
    type = "explode"
    schema = MessageAction

    def validate(self, snapshot: Dict[str, Any]) -> MessageAction:
        return MessageAction.model_validate({**snapshot, "_type": "message"})

    def get_info(self, action: Dict[str, Any]) -> ActionInfo:
        return ActionInfo(description="boom")

    def apply_action(self, action: MessageAction, helpers) -> None:
        raise RuntimeError("kaboom")


@pytest.fixture
def events():
    return []


@pytest.fixture
def em(events):
    return Emitter(run_id="r1", trace_id=None, send=events.append)


def test_complete_action_is_applied_exactly_once(agent, helpers, em):
    CountingMessageUtil.applied = []
    router = ActionRouter(agent, em=em, utils=(CountingMessageUtil,))
    snap = {"_type": "message", "text": "hi", "complete": True}
    assert router.handle(("message", 0), snap, helpers).description == "hi"
    assert router.handle(("message", 0), snap, helpers) is None
    assert CountingMessageUtil.applied == ["hi"]
    assert router.applied == 1


def test_partial_action_only_projects_info(agent, helpers, em, events):
    CountingMessageUtil.applied = []
    router = ActionRouter(agent, em=em, utils=(CountingMessageUtil,))
    info = router.handle(("message", 0), {"_type": "message", "text": "Hel", "complete": False}, helpers)
    assert info.description == "Hel"
    assert CountingMessageUtil.applied == []
    assert events[-1]["type"] == "action"
    assert events[-1]["data"]["complete"] is False


def test_unknown_kind_emits_error_and_continues(agent, helpers, em, events):
    router = ActionRouter(agent, em=em)
    assert router.handle(("teleport", 0), {"_type": "teleport", "complete": True}, helpers) is None
    assert events[-1]["type"] == "error"
    assert "teleport" in events[-1]["data"]["error"]


def test_invalid_create_image_schedules_retry_without_network(agent, api, helpers):
    router = ActionRouter(agent)
    snap = {"_type": "createImage", "intent": "x", "shapeId": "s1", "x": 0, "y": 0, "complete": True}
    info = router.handle(("createImage", 0), snap, helpers)
    assert info.description == "x"
    assert "Provide either `dataUrl` or a `generator`" in helpers.retry_message
    assert api.calls == []
    assert router.applied == 0


def test_apply_failure_is_reported_not_raised(agent, helpers, em, events):
    router = ActionRouter(agent, em=em, utils=(ExplodingUtil,))
    info = router.handle(("explode", 0), {"_type": "explode", "text": "t", "complete": True}, helpers)
    assert info.description == "boom"
    assert any(e["type"] == "error" and e["data"]["error"] == "kaboom" for e in events)


def test_registry_rejects_duplicates():
    with pytest.raises(ValueError):
        build_registry(None, (MessageActionUtil, CountingMessageUtil))


def test_unknown_kind_is_reported_once_per_action(agent, helpers, em, events):
    router = ActionRouter(agent, em=em)
    for text in ("a", "ab", "abc"):
        router.handle(("teleport", 0), {"_type": "teleport", "text": text}, helpers)
    router.handle(("teleport", 0), {"_type": "teleport", "complete": True}, helpers)
    router.handle(("teleport", 1), {"_type": "teleport", "complete": True}, helpers)
    assert [e["data"]["index"] for e in events if e["type"] == "error"] == [0, 1]


def test_failing_projection_falls_back_to_empty_info(agent, helpers, em, events):
    class BrokenInfo(CountingMessageUtil):
        type = "message"

        def get_info(self, action):
            raise KeyError("text")

    CountingMessageUtil.applied = []
    router = ActionRouter(agent, em=em, utils=(BrokenInfo,))
    assert router.handle(("message", 0), {"_type": "message", "text": "hi"}, helpers).description == ""
    assert router.handle(("message", 0), {"_type": "message", "text": "hi", "complete": True}, helpers).description == ""
    assert CountingMessageUtil.applied == ["hi"]

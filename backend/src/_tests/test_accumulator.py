# _tests/test_accumulator.py
from __future__ import annotations

from backend.src.stream.accumulator import StreamAccumulator, accumulate, merge
from backend.src.stream.sse import iter_sse_data, sse_pack


def test_merge_is_deep_and_ignores_none():
    prior = {"generator": {"mode": "edit", "prompt": "a"}, "tags": [1, 2]}
    out = merge(prior, {"generator": {"prompt": "ab", "editPrompt": None}, "tags": [3], "x": None})
    assert out == {"generator": {"mode": "edit", "prompt": "ab"}, "tags": [3]}
    assert prior["generator"]["prompt"] == "a"


def test_positional_identity_groups_deltas_of_one_action():
    acc = StreamAccumulator()
    k1, s1 = acc.push({"_type": "message", "text": "Hel"})
    k2, s2 = acc.push({"_type": "message", "text": "Hello", "complete": True})
    k3, _ = acc.push({"_type": "createImage", "intent": "banana"})
    k4, _ = acc.push({"_type": "message", "text": "next"})
    assert k1 == k2 == ("message", 0)
    assert s1["complete"] is False and s2 == {"_type": "message", "text": "Hello", "complete": True}
    assert k3 == ("createImage", 1)
    assert k4 == ("message", 2)


def test_explicit_index_and_interleaving():
    acc = StreamAccumulator()
    acc.push({"_type": "plan", "index": 0, "steps": ["a"]})
    acc.push({"_type": "message", "index": 1, "text": "hi"})
    key, snap = acc.push({"_type": "plan", "index": 0, "steps": ["a", "b"], "objective": "o"})
    assert key == ("plan", 0)
    assert snap["steps"] == ["a", "b"] and "index" not in snap
    assert acc.in_flight == 2


def test_complete_is_monotonic_and_late_deltas_are_dropped():
    acc = StreamAccumulator()
    acc.push({"_type": "message", "index": 0, "text": "done", "complete": True})
    assert acc.push({"_type": "message", "index": 0, "text": "again", "complete": False}) is None
    assert acc.in_flight == 0


def test_out_of_order_time_is_dropped():
    acc = StreamAccumulator()
    acc.push({"_type": "message", "index": 0, "text": "b", "time": 5})
    assert acc.push({"_type": "message", "index": 0, "text": "a", "time": 3}) is None
    _, snap = acc.push({"_type": "message", "index": 0, "text": "bc", "time": 6})
    assert snap["text"] == "bc"


def test_envelope_without_type_is_skipped():
    out = list(accumulate([{"text": "orphan"}, {"_type": "message", "text": "ok", "complete": True}]))
    assert [k for k, _ in out] == [("message", 0)]


def test_sse_frames_are_parsed_and_bad_frames_dropped():
    body = (
        ": keepalive\n\n"
        + sse_pack({"_type": "message", "text": "a"})
        + "data: {not json}\n\n"
        + "data: [1, 2]\n\n"
        + 'event: action\ndata: {"_type": "message",\ndata: "text": "b"}\n\n'
        + 'data: {"_type": "plan"}'
    )
    frames = list(iter_sse_data([body[:17], body[17:]]))
    assert frames == [
        {"_type": "message", "text": "a"},
        {"_type": "message", "text": "b"},
        {"_type": "plan"},
    ]

# _tests/test_document.py
from __future__ import annotations

import pytest

from backend.src.canvas.document import InMemoryDocument, bare_shape_id, is_asset_id, to_asset_id, to_shape_id
from backend.src.engine.helpers import AgentHelpers
from backend.src.schemas.canvas import Asset, Shape, Vec


def test_id_helpers():
    assert to_shape_id("a") == to_shape_id("shape:a") == "shape:a"
    assert to_asset_id("b") == "asset:b"
    assert is_asset_id("asset:b") and not is_asset_id("shape:b")
    assert bare_shape_id("shape:a") == "a"


def test_transaction_is_all_or_nothing(doc):
    with pytest.raises(ValueError):
        with doc.transaction():
            doc.create_assets([Asset(id="asset:1")])
            doc.create_shape(Shape(id="shape:1", type="image", props={"assetId": "asset:missing"}))
    assert doc.assets == [] and doc.shapes == []


def test_nested_transactions_join_the_outer_one(doc):
    with pytest.raises(RuntimeError):
        with doc.transaction():
            with doc.transaction():
                doc.create_shape(Shape(id="shape:inner", type="geo"))
            raise RuntimeError("outer failed")
    assert doc.get_shape("shape:inner") is None


def test_run_and_update(doc):
    doc.run(lambda: doc.create_shape(Shape(id="shape:s", type="geo", x=1)))
    doc.update_shape("shape:s", {"x": 9})
    assert doc.get_shape("shape:s").x == 9
    with pytest.raises(KeyError):
        doc.update_shape("shape:none", {"x": 1})
    with pytest.raises(ValueError):
        doc.create_shape(Shape(id="shape:s", type="geo"))


def test_offset_transform_round_trips():
    h = AgentHelpers(InMemoryDocument(), offset=(100, -50))
    model = h.apply_offset_to_vec(Vec(x=150, y=0))
    assert (model.x, model.y) == (50, 50)
    canvas = h.remove_offset_from_vec(model)
    assert (canvas.x, canvas.y) == (150, 0)


def test_shape_id_ledger(doc):
    h = AgentHelpers(doc)
    assert h.ensure_shape_id_is_unique("shape:cat") == "cat"
    assert h.ensure_shape_id_is_unique("cat") == "cat-1"
    doc.create_shape(Shape(id="shape:dog", type="geo"))
    assert h.ensure_shape_id_is_unique("dog") == "dog-1"


def test_retry_slot_keeps_latest_and_clears_on_take(doc):
    h = AgentHelpers(doc)
    h.schedule_image_retry("first")
    h.schedule_image_retry("second")
    assert h.take_retry_message() == "second"
    assert h.take_retry_message() is None

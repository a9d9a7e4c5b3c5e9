# canvas/document.py
from __future__ import annotations
import copy
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional

from backend.src.core.constants import ASSET_ID_PREFIX, SHAPE_ID_PREFIX
from backend.src.core.logging import get_logger
from backend.src.schemas.canvas import Asset, Shape

logger = get_logger("canvasagent.canvas.document")


def to_shape_id(raw: str) -> str:
    return raw if raw.startswith(SHAPE_ID_PREFIX) else f"{SHAPE_ID_PREFIX}{raw}"


def to_asset_id(raw: str) -> str:
    return raw if raw.startswith(ASSET_ID_PREFIX) else f"{ASSET_ID_PREFIX}{raw}"


def is_asset_id(raw: str) -> bool:
    return raw.startswith(ASSET_ID_PREFIX)


def bare_shape_id(raw: str) -> str:
    return raw[len(SHAPE_ID_PREFIX):] if raw.startswith(SHAPE_ID_PREFIX) else raw


class CanvasDocument(ABC):
    """Narrow capability surface the engine needs from the canvas."""

    @abstractmethod
    def create_assets(self, assets: Iterable[Asset]) -> None: ...

    @abstractmethod
    def get_asset(self, asset_id: str) -> Optional[Asset]: ...

    @abstractmethod
    def create_shape(self, shape: Shape) -> None: ...

    @abstractmethod
    def get_shape(self, shape_id: str) -> Optional[Shape]: ...

    @abstractmethod
    def update_shape(self, shape_id: str, changes: Dict[str, Any]) -> None: ...

    @abstractmethod
    def delete_shapes(self, shape_ids: Iterable[str]) -> None: ...

    @abstractmethod
    def transaction(self):
        """Context manager: enclosed writes become visible together or not at all."""

    def run(self, fn: Callable[[], Any]) -> Any:
        with self.transaction():
            return fn()


class InMemoryDocument(CanvasDocument):
    def __init__(self) -> None:
        self._shapes: Dict[str, Shape] = {}
        self._assets: Dict[str, Asset] = {}
        self._depth = 0

    @property
    def shapes(self) -> List[Shape]:
        return list(self._shapes.values())

    @property
    def assets(self) -> List[Asset]:
        return list(self._assets.values())

    def create_assets(self, assets: Iterable[Asset]) -> None:
        for a in assets:
            if a.id in self._assets:
                raise ValueError(f"Asset already exists: {a.id}")
            self._assets[a.id] = a.model_copy(deep=True)

    def get_asset(self, asset_id: str) -> Optional[Asset]:
        return self._assets.get(asset_id)

    def create_shape(self, shape: Shape) -> None:
        if shape.id in self._shapes:
            raise ValueError(f"Shape already exists: {shape.id}")
        asset_id = shape.props.get("assetId")
        if asset_id and asset_id not in self._assets:
            raise ValueError(f"Shape {shape.id} references missing asset {asset_id}")
        self._shapes[shape.id] = shape.model_copy(deep=True)

    def get_shape(self, shape_id: str) -> Optional[Shape]:
        return self._shapes.get(shape_id)

    def update_shape(self, shape_id: str, changes: Dict[str, Any]) -> None:
        cur = self._shapes.get(shape_id)
        if cur is None:
            raise KeyError(f"Unknown shape: {shape_id}")
        self._shapes[shape_id] = cur.model_copy(update=changes, deep=True)

    def delete_shapes(self, shape_ids: Iterable[str]) -> None:
        for sid in shape_ids:
            self._shapes.pop(sid, None)

    @contextmanager
    def transaction(self) -> Iterator[None]:
        if self._depth:
            # nested scopes join the outer transaction
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
            return
        saved = (copy.copy(self._shapes), copy.copy(self._assets))
        self._depth = 1
        try:
            yield
        except BaseException:
            self._shapes, self._assets = saved
            logger.warning("TRANSACTION_ROLLBACK shapes=%s assets=%s", len(self._shapes), len(self._assets))
            raise
        finally:
            self._depth = 0

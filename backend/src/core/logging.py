# core/logging.py
from __future__ import annotations
import logging
import os
from typing import Optional

ROOT_LOGGER = "canvasagent"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def _root(level: str) -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER)
    if not root.handlers:
        h = logging.StreamHandler()
        h.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(h)
        root.setLevel(level)
        root.propagate = False
    return root


def get_logger(name: str = ROOT_LOGGER, level: Optional[str] = None) -> logging.Logger:
    """Logger under the `canvasagent` tree; only the tree root owns a handler."""
    _root((os.getenv("LOG_LEVEL") or "INFO").upper())
    if not name.startswith(ROOT_LOGGER):
        name = f"{ROOT_LOGGER}.{name}"
    logger = logging.getLogger(name)
    if level:
        logger.setLevel(level.upper())
    return logger

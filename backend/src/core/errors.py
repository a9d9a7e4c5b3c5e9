# core/errors.py
from __future__ import annotations
from typing import Any, Dict, Optional


class ProviderError(RuntimeError):
    """An upstream provider failed; carries the status the route should answer with."""

    def __init__(self, message: str, status_code: int = 502, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details

    def to_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body

# core/config.py
from __future__ import annotations
import os
from typing import Optional

from dotenv import load_dotenv

from backend.src.core.constants import DEFAULT_API_BASE_URL, FALLBACK_GOOGLE_API_KEY


def bootstrap_env() -> None:
    """Load .env into environment variables."""
    load_dotenv()


def google_api_key() -> str:
    """Configured provider key, else the fallback key."""
    supplied = (os.getenv("GOOGLE_API_KEY") or "").strip()
    if supplied:
        return supplied
    return (os.getenv("GOOGLE_API_KEY_FALLBACK") or "").strip() or FALLBACK_GOOGLE_API_KEY


def provider_timeout() -> float:
    return max(1.0, float(os.getenv("PROVIDER_TIMEOUT_SEC", "60")))


def api_base_url() -> str:
    return os.getenv("CANVAS_API_BASE_URL", DEFAULT_API_BASE_URL).rstrip("/")


def api_timeout() -> Optional[float]:
    # unset means the engine waits as long as the transport does
    raw = (os.getenv("CANVAS_API_TIMEOUT_SEC") or "").strip()
    return float(raw) if raw else None


def env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}

# core/constants.py
from __future__ import annotations

DEFAULT_IMAGE_PROVIDER = "google-gemini"

GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta/models"
IMAGE_MODEL = "gemini-2.5-flash-image-preview"
VISION_MODEL = "gemini-2.0-flash"

# Placeholder only. Deployments set GOOGLE_API_KEY (or GOOGLE_API_KEY_FALLBACK).
FALLBACK_GOOGLE_API_KEY = "unset-google-api-key"

DUCKDUCKGO_API = "https://api.duckduckgo.com/"
LEXICA_API = "https://lexica.art/api/v1/search"
KNOWLEDGE_USER_AGENT = "canvas-agent/1.0 (knowledge lookup)"
INSPIRATION_USER_AGENT = "canvas-agent/1.0 (inspiration lookup)"

MAX_RELATED_TOPICS = 10
MAX_INSPIRATIONS = 8
MAX_OUTPUT_DIMENSION = 4096

DEFAULT_ANALYSIS_PROMPT = (
    "Provide a concise creative analysis focusing on subject, style, color palette, lighting, "
    "and notable details. Highlight elements that stand out and suggest potential directions for refinement."
)

DEFAULT_MIME_TYPE = "image/png"
IMAGE_FILE_PREFIX = "agent-image"

SHAPE_ID_PREFIX = "shape:"
ASSET_ID_PREFIX = "asset:"

DEFAULT_API_BASE_URL = "http://localhost:8000"

# _tests/_smoke_providers.py
from __future__ import annotations
import json

from backend.src.core.config import bootstrap_env
bootstrap_env()

from backend.src.tools.media.image_tool import generate_image
from backend.src.tools.vision.vision_tool import analyze_image
from backend.src.tools.web.inspiration_tool import inspiration_search
from backend.src.tools.web.knowledge_tool import knowledge_search

if __name__ == "__main__":
    print(json.dumps(knowledge_search("banana"), indent=2))
    print(json.dumps(inspiration_search("banana still life"), indent=2)[:1200])
    img = generate_image("generate", "a ripe banana on a marble table, studio light")
    print({"width": img.get("width"), "height": img.get("height"), "bytes": len(img["dataUrl"])})
    print(json.dumps(analyze_image(img["dataUrl"]), indent=2))

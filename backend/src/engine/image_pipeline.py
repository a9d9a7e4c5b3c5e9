# engine/image_pipeline.py
from __future__ import annotations
import logging
from typing import Any, Dict, Optional, Tuple
from uuid import uuid4

from pydantic import BaseModel

from backend.src.canvas.document import is_asset_id, to_asset_id, to_shape_id
from backend.src.core.constants import DEFAULT_MIME_TYPE
from backend.src.core.logging import get_logger
from backend.src.engine.agent import CanvasAgent
from backend.src.engine.api_client import ApiError
from backend.src.engine.helpers import AgentHelpers
from backend.src.schemas.actions import CreateImageAction, ImageGenerator
from backend.src.schemas.canvas import Asset, Shape, Vec
from backend.src.tools.media.assets import asset_file_name, decode_data_url, measure_image, split_data_url

GENERATE_PATH = "/images/generate"


class ImageRetry(Exception):
    """Aborts one createImage; the message goes back to the model verbatim."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ResolvedImage(BaseModel):
    data_url: str
    width: Optional[float] = None
    height: Optional[float] = None
    generated: bool = False


class ImagePipeline:
    """Resolve, materialize, measure and commit the image of a completed createImage."""

    def __init__(self, agent: CanvasAgent, logger: Optional[logging.Logger] = None):
        self.agent = agent
        self.logger = logger or get_logger("canvasagent.engine.image")

    def run(self, action: CreateImageAction, helpers: AgentHelpers) -> Optional[Shape]:
        if not action.complete:
            return None
        shape_id = to_shape_id(action.shape_id)
        self.logger.info(
            "IMAGE_START shape_id=%s inline=%s generator=%s mode=%s",
            shape_id,
            bool(action.data_url),
            bool(action.generator),
            action.generator.mode if action.generator else None,
        )
        try:
            resolved = self.resolve(action, helpers)
            if resolved.generated and not action.data_url:
                # history previews read the generated bytes from the action
                action.data_url = resolved.data_url
            blob, blob_mime = self.materialize(resolved.data_url, shape_id)
            width, height = self.measure(action, resolved, blob)
            shape = self.commit(action, helpers, resolved.data_url, blob_mime, width, height)
        except ImageRetry as e:
            self.logger.warning("IMAGE_ABORT shape_id=%s reason=%r", shape_id, e.message[:120])
            helpers.schedule_image_retry(e.message)
            return None
        helpers.mark_image_created()
        return shape

    # 1. resolve

    def resolve(self, action: CreateImageAction, helpers: AgentHelpers) -> ResolvedImage:
        if action.data_url:
            return ResolvedImage(data_url=action.data_url, width=action.w, height=action.h)
        if action.generator is None:
            raise ImageRetry(
                "The generated image data was missing. Please resend using a `createImage` action that either "
                "includes a base64 `dataUrl` or a valid `generator` description."
            )
        return self.fetch_from_generator(action, action.generator)

    def resolve_reference(self, gen: ImageGenerator) -> Dict[str, str]:
        doc = self.agent.document
        if gen.reference_asset_id:
            asset = doc.get_asset(to_asset_id(gen.reference_asset_id))
        elif gen.reference_shape_id and is_asset_id(gen.reference_shape_id):
            asset = doc.get_asset(gen.reference_shape_id)
        elif gen.reference_shape_id:
            shape = doc.get_shape(to_shape_id(gen.reference_shape_id))
            if shape is None or shape.type != "image":
                self.logger.warning("IMAGE_REFERENCE_MISSING reference=%s", gen.reference_shape_id)
                raise ImageRetry(
                    "Couldn't locate the image to edit. Please resend the `createImage` action with a valid "
                    "`referenceShapeId`."
                )
            asset_id = shape.props.get("assetId")
            asset = doc.get_asset(asset_id) if asset_id else None
        else:
            raise ImageRetry(
                "The edit request did not specify which image to modify. Please resend the `createImage` action "
                "with `generator.referenceShapeId` pointing to the existing image."
            )

        if asset is None:
            self.logger.warning("IMAGE_REFERENCE_ASSET_MISSING reference=%s", gen.reference)
            raise ImageRetry(
                "Couldn't retrieve the original image. Please resend the request after ensuring the image still exists."
            )
        src = asset.props.get("src")
        if not isinstance(src, str) or not src.startswith("data:image/"):
            self.logger.warning("IMAGE_REFERENCE_NOT_INLINE reference=%s asset_id=%s", gen.reference, asset.id)
            raise ImageRetry(
                "The runtime could not read the original image data. Please resend the edit request including an "
                "inline base64 `dataUrl`."
            )
        src_mime, b64 = split_data_url(src)
        mime = asset.props.get("mimeType") or gen.mime_type or src_mime or DEFAULT_MIME_TYPE
        return {"base64": b64, "mimeType": mime}

    def fetch_from_generator(self, action: CreateImageAction, gen: ImageGenerator) -> ResolvedImage:
        reference = self.resolve_reference(gen) if gen.mode == "edit" else None
        body: Dict[str, Any] = {
            "provider": gen.provider,
            "mode": gen.mode,
            "prompt": gen.prompt or action.intent,
            "editPrompt": gen.edit_prompt or (action.intent if gen.mode == "edit" else None),
            "reference": reference,
            "targetMimeType": gen.target_mime_type,
            "maxOutputSize": gen.max_output_size.model_dump(exclude_none=True) if gen.max_output_size else None,
        }
        body = {k: v for k, v in body.items() if v is not None}
        self.logger.info(
            "IMAGE_GENERATOR_REQUEST mode=%s prompt_len=%s reference=%s",
            gen.mode,
            len(body["prompt"]),
            bool(reference),
        )
        try:
            r = self.agent.api.post_json(GENERATE_PATH, body)
        except ApiError as e:
            self.logger.error("IMAGE_GENERATOR_UNREACHABLE error=%s", e)
            raise ImageRetry("The image generator could not be reached. Please try again shortly.") from e

        result = r.body if isinstance(r.body, dict) else {}
        if not r.ok:
            self.logger.error("IMAGE_GENERATOR_FAILED status=%s body=%r", r.status_code, r.text[:200])
            detail = f" ({result['error']})" if result.get("error") else ""
            raise ImageRetry(
                f"The image service returned an error{detail}. Please try again with a simpler description or "
                "different edit instructions."
            )
        if result.get("error"):
            self.logger.error("IMAGE_GENERATOR_ERROR error=%r", result["error"])
            raise ImageRetry(str(result["error"]))
        data_url = result.get("dataUrl")
        if not isinstance(data_url, str) or not data_url:
            self.logger.warning("IMAGE_GENERATOR_EMPTY status=%s", r.status_code)
            raise ImageRetry(
                "The image service returned an empty response. Please reissue the request with clear generation "
                "instructions."
            )
        return ResolvedImage(
            data_url=data_url,
            width=_positive(result.get("width")),
            height=_positive(result.get("height")),
            generated=True,
        )

    # 2. materialize

    def materialize(self, data_url: str, shape_id: str) -> Tuple[bytes, str]:
        try:
            blob, mime = decode_data_url(data_url)
        except ValueError as e:
            self.logger.error("IMAGE_DECODE_FAILED shape_id=%s error=%s", shape_id, e)
            raise ImageRetry(
                "There was an error downloading the generated image. Please resend it as a `createImage` action "
                "with a base64 `dataUrl`."
            ) from e
        if not blob:
            raise ImageRetry(
                "The generated image data was empty. Please resend the image as a `createImage` action with a "
                "valid base64 `dataUrl`."
            )
        self.logger.debug("IMAGE_MATERIALIZED shape_id=%s mime=%s bytes=%s", shape_id, mime, len(blob))
        return blob, mime

    # 3. measure

    def measure(self, action: CreateImageAction, resolved: ResolvedImage, blob: bytes) -> Tuple[float, float]:
        width = action.w or resolved.width
        height = action.h or resolved.height
        if not (width and height):
            try:
                mw, mh = measure_image(blob)
            except ValueError as e:
                self.logger.warning("IMAGE_MEASURE_FAILED error=%s", e)
                raise ImageRetry(
                    "Could not determine the size of the generated image. Please resend it with a valid base64 "
                    "`dataUrl`."
                ) from e
            width = width or mw
            height = height or mh
        if not width or not height or width <= 0 or height <= 0:
            raise ImageRetry(
                "The generated image dimensions were invalid. Please resend the image using a `createImage` action "
                "with a proper base64 `dataUrl`."
            )
        if width <= 1 and height <= 1:
            self.logger.warning("IMAGE_BLANK width=%s height=%s", width, height)
        return width, height

    # 4. commit

    def commit(
        self,
        action: CreateImageAction,
        helpers: AgentHelpers,
        data_url: str,
        blob_mime: str,
        width: float,
        height: float,
    ) -> Shape:
        doc = self.agent.document
        mime = blob_mime or (action.generator.target_mime_type if action.generator else None) or DEFAULT_MIME_TYPE
        name = asset_file_name(mime)
        asset = Asset(
            id=to_asset_id(uuid4().hex),
            type="image",
            props={"w": width, "h": height, "mimeType": mime, "name": name, "src": data_url, "isAnimated": False},
        )
        pos = helpers.remove_offset_from_vec(Vec(x=action.x, y=action.y))
        shape = Shape(
            id=to_shape_id(action.shape_id),
            type="image",
            x=pos.x,
            y=pos.y,
            props={
                "assetId": asset.id,
                "w": width,
                "h": height,
                "url": "",
                "crop": None,
                "playing": False,
                "flipX": False,
                "flipY": False,
                "altText": action.alt_text or "",
            },
        )
        try:
            with doc.transaction():
                if doc.get_asset(asset.id) is None:
                    doc.create_assets([asset])
                doc.create_shape(shape)
        except Exception as e:
            self.logger.exception("IMAGE_COMMIT_FAILED shape_id=%s asset_id=%s", shape.id, asset.id)
            raise ImageRetry(
                "The generated image could not be processed. Please resend it as a `createImage` action with a "
                "base64 `dataUrl`."
            ) from e
        self.logger.info(
            "IMAGE_COMMIT shape_id=%s asset_id=%s mime=%s size=%sx%s",
            shape.id,
            asset.id,
            mime,
            width,
            height,
        )
        return shape


def _positive(v: Any) -> Optional[float]:
    return float(v) if isinstance(v, (int, float)) and not isinstance(v, bool) and v > 0 else None

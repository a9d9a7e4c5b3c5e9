# api/app.py
from __future__ import annotations
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend.src.core.config import bootstrap_env
from backend.src.core.logging import get_logger
from backend.src.api.routes_images import router as images_router
from backend.src.api.routes_analyze import router as analyze_router
from backend.src.api.routes_knowledge import router as knowledge_router

bootstrap_env()
logger = get_logger("canvasagent.api")
app = FastAPI(title="Canvas Agent API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"], allow_credentials=True,
    allow_methods=["*"], allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError):
    reasons = []
    for e in exc.errors():
        loc = ".".join(str(p) for p in e.get("loc", ()) if p != "body")
        msg = str(e.get("msg") or "")
        reasons.append(f"{loc}: {msg}" if loc else msg)
    logger.warning("REQUEST_INVALID path=%s reasons=%s", request.url.path, reasons)
    return JSONResponse({"error": "; ".join(reasons) or "Invalid request body"}, status_code=400)


app.include_router(images_router)
app.include_router(analyze_router)
app.include_router(knowledge_router)

"""FastAPI entry for the route assistant."""

from __future__ import annotations

import uuid

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from amap_service.adapters import ConfigError
from amap_service.logging import get_logger
from amap_service.settings import get_settings as get_amap_settings

from .agent import ChatError
from .executor import ChatRequest, ChatResponse, handle_chat
from .settings import get_settings

app = FastAPI(title="Route Assistant", version="0.1.0")
logger = get_logger("route_agent")


@app.on_event("startup")
def check_config() -> None:
    settings = get_settings()
    # Missing keys abort startup instead of failing the first request.
    get_amap_settings().require_api_key()
    if not settings.mock_llm:
        settings.require_llm_key()
    logger.info(
        "route_agent_config",
        extra={
            "extra": {
                "llm_model": settings.llm_model,
                "llm_base_url": settings.llm_base_url,
                "mock_llm": settings.mock_llm,
                "max_iterations": settings.max_iterations,
            }
        },
    )


@app.exception_handler(ChatError)
async def chat_error_handler(request: Request, exc: ChatError) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": str(exc)})


@app.exception_handler(ConfigError)
async def config_error_handler(request: Request, exc: ConfigError) -> JSONResponse:
    logger.error("config_error", extra={"extra": {"error": str(exc)}})
    return JSONResponse(status_code=500, content={"error": str(exc)})


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/v1/chat", response_model=ChatResponse)
async def chat(payload: ChatRequest, request: Request):
    # Preserve incoming trace_id if provided, else generate one.
    trace_id = request.headers.get("x-trace-id") or str(uuid.uuid4())
    return await handle_chat(payload, trace_id)

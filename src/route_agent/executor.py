"""Protocol adapter for incoming chat requests.

Keep this layer thin so protocol changes do not affect core agent logic.
"""

from __future__ import annotations

import time
from functools import lru_cache

from pydantic import BaseModel, Field

from amap_service.mapping import MapClient
from amap_service.settings import get_settings as get_amap_settings

from .agent import Agent
from .dispatcher import ToolDispatcher
from .llm import AnthropicLLM, LLMClient, MockLLM
from .schemas import ChatMessage, MapData
from .settings import AgentSettings, get_settings
from .state import SessionStore
from .trace import build_trace, finalize_trace, record_final, write_trace


class ChatRequest(BaseModel):
    messages: list[ChatMessage] = Field(..., min_length=1)
    session_id: str | None = None


class ChatResponse(BaseModel):
    content: str
    map_data: MapData
    session_id: str
    trace_id: str
    tool_calls: list[dict] | None = None


@lru_cache(maxsize=1)
def get_session_store() -> SessionStore:
    return SessionStore(capacity=get_settings().session_capacity)


def build_llm(settings: AgentSettings) -> LLMClient:
    if settings.mock_llm:
        return MockLLM()
    return AnthropicLLM(settings)


async def handle_chat(payload: ChatRequest, trace_id: str, llm: LLMClient | None = None) -> ChatResponse:
    # Agent and clients are built per request; only sessions outlive it.
    settings = get_settings()
    session = get_session_store().get_or_create(payload.session_id)
    agent = Agent(settings, llm or build_llm(settings))
    started_at_ts = time.time()
    trace = build_trace(trace_id, session.session_id, [m.model_dump() for m in payload.messages])
    dispatcher = ToolDispatcher(settings, MapClient(get_amap_settings()), session, trace_id, trace)

    result = await agent.run(
        payload.messages,
        dispatcher,
        session_id=session.session_id,
        trace_id=trace_id,
        trace=trace,
    )

    record_final(trace, answer_text=result.content, iterations=result.iterations, exhausted=result.exhausted)
    finalize_trace(trace, started_at_ts)
    if settings.trace_enabled:
        write_trace(trace, settings.trace_dir)

    tool_calls = [
        {
            "name": call.name,
            "arguments": call.arguments,
            "ok": call.ok,
            "error": call.error,
        }
        for call in result.tool_calls
    ]
    return ChatResponse(
        content=result.content,
        map_data=result.map_data,
        session_id=result.session_id,
        trace_id=trace_id,
        tool_calls=tool_calls,
    )

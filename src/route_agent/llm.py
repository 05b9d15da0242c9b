"""LLM providers speaking the Anthropic messages protocol.

The chat loop only needs ``create(system=..., messages=..., tools=...)``
returning an object with ``content`` blocks and a ``stop_reason``.
``AnthropicLLM`` wraps the real SDK; ``MockLLM`` is an offline heuristic
stand-in so the whole turn can run without an API key.
"""

from __future__ import annotations

import json
import re
import uuid
from dataclasses import dataclass, field
from typing import Any, Protocol

from anthropic import AsyncAnthropic

from .settings import AgentSettings


class LLMClient(Protocol):
    async def create(
        self,
        *,
        system: str,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]],
    ) -> Any: ...


@dataclass
class TextBlock:
    text: str
    type: str = "text"


@dataclass
class ToolUseBlock:
    name: str
    input: dict[str, Any]
    id: str = field(default_factory=lambda: f"toolu_{uuid.uuid4().hex[:16]}")
    type: str = "tool_use"


@dataclass
class LLMReply:
    content: list[Any]
    stop_reason: str = "end_turn"


class AnthropicLLM:
    def __init__(self, settings: AgentSettings) -> None:
        self._settings = settings
        self._client = AsyncAnthropic(
            api_key=settings.require_llm_key(),
            base_url=settings.llm_base_url,
            timeout=settings.llm_timeout_s,
        )

    @property
    def model(self) -> str:
        return self._settings.llm_model

    async def create(
        self,
        *,
        system: str,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]],
    ) -> Any:
        return await self._client.messages.create(
            model=self._settings.llm_model,
            max_tokens=self._settings.max_tokens,
            system=system,
            messages=messages,
            tools=tools,
        )


_ROUTE_PATTERN = re.compile(r"从(?P<origin>.+?)(?:到|去)(?P<destination>[^，,。？?！!]+)")
_POI_PATTERN = re.compile(r"沿途|餐厅|饭店|加油站|咖啡|酒店|商场")
_POI_CATEGORIES = (
    ("加油站", "gas_station"),
    ("咖啡", "cafe"),
    ("酒店", "hotel"),
    ("商场", "mall"),
    ("西餐", "western_restaurant"),
    ("中餐", "chinese_restaurant"),
    ("餐厅", "restaurant"),
    ("饭店", "restaurant"),
)


class MockLLM:
    """Heuristic mock: one tool call from the last user message, then a summary."""

    model = "mock"

    async def create(
        self,
        *,
        system: str,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]],
    ) -> LLMReply:
        last = messages[-1] if messages else {"role": "user", "content": ""}
        if isinstance(last.get("content"), list):
            return LLMReply(content=[TextBlock(text=_summarize_results(last["content"]))])

        query = str(last.get("content", "")).strip()
        if not query:
            return LLMReply(content=[TextBlock(text="我可以帮你标记地点、规划驾车路线或推荐沿途的餐厅和加油站。")])
        return LLMReply(content=[_pick_tool(query)], stop_reason="tool_use")


def _pick_tool(query: str) -> ToolUseBlock:
    route = _ROUTE_PATTERN.search(query)
    if route:
        return ToolUseBlock(
            name="plan_driving_route",
            input={"origin": route.group("origin").strip(), "destination": route.group("destination").strip()},
        )
    if _POI_PATTERN.search(query):
        category = next((cat for word, cat in _POI_CATEGORIES if word in query), None)
        args: dict[str, Any] = {"keywords": _poi_keyword(query)}
        if category:
            args["category"] = category
        return ToolUseBlock(name="search_poi_along_route", input=args)
    return ToolUseBlock(name="geocode", input={"address": query})


def _poi_keyword(query: str) -> str:
    for word, _ in _POI_CATEGORIES:
        if word in query:
            return word
    return "餐厅"


def _summarize_results(blocks: list[dict[str, Any]]) -> str:
    lines: list[str] = []
    for block in blocks:
        if block.get("type") != "tool_result":
            continue
        content = block.get("content", "")
        if block.get("is_error"):
            lines.append(str(content))
            continue
        try:
            payload = json.loads(content)
        except (TypeError, ValueError):
            lines.append(str(content))
            continue
        lines.append(_describe(payload))
    return "\n".join(lines) or "暂无结果"


def _describe(payload: Any) -> str:
    if not isinstance(payload, dict):
        return str(payload)
    if "distance" in payload and "duration" in payload:
        return f"路线已规划：全程 {payload['distance']}，预计 {payload['duration']}，{payload.get('tolls', '')}"
    if "recommendations" in payload:
        names = "、".join(item["name"] for item in payload["recommendations"][:3]) or "暂无结果"
        return f"沿途推荐：{names}"
    if payload.get("found"):
        return f"已在地图上标记：{payload.get('formatted_address', '')}"
    return str(payload.get("message", payload))

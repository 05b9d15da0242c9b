"""Tool catalog and handler registry.

Catalog order is the order the LLM sees the tools in.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Awaitable, Callable

from ..schemas import GeocodeInput, PlanRouteInput, PoiAlongRouteInput, ToolSpec
from .base import ToolContext, ToolFailure, ToolOutput
from .geocode import locate_address
from .poi import search_along_route
from .route import plan_route

ToolHandler = Callable[[Any, ToolContext], Awaitable[ToolOutput]]


class ToolName(str, Enum):
    GEOCODE = "geocode"
    PLAN_DRIVING_ROUTE = "plan_driving_route"
    SEARCH_POI_ALONG_ROUTE = "search_poi_along_route"


TOOL_SPECS: dict[ToolName, ToolSpec] = {
    ToolName.GEOCODE: ToolSpec(
        name=ToolName.GEOCODE.value,
        description="将地址转换为坐标并在地图上标记位置。当用户只提供单个地点想查看位置时使用此工具。",
        input_model=GeocodeInput,
    ),
    ToolName.PLAN_DRIVING_ROUTE: ToolSpec(
        name=ToolName.PLAN_DRIVING_ROUTE.value,
        description="规划驾车路线，支持途经点。返回路线距离、时长、路线坐标等信息。",
        input_model=PlanRouteInput,
    ),
    ToolName.SEARCH_POI_ALONG_ROUTE: ToolSpec(
        name=ToolName.SEARCH_POI_ALONG_ROUTE.value,
        description="沿路线搜索 POI（餐厅、加油站等），按评分排序返回推荐结果。",
        input_model=PoiAlongRouteInput,
    ),
}

TOOL_HANDLERS: dict[ToolName, ToolHandler] = {
    ToolName.GEOCODE: locate_address,
    ToolName.PLAN_DRIVING_ROUTE: plan_route,
    ToolName.SEARCH_POI_ALONG_ROUTE: search_along_route,
}

_missing = set(ToolName) - set(TOOL_SPECS) | set(ToolName) - set(TOOL_HANDLERS)
if _missing:
    raise RuntimeError(f"Tools without spec or handler: {sorted(t.value for t in _missing)}")


def resolve_tool(name: str) -> ToolName | None:
    try:
        return ToolName(name)
    except ValueError:
        return None


def list_tool_specs() -> list[ToolSpec]:
    return list(TOOL_SPECS.values())


def input_schema(spec: ToolSpec) -> dict[str, Any]:
    """JSON schema for a tool's arguments, without pydantic titles."""
    schema = spec.input_model.model_json_schema()
    schema.pop("title", None)
    schema.pop("description", None)
    for prop in schema.get("properties", {}).values():
        prop.pop("title", None)
    return schema


def build_anthropic_tools() -> list[dict[str, Any]]:
    """Translate the catalog into Anthropic tool definitions."""
    return [
        {
            "name": spec.name,
            "description": spec.description,
            "input_schema": input_schema(spec),
        }
        for spec in list_tool_specs()
    ]


__all__ = [
    "TOOL_HANDLERS",
    "TOOL_SPECS",
    "ToolContext",
    "ToolFailure",
    "ToolHandler",
    "ToolName",
    "ToolOutput",
    "build_anthropic_tools",
    "list_tool_specs",
    "resolve_tool",
]

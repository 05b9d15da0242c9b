"""Tool and chat schemas shared by the dispatcher, the loop and the API."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, Field

from amap_service.coords import LngLat
from amap_service.schemas import POIResult, RouteResult

PoiCategory = Literal[
    "restaurant",
    "western_restaurant",
    "chinese_restaurant",
    "gas_station",
    "cafe",
    "hotel",
    "mall",
]


class ToolError(BaseModel):
    """Normalized error payload returned by tools."""
    code: str
    message: str
    details: dict[str, Any] | None = None


class ToolMeta(BaseModel):
    """Metadata attached to tool results for observability."""
    tool_name: str
    trace_id: str
    latency_ms: int | None = None


class Marker(BaseModel):
    id: str
    name: str
    location: LngLat
    address: str | None = None
    type: Literal["location", "origin", "destination", "waypoint"] = "location"


class MapData(BaseModel):
    """Geospatial output of one chat turn, WGS-84 only."""
    route: RouteResult | None = None
    pois: list[POIResult] | None = None
    markers: list[Marker] | None = None

    def merge(self, delta: "MapData | None") -> "MapData":
        """Return a copy where every kind set in ``delta`` replaces ours."""
        if delta is None:
            return self
        return self.model_copy(update={name: getattr(delta, name) for name in delta.kinds()})

    def kinds(self) -> list[str]:
        return [name for name in type(self).model_fields if getattr(self, name) is not None]


class ToolResult(BaseModel):
    """Dispatcher outcome: either ``data`` for the LLM or a tagged ``error``."""
    ok: bool
    data: Any | None = None
    error: ToolError | None = None
    map_data: MapData | None = None
    meta: ToolMeta

    def llm_content(self) -> str:
        if self.ok:
            return json.dumps(self.data, ensure_ascii=False)
        message = self.error.message if self.error else "工具执行失败"
        return f"错误: {message}"


class GeocodeInput(BaseModel):
    """Input for geocode tool."""
    address: str = Field(..., min_length=1, description="要标记的地址，如 '深圳湾科技园'、'龙华大浪'、'北京天安门'")
    city: str | None = Field(default=None, description="城市名称，如 '深圳'，用于提高地址解析准确性（可选）")


class PlanRouteInput(BaseModel):
    """Input for driving route tool."""
    origin: str = Field(..., min_length=1, description="起点地址，如 '南山区深圳湾科技园'")
    destination: str = Field(..., min_length=1, description="终点地址，如 '龙华区大浪街道'")
    waypoints: str | None = Field(default=None, description="途经点地址，多个用逗号分隔，如 '宝安区沙井,福永'")

    def waypoint_list(self) -> list[str] | None:
        if not self.waypoints:
            return None
        items = [w.strip() for w in self.waypoints.replace("，", ",").split(",")]
        return [w for w in items if w] or None


class PoiAlongRouteInput(BaseModel):
    """Input for route-relative POI tool."""
    keywords: str = Field(..., min_length=1, description="搜索关键词，如 '西餐厅'、'加油站'、'咖啡厅'")
    category: PoiCategory | None = Field(
        default=None,
        description="POI 类别：restaurant（餐厅）、gas_station（加油站）、cafe（咖啡厅）、hotel（酒店）",
    )


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str


@dataclass(frozen=True)
class ToolSpec:
    """Tool catalog entry exposed to the LLM."""
    name: str
    description: str
    input_model: type[BaseModel]

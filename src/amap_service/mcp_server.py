"""MCP server for the mapping client.

Registers geocode, plan_driving_route and search_poi and runs via stdio
transport. Coordinates in and out are WGS-84; results are JSON text.
"""

import json

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from .adapters import AdapterError
from .logging import get_logger
from .mapping import MapClient
from .schemas import POIResult, RouteResult
from .settings import get_settings

logger = get_logger("mcp_server")

_LOOKUP = ToolAnnotations(readOnlyHint=True, destructiveHint=False, openWorldHint=True)


def _dumps(payload: object) -> str:
    return json.dumps(payload, ensure_ascii=False, indent=2)


def _error(tool: str, exc: AdapterError) -> str:
    logger.warning("mcp_tool_error", extra={"extra": {"tool": tool, "code": exc.code, "error": exc.message}})
    return f"错误: {exc.message}"


def route_summary(route: RouteResult, origin: str, destination: str) -> dict[str, object]:
    return {
        "distance": f"{route.distance / 1000:.1f} 公里",
        "duration": f"{round(route.duration / 60)} 分钟",
        "tolls": f"{route.tolls:g} 元" if route.tolls > 0 else "无过路费",
        "origin": {"address": origin, "location": route.origin},
        "destination": {"address": destination, "location": route.destination},
        "waypoints": route.waypoints,
        "polyline": route.polyline,
    }


def poi_summary(poi: POIResult) -> dict[str, object]:
    return {
        "name": poi.name,
        "type": poi.type,
        "address": poi.address,
        "location": poi.location,
        "tel": poi.tel or "",
        "rating": poi.rating or "暂无评分",
        "cost": f"人均 {poi.cost} 元" if poi.cost else "暂无价格",
    }


def register_map_tools(mcp: FastMCP):

    @mcp.tool(annotations=_LOOKUP)
    async def geocode(address: str, city: str = "深圳") -> str:
        """将地址转换为坐标（地理编码），支持深圳及周边城市。

        Args:
            address: 要转换的地址，如 '深圳湾科技园'、'龙华大浪'
            city: 城市名称，默认为深圳
        """
        try:
            result = await MapClient().geocode(address, city or None)
        except AdapterError as exc:
            return _error("geocode", exc)
        if result is None:
            return "无法解析该地址"
        return _dumps(result.model_dump())

    @mcp.tool(annotations=_LOOKUP)
    async def plan_driving_route(origin: str, destination: str, waypoints: list[str] | None = None) -> str:
        """规划驾车路线，支持途经点，返回距离、时间、路线坐标。

        Args:
            origin: 起点地址，如 '南山区深圳湾科技园'
            destination: 终点地址，如 '龙华区大浪街道'
            waypoints: 途经点地址列表，如 ['宝安区沙井', '福永']
        """
        try:
            route = await MapClient().plan_driving_route(origin, destination, waypoints or None)
        except AdapterError as exc:
            return _error("plan_driving_route", exc)
        if route is None:
            return "路线规划失败"
        return _dumps(route_summary(route, origin, destination))

    @mcp.tool(annotations=_LOOKUP)
    async def search_poi(center: list[float], keywords: str, radius: int = 3000) -> str:
        """搜索周边 POI（餐厅、加油站等），返回名称、评分、地址等信息。

        Args:
            center: 搜索中心点坐标 [经度, 纬度]，WGS-84 坐标系
            keywords: 搜索关键词，如 '西餐厅'、'加油站'
            radius: 搜索半径（米），默认 3000
        """
        if len(center) != 2:
            return "错误: center 必须是 [经度, 纬度]"
        try:
            pois = await MapClient().search_poi_around(
                (center[0], center[1]),
                keywords,
                radius=radius or 3000,
                offset=10,
            )
        except AdapterError as exc:
            return _error("search_poi", exc)
        return _dumps([poi_summary(poi) for poi in pois])


mcp = FastMCP(
    "amap-route",
    instructions="高德地图地理编码、驾车路线规划和周边 POI 搜索，坐标均为 WGS-84",
)

register_map_tools(mcp)


def main():
    # A missing key aborts startup.
    get_settings().require_api_key()
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()

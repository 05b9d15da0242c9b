"""Route-relative POI tool.

Depends on the route most recently planned in the same session.
"""

from __future__ import annotations

from amap_service.along_route import search_poi_along_route
from amap_service.poi_types import type_code_for
from amap_service.schemas import POIResult

from ..schemas import MapData, PoiAlongRouteInput
from .base import ToolContext, ToolFailure, ToolOutput


def _recommendation(poi: POIResult) -> dict[str, str]:
    return {
        "name": poi.name,
        "address": poi.address,
        "rating": poi.rating or "暂无评分",
        "cost": f"人均 {poi.cost} 元" if poi.cost else "暂无价格",
        "tel": poi.tel or "暂无电话",
    }


async def search_along_route(payload: PoiAlongRouteInput, ctx: ToolContext) -> ToolOutput:
    route = ctx.session.current_route
    if route is None:
        raise ToolFailure("NO_ROUTE", "请先规划路线")

    pois = await search_poi_along_route(
        ctx.client,
        route.polyline,
        payload.keywords,
        types=type_code_for(payload.category),
        max_results=ctx.settings.route_poi_limit,
    )
    return ToolOutput(
        data={"count": len(pois), "recommendations": [_recommendation(poi) for poi in pois]},
        map_data=MapData(pois=pois),
    )

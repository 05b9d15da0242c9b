"""Driving route tool."""

from __future__ import annotations

from amap_service.schemas import RouteResult

from ..schemas import MapData, PlanRouteInput
from .base import ToolContext, ToolFailure, ToolOutput


def summarize_route(route: RouteResult) -> dict[str, object]:
    """Unit-converted summary the LLM can quote directly."""
    return {
        "success": True,
        "distance": f"{route.distance / 1000:.1f} 公里",
        "duration": f"{round(route.duration / 60)} 分钟",
        "tolls": f"{route.tolls:g} 元" if route.tolls > 0 else "无过路费",
        "steps_count": len(route.steps),
    }


async def plan_route(payload: PlanRouteInput, ctx: ToolContext) -> ToolOutput:
    route = await ctx.client.plan_driving_route(
        payload.origin,
        payload.destination,
        payload.waypoint_list(),
    )
    if route is None:
        raise ToolFailure("ROUTE_NOT_FOUND", "路线规划失败，请检查起点和终点是否正确")
    ctx.session.current_route = route
    return ToolOutput(data=summarize_route(route), map_data=MapData(route=route))

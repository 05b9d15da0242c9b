"""Address lookup tool: resolves a place and drops a marker on the map."""

from __future__ import annotations

import uuid

from ..schemas import GeocodeInput, MapData, Marker
from .base import ToolContext, ToolOutput


async def locate_address(payload: GeocodeInput, ctx: ToolContext) -> ToolOutput:
    result = await ctx.client.geocode(payload.address, payload.city)
    if result is None:
        return ToolOutput(
            data={
                "found": False,
                "message": f"未找到地址「{payload.address}」，请提供更具体的地址（包含城市名称）",
            }
        )
    marker = Marker(
        id=f"geocode-{uuid.uuid4().hex[:12]}",
        name=payload.address,
        location=result.location,
        address=result.formatted_address,
        type="location",
    )
    return ToolOutput(
        data={"found": True, **result.model_dump()},
        map_data=MapData(markers=[marker]),
    )

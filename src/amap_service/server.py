"""FastAPI app exposing the mapping client over REST.

Coordinates in requests and responses are WGS-84.
"""

from __future__ import annotations

import time

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .adapters import AdapterError
from .along_route import search_poi_along_route
from .logging import get_logger
from .mapping import MapClient
from .schemas import PoiAlongRouteRequest, RouteRequest
from .settings import get_settings

logger = get_logger("amap_service")

app = FastAPI(title="AMap Route Service", version="0.1.0")


@app.on_event("startup")
def check_config() -> None:
    settings = get_settings()
    # Fails startup when the key is missing.
    settings.require_api_key()
    logger.info(
        "amap_service_config",
        extra={"extra": {"amap_key_set": True, "request_timeout_s": settings.request_timeout_s}},
    )


@app.exception_handler(AdapterError)
async def adapter_error_handler(request: Request, exc: AdapterError) -> JSONResponse:
    logger.info(
        "amap_request_failed",
        extra={"extra": {"path": request.url.path, "error_code": exc.code, "error": exc.message}},
    )
    return JSONResponse(status_code=500, content={"error": exc.message, "code": exc.code})


def _client() -> MapClient:
    return MapClient(get_settings())


def _not_found(message: str) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": message})


def _bad_request(message: str) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": message})


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/api/amap/geocode")
async def geocode(
    address: str | None = None,
    city: str | None = None,
    lng: float | None = None,
    lat: float | None = None,
):
    client = _client()
    if lng is not None and lat is not None:
        formatted = await client.reverse_geocode(lng, lat)
        if formatted is None:
            return _not_found("无法获取该位置的地址信息")
        return {"address": formatted}
    if address:
        result = await client.geocode(address, city)
        if result is None:
            return _not_found("无法解析该地址")
        return result.model_dump()
    return _bad_request("请提供 address 参数或 lng/lat 参数")


async def _plan(payload: RouteRequest):
    start = time.time()
    route = await _client().plan_driving_route(payload.origin, payload.destination, payload.waypoints)
    logger.info(
        "route_planned",
        extra={"extra": {"found": route is not None, "latency_ms": int((time.time() - start) * 1000)}},
    )
    if route is None:
        return _not_found("路线规划失败，请检查地址是否正确")
    return route.model_dump()


@app.get("/api/amap/route")
async def route_get(origin: str | None = None, destination: str | None = None, waypoints: str | None = None):
    if not origin or not destination:
        return _bad_request("请提供起点 (origin) 和终点 (destination)")
    waypoint_list = [w for w in waypoints.split("|") if w] if waypoints else None
    return await _plan(RouteRequest(origin=origin, destination=destination, waypoints=waypoint_list))


@app.post("/api/amap/route")
async def route_post(payload: RouteRequest):
    return await _plan(payload)


@app.get("/api/amap/poi")
async def poi_around(
    keywords: str | None = None,
    lng: float | None = None,
    lat: float | None = None,
    radius: int = 3000,
    types: str | None = None,
):
    if not keywords:
        return _bad_request("请提供搜索关键词 (keywords)")
    if lng is None or lat is None:
        return _bad_request("请提供中心点坐标 (lng, lat)")
    pois = await _client().search_poi_around((lng, lat), keywords, radius=radius, types=types)
    return {"pois": [poi.model_dump() for poi in pois], "count": len(pois)}


@app.post("/api/amap/poi")
async def poi_along_route(payload: PoiAlongRouteRequest):
    pois = await search_poi_along_route(
        _client(),
        payload.coordinates,
        payload.keywords,
        radius=payload.radius,
        types=payload.types,
        max_results=payload.max_results,
    )
    return {"pois": [poi.model_dump() for poi in pois], "count": len(pois)}


def main() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "amap_service.server:app",
        host=settings.host,
        port=settings.port,
        reload=False,
    )


if __name__ == "__main__":
    main()

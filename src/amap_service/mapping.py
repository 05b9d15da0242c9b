"""Mapping client: geocoding, routing and POI search over AMap.

All inputs and outputs are WGS-84; GCJ-02 only exists on the wire.
"No result" is returned as ``None`` or ``[]``; transport failures and
payloads that do not fit the typed entities raise ``AdapterError``.
"""

from __future__ import annotations

import asyncio
from typing import Any, Sequence, Union

from pydantic import ValidationError

from .adapters import AdapterError
from .adapters import amap
from .coords import LngLat, format_coordinate, gcj02_to_wgs84, parse_coordinate, parse_polyline, wgs84_to_gcj02
from .logging import get_logger
from .schemas import GeocodeResult, POIResult, RouteResult, RouteStep, SortRule
from .settings import AmapSettings, get_settings

logger = get_logger("mapping")

# Free text to geocode, or an explicit WGS-84 coordinate.
Place = Union[str, LngLat]


def _text(value: Any) -> str | None:
    # AMap encodes missing string fields as [] instead of null.
    if isinstance(value, str) and value:
        return value
    return None


def _int(value: Any) -> int | None:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return int(value)
    text = _text(value)
    return int(float(text)) if text is not None else None


def _float_or_zero(value: Any) -> float:
    text = _text(value)
    try:
        return float(text) if text is not None else 0.0
    except ValueError:
        return 0.0


def _log_no_result(event: str, data: dict, **context: Any) -> None:
    logger.warning(
        event,
        extra={
            "extra": {
                "status": data.get("status"),
                "info": data.get("info"),
                "infocode": data.get("infocode"),
                **context,
            }
        },
    )


class MapClient:
    def __init__(self, settings: AmapSettings | None = None) -> None:
        self._settings = settings or get_settings()

    @property
    def _api_key(self) -> str:
        return self._settings.require_api_key()

    async def geocode(self, address: str, city: str | None = None) -> GeocodeResult | None:
        """Resolve an address; the first candidate wins."""
        data = await amap.geocode_address(
            api_key=self._api_key,
            address=address,
            city=city,
            timeout_s=self._settings.request_timeout_s,
        )
        if not amap.is_success(data) or not data.get("geocodes"):
            _log_no_result("geocode_no_result", data, address=address, city=city)
            return None
        return _parse_geocode(data["geocodes"][0])

    async def reverse_geocode(self, lng: float, lat: float, is_wgs84: bool = True) -> str | None:
        gcj = wgs84_to_gcj02(lng, lat) if is_wgs84 else (lng, lat)
        data = await amap.reverse_geocode(
            api_key=self._api_key,
            location=format_coordinate(gcj),
            timeout_s=self._settings.request_timeout_s,
        )
        regeocode = data.get("regeocode")
        if not amap.is_success(data) or not isinstance(regeocode, dict):
            _log_no_result("regeo_no_result", data, lng=lng, lat=lat)
            return None
        return _text(regeocode.get("formatted_address"))

    async def _resolve(self, place: Place, label: str) -> LngLat:
        """Return the GCJ-02 coordinate for a route endpoint."""
        if isinstance(place, str):
            # No city hint: nationwide resolution.
            geo = await self.geocode(place)
            if geo is None:
                raise AdapterError("UNRESOLVED_ADDRESS", f"无法解析{label}地址: {place}", {"address": place})
            return geo.location_gcj02 or wgs84_to_gcj02(*geo.location)
        return wgs84_to_gcj02(place[0], place[1])

    async def plan_driving_route(
        self,
        origin: Place,
        destination: Place,
        waypoints: Sequence[Place] | None = None,
    ) -> RouteResult | None:
        origin_gcj = await self._resolve(origin, "起点")
        dest_gcj = await self._resolve(destination, "终点")
        waypoint_gcj: list[LngLat] = []
        if waypoints:
            waypoint_gcj = list(await asyncio.gather(*(self._resolve(wp, "途经点") for wp in waypoints)))

        data = await amap.driving_direction(
            api_key=self._api_key,
            origin=format_coordinate(origin_gcj),
            destination=format_coordinate(dest_gcj),
            waypoints=";".join(format_coordinate(c) for c in waypoint_gcj) or None,
            timeout_s=self._settings.request_timeout_s,
        )
        route = data.get("route")
        paths = route.get("paths") if isinstance(route, dict) else None
        if not amap.is_success(data) or not paths:
            _log_no_result("route_not_found", data, origin=str(origin), destination=str(destination))
            return None
        return _parse_route(paths[0], origin_gcj, dest_gcj, waypoint_gcj)

    async def search_poi_around(
        self,
        center: LngLat,
        keywords: str,
        *,
        radius: int = 3000,
        types: str | None = None,
        offset: int = 20,
        page: int = 1,
        sort_rule: SortRule = "weight",
        is_wgs84: bool = True,
    ) -> list[POIResult]:
        gcj = wgs84_to_gcj02(center[0], center[1]) if is_wgs84 else center
        data = await amap.search_poi_around(
            api_key=self._api_key,
            keyword=keywords,
            types=types,
            location=format_coordinate(gcj),
            radius_m=radius,
            limit=offset,
            page=page,
            sort_rule=sort_rule,
            timeout_s=self._settings.request_timeout_s,
        )
        if not amap.is_success(data):
            _log_no_result("poi_no_result", data, keywords=keywords)
            return []
        if not data.get("pois"):
            return []
        return [_parse_poi(poi) for poi in data["pois"]]


def _parse_geocode(raw: dict) -> GeocodeResult:
    try:
        lng, lat = parse_coordinate(raw["location"])
        return GeocodeResult(
            formatted_address=_text(raw.get("formatted_address")) or "",
            location=gcj02_to_wgs84(lng, lat),
            location_gcj02=(lng, lat),
            province=_text(raw.get("province")) or "",
            city=_text(raw.get("city")) or _text(raw.get("province")) or "",
            district=_text(raw.get("district")) or "",
            adcode=_text(raw.get("adcode")) or "",
        )
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise AdapterError("BAD_RESPONSE", f"Unexpected geocode payload: {exc}") from exc


def _parse_route(path: dict, origin_gcj: LngLat, dest_gcj: LngLat, waypoint_gcj: list[LngLat]) -> RouteResult:
    try:
        steps: list[RouteStep] = []
        polyline: list[LngLat] = []
        for step in path["steps"]:
            step_polyline = parse_polyline(step["polyline"])
            polyline.extend(step_polyline)
            steps.append(
                RouteStep(
                    instruction=_text(step.get("instruction")) or "",
                    road=_text(step.get("road")) or "",
                    distance=_int(step.get("distance")) or 0,
                    duration=_int(step.get("duration")) or 0,
                    polyline=step_polyline,
                )
            )
        return RouteResult(
            distance=_int(path.get("distance")) or 0,
            duration=_int(path.get("duration")) or 0,
            tolls=_float_or_zero(path.get("tolls")),
            polyline=polyline,
            steps=steps,
            origin=gcj02_to_wgs84(*origin_gcj),
            destination=gcj02_to_wgs84(*dest_gcj),
            waypoints=[gcj02_to_wgs84(*c) for c in waypoint_gcj],
        )
    except (KeyError, TypeError, ValueError, AttributeError, ValidationError) as exc:
        raise AdapterError("BAD_RESPONSE", f"Unexpected route payload: {exc}") from exc


def _parse_poi(raw: dict) -> POIResult:
    try:
        lng, lat = parse_coordinate(raw["location"])
        biz = raw.get("biz_ext") if isinstance(raw.get("biz_ext"), dict) else {}
        photos = raw.get("photos")
        return POIResult(
            id=raw["id"],
            name=raw["name"],
            type=_text(raw.get("type")) or "",
            typecode=_text(raw.get("typecode")) or "",
            address=_text(raw.get("address")) or "",
            location=gcj02_to_wgs84(lng, lat),
            location_gcj02=(lng, lat),
            tel=_text(raw.get("tel")),
            distance=_int(raw.get("distance")),
            rating=_text(biz.get("rating")),
            cost=_text(biz.get("cost")),
            photos=[p["url"] for p in photos if _text(p.get("url"))] if isinstance(photos, list) else None,
            business_area=_text(raw.get("business_area")),
            opening_hours=_text(biz.get("opentime")),
        )
    except (KeyError, TypeError, ValueError, AttributeError, ValidationError) as exc:
        raise AdapterError("BAD_RESPONSE", f"Unexpected POI payload: {exc}") from exc

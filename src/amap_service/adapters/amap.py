"""AMap (Gaode) adapter.

Encapsulates upstream API details and transport error normalization.
Every function returns the provider's decoded JSON body untouched;
interpreting ``status``/``info`` is left to the caller because a
non-success status usually means "no result" rather than a failure.
"""

from __future__ import annotations

import httpx

from . import AdapterError, ConfigError

AMAP_BASE_URL = "https://restapi.amap.com/v3"

# Driving strategy 10: avoid congestion, may return multiple paths.
DRIVING_STRATEGY_AVOID_CONGESTION = "10"


def is_success(data: dict) -> bool:
    return str(data.get("status")) == "1"


async def _get_json(path: str, params: dict[str, str | int], timeout_s: float) -> dict:
    url = f"{AMAP_BASE_URL}/{path}"
    try:
        async with httpx.AsyncClient(timeout=timeout_s) as client:
            resp = await client.get(url, params=params)
    except httpx.HTTPError as exc:
        raise AdapterError("UPSTREAM_UNAVAILABLE", str(exc), {"path": path}) from exc
    if resp.status_code >= 400:
        raise AdapterError(
            "UPSTREAM_HTTP_ERROR",
            f"AMap error: {resp.status_code}",
            {"path": path, "status_code": resp.status_code},
        )
    try:
        data = resp.json()
    except ValueError as exc:
        raise AdapterError("BAD_RESPONSE", str(exc), {"path": path}) from exc
    if not isinstance(data, dict):
        raise AdapterError("BAD_RESPONSE", "AMap response is not a JSON object", {"path": path})
    return data


def _require_key(api_key: str | None) -> str:
    if not api_key:
        raise ConfigError("AMAP_API_KEY is not set")
    return api_key


async def geocode_address(
    *,
    api_key: str | None,
    address: str,
    city: str | None,
    timeout_s: float,
) -> dict:
    params: dict[str, str | int] = {
        "key": _require_key(api_key),
        "address": address,
        "output": "JSON",
    }
    if city:
        params["city"] = city
    return await _get_json("geocode/geo", params, timeout_s)


async def reverse_geocode(
    *,
    api_key: str | None,
    location: str,
    timeout_s: float,
) -> dict:
    params: dict[str, str | int] = {
        "key": _require_key(api_key),
        "location": location,
        "output": "JSON",
    }
    return await _get_json("geocode/regeo", params, timeout_s)


async def driving_direction(
    *,
    api_key: str | None,
    origin: str,
    destination: str,
    waypoints: str | None,
    timeout_s: float,
) -> dict:
    params: dict[str, str | int] = {
        "key": _require_key(api_key),
        "origin": origin,
        "destination": destination,
        "extensions": "all",
        "output": "JSON",
        "strategy": DRIVING_STRATEGY_AVOID_CONGESTION,
    }
    if waypoints:
        params["waypoints"] = waypoints
    return await _get_json("direction/driving", params, timeout_s)


async def search_poi_around(
    *,
    api_key: str | None,
    keyword: str | None,
    types: str | None,
    location: str,
    radius_m: int,
    limit: int,
    page: int,
    sort_rule: str,
    timeout_s: float,
) -> dict:
    params: dict[str, str | int] = {
        "key": _require_key(api_key),
        "location": location,
        "radius": radius_m,
        "offset": limit,
        "page": page,
        "sortrule": sort_rule,
        "extensions": "all",
        "output": "JSON",
    }
    if keyword:
        params["keywords"] = keyword
    if types:
        params["types"] = types
    return await _get_json("place/around", params, timeout_s)

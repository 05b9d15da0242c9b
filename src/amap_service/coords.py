"""WGS-84 / GCJ-02 coordinate conversion.

AMap works in GCJ-02, an obfuscated frame offset from WGS-84 by a fixed
closed-form series. Map renderers and every payload we hand out use
WGS-84, so conversion happens exactly at the provider boundary.

Both directions are the usual one-step approximations. ``gcj02_to_wgs84``
is not an exact inverse of ``wgs84_to_gcj02``; the round-trip error is a
few meters at most inside mainland China. Points outside China are
converted anyway, without bounds checking.
"""

from __future__ import annotations

import math

LngLat = tuple[float, float]

A = 6378245.0
EE = 0.00669342162296594323

# Approximate center of the distortion domain.
_LNG_ORIGIN = 105.0
_LAT_ORIGIN = 35.0


def _lat_offset(x: float, y: float) -> float:
    ret = -100.0 + 2.0 * x + 3.0 * y + 0.2 * y * y + 0.1 * x * y + 0.2 * math.sqrt(abs(x))
    ret += (20.0 * math.sin(6.0 * x * math.pi) + 20.0 * math.sin(2.0 * x * math.pi)) * 2.0 / 3.0
    ret += (20.0 * math.sin(y * math.pi) + 40.0 * math.sin(y / 3.0 * math.pi)) * 2.0 / 3.0
    ret += (160.0 * math.sin(y / 12.0 * math.pi) + 320 * math.sin(y * math.pi / 30.0)) * 2.0 / 3.0
    return ret


def _lng_offset(x: float, y: float) -> float:
    ret = 300.0 + x + 2.0 * y + 0.1 * x * x + 0.1 * x * y + 0.1 * math.sqrt(abs(x))
    ret += (20.0 * math.sin(6.0 * x * math.pi) + 20.0 * math.sin(2.0 * x * math.pi)) * 2.0 / 3.0
    ret += (20.0 * math.sin(x * math.pi) + 40.0 * math.sin(x / 3.0 * math.pi)) * 2.0 / 3.0
    ret += (150.0 * math.sin(x / 12.0 * math.pi) + 300.0 * math.sin(x / 30.0 * math.pi)) * 2.0 / 3.0
    return ret


def _delta(lng: float, lat: float) -> LngLat:
    """Offset in degrees that GCJ-02 adds at ``(lng, lat)``."""
    dlat = _lat_offset(lng - _LNG_ORIGIN, lat - _LAT_ORIGIN)
    dlng = _lng_offset(lng - _LNG_ORIGIN, lat - _LAT_ORIGIN)
    radlat = lat / 180.0 * math.pi
    magic = math.sin(radlat)
    magic = 1 - EE * magic * magic
    sqrtmagic = math.sqrt(magic)
    dlat = (dlat * 180.0) / ((A * (1 - EE)) / (magic * sqrtmagic) * math.pi)
    dlng = (dlng * 180.0) / (A / sqrtmagic * math.cos(radlat) * math.pi)
    return dlng, dlat


def wgs84_to_gcj02(lng: float, lat: float) -> LngLat:
    dlng, dlat = _delta(lng, lat)
    return lng + dlng, lat + dlat


def gcj02_to_wgs84(lng: float, lat: float) -> LngLat:
    # Reflect the input through its own forward-shifted point.
    dlng, dlat = _delta(lng, lat)
    mglng = lng + dlng
    mglat = lat + dlat
    return lng * 2 - mglng, lat * 2 - mglat


def parse_coordinate(text: str) -> LngLat:
    """Parse AMap's ``"lng,lat"`` string without changing frames."""
    lng_str, lat_str = text.split(",")
    return float(lng_str), float(lat_str)


def format_coordinate(coord: LngLat) -> str:
    return f"{coord[0]},{coord[1]}"


def parse_polyline(polyline: str) -> list[LngLat]:
    """Parse a ``;``-separated GCJ-02 polyline into WGS-84 points."""
    points: list[LngLat] = []
    for chunk in polyline.split(";"):
        if not chunk:
            continue
        lng, lat = parse_coordinate(chunk)
        points.append(gcj02_to_wgs84(lng, lat))
    return points

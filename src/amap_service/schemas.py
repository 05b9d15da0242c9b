"""Typed mapping entities (single source of truth).

Coordinates named ``location``/``polyline``/``origin``... are WGS-84.
GCJ-02 copies are kept only in ``*_gcj02`` fields so they can be fed back
into provider calls; those fields are excluded from serialization, so
nothing that leaves the process carries provider-frame values.
"""

from __future__ import annotations

import math
from typing import Literal

from pydantic import BaseModel, Field

from .coords import LngLat

SortRule = Literal["distance", "weight"]


class GeocodeResult(BaseModel):
    """Address lookup result."""
    formatted_address: str
    location: LngLat
    location_gcj02: LngLat | None = Field(default=None, exclude=True)
    province: str = ""
    city: str = ""
    district: str = ""
    adcode: str = ""


class RouteStep(BaseModel):
    instruction: str
    road: str = ""
    distance: int = Field(ge=0, description="Meters")
    duration: int = Field(ge=0, description="Seconds")
    polyline: list[LngLat]


class RouteResult(BaseModel):
    """First driving path returned for a request."""
    distance: int = Field(ge=0, description="Meters")
    duration: int = Field(ge=0, description="Seconds")
    tolls: float = Field(default=0.0, ge=0, description="Yuan, 0 means free")
    polyline: list[LngLat] = Field(min_length=2)
    steps: list[RouteStep]
    origin: LngLat
    destination: LngLat
    waypoints: list[LngLat] = Field(default_factory=list)


class POIResult(BaseModel):
    id: str
    name: str
    type: str = ""
    typecode: str = ""
    address: str = ""
    location: LngLat
    location_gcj02: LngLat | None = Field(default=None, exclude=True)
    tel: str | None = None
    distance: int | None = None
    rating: str | None = None
    cost: str | None = None
    photos: list[str] | None = None
    business_area: str | None = None
    opening_hours: str | None = None

    def rating_value(self) -> float:
        try:
            value = float(self.rating) if self.rating else 0.0
        except ValueError:
            return 0.0
        # "nan" and "inf" parse but cannot be ranked.
        return value if math.isfinite(value) else 0.0


class RouteRequest(BaseModel):
    """Route planning input; each endpoint is text or a WGS-84 ``[lng, lat]``."""
    origin: str | LngLat
    destination: str | LngLat
    waypoints: list[str | LngLat] | None = None


class PoiAlongRouteRequest(BaseModel):
    coordinates: list[LngLat] = Field(min_length=2)
    keywords: str = Field(..., min_length=1)
    radius: int = Field(default=2000, ge=1, le=50000)
    types: str | None = None
    max_results: int = Field(default=10, ge=1, le=50, alias="maxResults")

    model_config = {"populate_by_name": True}

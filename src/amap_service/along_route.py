"""POI search along a planned route.

Searches around five evenly spaced points of the polyline, merges the hits
and ranks them by rating.
"""

from __future__ import annotations

from typing import Sequence

from .coords import LngLat
from .logging import get_logger
from .mapping import MapClient
from .schemas import POIResult

logger = get_logger("along_route")

SAMPLE_FRACTIONS = (0.0, 0.25, 0.5, 0.75)
PER_SAMPLE_LIMIT = 10


def sample_indices(total_points: int) -> list[int]:
    """Indices at 0%, 25%, 50%, 75% and the last point, deduplicated."""
    if total_points <= 0:
        return []
    candidates = [int(total_points * f) for f in SAMPLE_FRACTIONS] + [total_points - 1]
    indices: list[int] = []
    for idx in candidates:
        if idx not in indices:
            indices.append(idx)
    return indices


def merge_pois(batches: Sequence[Sequence[POIResult]], max_results: int) -> list[POIResult]:
    """Dedupe by id (first occurrence wins), sort by rating desc, truncate."""
    seen: set[str] = set()
    merged: list[POIResult] = []
    for batch in batches:
        for poi in batch:
            if poi.id in seen:
                continue
            seen.add(poi.id)
            merged.append(poi)
    merged.sort(key=lambda poi: poi.rating_value(), reverse=True)
    return merged[:max_results]


async def search_poi_along_route(
    client: MapClient,
    polyline: Sequence[LngLat],
    keywords: str,
    *,
    radius: int = 2000,
    types: str | None = None,
    max_results: int = 10,
) -> list[POIResult]:
    batches: list[list[POIResult]] = []
    indices = sample_indices(len(polyline))
    # One provider request in flight at a time.
    for idx in indices:
        batches.append(
            await client.search_poi_around(
                polyline[idx],
                keywords,
                radius=radius,
                types=types,
                offset=PER_SAMPLE_LIMIT,
                is_wgs84=True,
            )
        )
    results = merge_pois(batches, max_results)
    logger.info(
        "poi_along_route",
        extra={
            "extra": {
                "keywords": keywords,
                "samples": len(indices),
                "hits": sum(len(b) for b in batches),
                "returned": len(results),
            }
        },
    )
    return results

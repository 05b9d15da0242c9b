"""AMap POI type codes.

Full list: https://lbs.amap.com/api/webservice/download
"""

from __future__ import annotations

POI_TYPES: dict[str, str] = {
    # Food
    "restaurant": "050000",
    "chinese_restaurant": "050100",
    "western_restaurant": "050200",
    "fast_food": "050300",
    "cafe": "050500",
    # Shopping
    "shopping": "060000",
    "mall": "060100",
    "supermarket": "060400",
    # Services
    "gas_station": "010100",
    "parking": "150900",
    "charging_station": "011100",
    # Lodging
    "hotel": "100000",
    # Sightseeing
    "scenic": "110000",
}


def type_code_for(category: str | None) -> str | None:
    if not category:
        return None
    return POI_TYPES.get(category)

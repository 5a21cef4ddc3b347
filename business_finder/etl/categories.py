"""Translate user-facing category names into Google Places types."""

from typing import Dict

CATEGORY_TO_PLACE_TYPE: Dict[str, str] = {
    "hotel": "lodging",
    "motel": "lodging",
    "accommodation": "lodging",
    "shopping": "shopping_mall",
    "mall": "shopping_mall",
    "coffee": "cafe",
    "coffee shop": "cafe",
    "grocery": "supermarket",
    "groceries": "supermarket",
    "mechanic": "car_repair",
    "auto repair": "car_repair",
    "hairdresser": "hair_care",
    "barber": "hair_care",
    "salon": "beauty_salon",
    "pub": "bar",
    "chemist": "pharmacy",
    "doctor": "doctor",
    "gp": "doctor",
    "vet": "veterinary_care",
    "fitness": "gym",
    "takeaway": "meal_takeaway",
    "fast food": "meal_takeaway",
    "real estate": "real_estate_agency",
    "lawyer": "lawyer",
    "solicitor": "lawyer",
}


def map_category(category: str) -> str:
    """Return the Places type for ``category``; unknown values pass through."""
    key = category.strip()
    return CATEGORY_TO_PLACE_TYPE.get(key.lower(), key)

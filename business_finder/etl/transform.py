"""Utilities for transforming Google Places responses into database rows."""

import logging
from typing import Any, Dict, Optional

from business_finder.etl.postcode import extract_postcode
from business_finder.models import CandidatePlace

logger = logging.getLogger(__name__)


def to_candidate(result: Dict[str, Any]) -> Optional[CandidatePlace]:
    """Build a candidate from a nearby search result.

    Results without a place id, a name or coordinates cannot be stored and are
    skipped.
    """
    place_id = _strip_or_none(result.get("place_id"))
    name = _strip_or_none(result.get("name"))
    location = (result.get("geometry") or {}).get("location") or {}
    latitude = _safe_float(location.get("lat"))
    longitude = _safe_float(location.get("lng"))

    if not place_id or not name:
        logger.debug("Skipping result without place_id or name: %s", result)
        return None
    if latitude is None or longitude is None:
        logger.debug("Skipping %s without coordinates", place_id)
        return None

    return CandidatePlace(
        place_id=place_id,
        name=name,
        latitude=latitude,
        longitude=longitude,
        types=[str(t) for t in result.get("types") or []],
        address=_strip_or_none(result.get("formatted_address") or result.get("vicinity")),
        phone=_strip_or_none(result.get("formatted_phone_number")),
        website=_strip_or_none(result.get("website")),
        rating=_safe_float(result.get("rating")),
        review_count=_safe_int(result.get("user_ratings_total")),
    )


def apply_details(candidate: CandidatePlace, details: Dict[str, Any]) -> CandidatePlace:
    """Backfill phone, website and formatted address from a details payload."""
    candidate.address = _strip_or_none(details.get("formatted_address")) or candidate.address
    candidate.phone = _strip_or_none(details.get("formatted_phone_number")) or candidate.phone
    candidate.website = _strip_or_none(details.get("website")) or candidate.website
    return candidate


def to_business_row(candidate: CandidatePlace) -> Dict[str, Any]:
    """Map a candidate onto every writable column of ``businesses``."""
    address = candidate.address or ""
    return {
        "place_id": candidate.place_id,
        "name": candidate.name,
        "address": address,
        "postcode": candidate.postcode or extract_postcode(address),
        "phone": candidate.phone,
        "website": candidate.website,
        "latitude": candidate.latitude,
        "longitude": candidate.longitude,
        "category": ",".join(candidate.types) or None,
        "google_rating": candidate.rating,
        "user_ratings_total": candidate.review_count,
    }


def _strip_or_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    value_str = str(value).strip()
    return value_str or None


def _safe_float(value: Any) -> Optional[float]:
    try:
        if value is None:
            return None
        return float(value)
    except (TypeError, ValueError):
        return None


def _safe_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None

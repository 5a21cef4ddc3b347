"""Client utilities for the Google Geocoding and Places APIs."""

import logging
from typing import Any, Dict, List

import requests

from business_finder.etl.transform import apply_details, to_candidate
from business_finder.models import CandidatePlace, Coordinates

logger = logging.getLogger(__name__)
_SESSION = requests.Session()
_BASE_URL = "https://maps.googleapis.com/maps/api/place"
_GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"
_DETAIL_FIELDS = "formatted_address,formatted_phone_number,website"
_CONNECTION_TEST_ADDRESS = "Sydney, Australia"

DEFAULT_TIMEOUT = 10


class GeocodingError(RuntimeError):
    """Raised when a location cannot be resolved to coordinates."""


class GooglePlacesError(RuntimeError):
    """Raised when the Places API returns a non-successful response."""


def geocode(location: str, api_key: str, timeout: float = DEFAULT_TIMEOUT) -> Coordinates:
    """Resolve ``location`` to the coordinates of the first geocoding result."""
    try:
        response = _SESSION.get(_GEOCODE_URL, params={"address": location, "key": api_key}, timeout=timeout)
        response.raise_for_status()
        payload = response.json()
    except (requests.RequestException, ValueError) as exc:
        logger.error("geocode request failed for %s: %s", location, exc)
        raise GeocodingError(f"geocoding request failed for {location!r}") from exc

    status = payload.get("status")
    results = payload.get("results") or []
    if status != "OK" or not results:
        logger.error(
            "geocode failed for %s: status=%s, error_message=%s", location, status, payload.get("error_message")
        )
        raise GeocodingError(payload.get("error_message") or f"no geocoding result for {location!r} ({status})")

    first = results[0]
    point = (first.get("geometry") or {}).get("location") or {}
    try:
        return Coordinates(
            lat=float(point["lat"]),
            lng=float(point["lng"]),
            formatted_address=first.get("formatted_address"),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise GeocodingError(f"geocoding result for {location!r} has no coordinates") from exc


def nearby_search(
    coordinates: Coordinates,
    radius_meters: int,
    place_type: str,
    api_key: str,
    max_radius: int,
    timeout: float = DEFAULT_TIMEOUT,
) -> List[CandidatePlace]:
    """Return candidate places around ``coordinates``.

    ``radius_meters`` is capped at ``max_radius``, the ceiling Google enforces
    for nearby search. ``ZERO_RESULTS`` yields an empty list.
    """
    radius = min(radius_meters, max_radius)
    if radius != radius_meters:
        logger.info("Clamping search radius from %d to %d metres", radius_meters, radius)

    params = {
        "location": f"{coordinates.lat},{coordinates.lng}",
        "radius": radius,
        "type": place_type,
        "key": api_key,
    }
    try:
        response = _SESSION.get(f"{_BASE_URL}/nearbysearch/json", params=params, timeout=timeout)
        response.raise_for_status()
        payload = response.json()
    except (requests.RequestException, ValueError) as exc:
        logger.error("nearby_search request failed: %s", exc)
        raise GooglePlacesError(f"nearby search request failed: {exc}") from exc

    status = payload.get("status")
    if status == "ZERO_RESULTS":
        return []
    if status != "OK":
        logger.error("nearby_search failed: status=%s, error_message=%s", status, payload.get("error_message"))
        raise GooglePlacesError(payload.get("error_message") or status)

    candidates = []
    for result in payload.get("results", []):
        candidate = to_candidate(result)
        if candidate is not None:
            candidates.append(candidate)
    logger.info("nearby_search returned %d candidates for type=%s", len(candidates), place_type)
    return candidates


def place_details(place_id: str, api_key: str, timeout: float = DEFAULT_TIMEOUT) -> Dict[str, Any]:
    params = {"place_id": place_id, "key": api_key, "fields": _DETAIL_FIELDS}
    response = _SESSION.get(f"{_BASE_URL}/details/json", params=params, timeout=timeout)
    response.raise_for_status()
    payload = response.json()
    status = payload.get("status")
    if status != "OK":
        logger.error("place_details failed: status=%s, error_message=%s", status, payload.get("error_message"))
        raise GooglePlacesError(payload.get("error_message") or status)
    return payload.get("result", {})


def enrich_candidate(candidate: CandidatePlace, api_key: str, timeout: float = DEFAULT_TIMEOUT) -> CandidatePlace:
    """Backfill contact fields from place details, keeping the candidate as-is on failure."""
    try:
        details = place_details(candidate.place_id, api_key, timeout=timeout)
    except Exception as exc:  # noqa: BLE001
        logger.warning("Failed to fetch details for %s: %s", candidate.place_id, exc)
        return candidate
    return apply_details(candidate, details)


def check_connection(api_key: str, timeout: float = DEFAULT_TIMEOUT) -> Dict[str, Any]:
    """Geocode a well-known address and report whether the key works."""
    try:
        response = _SESSION.get(
            _GEOCODE_URL, params={"address": _CONNECTION_TEST_ADDRESS, "key": api_key}, timeout=timeout
        )
        payload = response.json()
    except (requests.RequestException, ValueError) as exc:
        return {"status": 500, "api_status": "ERROR", "success": False, "message": str(exc)}

    api_status = payload.get("status", "UNKNOWN")
    return {
        "status": response.status_code,
        "api_status": api_status,
        "success": response.ok and api_status == "OK",
        "message": payload.get("error_message") or "Connection successful",
    }


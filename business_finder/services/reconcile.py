"""Search Google Places for businesses and reconcile them with the store.

One search runs sequentially: every target location is geocoded and searched,
candidates are filtered by the rating policy, merged across locations by
``place_id`` (first sighting wins), enriched with contact details, stamped with
a postcode and then inserted or overwritten in the ``businesses`` table.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

from business_finder.core import db
from business_finder.core.config import Settings
from business_finder.core.errors import ValidationError
from business_finder.etl.categories import map_category
from business_finder.etl.postcode import extract_postcode, is_valid_postcode
from business_finder.etl.transform import to_business_row
from business_finder.models import BusinessRecord, CandidatePlace, SearchOutcome, SearchRequest
from business_finder.vendors import google_places

logger = logging.getLogger(__name__)

MAX_REQUEST_RADIUS = 100000
MAX_CATEGORY_LENGTH = 100
MAX_LOCATION_LENGTH = 255
_TRUTHY = {"1", "true", "yes", "on"}


def parse_search_params(params: Mapping[str, Any], settings: Settings) -> SearchRequest:
    """Validate raw request parameters into a :class:`SearchRequest`."""
    errors: Dict[str, str] = {}

    location = _clean(params.get("location"))
    postcode = _clean(params.get("postcode"))
    country = _clean(params.get("country"))
    category = _clean(params.get("category"))

    radius: Optional[int] = None
    radius_raw = params.get("radius")
    if radius_raw is None or str(radius_raw).strip() == "":
        errors["radius"] = "The radius field is required."
    else:
        try:
            radius = int(str(radius_raw).strip())
        except ValueError:
            errors["radius"] = "The radius must be an integer."
        else:
            if not 1 <= radius <= MAX_REQUEST_RADIUS:
                errors["radius"] = f"The radius must be between 1 and {MAX_REQUEST_RADIUS}."

    if not category:
        errors["category"] = "The category field is required."
    elif len(category) > MAX_CATEGORY_LENGTH:
        errors["category"] = f"The category may not be greater than {MAX_CATEGORY_LENGTH} characters."

    if location and len(location) > MAX_LOCATION_LENGTH:
        errors["location"] = f"The location may not be greater than {MAX_LOCATION_LENGTH} characters."
    if postcode and not is_valid_postcode(postcode):
        errors["postcode"] = "The postcode must be 4 digits."

    country_wide = False
    if country:
        country_wide = country.lower() in _TRUTHY or country.lower() == settings.country.lower()
        if not country_wide:
            errors["country"] = f"Country-wide search is only available for {settings.country}."

    modes = sum(1 for given in (location, postcode, country) if given)
    if modes == 0:
        errors.setdefault("location", "One of location, postcode or country is required.")
    elif modes > 1:
        errors.setdefault("location", "Only one of location, postcode or country may be given.")

    if errors:
        raise ValidationError(errors)

    return SearchRequest(
        radius=radius,
        category=category,
        location=location,
        postcode=postcode,
        country_wide=country_wide,
    )


class SearchReconciler:
    """Runs searches against Google and upserts the surviving businesses.

    ``store`` must provide ``find_business_by_place_id``, ``insert_business``
    and ``update_business``; ``places`` must provide ``geocode``,
    ``nearby_search`` and ``enrich_candidate``. Both default to the real
    modules.
    """

    def __init__(self, settings: Settings, store: Any = db, places: Any = google_places) -> None:
        self.settings = settings
        self.store = store
        self.places = places

    def target_locations(self, request: SearchRequest) -> Tuple[List[str], bool]:
        """Return the query strings to geocode and whether this is a fan-out."""
        country = self.settings.country
        if request.country_wide:
            return [f"{city}, {country}" for city in self.settings.anchor_cities], True
        if request.postcode:
            return [f"{request.postcode}, {country}"], False
        return [request.location], False

    def run(self, request: SearchRequest) -> SearchOutcome:
        locations, fan_out = self.target_locations(request)
        place_type = map_category(request.category)
        outcome = SearchOutcome()

        logger.info(
            "Searching type=%s radius=%d across %d location(s)", place_type, request.radius, len(locations)
        )

        candidates: List[CandidatePlace] = []
        for location in locations:
            try:
                coordinates = self.places.geocode(
                    location, self.settings.google_api_key, timeout=self.settings.request_timeout
                )
            except google_places.GeocodingError as exc:
                if not fan_out:
                    raise
                logger.warning("Skipping %s: %s", location, exc)
                outcome.skipped_locations.append(location)
                continue

            logger.info("Geocoded %s to %.6f,%.6f", location, coordinates.lat, coordinates.lng)
            found = self.places.nearby_search(
                coordinates,
                request.radius,
                place_type,
                self.settings.google_api_key,
                max_radius=self.settings.max_radius_meters,
                timeout=self.settings.request_timeout,
            )
            outcome.searched_locations.append(location)
            candidates.extend(c for c in found if self.passes_filter(c))

        unique = self.deduplicate(candidates)
        logger.info("Kept %d unique candidates out of %d", len(unique), len(candidates))

        for candidate in unique:
            if self.settings.enrich_details:
                candidate = self.places.enrich_candidate(
                    candidate, self.settings.google_api_key, timeout=self.settings.request_timeout
                )
            candidate.postcode = request.postcode or extract_postcode(candidate.address)
            outcome.businesses.append(self.upsert(candidate))

        logger.info("Search completed: %d businesses stored", outcome.total_found)
        return outcome

    def passes_filter(self, candidate: CandidatePlace) -> bool:
        """Keep rated places at or below the rating ceiling with enough reviews."""
        if candidate.rating is None or candidate.review_count is None:
            return False
        return candidate.rating <= self.settings.max_rating and candidate.review_count >= self.settings.min_reviews

    @staticmethod
    def deduplicate(candidates: List[CandidatePlace]) -> List[CandidatePlace]:
        seen = set()
        unique = []
        for candidate in candidates:
            if candidate.place_id in seen:
                continue
            seen.add(candidate.place_id)
            unique.append(candidate)
        return unique

    def upsert(self, candidate: CandidatePlace) -> BusinessRecord:
        row = to_business_row(candidate)
        existing = self.store.find_business_by_place_id(candidate.place_id)
        if existing is None:
            record = self.store.insert_business(row)
            logger.info("Created new business %s", record.name)
        else:
            record = self.store.update_business(existing.id, row)
            logger.info("Updated existing business %s", record.name)
        return record


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None

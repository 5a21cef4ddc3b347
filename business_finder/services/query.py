"""Read-side filtering over stored businesses."""

import logging
import math
from typing import Any, Dict, Optional, Tuple

from business_finder.core import db
from business_finder.core.config import Settings
from business_finder.core.errors import BusinessNotFound
from business_finder.models import BusinessFilters, BusinessPage, BusinessRecord

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0
LOW_RATED_BUCKET = "low"


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def bounding_box(lat: float, lng: float, radius_km: float) -> Tuple[float, float, float, float]:
    """Return ``(min_lat, min_lng, max_lat, max_lng)`` enclosing the circle.

    Uses the same sphere as :func:`haversine_km`, with the longitude
    half-width taken at the circle's widest point rather than at ``lat``.
    """
    angular = radius_km / EARTH_RADIUS_KM
    d_lat = math.degrees(angular)
    ratio = math.sin(min(angular, math.pi / 2)) / max(math.cos(math.radians(lat)), 1e-12)
    d_lng = 180.0 if ratio >= 1 else math.degrees(math.asin(ratio))
    return lat - d_lat, lng - d_lng, lat + d_lat, lng + d_lng


class BusinessQueryService:
    """List, look up and summarise stored businesses."""

    def __init__(self, settings: Settings, store: Any = db) -> None:
        self.settings = settings
        self.store = store

    def list_businesses(self, filters: BusinessFilters, page: int = 1) -> BusinessPage:
        """One page of matching businesses, best rated first.

        Without a radius the store pages and counts. With one, rows inside the
        bounding box are fetched and the exact distance check runs here.
        """
        max_rating: Optional[float] = None
        min_reviews: Optional[int] = None
        if filters.rating_bucket == LOW_RATED_BUCKET:
            max_rating = self.settings.low_rating_ceiling
            min_reviews = self.settings.low_rating_review_floor

        page = max(page, 1)
        per_page = self.settings.page_size
        start = (page - 1) * per_page
        scalar = dict(
            category=filters.category,
            postcode=filters.postcode,
            max_rating=max_rating,
            min_reviews=min_reviews,
        )

        if filters.center is None or filters.radius_km is None:
            total = self.store.count_businesses(bbox=None, **scalar)
            items = self.store.select_businesses(bbox=None, limit=per_page, offset=start, **scalar)
            return BusinessPage(items=items, total=total, page=page, per_page=per_page)

        lat, lng = filters.center
        records = self.store.select_businesses(bbox=bounding_box(lat, lng, filters.radius_km), **scalar)
        records = [r for r in records if haversine_km(lat, lng, r.latitude, r.longitude) <= filters.radius_km]
        logger.debug("Listing page %d of %d businesses within %.3f km", page, len(records), filters.radius_km)
        return BusinessPage(items=records[start:start + per_page], total=len(records), page=page, per_page=per_page)

    def total_businesses(self) -> int:
        return self.store.count_businesses()

    def get_business(self, business_id: int) -> BusinessRecord:
        record = self.store.get_business(business_id)
        if record is None:
            raise BusinessNotFound(business_id)
        return record

    def stats(self) -> Dict[str, Any]:
        return self.store.business_stats()

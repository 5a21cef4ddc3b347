"""Application configuration helpers."""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Tuple

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_ANCHOR_CITIES: Tuple[str, ...] = (
    "Sydney",
    "Melbourne",
    "Brisbane",
    "Perth",
    "Adelaide",
    "Gold Coast",
    "Canberra",
    "Hobart",
)

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    google_api_key: str
    database_url: str
    server_port: int = 8080
    debug: bool = False
    request_timeout: float = 10.0
    max_radius_meters: int = 50000
    max_rating: float = 4.0
    min_reviews: int = 10
    country: str = "Australia"
    anchor_cities: Tuple[str, ...] = DEFAULT_ANCHOR_CITIES
    enrich_details: bool = True
    page_size: int = 20
    low_rating_ceiling: float = 4.0
    low_rating_review_floor: int = 10


def _parse_cities(raw: str) -> Tuple[str, ...]:
    cities = tuple(part.strip() for part in raw.split(",") if part.strip())
    return cities or DEFAULT_ANCHOR_CITIES


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from environment variables with sensible defaults."""
    load_dotenv()

    google_api_key = os.getenv("GOOGLE_API_KEY", "")
    database_url = os.getenv("DATABASE_URL", "")
    server_port = int(os.getenv("PORT", "8080"))
    debug = os.getenv("APP_DEBUG", "false").lower() in _TRUTHY
    request_timeout = float(os.getenv("GOOGLE_REQUEST_TIMEOUT", "10"))
    max_radius_meters = int(os.getenv("SEARCH_MAX_RADIUS", "50000"))
    max_rating = float(os.getenv("SEARCH_MAX_RATING", "4.0"))
    min_reviews = int(os.getenv("SEARCH_MIN_REVIEWS", "10"))
    country = os.getenv("SEARCH_COUNTRY", "Australia").strip() or "Australia"
    anchor_cities = _parse_cities(os.getenv("SEARCH_ANCHOR_CITIES", ""))
    enrich_details = os.getenv("SEARCH_ENRICH_DETAILS", "true").lower() in _TRUTHY
    page_size = int(os.getenv("LIST_PAGE_SIZE", "20"))
    low_rating_ceiling = float(os.getenv("LOW_RATING_CEILING", "4.0"))
    low_rating_review_floor = int(os.getenv("LOW_RATING_REVIEW_FLOOR", "10"))

    if not database_url:
        logger.warning("DATABASE_URL is not set; database operations will fail.")
    if not google_api_key:
        logger.warning("GOOGLE_API_KEY is not configured; Google API requests will fail.")

    return Settings(
        google_api_key=google_api_key,
        database_url=database_url,
        server_port=server_port,
        debug=debug,
        request_timeout=request_timeout,
        max_radius_meters=max_radius_meters,
        max_rating=max_rating,
        min_reviews=min_reviews,
        country=country,
        anchor_cities=anchor_cities,
        enrich_details=enrich_details,
        page_size=page_size,
        low_rating_ceiling=low_rating_ceiling,
        low_rating_review_floor=low_rating_review_floor,
    )

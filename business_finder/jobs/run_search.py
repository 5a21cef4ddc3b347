"""CLI job to run one business search and persist the results."""

import argparse
import logging
from typing import Optional

from business_finder.core.config import get_settings
from business_finder.core.db import init_pool, init_schema
from business_finder.models import SearchOutcome
from business_finder.services.reconcile import SearchReconciler, parse_search_params

logger = logging.getLogger(__name__)


def run_search_job(
    *,
    category: str,
    radius: int,
    location: Optional[str] = None,
    postcode: Optional[str] = None,
    country: Optional[str] = None,
    create_schema: bool = False,
) -> SearchOutcome:
    settings = get_settings()
    if not settings.google_api_key:
        raise RuntimeError("GOOGLE_API_KEY is required")

    search = parse_search_params(
        {"category": category, "radius": radius, "location": location, "postcode": postcode, "country": country},
        settings,
    )

    init_pool()
    if create_schema:
        init_schema()

    outcome = SearchReconciler(settings).run(search)
    if outcome.skipped_locations:
        logger.warning("Skipped locations that failed to geocode: %s", ", ".join(outcome.skipped_locations))
    logger.info("Completed run: businesses_stored=%d", outcome.total_found)
    return outcome


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Search Google Places and store matching businesses")
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--location", dest="location", help="Free-text location, e.g. 'Newtown NSW'")
    target.add_argument("--postcode", dest="postcode", help="Four digit postcode")
    target.add_argument(
        "--country",
        dest="country",
        help="Search the configured country through its anchor cities (country name or 'true')",
    )
    parser.add_argument("--category", dest="category", required=True, help="Business category, e.g. 'hotel'")
    parser.add_argument("--radius", dest="radius", type=int, default=5000, help="Search radius in metres")
    parser.add_argument("--create-schema", dest="create_schema", action="store_true", help="Create the table first")
    return parser


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s - %(message)s")
    parser = build_parser()
    args = parser.parse_args()

    run_search_job(
        category=args.category,
        radius=args.radius,
        location=args.location,
        postcode=args.postcode,
        country=args.country,
        create_schema=args.create_schema,
    )


if __name__ == "__main__":
    main()

"""HTTP entrypoint exposing business search, listing and lookup."""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from business_finder.core.config import get_settings
from business_finder.core.errors import BusinessNotFound, ValidationError
from business_finder.models import BusinessFilters
from business_finder.services.query import LOW_RATED_BUCKET, BusinessQueryService
from business_finder.services.reconcile import SearchReconciler, parse_search_params
from business_finder.vendors import google_places

# ---------- Logging ----------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)

# ---------- App ----------
app = Flask(__name__)


def _reconciler() -> SearchReconciler:
    return SearchReconciler(get_settings())


def _query_service() -> BusinessQueryService:
    return BusinessQueryService(get_settings())


# ---------- Routes ----------


@app.get("/")
def root() -> Any:
    """Simple root to avoid 404 on GET /"""
    return "ok", 200


@app.get("/healthz")
def healthcheck() -> Any:
    """Lightweight health endpoint; reads settings only, never touches the database."""
    settings = get_settings()
    return (
        jsonify(
            {
                "status": "ok",
                "port": settings.server_port,
                "revision": os.getenv("K_REVISION", "unknown"),
            }
        ),
        200,
    )


@app.get("/businesses/search")
def search_businesses() -> Any:
    """
    Search Google for businesses and upsert them.
    Exactly one of: location, postcode, country. Required: radius (metres), category.
    """
    search = parse_search_params(request.args, get_settings())
    logger.info(
        "Searching for businesses location=%s postcode=%s country_wide=%s radius=%d category=%s",
        search.location,
        search.postcode,
        search.country_wide,
        search.radius,
        search.category,
    )

    try:
        outcome = _reconciler().run(search)
    except google_places.GeocodingError as exc:
        logger.warning("Search aborted, location could not be geocoded: %s", exc)
        return (
            jsonify(
                {
                    "message": "The requested location could not be found.",
                    "error": _public_error(exc, "Geocoding failed"),
                }
            ),
            422,
        )

    return (
        jsonify(
            {
                "message": "Search completed successfully",
                "total_found": outcome.total_found,
                "data": [business.to_dict() for business in outcome.businesses],
            }
        ),
        200,
    )


@app.get("/businesses")
def list_businesses() -> Any:
    """Stored businesses filtered by category, postcode, lat/lng/radius (metres) and rating bucket."""
    filters = _parse_filters(request.args)
    page = _optional_number(request.args, "page", int) or 1

    service = _query_service()
    result = service.list_businesses(filters, page=page)
    return (
        jsonify(
            {
                "debug_info": {
                    "total_businesses_in_db": service.total_businesses(),
                    "filtered_results": result.total,
                    "filters_applied": filters.applied(),
                },
                "pagination": result.to_dict(),
            }
        ),
        200,
    )


@app.get("/businesses/stats")
def business_stats() -> Any:
    return jsonify(_query_service().stats()), 200


@app.get("/businesses/test-api")
def check_api() -> Any:
    """Check that the configured Google key can geocode."""
    settings = get_settings()
    result = google_places.check_connection(settings.google_api_key, timeout=settings.request_timeout)
    return (
        jsonify(
            {
                "google_api_test": result,
                "api_key_configured": bool(settings.google_api_key),
                "api_key_length": len(settings.google_api_key),
            }
        ),
        200,
    )


@app.get("/businesses/<int:business_id>")
def show_business(business_id: int) -> Any:
    return jsonify(_query_service().get_business(business_id).to_dict()), 200


# ---------- Error handlers ----------


@app.errorhandler(ValidationError)
def handle_validation_error(exc: ValidationError) -> Any:
    return jsonify({"message": "The given data was invalid.", "errors": exc.errors}), 400


@app.errorhandler(BusinessNotFound)
def handle_not_found(exc: BusinessNotFound) -> Any:
    return jsonify({"message": "Business not found."}), 404


@app.errorhandler(Exception)
def handle_unexpected(exc: Exception) -> Any:
    if isinstance(exc, HTTPException):
        return exc
    logger.exception("Request %s %s failed: %s", request.method, request.path, exc)
    return (
        jsonify(
            {
                "message": "An error occurred while processing the request.",
                "error": _public_error(exc, "Internal server error"),
            }
        ),
        500,
    )


# ---------- Internals ----------


def _public_error(exc: Exception, fallback: str) -> str:
    return str(exc) if get_settings().debug else fallback


def _optional_number(args: Any, name: str, cast: Any) -> Optional[Any]:
    raw = args.get(name)
    if raw is None or str(raw).strip() == "":
        return None
    try:
        return cast(str(raw).strip())
    except ValueError:
        raise ValidationError({name: f"The {name} must be numeric."}) from None


def _parse_filters(args: Any) -> BusinessFilters:
    lat = _optional_number(args, "lat", float)
    lng = _optional_number(args, "lng", float)
    radius = _optional_number(args, "radius", float)

    center = None
    radius_km = None
    if lat is not None and lng is not None and radius is not None:
        errors: Dict[str, str] = {}
        if not -90 <= lat <= 90:
            errors["lat"] = "The lat must be between -90 and 90."
        if not -180 <= lng <= 180:
            errors["lng"] = "The lng must be between -180 and 180."
        if radius <= 0:
            errors["radius"] = "The radius must be positive."
        if errors:
            raise ValidationError(errors)
        center = (lat, lng)
        radius_km = radius / 1000

    rating = (args.get("rating") or "").strip().lower() or None
    if rating is not None and rating != LOW_RATED_BUCKET:
        raise ValidationError({"rating": f"The rating bucket must be '{LOW_RATED_BUCKET}'."})

    return BusinessFilters(
        category=(args.get("category") or "").strip() or None,
        postcode=(args.get("postcode") or "").strip() or None,
        center=center,
        radius_km=radius_km,
        rating_bucket=rating,
    )


def main() -> None:
    """Bind on 0.0.0.0 using PORT (defaults to 8080)."""
    settings = get_settings()
    logger.info("[BOOT] Binding on 0.0.0.0:%d", settings.server_port)
    app.run(host="0.0.0.0", port=settings.server_port, debug=settings.debug)


if __name__ == "__main__":
    main()

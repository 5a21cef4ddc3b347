"""Database helpers for the businesses table."""

import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Tuple

from psycopg2 import extras, pool

from business_finder.core.config import get_settings
from business_finder.core.errors import BusinessNotFound
from business_finder.models import BusinessRecord

logger = logging.getLogger(__name__)

_connection_pool: Optional[pool.SimpleConnectionPool] = None

_WRITABLE_COLUMNS = (
    "place_id",
    "name",
    "address",
    "postcode",
    "phone",
    "website",
    "latitude",
    "longitude",
    "category",
    "google_rating",
    "user_ratings_total",
)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS businesses (
    id BIGSERIAL PRIMARY KEY,
    place_id VARCHAR(255) NOT NULL UNIQUE,
    name VARCHAR(255) NOT NULL,
    category TEXT,
    address TEXT NOT NULL,
    postcode VARCHAR(10),
    phone VARCHAR(50),
    website VARCHAR(255),
    email VARCHAR(255),
    google_rating NUMERIC(2, 1),
    user_ratings_total INTEGER,
    latitude NUMERIC(10, 8) NOT NULL,
    longitude NUMERIC(11, 8) NOT NULL,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);
CREATE INDEX IF NOT EXISTS businesses_lat_lng_idx ON businesses (latitude, longitude);
CREATE INDEX IF NOT EXISTS businesses_category_idx ON businesses (category);
"""


def init_pool(minconn: int = 1, maxconn: int = 5) -> pool.SimpleConnectionPool:
    """Initialise and return the shared connection pool."""
    global _connection_pool
    if _connection_pool is None:
        settings = get_settings()
        if not settings.database_url:
            raise RuntimeError("DATABASE_URL is required for database connections")
        _connection_pool = pool.SimpleConnectionPool(
            minconn,
            maxconn,
            dsn=settings.database_url,
            connect_timeout=10,
        )
        logger.info("Database connection pool initialised")
    return _connection_pool


@contextmanager
def get_connection():
    """Context manager yielding a pooled connection."""
    pg_pool = init_pool()
    conn = pg_pool.getconn()
    try:
        yield conn
    finally:
        pg_pool.putconn(conn)


def init_schema() -> None:
    """Create the businesses table and its indexes when missing."""
    with get_connection() as conn:
        with conn.cursor() as cur:
            cur.execute(_SCHEMA)
        conn.commit()
    logger.info("Database schema ensured")


def _prepare_params(row: Dict[str, Any]) -> Dict[str, Any]:
    params = {column: row.get(column) for column in _WRITABLE_COLUMNS}
    if params["address"] is None:
        params["address"] = ""
    if not params["place_id"] or not params["name"]:
        raise ValueError("place_id and name are required for a business row")
    if params["latitude"] is None or params["longitude"] is None:
        raise ValueError("latitude and longitude are required for a business row")
    return params


_INSERT_BUSINESS = """
INSERT INTO businesses (
    place_id,
    name,
    address,
    postcode,
    phone,
    website,
    latitude,
    longitude,
    category,
    google_rating,
    user_ratings_total,
    created_at,
    updated_at
) VALUES (
    %(place_id)s,
    %(name)s,
    %(address)s,
    %(postcode)s,
    %(phone)s,
    %(website)s,
    %(latitude)s,
    %(longitude)s,
    %(category)s,
    %(google_rating)s,
    %(user_ratings_total)s,
    NOW(),
    NOW()
)
ON CONFLICT (place_id) DO UPDATE SET
    name = EXCLUDED.name,
    address = EXCLUDED.address,
    postcode = EXCLUDED.postcode,
    phone = EXCLUDED.phone,
    website = EXCLUDED.website,
    latitude = EXCLUDED.latitude,
    longitude = EXCLUDED.longitude,
    category = EXCLUDED.category,
    google_rating = EXCLUDED.google_rating,
    user_ratings_total = EXCLUDED.user_ratings_total,
    updated_at = NOW()
RETURNING *;
"""

_UPDATE_BUSINESS = """
UPDATE businesses SET
    place_id = %(place_id)s,
    name = %(name)s,
    address = %(address)s,
    postcode = %(postcode)s,
    phone = %(phone)s,
    website = %(website)s,
    latitude = %(latitude)s,
    longitude = %(longitude)s,
    category = %(category)s,
    google_rating = %(google_rating)s,
    user_ratings_total = %(user_ratings_total)s,
    updated_at = NOW()
WHERE id = %(id)s
RETURNING *;
"""


def _fetch_one(sql: str, params: Dict[str, Any], *, commit: bool = False) -> Optional[Dict[str, Any]]:
    with get_connection() as conn:
        with conn.cursor(cursor_factory=extras.RealDictCursor) as cur:
            cur.execute(sql, params)
            row = cur.fetchone()
        if commit:
            conn.commit()
    return row


def _fetch_all(sql: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
    with get_connection() as conn:
        with conn.cursor(cursor_factory=extras.RealDictCursor) as cur:
            cur.execute(sql, params)
            return list(cur.fetchall())


def find_business_by_place_id(place_id: str) -> Optional[BusinessRecord]:
    row = _fetch_one("SELECT * FROM businesses WHERE place_id = %(place_id)s;", {"place_id": place_id})
    return BusinessRecord.from_row(row) if row else None


def get_business(business_id: int) -> Optional[BusinessRecord]:
    row = _fetch_one("SELECT * FROM businesses WHERE id = %(id)s;", {"id": business_id})
    return BusinessRecord.from_row(row) if row else None


def insert_business(row: Dict[str, Any]) -> BusinessRecord:
    """Insert a new business and return the stored record.

    A concurrent insert of the same ``place_id`` turns into an overwrite.
    """
    params = _prepare_params(row)
    stored = _fetch_one(_INSERT_BUSINESS, params, commit=True)
    logger.debug("Inserted business %s", params["place_id"])
    return BusinessRecord.from_row(stored)


def update_business(business_id: int, row: Dict[str, Any]) -> BusinessRecord:
    """Overwrite every writable column of an existing business."""
    params = _prepare_params(row)
    params["id"] = business_id
    stored = _fetch_one(_UPDATE_BUSINESS, params, commit=True)
    if stored is None:
        raise BusinessNotFound(business_id)
    logger.debug("Updated business %s", params["place_id"])
    return BusinessRecord.from_row(stored)


def _filter_clauses(
    category: Optional[str],
    postcode: Optional[str],
    max_rating: Optional[float],
    min_reviews: Optional[int],
    bbox: Optional[Tuple[float, float, float, float]],
) -> Tuple[str, Dict[str, Any]]:
    clauses: List[str] = []
    params: Dict[str, Any] = {}

    if category:
        clauses.append("category ILIKE %(category)s")
        params["category"] = f"%{category}%"
    if postcode:
        clauses.append("(postcode = %(postcode)s OR address LIKE %(postcode_like)s)")
        params["postcode"] = postcode
        params["postcode_like"] = f"%{postcode}%"
    if max_rating is not None:
        clauses.append("google_rating < %(max_rating)s")
        params["max_rating"] = max_rating
    if min_reviews is not None:
        clauses.append("user_ratings_total > %(min_reviews)s")
        params["min_reviews"] = min_reviews
    if bbox is not None:
        clauses.append("latitude BETWEEN %(min_lat)s AND %(max_lat)s")
        clauses.append("longitude BETWEEN %(min_lng)s AND %(max_lng)s")
        params["min_lat"], params["min_lng"], params["max_lat"], params["max_lng"] = bbox

    where = " WHERE " + " AND ".join(clauses) if clauses else ""
    return where, params


def select_businesses(
    *,
    category: Optional[str] = None,
    postcode: Optional[str] = None,
    max_rating: Optional[float] = None,
    min_reviews: Optional[int] = None,
    bbox: Optional[Tuple[float, float, float, float]] = None,
    limit: Optional[int] = None,
    offset: int = 0,
) -> List[BusinessRecord]:
    """Return businesses matching the scalar filters, best rated first.

    ``max_rating`` and ``min_reviews`` are exclusive bounds. ``bbox`` is
    ``(min_lat, min_lng, max_lat, max_lng)``. Without ``limit`` every
    matching row is returned.
    """
    where, params = _filter_clauses(category, postcode, max_rating, min_reviews, bbox)
    sql = "SELECT * FROM businesses" + where + " ORDER BY google_rating DESC NULLS LAST, id ASC"
    if limit is not None:
        sql += " LIMIT %(limit)s OFFSET %(offset)s"
        params["limit"] = limit
        params["offset"] = offset
    sql += ";"

    return [BusinessRecord.from_row(row) for row in _fetch_all(sql, params)]


def count_businesses(
    *,
    category: Optional[str] = None,
    postcode: Optional[str] = None,
    max_rating: Optional[float] = None,
    min_reviews: Optional[int] = None,
    bbox: Optional[Tuple[float, float, float, float]] = None,
) -> int:
    where, params = _filter_clauses(category, postcode, max_rating, min_reviews, bbox)
    row = _fetch_one("SELECT COUNT(*) AS total FROM businesses" + where + ";", params)
    return int(row["total"]) if row else 0


def business_stats(top: int = 10, sample: int = 5) -> Dict[str, Any]:
    """Row count, most common category strings and a few sample rows."""
    with get_connection() as conn:
        with conn.cursor(cursor_factory=extras.RealDictCursor) as cur:
            cur.execute("SELECT COUNT(*) AS total FROM businesses;")
            total = cur.fetchone()["total"]
            cur.execute(
                "SELECT category, COUNT(*) AS count FROM businesses"
                " GROUP BY category ORDER BY count DESC LIMIT %(top)s;",
                {"top": top},
            )
            categories = [dict(row) for row in cur.fetchall()]
            cur.execute(
                "SELECT id, name, category, address FROM businesses ORDER BY id LIMIT %(sample)s;",
                {"sample": sample},
            )
            samples = [dict(row) for row in cur.fetchall()]
    return {"total_businesses": total, "top_categories": categories, "sample_businesses": samples}

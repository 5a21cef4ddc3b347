"""Core data models shared by the search and query flows."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple


@dataclass(slots=True, frozen=True)
class Coordinates:
    """A geocoded point. ``formatted_address`` is advisory only."""

    lat: float
    lng: float
    formatted_address: Optional[str] = None


@dataclass(slots=True)
class CandidatePlace:
    """Normalized snapshot of a place returned by the nearby search."""

    place_id: str
    name: str
    latitude: float
    longitude: float
    types: List[str] = field(default_factory=list)
    address: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    rating: Optional[float] = None
    review_count: Optional[int] = None
    postcode: Optional[str] = None


@dataclass(slots=True)
class BusinessRecord:
    """A row of the ``businesses`` table."""

    id: int
    place_id: str
    name: str
    address: str
    latitude: float
    longitude: float
    postcode: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    email: Optional[str] = None
    category: Optional[str] = None
    google_rating: Optional[float] = None
    user_ratings_total: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "BusinessRecord":
        return cls(
            id=row["id"],
            place_id=row["place_id"],
            name=row["name"],
            address=row.get("address") or "",
            latitude=_to_float(row["latitude"]),
            longitude=_to_float(row["longitude"]),
            postcode=row.get("postcode"),
            phone=row.get("phone"),
            website=row.get("website"),
            email=row.get("email"),
            category=row.get("category"),
            google_rating=_to_float(row.get("google_rating")),
            user_ratings_total=row.get("user_ratings_total"),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "place_id": self.place_id,
            "name": self.name,
            "address": self.address,
            "postcode": self.postcode,
            "phone": self.phone,
            "website": self.website,
            "email": self.email,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "category": self.category,
            "google_rating": self.google_rating,
            "user_ratings_total": self.user_ratings_total,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass(slots=True, frozen=True)
class SearchRequest:
    """A validated search. Exactly one of location, postcode or country_wide is set."""

    radius: int
    category: str
    location: Optional[str] = None
    postcode: Optional[str] = None
    country_wide: bool = False


@dataclass(slots=True)
class SearchOutcome:
    businesses: List[BusinessRecord] = field(default_factory=list)
    searched_locations: List[str] = field(default_factory=list)
    skipped_locations: List[str] = field(default_factory=list)

    @property
    def total_found(self) -> int:
        return len(self.businesses)


@dataclass(slots=True, frozen=True)
class BusinessFilters:
    category: Optional[str] = None
    postcode: Optional[str] = None
    center: Optional[Tuple[float, float]] = None
    radius_km: Optional[float] = None
    rating_bucket: Optional[str] = None

    def applied(self) -> Dict[str, Any]:
        applied: Dict[str, Any] = {}
        if self.category:
            applied["category"] = self.category
        if self.postcode:
            applied["postcode"] = self.postcode
        if self.center is not None and self.radius_km is not None:
            applied["lat"], applied["lng"] = self.center
            applied["radius_km"] = self.radius_km
        if self.rating_bucket:
            applied["rating"] = self.rating_bucket
        return applied


@dataclass(slots=True)
class BusinessPage:
    items: List[BusinessRecord]
    total: int
    page: int
    per_page: int

    @property
    def last_page(self) -> int:
        if self.total == 0:
            return 1
        return (self.total + self.per_page - 1) // self.per_page

    def to_dict(self) -> Dict[str, Any]:
        return {
            "current_page": self.page,
            "per_page": self.per_page,
            "total": self.total,
            "last_page": self.last_page,
            "data": [item.to_dict() for item in self.items],
        }


def _to_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    return float(value)

"""Canonical data models shared by the clinic ingestion pipeline."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

UNKNOWN_NAME = "Unknown Clinic"
UNKNOWN_ADDRESS = "Unknown Address"
UNKNOWN_CITY = "Unknown City"
UNKNOWN_COUNTRY = "Unknown Country"

DAY_NAMES = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


class ThirdPartySource(str, Enum):
    """Tag identifying which adapter produced a record."""

    YELP = "yelp"
    HEALTHGRADES = "healthgrades"
    GOOGLE_PLACES = "google_places"
    SAMPLE = "sample"


@dataclass(slots=True)
class Review:
    """A single review as supplied by a provider or generated for seeding."""

    rating: float
    time: Optional[datetime] = None
    author_name: Optional[str] = None
    author_url: Optional[str] = None
    text: str = ""
    relative_time: Optional[str] = None

    @classmethod
    def from_google(cls, raw: Dict[str, Any]) -> "Review":
        """Build a review from a Google Places ``reviews[]`` entry (epoch-second ``time``)."""
        timestamp = raw.get("time")
        rating = raw.get("rating")
        if isinstance(rating, bool) or not isinstance(rating, (int, float)) or not math.isfinite(rating):
            rating = 0
        when = None
        if isinstance(timestamp, (int, float)) and not isinstance(timestamp, bool):
            try:
                when = datetime.fromtimestamp(timestamp, tz=timezone.utc)
            except (OverflowError, OSError, ValueError):
                when = None
        return cls(
            rating=rating,
            time=when,
            author_name=raw.get("author_name"),
            author_url=raw.get("author_url"),
            text=raw.get("text") or "",
            relative_time=raw.get("relative_time_description"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "author_name": self.author_name,
            "author_url": self.author_url,
            "rating": self.rating,
            "text": self.text,
            "time": self.time.isoformat() if self.time else None,
            "relative_time": self.relative_time,
        }


@dataclass(slots=True)
class ReviewStats:
    """Aggregate summary of a review collection; recomputed, never patched."""

    total_reviews: int = 0
    average_rating: float = 0.0
    rating_distribution: Dict[int, int] = field(default_factory=lambda: {n: 0 for n in range(1, 6)})
    recent_reviews: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class ClinicRecord:
    """Provider-agnostic clinic listing produced by a provider adapter."""

    id: str
    third_party_source: ThirdPartySource
    name: str = UNKNOWN_NAME
    address: str = UNKNOWN_ADDRESS
    city: str = UNKNOWN_CITY
    country: str = UNKNOWN_COUNTRY
    state: Optional[str] = None
    postal_code: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    rating: float = 0
    review_count: int = 0
    phone: Optional[str] = None
    website: Optional[str] = None
    email: Optional[str] = None
    description: Optional[str] = None
    clinic_type: str = "DENTAL"
    services: List[str] = field(default_factory=list)
    specialties: List[str] = field(default_factory=list)
    languages: List[str] = field(default_factory=list)
    operating_hours: Optional[Dict[str, str]] = None
    social_media: Dict[str, str] = field(default_factory=dict)
    reviews: List[Review] = field(default_factory=list)
    third_party_data: Optional[Dict[str, Any]] = field(default=None, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["third_party_source"] = self.third_party_source.value
        data["reviews"] = [review.to_dict() for review in self.reviews]
        return data

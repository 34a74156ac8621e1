"""Adapter for Yelp Fusion business payloads."""

from typing import Any, Dict, List

from clinic_ingest.adapters.base import ProviderAdapter, mapping
from clinic_ingest.etl.hours import flatten_open_blocks, normalize_numeric_day_hours
from clinic_ingest.models import ThirdPartySource


def category_titles(categories: Any) -> List[str]:
    if not isinstance(categories, list):
        return []
    titles = []
    for category in categories:
        title = mapping(category).get("title")
        if isinstance(title, str) and title:
            titles.append(title)
    return titles


class YelpAdapter(ProviderAdapter):
    source = ThirdPartySource.YELP
    service_keywords = ("dental", "health", "medical")
    specialty_keywords = ("dental",)

    def read_listing(self, raw: Dict[str, Any]) -> Dict[str, Any]:
        location = mapping(raw.get("location"))
        coordinates = mapping(raw.get("coordinates"))
        return {
            "id": raw.get("id"),
            "name": raw.get("name"),
            "address": location.get("address1"),
            "city": location.get("city"),
            "state": location.get("state"),
            "country": location.get("country"),
            "postal_code": location.get("zip_code"),
            "latitude": coordinates.get("latitude"),
            "longitude": coordinates.get("longitude"),
            "rating": raw.get("rating"),
            "review_count": raw.get("review_count"),
            "phone": raw.get("phone"),
            "website": raw.get("url"),
        }

    def read_detail(self, raw: Dict[str, Any]) -> Dict[str, Any]:
        titles = category_titles(raw.get("categories"))
        hours = raw.get("hours")
        return {
            "description": ", ".join(titles),
            "services": self.extract_services(titles),
            "specialties": self.extract_specialties(titles),
            "operating_hours": (
                normalize_numeric_day_hours(flatten_open_blocks(hours)) if isinstance(hours, list) else None
            ),
            "social_media": {"yelp": raw.get("url")},
        }

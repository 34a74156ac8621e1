"""Adapter for Google Places text-search and place-details payloads."""

from typing import Any, Dict

from clinic_ingest.adapters.base import ProviderAdapter, mapping
from clinic_ingest.etl.hours import normalize_numeric_day_hours, periods_to_day_entries
from clinic_ingest.etl.transform import parse_address_components
from clinic_ingest.models import Review, ThirdPartySource


class GooglePlacesAdapter(ProviderAdapter):
    source = ThirdPartySource.GOOGLE_PLACES
    service_keywords = ("dentist", "dental", "health", "doctor")
    specialty_keywords = ("dentist", "dental")

    def read_listing(self, raw: Dict[str, Any]) -> Dict[str, Any]:
        location = mapping(mapping(raw.get("geometry")).get("location"))
        return {
            "id": raw.get("place_id"),
            "name": raw.get("name"),
            "address": raw.get("formatted_address"),
            "latitude": location.get("lat"),
            "longitude": location.get("lng"),
            "rating": raw.get("rating"),
            "review_count": raw.get("user_ratings_total"),
        }

    def read_detail(self, raw: Dict[str, Any]) -> Dict[str, Any]:
        fields: Dict[str, Any] = parse_address_components(raw.get("address_components"))
        types = raw.get("types")
        periods = mapping(raw.get("opening_hours")).get("periods")
        reviews = raw.get("reviews") if isinstance(raw.get("reviews"), list) else []
        fields.update(
            {
                "phone": raw.get("formatted_phone_number"),
                "website": raw.get("website"),
                "services": self.extract_services(types),
                "specialties": self.extract_specialties(types),
                "operating_hours": (
                    normalize_numeric_day_hours(periods_to_day_entries(periods)) if isinstance(periods, list) else None
                ),
                "social_media": {"google": raw.get("url")},
                "reviews": [Review.from_google(review) for review in reviews if isinstance(review, dict)],
            }
        )
        return fields

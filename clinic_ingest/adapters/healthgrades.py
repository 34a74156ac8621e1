"""Adapter for Healthgrades provider payloads."""

from typing import Any, Dict

from clinic_ingest.adapters.base import ProviderAdapter, mapping, string_list
from clinic_ingest.etl.hours import normalize_named_day_hours
from clinic_ingest.models import ThirdPartySource


class HealthgradesAdapter(ProviderAdapter):
    source = ThirdPartySource.HEALTHGRADES
    service_keywords = ("dental", "oral", "tooth")

    def extract_specialties(self, values):
        # Healthgrades specialties are already clinical; keep them all.
        return string_list(values)

    def read_listing(self, raw: Dict[str, Any]) -> Dict[str, Any]:
        address = mapping(raw.get("address"))
        coordinates = mapping(raw.get("coordinates"))
        return {
            "id": raw.get("id"),
            "name": raw.get("name"),
            "address": address.get("street"),
            "city": address.get("city"),
            "state": address.get("state"),
            "country": address.get("country"),
            "postal_code": address.get("zip"),
            "latitude": coordinates.get("latitude"),
            "longitude": coordinates.get("longitude"),
            "rating": raw.get("rating"),
            "review_count": raw.get("review_count"),
            "phone": raw.get("phone"),
            "website": raw.get("website"),
            "specialties": self.extract_specialties(raw.get("specialties")),
        }

    def read_detail(self, raw: Dict[str, Any]) -> Dict[str, Any]:
        specialties = string_list(raw.get("specialties"))
        return {
            "description": raw.get("bio") or ", ".join(specialties),
            "email": raw.get("email"),
            "services": self.extract_services(specialties),
            "languages": string_list(raw.get("languages")),
            "operating_hours": normalize_named_day_hours(raw.get("hours")),
            "social_media": {"healthgrades": raw.get("profile_url")},
        }

"""Shared interface for provider adapters.

Each adapter reads its provider's raw payload into a flat dict of candidate
values (``read_listing`` / ``read_detail``) and hands it to ``canonicalize``,
the single place where every canonical field receives its fallback.
"""

import logging
import math
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, Tuple

from clinic_ingest.models import (
    UNKNOWN_ADDRESS,
    UNKNOWN_CITY,
    UNKNOWN_COUNTRY,
    UNKNOWN_NAME,
    ClinicRecord,
    ThirdPartySource,
)

logger = logging.getLogger(__name__)


def filter_by_keywords(values: Iterable[Any], keywords: Tuple[str, ...]) -> List[str]:
    """Keep strings containing any keyword, case-insensitively, in source order."""
    matched = []
    if not isinstance(values, (list, tuple)):
        return matched
    for value in values:
        if not isinstance(value, str):
            continue
        lowered = value.lower()
        if any(keyword in lowered for keyword in keywords):
            matched.append(value)
    return matched


def text_or_none(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (dict, list)):
        return None
    value_str = str(value).strip()
    return value_str or None


def number_or_none(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def string_list(values: Any) -> List[str]:
    if not isinstance(values, list):
        return []
    return [value for value in values if isinstance(value, str) and value.strip()]


def mapping(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


class ProviderAdapter(ABC):
    """Converts one provider's payloads into ``ClinicRecord`` objects."""

    source: ThirdPartySource
    service_keywords: Tuple[str, ...] = ()
    specialty_keywords: Tuple[str, ...] = ()

    def normalize(self, raw: Any) -> ClinicRecord:
        """Canonical record from a search/listing payload."""
        raw = mapping(raw)
        return self.canonicalize(self.read_listing(raw), raw)

    def normalize_detail(self, raw: Any) -> ClinicRecord:
        """Canonical record from a detail payload, including hours and profile links."""
        raw = mapping(raw)
        fields = self.read_listing(raw)
        fields.update(self.read_detail(raw))
        return self.canonicalize(fields, raw)

    def extract_services(self, values: Iterable[Any]) -> List[str]:
        return filter_by_keywords(values, self.service_keywords)

    def extract_specialties(self, values: Iterable[Any]) -> List[str]:
        return filter_by_keywords(values, self.specialty_keywords)

    @abstractmethod
    def read_listing(self, raw: Dict[str, Any]) -> Dict[str, Any]:
        """Candidate values present in both listing and detail payloads."""

    @abstractmethod
    def read_detail(self, raw: Dict[str, Any]) -> Dict[str, Any]:
        """Candidate values only detail payloads carry."""

    def canonicalize(self, fields: Dict[str, Any], raw: Dict[str, Any]) -> ClinicRecord:
        review_count = number_or_none(fields.get("review_count"))
        record = ClinicRecord(
            id=text_or_none(fields.get("id")) or "",
            third_party_source=self.source,
            name=text_or_none(fields.get("name")) or UNKNOWN_NAME,
            address=text_or_none(fields.get("address")) or UNKNOWN_ADDRESS,
            city=text_or_none(fields.get("city")) or UNKNOWN_CITY,
            country=text_or_none(fields.get("country")) or UNKNOWN_COUNTRY,
            state=text_or_none(fields.get("state")),
            postal_code=text_or_none(fields.get("postal_code")),
            latitude=number_or_none(fields.get("latitude")),
            longitude=number_or_none(fields.get("longitude")),
            rating=number_or_none(fields.get("rating")) or 0,
            review_count=int(review_count) if review_count else 0,
            phone=text_or_none(fields.get("phone")),
            website=text_or_none(fields.get("website")),
            email=text_or_none(fields.get("email")),
            description=text_or_none(fields.get("description")),
            services=list(fields.get("services") or []),
            specialties=list(fields.get("specialties") or []),
            languages=list(fields.get("languages") or []),
            operating_hours=fields.get("operating_hours") or None,
            social_media={key: url for key, url in (fields.get("social_media") or {}).items() if isinstance(url, str) and url},
            reviews=list(fields.get("reviews") or []),
            third_party_data=raw,
        )
        if record.name == UNKNOWN_NAME:
            logger.debug("%s record %s has no name; using placeholder", self.source.value, record.id)
        return record

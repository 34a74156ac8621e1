"""Utilities for turning canonical clinic records into database rows."""

import logging
from typing import Any, Dict, Iterable, Optional, Set, Tuple

from clinic_ingest.etl.slugs import slug_email
from clinic_ingest.models import ClinicRecord, ReviewStats

logger = logging.getLogger(__name__)


def _component_types(component: Any) -> Set[str]:
    if not isinstance(component, dict) or not isinstance(component.get("types"), list):
        return set()
    return {t for t in component["types"] if isinstance(t, str)}


def parse_city_country(address_components: Iterable[Dict[str, Any]]) -> Tuple[Optional[str], Optional[str]]:
    city = None
    country = None
    for component in address_components or []:
        types = _component_types(component)
        if "locality" in types or ("administrative_area_level_2" in types and not city):
            city = component.get("long_name")
        if "country" in types:
            country = component.get("long_name")
    return city, country


def parse_address_components(address_components: Any) -> Dict[str, Optional[str]]:
    """City, state, country and postal code from Google ``address_components``."""
    components = [c for c in address_components or [] if isinstance(c, dict)] if isinstance(address_components, list) else []
    city, country = parse_city_country(components)
    state = None
    postal_code = None
    for component in components:
        types = _component_types(component)
        if "administrative_area_level_1" in types:
            state = component.get("short_name") or component.get("long_name")
        if "postal_code" in types:
            postal_code = component.get("long_name")
    return {"city": city, "state": state, "country": country, "postal_code": postal_code}


def to_clinic_row(record: ClinicRecord, slug: str, stats: ReviewStats) -> Dict[str, Any]:
    """Flatten a record plus its slug and review stats into the ``clinics`` row shape."""
    row = record.to_dict()
    external_id = row.pop("id")
    row.update(
        {
            "external_id": external_id,
            "slug": slug,
            "email": record.email or slug_email(slug),
            "review_stats": stats.to_dict(),
        }
    )
    return row

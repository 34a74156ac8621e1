"""Client utilities for the Yelp Fusion business search API."""

import logging
from typing import Any, Dict, List

import requests

from clinic_ingest.core.errors import ProviderFetchError
from clinic_ingest.vendors.session import REQUEST_TIMEOUT, build_session

logger = logging.getLogger(__name__)
_SESSION = build_session()
_BASE_URL = "https://api.yelp.com/v3"
PROVIDER = "yelp"


def search_clinics(term: str, location: str, api_key: str, limit: int = 20) -> List[Dict[str, Any]]:
    params = {
        "term": f"{term} dental clinic".strip(),
        "location": location,
        "categories": "dentists",
        "limit": limit,
        "sort_by": "rating",
    }
    try:
        response = _SESSION.get(
            f"{_BASE_URL}/businesses/search",
            headers={"Authorization": f"Bearer {api_key}"},
            params=params,
            timeout=REQUEST_TIMEOUT,
        )
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, dict):
            raise ValueError(f"expected a JSON object, got {type(payload).__name__}")
    except (requests.RequestException, ValueError) as exc:
        logger.error("Yelp search failed for term=%s location=%s: %s", term, location, exc)
        raise ProviderFetchError(PROVIDER) from exc
    businesses = payload.get("businesses")
    return businesses if isinstance(businesses, list) else []


def business_details(business_id: str, api_key: str) -> Dict[str, Any]:
    try:
        response = _SESSION.get(
            f"{_BASE_URL}/businesses/{business_id}",
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=REQUEST_TIMEOUT,
        )
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, dict):
            raise ValueError(f"expected a JSON object, got {type(payload).__name__}")
        return payload
    except (requests.RequestException, ValueError) as exc:
        logger.error("Yelp details failed for %s: %s", business_id, exc)
        raise ProviderFetchError(PROVIDER, f"Failed to fetch clinic details from {PROVIDER}") from exc

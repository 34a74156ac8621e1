"""Client utilities for the Healthgrades provider directory API."""

import logging
from typing import Any, Dict, List

import requests

from clinic_ingest.core.errors import ProviderFetchError
from clinic_ingest.vendors.session import REQUEST_TIMEOUT, build_session

logger = logging.getLogger(__name__)
_SESSION = build_session()
_BASE_URL = "https://api.healthgrades.com/v1"
PROVIDER = "healthgrades"


def _headers(api_key: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"}


def search_clinics(query: str, location: str, api_key: str, limit: int = 20) -> List[Dict[str, Any]]:
    params = {
        "q": f"{query} dental".strip(),
        "location": location,
        "specialty": "dentist",
        "limit": limit,
    }
    try:
        response = _SESSION.get(
            f"{_BASE_URL}/providers/search",
            headers=_headers(api_key),
            params=params,
            timeout=REQUEST_TIMEOUT,
        )
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, dict):
            raise ValueError(f"expected a JSON object, got {type(payload).__name__}")
    except (requests.RequestException, ValueError) as exc:
        logger.error("Healthgrades search failed for query=%s location=%s: %s", query, location, exc)
        raise ProviderFetchError(PROVIDER) from exc
    providers = payload.get("providers")
    return providers if isinstance(providers, list) else []


def provider_details(provider_id: str, api_key: str) -> Dict[str, Any]:
    try:
        response = _SESSION.get(
            f"{_BASE_URL}/providers/{provider_id}",
            headers=_headers(api_key),
            timeout=REQUEST_TIMEOUT,
        )
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, dict):
            raise ValueError(f"expected a JSON object, got {type(payload).__name__}")
        return payload
    except (requests.RequestException, ValueError) as exc:
        logger.error("Healthgrades details failed for %s: %s", provider_id, exc)
        raise ProviderFetchError(PROVIDER, f"Failed to fetch clinic details from {PROVIDER}") from exc

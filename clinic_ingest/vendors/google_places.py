"""Client utilities for the Google Places API."""

import logging
import re
import time
from typing import Any, Dict, List, Optional
from urllib.parse import unquote_plus

import requests

from clinic_ingest.core.errors import ProviderFetchError
from clinic_ingest.vendors.session import REQUEST_TIMEOUT, build_session

logger = logging.getLogger(__name__)
_SESSION = build_session()
_BASE_URL = "https://maps.googleapis.com/maps/api/place"
PROVIDER = "google_places"
NEXT_PAGE_DELAY = 2.5

DETAIL_FIELDS = (
    "place_id,name,formatted_address,formatted_phone_number,geometry,website,url,rating,"
    "user_ratings_total,types,address_components,opening_hours,reviews"
)

_PLACE_ID_PATTERNS = (
    re.compile(r"[?&]place_id=([^&]+)"),
    re.compile(r"!1s([^!?&/]+)"),
)
_PLACE_NAME_PATTERN = re.compile(r"/place/([^/]+)/@")


class GooglePlacesError(ProviderFetchError):
    """Raised when the Places API returns a non-successful response."""


def _get(endpoint: str, params: Dict[str, Any]) -> Dict[str, Any]:
    try:
        response = _SESSION.get(f"{_BASE_URL}/{endpoint}/json", params=params, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, dict):
            raise ValueError(f"expected a JSON object, got {type(payload).__name__}")
        return payload
    except (requests.RequestException, ValueError) as exc:
        logger.error("%s request failed: %s", endpoint, exc)
        raise GooglePlacesError(PROVIDER) from exc


def _check_status(payload: Dict[str, Any], operation: str) -> None:
    status = payload.get("status")
    if status not in {"OK", "ZERO_RESULTS"}:
        logger.error("%s failed: status=%s, error_message=%s", operation, status, payload.get("error_message"))
        raise GooglePlacesError(PROVIDER)


def _results(payload: Dict[str, Any]) -> List[Dict[str, Any]]:
    results = payload.get("results")
    if not isinstance(results, list):
        return []
    return [result for result in results if isinstance(result, dict)]


def text_search(query: str, api_key: str, pagetoken: Optional[str] = None) -> Dict[str, Any]:
    params = {"query": query, "key": api_key}
    if pagetoken:
        params["pagetoken"] = pagetoken
    payload = _get("textsearch", params)
    _check_status(payload, "text_search")
    return payload


def search_clinics(query: str, location: str, api_key: str, limit: int = 20) -> List[Dict[str, Any]]:
    """Text-search hits for a dental clinic query, following result pages until ``limit``.

    Google returns at most 20 hits per page and needs a short pause before a
    ``next_page_token`` becomes valid.
    """
    text = " ".join(filter(None, [query, "dental clinic", location])).strip()
    results: List[Dict[str, Any]] = []
    page_token: Optional[str] = None
    while True:
        payload = text_search(text, api_key, pagetoken=page_token)
        results.extend(_results(payload))
        page_token = payload.get("next_page_token")
        if len(results) >= limit or not page_token:
            break
        logger.debug("Fetched %d results for %r; requesting next page", len(results), text)
        time.sleep(NEXT_PAGE_DELAY)
    return results[:limit]


def place_details(place_id: str, api_key: str) -> Dict[str, Any]:
    params = {"place_id": place_id, "key": api_key, "fields": DETAIL_FIELDS}
    payload = _get("details", params)
    _check_status(payload, "place_details")
    result = payload.get("result")
    return result if isinstance(result, dict) else {}


def extract_place_id(url: str) -> Optional[str]:
    """Pull a place id out of a Google Maps URL.

    Falls back to the URL-decoded place name from ``/place/<name>/@`` links,
    which text search can resolve.
    """
    if not url:
        return None
    for pattern in _PLACE_ID_PATTERNS:
        match = pattern.search(url)
        if match:
            return unquote_plus(match.group(1))
    match = _PLACE_NAME_PATTERN.search(url)
    if match:
        return unquote_plus(match.group(1))
    return None


def find_place(url: str, api_key: str, name: Optional[str] = None) -> Optional[Dict[str, Any]]:
    """Place details for a Google Maps link, or ``None`` when it cannot be resolved.

    The id taken from ``url`` is tried first. When that yields nothing, the
    first text-search hit for ``name`` (or for the name embedded in the link)
    is looked up instead.
    """
    candidate = extract_place_id(url)
    if candidate:
        try:
            details = place_details(candidate, api_key)
        except GooglePlacesError:
            logger.info("Place lookup failed for %s; falling back to text search", candidate)
            details = {}
        if details:
            return details

    query = name or candidate
    if not query:
        logger.warning("Could not extract a place from %s", url)
        return None
    hits = _results(text_search(query, api_key))
    place_id = hits[0].get("place_id") if hits else None
    if not place_id:
        logger.warning("No places found for %r", query)
        return None
    return place_details(place_id, api_key) or None

"""Adapter lookup by explicit provider tag."""

from typing import Dict, Type, Union

from clinic_ingest.adapters.base import ProviderAdapter
from clinic_ingest.adapters.google_places import GooglePlacesAdapter
from clinic_ingest.adapters.healthgrades import HealthgradesAdapter
from clinic_ingest.adapters.yelp import YelpAdapter
from clinic_ingest.models import ThirdPartySource

_ADAPTERS: Dict[ThirdPartySource, Type[ProviderAdapter]] = {
    ThirdPartySource.YELP: YelpAdapter,
    ThirdPartySource.HEALTHGRADES: HealthgradesAdapter,
    ThirdPartySource.GOOGLE_PLACES: GooglePlacesAdapter,
}


class UnknownProviderError(ValueError):
    """Raised for a provider tag with no registered adapter."""


def get_adapter(source: Union[str, ThirdPartySource]) -> ProviderAdapter:
    """Return a fresh adapter for ``source``; adapters hold no state."""
    try:
        tag = ThirdPartySource(source.lower() if isinstance(source, str) else source)
    except ValueError as exc:
        raise UnknownProviderError(f"Unknown provider: {source}. Known: {known_providers()}") from exc
    adapter_cls = _ADAPTERS.get(tag)
    if adapter_cls is None:
        raise UnknownProviderError(f"Unknown provider: {source}. Known: {known_providers()}")
    return adapter_cls()


def known_providers():
    return [tag.value for tag in _ADAPTERS]

"""CLI job that normalizes provider listings and seeds them into the clinic store."""

import argparse
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from clinic_ingest.adapters.registry import get_adapter, known_providers
from clinic_ingest.core.config import get_settings
from clinic_ingest.core.db import create_clinic, ensure_schema, init_pool, slug_exists
from clinic_ingest.core.errors import ConfigError, DuplicateClinicError, ProviderFetchError, SlugConflictError
from clinic_ingest.etl.review_stats import compute_stats
from clinic_ingest.etl.slugs import create_with_unique_slug
from clinic_ingest.etl.transform import to_clinic_row
from clinic_ingest.models import ClinicRecord, Review, ThirdPartySource
from clinic_ingest.sample_data import sample_clinics, synthetic_reviews
from clinic_ingest.vendors import google_places, healthgrades, yelp

logger = logging.getLogger(__name__)

ReviewSource = Callable[[ClinicRecord], List[Review]]

# provider -> (search(query, location, api_key, limit), details(id, api_key))
_VENDORS: Dict[ThirdPartySource, Tuple[Callable[..., List[Dict[str, Any]]], Callable[..., Dict[str, Any]]]] = {
    ThirdPartySource.YELP: (yelp.search_clinics, yelp.business_details),
    ThirdPartySource.HEALTHGRADES: (healthgrades.search_clinics, healthgrades.provider_details),
    ThirdPartySource.GOOGLE_PLACES: (google_places.search_clinics, google_places.place_details),
}


@dataclass
class SeedSummary:
    created: int = 0
    skipped: int = 0
    failed: int = 0
    slugs: List[str] = field(default_factory=list)

    def __str__(self) -> str:
        return f"created={self.created} skipped={self.skipped} failed={self.failed}"


def seed_clinics(
    records: Iterable[ClinicRecord],
    *,
    exists_fn: Callable[[str], bool] = slug_exists,
    create_fn: Callable[[Dict[str, Any]], Any] = create_clinic,
    review_source: Optional[ReviewSource] = None,
    now: Optional[datetime] = None,
) -> SeedSummary:
    """Persist records one at a time, skipping duplicates instead of aborting.

    Records that carry no reviews get them from ``review_source`` when given.
    """
    summary = SeedSummary()

    for index, record in enumerate(records, start=1):
        reviews = record.reviews or (review_source(record) if review_source else [])
        record.reviews = list(reviews)
        stats = compute_stats(record.reviews, now)

        def _create(slug: str, record: ClinicRecord = record) -> str:
            create_fn(to_clinic_row(record, slug, stats))
            return slug

        try:
            slug = create_with_unique_slug(record.name, exists_fn, _create)
        except DuplicateClinicError as exc:
            logger.warning("Skipping clinic %d (%s): %s", index, record.name, exc)
            summary.skipped += 1
            continue
        except SlugConflictError as exc:
            logger.error("Giving up on clinic %d (%s): %s", index, record.name, exc)
            summary.failed += 1
            continue
        except Exception as exc:  # noqa: BLE001
            logger.error("Failed to create clinic %d (%s): %s", index, record.name, exc)
            summary.failed += 1
            continue

        summary.created += 1
        summary.slugs.append(slug)
        logger.info(
            "Created clinic %s (rating %.1f from %d reviews, %d recent)",
            slug,
            stats.average_rating,
            stats.total_reviews,
            stats.recent_reviews,
        )

    logger.info("Seeding finished: %s", summary)
    return summary


def fetch_provider_records(
    source: ThirdPartySource,
    *,
    term: str,
    location: str,
    api_key: str,
    limit: int,
    with_details: bool,
    request_delay: float = 0.0,
) -> List[ClinicRecord]:
    """Search a provider and normalize each hit, optionally via its detail endpoint."""
    search, details = _VENDORS[source]
    adapter = get_adapter(source)

    hits = search(term, location, api_key, limit=limit)
    logger.info("Fetched %d %s results for term=%s location=%s", len(hits), source.value, term, location)

    records: List[ClinicRecord] = []
    for hit in hits:
        record = adapter.normalize(hit)
        if with_details and record.id:
            try:
                record = adapter.normalize_detail(details(record.id, api_key))
            except ProviderFetchError as exc:
                logger.warning("Using listing data for %s: %s", record.id, exc)
            time.sleep(request_delay)
        records.append(record)
    return records


def fetch_place_by_url(url: str, name: Optional[str], api_key: str) -> Optional[ClinicRecord]:
    """Normalized Google record, reviews included, for a Google Maps link.

    ``name`` is searched for when the link itself does not resolve to a place.
    """
    details = google_places.find_place(url, api_key, name=name)
    if not details:
        return None
    record = get_adapter(ThirdPartySource.GOOGLE_PLACES).normalize_detail(details)
    logger.info("Resolved %s to %s with %d reviews", url, record.name, len(record.reviews))
    return record


def fetch_records_by_url(
    maps_urls: Sequence[Tuple[str, Optional[str]]], *, api_key: str, request_delay: float = 0.0
) -> List[ClinicRecord]:
    records: List[ClinicRecord] = []
    for url, name in maps_urls:
        try:
            record = fetch_place_by_url(url, name, api_key)
        except ProviderFetchError as exc:
            logger.warning("Skipping %s: %s", url, exc)
            continue
        if record is None:
            logger.warning("Could not find clinic information for %s", url)
            continue
        records.append(record)
        time.sleep(request_delay)
    return records


def run_seed_job(
    *,
    source: str,
    term: str = "",
    location: str = "",
    limit: Optional[int] = None,
    with_details: bool = False,
    synthetic: bool = False,
    init_schema: bool = False,
    maps_urls: Sequence[Tuple[str, Optional[str]]] = (),
) -> SeedSummary:
    """Fetch, normalize and persist clinics.

    ``maps_urls`` pairs of (Google Maps link, optional clinic name) replace the
    provider search with one Google lookup per link.
    """
    settings = get_settings()
    tag = ThirdPartySource.GOOGLE_PLACES if maps_urls else ThirdPartySource(source)

    if maps_urls:
        api_key = settings.api_key_for(tag.value)
        if not api_key:
            raise ConfigError(f"An API key for {tag.value} is required")
        records = fetch_records_by_url(maps_urls, api_key=api_key, request_delay=settings.request_delay)
    elif tag is ThirdPartySource.SAMPLE:
        records = sample_clinics()
        synthetic = True
    else:
        api_key = settings.api_key_for(tag.value)
        if not api_key:
            raise ConfigError(f"An API key for {tag.value} is required")
        if not location:
            raise ValueError("location is required for provider imports")
        records = fetch_provider_records(
            tag,
            term=term,
            location=location,
            api_key=api_key,
            limit=limit or settings.search_limit,
            with_details=with_details,
            request_delay=settings.request_delay,
        )

    init_pool()
    if init_schema:
        ensure_schema()

    review_source = (lambda _record: synthetic_reviews()) if synthetic else None
    return seed_clinics(records, review_source=review_source)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Normalize clinic listings and seed the clinic store")
    parser.add_argument(
        "--source",
        choices=known_providers() + [ThirdPartySource.SAMPLE.value],
        default=ThirdPartySource.SAMPLE.value,
        help="Provider to import from, or 'sample' for built-in sample clinics",
    )
    parser.add_argument("--term", default="", help="Search term prefix, e.g. 'implant'")
    parser.add_argument("--location", default="", help="Location to search, e.g. 'Austin, TX'")
    parser.add_argument(
        "--limit",
        type=int,
        default=get_settings().search_limit,
        help="Maximum number of search results to import",
    )
    parser.add_argument("--details", action="store_true", help="Fetch each result's detail payload")
    parser.add_argument("--synthetic-reviews", action="store_true", help="Attach sample reviews to records without any")
    parser.add_argument(
        "--maps-url",
        dest="maps_urls",
        action="append",
        nargs="+",
        metavar=("URL", "NAME"),
        default=[],
        help="Import a Google Maps link instead of searching; an optional clinic name is searched for if the link does not resolve",
    )
    parser.add_argument("--init-schema", action="store_true", help="Create the clinics table if missing")
    return parser


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s - %(message)s")
    args = build_parser().parse_args()

    try:
        summary = run_seed_job(
            source=args.source,
            term=args.term,
            location=args.location,
            limit=args.limit,
            with_details=args.details,
            synthetic=args.synthetic_reviews,
            init_schema=args.init_schema,
            maps_urls=[(values[0], " ".join(values[1:]) or None) for values in args.maps_urls],
        )
    except ConfigError as exc:
        logger.error("Configuration error: %s", exc)
        raise SystemExit(2) from exc
    except Exception as exc:  # pragma: no cover - CLI fallback
        logger.error("Seeding failed: %s", exc, exc_info=True)
        raise SystemExit(1) from exc

    logger.info("Done: %s", summary)


if __name__ == "__main__":
    main()

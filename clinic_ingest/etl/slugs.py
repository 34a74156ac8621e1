"""URL slug generation with collision-free suffixing."""

import logging
import re
from typing import Callable, Optional, TypeVar

from clinic_ingest.core.errors import SlugConflictError

logger = logging.getLogger(__name__)

_DISALLOWED = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")
_HYPHENS = re.compile(r"-+")

FALLBACK_SLUG = "clinic"

MAX_CREATE_ATTEMPTS = 5

T = TypeVar("T")


def slugify(name: str) -> str:
    slug = _DISALLOWED.sub("", (name or "").lower())
    slug = _WHITESPACE.sub("-", slug)
    slug = _HYPHENS.sub("-", slug)
    return slug.strip("-")


def assign_slug(name: str, exists_fn: Callable[[str], bool], start: int = 1) -> str:
    """Return the first of ``base``, ``base-1``, ``base-2``... that ``exists_fn`` reports free.

    Names with no usable characters fall back to ``clinic``. ``start`` skips the
    bare base slug and begins suffixing at that number when greater than 1; the
    conflict-retry path uses it to move past a slug another writer claimed after
    it was checked.
    """
    base = slugify(name) or FALLBACK_SLUG
    if start <= 1:
        slug, counter = base, 1
    else:
        slug, counter = f"{base}-{start}", start + 1
    while exists_fn(slug):
        logger.debug("Slug %s is taken", slug)
        slug = f"{base}-{counter}"
        counter += 1
    return slug


def create_with_unique_slug(
    name: str,
    exists_fn: Callable[[str], bool],
    create_fn: Callable[[str], T],
    max_attempts: int = MAX_CREATE_ATTEMPTS,
) -> T:
    """Assign a slug and create the record, retrying when the insert loses a slug race.

    ``create_fn`` receives the candidate slug and must raise ``SlugConflictError``
    when the store's unique constraint on ``slug`` rejects it. Any other error
    propagates unchanged.
    """
    start = 1
    last_error: Optional[SlugConflictError] = None
    for attempt in range(1, max_attempts + 1):
        slug = assign_slug(name, exists_fn, start=start)
        try:
            return create_fn(slug)
        except SlugConflictError as exc:
            logger.warning("Slug %s was claimed concurrently (attempt %d/%d)", slug, attempt, max_attempts)
            last_error = exc
            start = _next_suffix(slug, slugify(name) or FALLBACK_SLUG)
    raise SlugConflictError(f"Could not claim a unique slug for {name!r} after {max_attempts} attempts") from last_error


def _next_suffix(slug: str, base: str) -> int:
    suffix = slug[len(base) + 1:] if slug != base else ""
    if suffix.isdigit():
        return int(suffix) + 1
    return 1


def slug_email(slug: str) -> str:
    """Contact address placeholder derived from a slug, as used for seeded clinics."""
    return f"contact@{slug.replace('-', '')}.com"


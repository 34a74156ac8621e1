"""Database helpers for the clinic store."""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Optional

import psycopg2
from psycopg2 import errors, extras, pool

from clinic_ingest.core.config import get_settings
from clinic_ingest.core.errors import DuplicateClinicError, SlugConflictError

logger = logging.getLogger(__name__)

_connection_pool: Optional[pool.SimpleConnectionPool] = None

SLUG_CONSTRAINT = "clinics_slug_key"

_CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS clinics (
    id SERIAL PRIMARY KEY,
    slug TEXT NOT NULL,
    external_id TEXT NOT NULL,
    third_party_source TEXT NOT NULL,
    name TEXT NOT NULL,
    email TEXT,
    phone TEXT,
    website TEXT,
    description TEXT,
    clinic_type TEXT NOT NULL DEFAULT 'DENTAL',
    address TEXT NOT NULL,
    city TEXT NOT NULL,
    state TEXT,
    country TEXT NOT NULL,
    postal_code TEXT,
    latitude DOUBLE PRECISION,
    longitude DOUBLE PRECISION,
    rating DOUBLE PRECISION NOT NULL DEFAULT 0,
    review_count INTEGER NOT NULL DEFAULT 0,
    services JSONB NOT NULL DEFAULT '[]',
    specialties JSONB NOT NULL DEFAULT '[]',
    languages JSONB NOT NULL DEFAULT '[]',
    operating_hours JSONB,
    social_media JSONB NOT NULL DEFAULT '{}',
    reviews JSONB NOT NULL DEFAULT '[]',
    review_stats JSONB NOT NULL,
    third_party_data JSONB,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    CONSTRAINT clinics_slug_key UNIQUE (slug),
    CONSTRAINT clinics_source_external_id_key UNIQUE (third_party_source, external_id)
);
"""

_SLUG_EXISTS = "SELECT 1 FROM clinics WHERE slug = %(slug)s LIMIT 1;"

_INSERT_CLINIC = """
INSERT INTO clinics (
    slug,
    external_id,
    third_party_source,
    name,
    email,
    phone,
    website,
    description,
    clinic_type,
    address,
    city,
    state,
    country,
    postal_code,
    latitude,
    longitude,
    rating,
    review_count,
    services,
    specialties,
    languages,
    operating_hours,
    social_media,
    reviews,
    review_stats,
    third_party_data
) VALUES (
    %(slug)s,
    %(external_id)s,
    %(third_party_source)s,
    %(name)s,
    %(email)s,
    %(phone)s,
    %(website)s,
    %(description)s,
    %(clinic_type)s,
    %(address)s,
    %(city)s,
    %(state)s,
    %(country)s,
    %(postal_code)s,
    %(latitude)s,
    %(longitude)s,
    %(rating)s,
    %(review_count)s,
    %(services)s,
    %(specialties)s,
    %(languages)s,
    %(operating_hours)s,
    %(social_media)s,
    %(reviews)s,
    %(review_stats)s,
    %(third_party_data)s
)
RETURNING id;
"""

_JSON_COLUMNS = (
    "services",
    "specialties",
    "languages",
    "operating_hours",
    "social_media",
    "reviews",
    "review_stats",
    "third_party_data",
)


def init_pool(minconn: int = 1, maxconn: int = 5) -> pool.SimpleConnectionPool:
    """Initialise and return the shared connection pool."""
    global _connection_pool
    if _connection_pool is None:
        settings = get_settings()
        if not settings.database_url:
            raise RuntimeError("DATABASE_URL is required for database connections")
        _connection_pool = pool.SimpleConnectionPool(
            minconn,
            maxconn,
            dsn=settings.database_url,
            connect_timeout=10,
        )
        logger.info("Database connection pool initialised")
    return _connection_pool


@contextmanager
def get_connection():
    """Context manager yielding a pooled connection."""
    pg_pool = init_pool()
    conn = pg_pool.getconn()
    try:
        yield conn
    finally:
        pg_pool.putconn(conn)


def ensure_schema() -> None:
    with get_connection() as conn:
        with conn.cursor() as cur:
            cur.execute(_CREATE_TABLE)
        conn.commit()


def _prepare_params(row: Dict[str, Any]) -> Dict[str, Any]:
    params = {
        "slug": row.get("slug"),
        "external_id": row.get("external_id") or "",
        "third_party_source": row.get("third_party_source"),
        "name": row.get("name"),
        "email": row.get("email"),
        "phone": row.get("phone"),
        "website": row.get("website"),
        "description": row.get("description"),
        "clinic_type": row.get("clinic_type") or "DENTAL",
        "address": row.get("address"),
        "city": row.get("city"),
        "state": row.get("state"),
        "country": row.get("country"),
        "postal_code": row.get("postal_code"),
        "latitude": row.get("latitude"),
        "longitude": row.get("longitude"),
        "rating": row.get("rating") or 0,
        "review_count": row.get("review_count") or 0,
    }
    for column in _JSON_COLUMNS:
        value = row.get(column)
        params[column] = extras.Json(value) if value is not None else None
    return params


def slug_exists(slug: str) -> bool:
    with get_connection() as conn:
        with conn.cursor() as cur:
            cur.execute(_SLUG_EXISTS, {"slug": slug})
            return cur.fetchone() is not None


def create_clinic(row: Dict[str, Any]) -> int:
    """Insert a clinic row and return its id.

    Unique violations are rolled back and reported as ``SlugConflictError`` when
    the slug constraint fired, ``DuplicateClinicError`` otherwise.
    """
    params = _prepare_params(row)
    if not params["slug"] or not params["name"]:
        raise ValueError("slug and name are required to create a clinic")

    with get_connection() as conn:
        try:
            with conn.cursor() as cur:
                cur.execute(_INSERT_CLINIC, params)
                clinic_id = cur.fetchone()[0]
            conn.commit()
        except errors.UniqueViolation as exc:
            conn.rollback()
            constraint = getattr(exc.diag, "constraint_name", None)
            if constraint == SLUG_CONSTRAINT:
                raise SlugConflictError(f"slug {params['slug']} already exists") from exc
            raise DuplicateClinicError(
                f"{params['third_party_source']} clinic {params['external_id']} already exists"
            ) from exc
        except psycopg2.Error:
            conn.rollback()
            raise
    logger.debug("Created clinic %s (id=%s)", params["slug"], clinic_id)
    return clinic_id

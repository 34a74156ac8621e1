"""Application configuration helpers."""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    database_url: str
    yelp_api_key: str = ""
    healthgrades_api_key: str = ""
    google_places_api_key: str = ""
    worker_port: int = 9000
    search_limit: int = 20
    request_delay: float = 0.15

    def api_key_for(self, provider: str) -> str:
        return {
            "yelp": self.yelp_api_key,
            "healthgrades": self.healthgrades_api_key,
            "google_places": self.google_places_api_key,
        }.get(provider, "")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from environment variables with sensible defaults."""
    load_dotenv()

    database_url = os.getenv("DATABASE_URL", "")
    yelp_api_key = os.getenv("YELP_API_KEY", "")
    healthgrades_api_key = os.getenv("HEALTHGRADES_API_KEY", "")
    google_places_api_key = os.getenv("GOOGLE_PLACES_API_KEY", "")
    worker_port = int(os.getenv("WORKER_PORT", "9000"))
    search_limit = int(os.getenv("SEED_SEARCH_LIMIT", "20"))
    request_delay = float(os.getenv("SEED_REQUEST_DELAY", "0.15"))

    if not database_url:
        logger.warning("DATABASE_URL is not set; database operations will fail.")
    if not yelp_api_key:
        logger.warning("YELP_API_KEY is not configured; Yelp imports will fail.")
    if not healthgrades_api_key:
        logger.warning("HEALTHGRADES_API_KEY is not configured; Healthgrades imports will fail.")
    if not google_places_api_key:
        logger.warning("GOOGLE_PLACES_API_KEY is not configured; Google Places imports will fail.")

    return Settings(
        database_url=database_url,
        yelp_api_key=yelp_api_key,
        healthgrades_api_key=healthgrades_api_key,
        google_places_api_key=google_places_api_key,
        worker_port=worker_port,
        search_limit=search_limit,
        request_delay=request_delay,
    )

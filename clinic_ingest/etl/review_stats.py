"""Aggregate statistics over review collections."""

from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from clinic_ingest.models import Review, ReviewStats

RECENT_WINDOW = timedelta(days=30)


def compute_stats(reviews: Iterable[Review], now: Optional[datetime] = None) -> ReviewStats:
    """Summarise ``reviews`` as of ``now`` (defaults to the current UTC time).

    An empty collection yields zero counts, a 0.0 average and a zeroed 1-5
    distribution. Ratings outside 1-5, or not whole numbers, count toward the
    total and the average but not the distribution.
    """
    reviews = list(reviews)
    stats = ReviewStats()
    if not reviews:
        return stats

    now = now or datetime.now(timezone.utc)
    cutoff = now - RECENT_WINDOW

    total = 0.0
    for review in reviews:
        rating = review.rating
        total += rating
        if float(rating).is_integer() and 1 <= rating <= 5:
            stats.rating_distribution[int(rating)] += 1
        if review.time is not None and review.time > cutoff:
            stats.recent_reviews += 1

    stats.total_reviews = len(reviews)
    stats.average_rating = _round_one(total / len(reviews))
    return stats


def _round_one(value: float) -> float:
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))

"""Sample clinics and synthetic reviews used when seeding without a provider."""

from datetime import datetime, timedelta, timezone
from typing import List, Optional

from clinic_ingest.models import ClinicRecord, Review, ThirdPartySource

_SAMPLE_REVIEWS = (
    ("Sarah Johnson", 5, 7, "a week ago",
     "Excellent service! The staff was very professional and the dentist was thorough in explaining my treatment options."),
    ("Michael Chen", 4, 14, "2 weeks ago",
     "Great experience overall. The office is clean and modern. The only minor issue was the wait time."),
    ("Emily Rodriguez", 5, 21, "3 weeks ago",
     "Outstanding dental care! The team is friendly and knowledgeable."),
    ("David Thompson", 4, 30, "a month ago",
     "Professional staff and clean facility. The procedure was painless and the results exceeded my expectations."),
    ("Lisa Wang", 5, 45, "a month ago",
     "Amazing dental practice! The dentist took time to explain everything and made me feel comfortable."),
)


def synthetic_reviews(now: Optional[datetime] = None) -> List[Review]:
    """Five reviews dated 7, 14, 21, 30 and 45 days before ``now``."""
    now = now or datetime.now(timezone.utc)
    return [
        Review(
            rating=rating,
            time=now - timedelta(days=days_ago),
            author_name=author,
            text=text,
            relative_time=relative,
        )
        for author, rating, days_ago, relative, text in _SAMPLE_REVIEWS
    ]


def _sample(external_id, name, address, city, state, postal_code, lat, lng, rating, review_count, phone, website):
    return ClinicRecord(
        id=external_id,
        third_party_source=ThirdPartySource.SAMPLE,
        name=name,
        address=address,
        city=city,
        state=state,
        country="USA",
        postal_code=postal_code,
        latitude=lat,
        longitude=lng,
        rating=rating,
        review_count=review_count,
        phone=phone,
        website=website,
        description=f"Professional dental clinic with {rating}/5 star rating and {review_count} reviews.",
        services=["General Dentistry", "Implants", "Crowns", "Root Canal", "Fillings", "Cosmetic Dentistry"],
        specialties=["Cosmetic Dentistry", "Restorative Dentistry", "Preventive Care"],
        languages=["English", "Spanish"],
    )


def sample_clinics() -> List[ClinicRecord]:
    return [
        _sample("sample-1", "Downtown Dental Clinic", "123 Main Street", "New York", "NY", "10001",
                40.7128, -74.0060, 4.5, 127, "+1 (555) 123-4567", "https://downtowndental.com"),
        _sample("sample-2", "Metro Dental Center", "456 Oak Avenue", "Metro City", "CA", "90210",
                34.0522, -118.2437, 4.2, 89, "+1 (555) 234-5678", "https://metrodental.com"),
        _sample("sample-3", "Elite Dental Practice", "789 Pine Street", "Elite District", "TX", "75001",
                32.7767, -96.7970, 4.8, 203, "+1 (555) 345-6789", "https://elitedental.com"),
        _sample("sample-4", "Family Dental Care", "321 Elm Street", "Family Town", "FL", "33101",
                25.7617, -80.1918, 4.3, 156, "+1 (555) 456-7890", "https://familydental.com"),
        _sample("sample-5", "Premium Dental Studio", "654 Maple Drive", "Premium Heights", "WA", "98101",
                47.6062, -122.3321, 4.7, 178, "+1 (555) 567-8901", "https://premiumdental.com"),
    ]

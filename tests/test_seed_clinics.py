import argparse
from datetime import datetime, timezone

import pytest

from clinic_ingest.core.errors import ConfigError, DuplicateClinicError, ProviderFetchError, SlugConflictError
from clinic_ingest.jobs import seed_clinics
from clinic_ingest.models import ClinicRecord, Review, ThirdPartySource
from clinic_ingest.sample_data import sample_clinics, synthetic_reviews

NOW = datetime(2026, 10, 1, tzinfo=timezone.utc)


class DummySettings:
    def __init__(self, api_key="test-key", search_limit=20):
        self.api_key = api_key
        self.search_limit = search_limit
        self.request_delay = 0

    def api_key_for(self, provider):
        return self.api_key


class MemoryStore:
    """Stand-in for the clinics table with slug and natural-key constraints."""

    def __init__(self):
        self.rows = []

    def exists(self, slug):
        return any(row["slug"] == slug for row in self.rows)

    def create(self, row):
        key = (row["third_party_source"], row["external_id"])
        if any((r["third_party_source"], r["external_id"]) == key for r in self.rows):
            raise DuplicateClinicError(str(key))
        if self.exists(row["slug"]):
            raise SlugConflictError(row["slug"])
        self.rows.append(row)
        return len(self.rows)


def _record(external_id, name, reviews=None):
    return ClinicRecord(id=external_id, third_party_source=ThirdPartySource.YELP, name=name, reviews=reviews or [])


def test_seed_clinics_assigns_unique_slugs_and_stats():
    store = MemoryStore()
    records = [
        _record("1", "Bright Smiles", [Review(rating=5), Review(rating=5), Review(rating=1)]),
        _record("2", "Bright Smiles!"),
        _record("3", "Bright  Smiles"),
    ]

    summary = seed_clinics.seed_clinics(records, exists_fn=store.exists, create_fn=store.create, now=NOW)

    assert summary.created == 3
    assert summary.slugs == ["bright-smiles", "bright-smiles-1", "bright-smiles-2"]
    assert store.rows[0]["review_stats"]["average_rating"] == 3.7
    assert store.rows[0]["review_stats"]["rating_distribution"] == {1: 1, 2: 0, 3: 0, 4: 0, 5: 2}
    assert store.rows[1]["review_stats"]["total_reviews"] == 0


def test_seed_clinics_skips_duplicates_and_continues(caplog):
    store = MemoryStore()
    records = [_record("1", "Alpha Dental"), _record("1", "Alpha Dental Again"), _record("2", "Beta Dental")]

    with caplog.at_level("WARNING"):
        summary = seed_clinics.seed_clinics(records, exists_fn=store.exists, create_fn=store.create, now=NOW)

    assert (summary.created, summary.skipped, summary.failed) == (2, 1, 0)
    assert [row["slug"] for row in store.rows] == ["alpha-dental", "beta-dental"]
    assert "Skipping clinic 2" in " ".join(caplog.messages)


def test_seed_clinics_counts_unexpected_failures():
    def create(row):
        if row["external_id"] == "bad":
            raise RuntimeError("db down")
        return 1

    records = [_record("bad", "Broken"), _record("ok", "Fine")]
    summary = seed_clinics.seed_clinics(records, exists_fn=lambda _: False, create_fn=create, now=NOW)

    assert (summary.created, summary.failed) == (1, 1)
    assert str(summary) == "created=1 skipped=0 failed=1"


def test_seed_clinics_uses_review_source_only_when_empty():
    store = MemoryStore()
    own = [Review(rating=2)]
    records = [_record("1", "Has Reviews", own), _record("2", "No Reviews")]

    seed_clinics.seed_clinics(
        records,
        exists_fn=store.exists,
        create_fn=store.create,
        review_source=lambda record: synthetic_reviews(NOW),
        now=NOW,
    )

    assert store.rows[0]["review_stats"]["total_reviews"] == 1
    stats = store.rows[1]["review_stats"]
    assert stats["total_reviews"] == 5
    assert stats["average_rating"] == 4.6
    # 7, 14 and 21 days old are recent; 30 and 45 are not.
    assert stats["recent_reviews"] == 3


def test_fetch_provider_records_uses_details(monkeypatch):
    calls = []

    def fake_search(term, location, api_key, limit):
        return [{"id": "a", "name": "Listing A"}, {"id": "b", "name": "Listing B"}, {"name": "No Id"}]

    def fake_details(business_id, api_key):
        calls.append(business_id)
        if business_id == "b":
            raise ProviderFetchError("yelp")
        return {"id": business_id, "name": "Detail A", "categories": [{"title": "Dental Care"}]}

    monkeypatch.setitem(seed_clinics._VENDORS, ThirdPartySource.YELP, (fake_search, fake_details))
    monkeypatch.setattr(seed_clinics.time, "sleep", lambda _: None)

    records = seed_clinics.fetch_provider_records(
        ThirdPartySource.YELP, term="", location="Austin", api_key="k", limit=3, with_details=True
    )

    assert calls == ["a", "b"]
    assert [r.name for r in records] == ["Detail A", "Listing B", "No Id"]
    assert records[0].services == ["Dental Care"]


def test_run_seed_job_requires_api_key(monkeypatch):
    monkeypatch.setattr(seed_clinics, "get_settings", lambda: DummySettings(api_key=""))

    with pytest.raises(ConfigError):
        seed_clinics.run_seed_job(source="yelp", location="Austin")


def test_run_seed_job_requires_location(monkeypatch):
    monkeypatch.setattr(seed_clinics, "get_settings", lambda: DummySettings())

    with pytest.raises(ValueError):
        seed_clinics.run_seed_job(source="healthgrades", location="")


def test_run_seed_job_propagates_fetch_failure(monkeypatch):
    def failing_search(*args, **kwargs):
        raise ProviderFetchError("healthgrades")

    monkeypatch.setattr(seed_clinics, "get_settings", lambda: DummySettings())
    monkeypatch.setitem(seed_clinics._VENDORS, ThirdPartySource.HEALTHGRADES, (failing_search, None))

    with pytest.raises(ProviderFetchError, match="Failed to fetch data from healthgrades"):
        seed_clinics.run_seed_job(source="healthgrades", location="Boston")


def test_run_seed_job_with_sample_data(monkeypatch):
    captured = {}

    def fake_seed(records, review_source=None):
        captured["records"] = records
        captured["reviews"] = review_source(records[0])
        return seed_clinics.SeedSummary(created=len(records))

    monkeypatch.setattr(seed_clinics, "get_settings", lambda: DummySettings())
    monkeypatch.setattr(seed_clinics, "init_pool", lambda: None)
    monkeypatch.setattr(seed_clinics, "seed_clinics", fake_seed)

    summary = seed_clinics.run_seed_job(source="sample")

    assert summary.created == len(sample_clinics())
    assert len(captured["reviews"]) == 5
    assert captured["records"][0].third_party_source is ThirdPartySource.SAMPLE


def test_build_parser_defaults(monkeypatch):
    monkeypatch.setattr(seed_clinics, "get_settings", lambda: DummySettings(search_limit=7))
    parser = seed_clinics.build_parser()
    args = parser.parse_args(["--source", "yelp", "--location", "Austin"])
    assert isinstance(parser, argparse.ArgumentParser)
    assert args.source == "yelp"
    assert args.limit == 7
    assert args.details is False
    assert parser.parse_args([]).source == "sample"


PLACE_DETAILS = {
    "place_id": "ChIJabc",
    "name": "Downtown Dental",
    "types": ["dentist"],
    "reviews": [
        {"author_name": "Ann", "rating": 5, "time": 1_700_000_000},
        {"author_name": "Bo", "rating": 4, "time": 1_700_100_000},
    ],
}


def test_fetch_place_by_url_normalizes_google_details(monkeypatch):
    lookups = []

    def fake_find_place(url, api_key, name=None):
        lookups.append((url, api_key, name))
        return PLACE_DETAILS

    monkeypatch.setattr(seed_clinics.google_places, "find_place", fake_find_place)

    record = seed_clinics.fetch_place_by_url("https://maps.google.com/?place_id=ChIJabc", "Downtown Dental", "k")

    assert lookups == [("https://maps.google.com/?place_id=ChIJabc", "k", "Downtown Dental")]
    assert record.id == "ChIJabc"
    assert record.third_party_source is ThirdPartySource.GOOGLE_PLACES
    assert [review.author_name for review in record.reviews] == ["Ann", "Bo"]
    assert record.specialties == ["dentist"]


@pytest.mark.parametrize("found", [None, {}])
def test_fetch_place_by_url_returns_none_when_unresolved(monkeypatch, found):
    monkeypatch.setattr(seed_clinics.google_places, "find_place", lambda url, api_key, name=None: found)
    assert seed_clinics.fetch_place_by_url("https://example.com", None, "k") is None


def test_fetch_records_by_url_skips_failures(monkeypatch, caplog):
    def fake_find_place(url, api_key, name=None):
        if url == "bad":
            raise ProviderFetchError("google_places")
        if url == "missing":
            return None
        return dict(PLACE_DETAILS, place_id=url)

    monkeypatch.setattr(seed_clinics.google_places, "find_place", fake_find_place)
    monkeypatch.setattr(seed_clinics.time, "sleep", lambda _: None)

    with caplog.at_level("WARNING"):
        records = seed_clinics.fetch_records_by_url([("bad", None), ("missing", None), ("good", "Acme")], api_key="k")

    assert [record.id for record in records] == ["good"]
    assert "Skipping bad" in " ".join(caplog.messages)
    assert "Could not find clinic information for missing" in " ".join(caplog.messages)


def test_run_seed_job_imports_maps_urls(monkeypatch):
    captured = {}

    def fake_fetch(maps_urls, api_key, request_delay=0.0):
        captured["urls"] = list(maps_urls)
        captured["api_key"] = api_key
        return [seed_clinics.get_adapter(ThirdPartySource.GOOGLE_PLACES).normalize_detail(PLACE_DETAILS)]

    def fake_seed(records, review_source=None):
        captured["review_source"] = review_source
        return seed_clinics.SeedSummary(created=len(records))

    monkeypatch.setattr(seed_clinics, "get_settings", lambda: DummySettings(api_key="gkey"))
    monkeypatch.setattr(seed_clinics, "fetch_records_by_url", fake_fetch)
    monkeypatch.setattr(seed_clinics, "init_pool", lambda: None)
    monkeypatch.setattr(seed_clinics, "seed_clinics", fake_seed)

    summary = seed_clinics.run_seed_job(source="sample", maps_urls=[("https://maps.google.com/?place_id=x", None)])

    assert summary.created == 1
    assert captured["urls"] == [("https://maps.google.com/?place_id=x", None)]
    assert captured["api_key"] == "gkey"
    assert captured["review_source"] is None


def test_run_seed_job_maps_urls_need_google_key(monkeypatch):
    monkeypatch.setattr(seed_clinics, "get_settings", lambda: DummySettings(api_key=None))

    with pytest.raises(ConfigError, match="google_places"):
        seed_clinics.run_seed_job(source="yelp", maps_urls=[("https://maps.google.com/?place_id=x", None)])


def test_main_passes_maps_urls_with_optional_names(monkeypatch):
    captured = {}

    def fake_run(**kwargs):
        captured.update(kwargs)
        return seed_clinics.SeedSummary()

    monkeypatch.setattr(seed_clinics, "get_settings", lambda: DummySettings())
    monkeypatch.setattr(seed_clinics, "run_seed_job", fake_run)
    monkeypatch.setattr(
        "sys.argv",
        ["clinic-seed", "--maps-url", "https://a.example", "--maps-url", "https://b.example", "Acme", "Dental"],
    )

    seed_clinics.main()

    assert captured["maps_urls"] == [("https://a.example", None), ("https://b.example", "Acme Dental")]

"""Tests for the data models."""

import dataclasses

import pytest

from job_feeds.models import FeedCacheEntry, JobListing, ScoredJob, SearchResult


def test_job_listing_creation():
    job = JobListing(
        title="Flutter Developer",
        link="https://example.com/jobs/1",
        description="Build mobile apps",
        pub_date="2025-01-06T10:00:00+00:00",
        source="https://feed-a.test/rss",
    )
    assert job.title == "Flutter Developer"
    assert job.source == "https://feed-a.test/rss"


def test_job_listing_is_immutable():
    job = JobListing(title="A", link="https://example.com/1")
    with pytest.raises(dataclasses.FrozenInstanceError):
        job.title = "B"


def test_link_key_normalizes_case_and_whitespace():
    job1 = JobListing(title="A", link="  https://EXAMPLE.com/Jobs/123 ")
    job2 = JobListing(title="B", link="https://example.com/jobs/123")
    assert job1.link_key == job2.link_key


def test_to_dict_uses_camel_case_pub_date():
    job = JobListing(title="A", link="https://example.com/1", pub_date="2025-01-01T00:00:00+00:00")
    d = job.to_dict()
    assert set(d) == {"title", "link", "description", "pubDate", "source"}
    assert d["pubDate"] == "2025-01-01T00:00:00+00:00"
    assert JobListing.from_dict(d) == job


def test_from_dict_tolerates_missing_fields():
    job = JobListing.from_dict({"title": "A", "link": "https://example.com/1"})
    assert job.description == ""
    assert job.pub_date is None
    assert job.source == ""


@pytest.mark.parametrize("data", [
    "not a job",
    {"title": ["list"], "link": "https://example.com/1"},
    {"title": "A", "link": 42},
    {"title": "A", "link": "https://example.com/1", "pubDate": 12345},
])
def test_job_from_dict_rejects_wrong_types(data):
    with pytest.raises(ValueError):
        JobListing.from_dict(data)


@pytest.mark.parametrize("data", [
    [],
    {"timestamp": 0, "jobs": []},
    {"feedUrl": "u", "timestamp": "0", "jobs": []},
    {"feedUrl": "u", "timestamp": True, "jobs": []},
    {"feedUrl": "u", "timestamp": 0, "jobs": "oops"},
    {"feedUrl": "u", "timestamp": 0, "jobs": ["oops"]},
])
def test_cache_entry_from_dict_rejects_wrong_shape(data):
    with pytest.raises(ValueError):
        FeedCacheEntry.from_dict(data)


def test_scored_job_weights_title_double():
    job = JobListing(title="A", link="https://example.com/1")
    assert ScoredJob(job, title_hits=1, description_hits=0).relevance_score == 2
    assert ScoredJob(job, title_hits=0, description_hits=1).relevance_score == 1
    assert ScoredJob(job, title_hits=2, description_hits=3).relevance_score == 7


def test_cache_entry_timestamp_in_millis():
    entry = FeedCacheEntry(
        feed_url="https://feed-a.test/rss",
        fetched_at=1_700_000_000.5,
        jobs=[JobListing(title="A", link="https://example.com/1")],
    )
    d = entry.to_dict()
    assert d["feedUrl"] == "https://feed-a.test/rss"
    assert d["timestamp"] == 1_700_000_000_500
    assert d["jobs"][0]["link"] == "https://example.com/1"

    restored = FeedCacheEntry.from_dict(d)
    assert restored.fetched_at == pytest.approx(1_700_000_000.5)
    assert restored.jobs == entry.jobs


def test_cache_entry_freshness():
    entry = FeedCacheEntry(feed_url="u", fetched_at=1000.0)
    assert entry.is_fresh(ttl_seconds=60, now=1060.0)
    assert not entry.is_fresh(ttl_seconds=60, now=1060.5)


def test_search_result_to_dict():
    job = JobListing(title="A", link="https://example.com/1")
    result = SearchResult(jobs=[job], total=1, query="a query")
    assert result.to_dict() == {
        "jobs": [job.to_dict()],
        "total": 1,
        "query": "a query",
    }

"""Data models for the feed pipeline."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Optional

from job_feeds.errors import FetchError


@dataclass(frozen=True)
class JobListing:
    """A single job posting parsed from a feed.

    Listings are immutable once produced by the fetcher. The ``link`` is
    the canonical URL and doubles as the deduplication key.
    """

    title: str
    link: str
    description: str = ""
    pub_date: Optional[str] = None  # ISO 8601, UTC
    source: str = ""  # originating feed URL

    @property
    def link_key(self) -> str:
        """Case-insensitive, trimmed link used for cross-feed dedup."""
        return self.link.strip().lower()

    def to_dict(self) -> dict:
        """Serialize to the on-disk / API shape (camelCase ``pubDate``)."""
        return {
            "title": self.title,
            "link": self.link,
            "description": self.description,
            "pubDate": self.pub_date,
            "source": self.source,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "JobListing":
        """Build a listing from its serialized form.

        Raises:
            ValueError: data is not a mapping, or a field has the wrong type
        """
        if not isinstance(data, dict):
            raise ValueError(f"job must be an object, got {type(data).__name__}")

        values = {}
        for key in ("title", "link", "description", "source"):
            value = data.get(key) or ""
            if not isinstance(value, str):
                raise ValueError(f"job field {key!r} must be a string")
            values[key] = value

        pub_date = data.get("pubDate")
        if pub_date is not None and not isinstance(pub_date, str):
            raise ValueError("job field 'pubDate' must be a string or null")

        return cls(pub_date=pub_date, **values)

    def __repr__(self) -> str:
        return f"JobListing(title={self.title!r}, link={self.link!r}, source={self.source!r})"


@dataclass
class ScoredJob:
    """A listing plus its per-query relevance. Never persisted."""

    job: JobListing
    title_hits: int
    description_hits: int

    @property
    def relevance_score(self) -> int:
        # Title matches weigh twice as much as description matches
        return 2 * self.title_hits + self.description_hits


@dataclass
class FeedCacheEntry:
    """Cached listings for one feed URL.

    ``fetched_at`` is epoch seconds; on disk it is stored as epoch
    millis under ``timestamp``.
    """

    feed_url: str
    fetched_at: float
    jobs: list[JobListing] = field(default_factory=list)

    def age_seconds(self, now: float | None = None) -> float:
        now = time.time() if now is None else now
        return now - self.fetched_at

    def is_fresh(self, ttl_seconds: float, now: float | None = None) -> bool:
        return self.age_seconds(now) <= ttl_seconds

    def to_dict(self) -> dict:
        return {
            "feedUrl": self.feed_url,
            "timestamp": int(self.fetched_at * 1000),
            "jobs": [job.to_dict() for job in self.jobs],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "FeedCacheEntry":
        """Raises ValueError when the stored entry has the wrong shape."""
        if not isinstance(data, dict):
            raise ValueError("cache entry must be an object")

        feed_url = data.get("feedUrl")
        timestamp = data.get("timestamp")
        jobs = data.get("jobs", [])
        if not isinstance(feed_url, str):
            raise ValueError("cache entry 'feedUrl' must be a string")
        if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
            raise ValueError("cache entry 'timestamp' must be a number")
        if not isinstance(jobs, list):
            raise ValueError("cache entry 'jobs' must be a list")

        return cls(
            feed_url=feed_url,
            fetched_at=timestamp / 1000.0,
            jobs=[JobListing.from_dict(j) for j in jobs],
        )


@dataclass
class FeedResult:
    """Outcome of looking up one feed: either jobs or an error."""

    feed_url: str
    jobs: list[JobListing] = field(default_factory=list)
    error: Optional[FetchError] = None
    from_cache: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class SearchResult:
    """What ``search()`` hands back to callers."""

    jobs: list[JobListing]
    total: int
    query: str

    def to_dict(self) -> dict:
        return {
            "jobs": [job.to_dict() for job in self.jobs],
            "total": self.total,
            "query": self.query,
        }


@dataclass
class RefreshSummary:
    refreshed: int = 0
    failed: int = 0

    def to_dict(self) -> dict:
        return {"refreshed": self.refreshed, "failed": self.failed}


@dataclass
class CacheStats:
    total_files: int = 0
    total_size: int = 0
    oldest_file: Optional[str] = None
    newest_file: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "totalFiles": self.total_files,
            "totalSize": self.total_size,
            "oldestFile": self.oldest_file,
            "newestFile": self.newest_file,
        }

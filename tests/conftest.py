"""Shared fakes for pipeline tests."""

from __future__ import annotations

import threading
import time

import pytest

from job_feeds.config import FeedSource, PipelineConfig
from job_feeds.models import JobListing


class FakeFetcher:
    """Stands in for FeedFetcher; serves canned listings or raises.

    ``feeds`` maps feed URL to a list of listings or an exception instance.
    """

    def __init__(self, feeds: dict, delays: dict | None = None):
        self.feeds = feeds
        self.delays = delays or {}
        self.calls: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()

    def fetch(self, feed_url: str) -> list[JobListing]:
        with self._lock:
            self.calls.append(feed_url)
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            delay = self.delays.get(feed_url)
            if delay:
                time.sleep(delay)
            result = self.feeds[feed_url]
            if isinstance(result, Exception):
                raise result
            return list(result)
        finally:
            with self._lock:
                self.in_flight -= 1


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_job(title: str, link: str, source: str = "https://feed-a.test/rss", **kwargs) -> JobListing:
    return JobListing(title=title, link=link, source=source, **kwargs)


def make_config(feed_urls: list[str], cache_dir, **kwargs) -> PipelineConfig:
    return PipelineConfig(
        feeds=[FeedSource(url=u) for u in feed_urls],
        cache_dir=str(cache_dir),
        **kwargs,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()

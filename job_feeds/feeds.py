"""RSS/Atom feed fetcher.

Downloads a feed with a bounded timeout and parses it into uniform
``JobListing`` records. Failures are raised as ``FetchError`` subclasses;
the cache layer decides what to do with them.

Parsing tolerates partial malformation: a body that feedparser flags as
broken but still yields entries is accepted, and a single entry that
cannot be read is skipped without dropping the rest of the feed.
"""

from __future__ import annotations

import calendar
import logging
import time
from datetime import datetime, timezone
from typing import Any, Optional

import feedparser
import requests
from bs4 import BeautifulSoup

from job_feeds.config import PipelineConfig
from job_feeds.errors import FeedFetchError, FeedParseError
from job_feeds.models import JobListing

logger = logging.getLogger(__name__)

NO_TITLE = "No title"
NO_DESCRIPTION = "No description"


class FeedFetcher:
    """Fetches and parses job feeds over HTTP.

    One instance is shared by all threads of a query or refresh batch;
    ``requests.Session`` is safe for that as long as its configuration is
    not changed while requests are in flight.
    """

    def __init__(self, config: PipelineConfig, session: requests.Session | None = None):
        self.config = config
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": config.user_agent})

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def fetch(self, feed_url: str) -> list[JobListing]:
        """Download and parse one feed.

        Raises:
            FeedFetchError: network error, timeout or non-2xx status
            FeedParseError: body is not a usable feed
        """
        resp = self._get(feed_url)
        jobs = self.parse(feed_url, resp.content)
        logger.debug("Fetched %d items from %s", len(jobs), feed_url)
        return jobs

    def parse(self, feed_url: str, body: bytes | str) -> list[JobListing]:
        """Parse a feed document into listings tagged with ``feed_url``."""
        try:
            parsed = feedparser.parse(body)
        except Exception as exc:
            raise FeedParseError(feed_url, f"unparseable feed: {exc}") from exc

        entries = parsed.get("entries") or []
        if parsed.get("bozo") and not entries:
            reason = parsed.get("bozo_exception") or "malformed feed"
            raise FeedParseError(feed_url, str(reason))

        jobs: list[JobListing] = []
        for entry in entries:
            try:
                job = self._parse_entry(entry, feed_url)
            except Exception as exc:
                logger.warning("Skipping malformed item in %s: %s", feed_url, exc)
                continue
            if job:
                jobs.append(job)

        return jobs

    # ------------------------------------------------------------------
    # Parsing helpers
    # ------------------------------------------------------------------

    def _parse_entry(self, entry: Any, feed_url: str) -> JobListing | None:
        """Convert a single feed entry into a JobListing."""
        link = (entry.get("link") or "").strip()
        if not link:
            # Link is the dedup key; an item without one cannot be tracked
            logger.debug("Skipping item without link in %s", feed_url)
            return None

        title = self._html_to_text(entry.get("title") or "") or NO_TITLE

        raw_description = entry.get("summary") or entry.get("description") or ""
        if not raw_description and entry.get("content"):
            raw_description = entry["content"][0].get("value", "")
        description = self._html_to_text(raw_description)
        description = description[: self.config.description_max_length] or NO_DESCRIPTION

        return JobListing(
            title=title,
            link=link,
            description=description,
            pub_date=self._entry_date(entry),
            source=feed_url,
        )

    @staticmethod
    def _entry_date(entry: Any) -> Optional[str]:
        """Published (or updated) time as an ISO 8601 UTC string."""
        struct = entry.get("published_parsed") or entry.get("updated_parsed")
        if not struct:
            return None
        # feedparser normalizes parsed times to UTC
        ts = calendar.timegm(struct)
        return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat()

    @staticmethod
    def _html_to_text(html: str) -> str:
        """Convert HTML content to plain text."""
        if not html:
            return ""
        if "<" not in html and "&" not in html:
            return html.strip()
        soup = BeautifulSoup(html, "html.parser")
        return soup.get_text(separator=" ", strip=True)

    # ------------------------------------------------------------------
    # HTTP helpers
    # ------------------------------------------------------------------

    def _get(self, url: str) -> requests.Response:
        """GET with the configured timeout and retry count."""
        attempts = max(1, self.config.request_retries)

        for attempt in range(1, attempts + 1):
            try:
                resp = self.session.get(url, timeout=self.config.request_timeout_seconds)
                resp.raise_for_status()
                return resp
            except requests.RequestException as exc:
                logger.debug("GET %s attempt %d failed: %s", url, attempt, exc)
                if attempt == attempts:
                    raise FeedFetchError(url, str(exc)) from exc
                time.sleep(2 ** attempt)

        # Unreachable, but keeps type checkers happy
        raise RuntimeError("Retry loop exited unexpectedly")

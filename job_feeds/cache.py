"""On-disk feed cache for the job search pipeline.

One JSON file per feed in the cache directory::

    {"feedUrl": "...", "timestamp": <epoch millis>, "jobs": [...]}

File names are the SHA-256 hex digest of the feed URL, so they are
collision-resistant and filesystem-safe.

Reads are served from disk while the entry is younger than the TTL;
otherwise the feed is fetched live and written through. All writes use
the atomic write pattern:
  1. Write to .tmp file
  2. fsync
  3. Rename to target (atomic on POSIX)

Concurrent writers for the same feed race harmlessly: last writer wins.

Nothing in here raises to callers of ``get``/``fetch``. Fetch, parse and
cache I/O errors degrade to "no jobs from this feed this round" and are
logged and kept in ``recent_errors()``.
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
import threading
import time
from pathlib import Path
from typing import Any, Callable, Iterable

from job_feeds.config import PipelineConfig
from job_feeds.errors import CacheError, FetchError
from job_feeds.feeds import FeedFetcher
from job_feeds.models import CacheStats, FeedCacheEntry, FeedResult, JobListing

logger = logging.getLogger(__name__)


def cache_key(feed_url: str) -> str:
    """Stable, filesystem-safe key for a feed URL."""
    return hashlib.sha256(feed_url.encode("utf-8")).hexdigest()


class FeedCache:
    """TTL cache in front of a ``FeedFetcher``."""

    def __init__(
        self,
        config: PipelineConfig,
        fetcher: FeedFetcher | None = None,
        cache_dir: str | Path | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.config = config
        self.fetcher = fetcher or FeedFetcher(config)
        self.cache_dir = Path(cache_dir or config.cache_dir)
        self.ttl_seconds = config.cache_ttl_seconds
        self._clock = clock
        self._errors: dict[str, str] = {}
        self._errors_lock = threading.Lock()

    # ── Lookup ─────────────────────────────────────────────────────────────

    def get(self, feed_url: str) -> list[JobListing]:
        """Cached or freshly fetched listings for one feed. Never raises."""
        return self.fetch(feed_url).jobs

    def refresh(self, feed_url: str) -> FeedResult:
        """Fetch a feed live regardless of cache age."""
        return self.fetch(feed_url, force=True)

    def fetch(self, feed_url: str, force: bool = False) -> FeedResult:
        """Look up one feed, returning an explicit success/failure result.

        Args:
            feed_url: Feed to look up
            force: Skip the cache read and always fetch live

        Returns:
            FeedResult with either ``jobs`` or ``error`` set
        """
        if not force:
            entry = self.load(feed_url)
            if entry is not None:
                logger.debug(
                    "Cache hit for %s (%d jobs, %.0f min old)",
                    feed_url,
                    len(entry.jobs),
                    entry.age_seconds(self._clock()) / 60,
                )
                return FeedResult(feed_url=feed_url, jobs=list(entry.jobs), from_cache=True)

        try:
            jobs = self.fetcher.fetch(feed_url)
        except FetchError as exc:
            return self._record_failure(feed_url, exc)
        except Exception as exc:
            return self._record_failure(feed_url, FetchError(feed_url, repr(exc)))

        try:
            self.save(feed_url, jobs)
        except CacheError as exc:
            # Fresh data is still good even if it could not be persisted
            logger.warning("Cache write failed for %s: %s", feed_url, exc)

        self._clear_failure(feed_url)
        logger.info("Fetched %s: %d jobs", feed_url, len(jobs))
        return FeedResult(feed_url=feed_url, jobs=jobs)

    # ── Disk I/O ───────────────────────────────────────────────────────────

    def path_for(self, feed_url: str) -> Path:
        return self.cache_dir / f"{cache_key(feed_url)}.json"

    def load(self, feed_url: str) -> FeedCacheEntry | None:
        """Return the cached entry for a feed if it exists and is fresh.

        Unreadable or corrupted files count as a miss.
        """
        path = self.path_for(feed_url)
        if not path.exists():
            return None

        try:
            data = _read_json(path)
            entry = FeedCacheEntry.from_dict(data)
        except (CacheError, KeyError, TypeError, ValueError) as exc:
            logger.warning("Ignoring unreadable cache file %s: %s", path, exc)
            return None

        if entry.feed_url != feed_url:
            logger.warning("Cache file %s belongs to %s, ignoring", path, entry.feed_url)
            return None

        if not entry.is_fresh(self.ttl_seconds, now=self._clock()):
            logger.debug("Cache for %s is stale", feed_url)
            return None

        return entry

    def save(self, feed_url: str, jobs: list[JobListing]) -> FeedCacheEntry:
        """Write listings for a feed, stamped with the current time.

        Raises:
            CacheError: the directory or file could not be written
        """
        entry = FeedCacheEntry(feed_url=feed_url, fetched_at=self._clock(), jobs=list(jobs))
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise CacheError(f"cannot create {self.cache_dir}: {exc}") from exc
        _atomic_write_json(self.path_for(feed_url), entry.to_dict())
        return entry

    def clear(self) -> int:
        """Delete all cache files. Returns the number removed."""
        if not self.cache_dir.is_dir():
            return 0

        removed = 0
        for path in self.cache_dir.glob("*.json"):
            try:
                path.unlink()
                removed += 1
            except OSError as exc:
                logger.warning("Could not remove %s: %s", path, exc)

        logger.info("Cleared %d cache files from %s", removed, self.cache_dir)
        return removed

    def stats(self) -> CacheStats:
        """File count, total size, and oldest/newest file by mtime."""
        stats = CacheStats()
        if not self.cache_dir.is_dir():
            return stats

        oldest_time = float("inf")
        newest_time = 0.0
        for path in self.cache_dir.glob("*.json"):
            try:
                st = path.stat()
            except OSError:
                continue
            stats.total_files += 1
            stats.total_size += st.st_size
            if st.st_mtime < oldest_time:
                oldest_time = st.st_mtime
                stats.oldest_file = path.name
            if st.st_mtime > newest_time:
                newest_time = st.st_mtime
                stats.newest_file = path.name

        return stats

    # ── Failure registry ───────────────────────────────────────────────────

    def recent_errors(self) -> dict[str, str]:
        """Last error message per feed that is currently failing."""
        with self._errors_lock:
            return dict(self._errors)

    def _record_failure(self, feed_url: str, error: FetchError) -> FeedResult:
        logger.warning("Feed failed, contributing 0 jobs: %s (%s)", error, type(error).__name__)
        with self._errors_lock:
            self._errors[feed_url] = error.message
        return FeedResult(feed_url=feed_url, error=error)

    def _clear_failure(self, feed_url: str) -> None:
        with self._errors_lock:
            self._errors.pop(feed_url, None)


# ── Deduplication ──────────────────────────────────────────────────────────


def dedupe_jobs(jobs: Iterable[JobListing]) -> list[JobListing]:
    """Keep the first listing per link (case-insensitive, trimmed).

    Input order must be the configured feed order, so that the earliest
    configured feed wins for jobs listed in several feeds.
    """
    seen: set[str] = set()
    unique: list[JobListing] = []
    duplicates = 0

    for job in jobs:
        key = job.link_key
        if key in seen:
            duplicates += 1
            continue
        seen.add(key)
        unique.append(job)

    if duplicates:
        logger.debug("Dropped %d duplicate listings", duplicates)
    return unique


# ── Internal Helpers ───────────────────────────────────────────────────────


def _read_json(path: Path) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (json.JSONDecodeError, OSError, UnicodeDecodeError) as exc:
        raise CacheError(f"cannot read {path}: {exc}") from exc


def _atomic_write_json(path: Path, data: Any) -> None:
    """Write JSON data atomically using temp file + rename.

    The temp name is unique per thread so that concurrent refreshes of the
    same feed do not clobber each other's half-written files.
    """
    tmp_path = path.with_name(f"{path.name}.{os.getpid()}.{threading.get_ident()}.tmp")

    try:
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.flush()
            os.fsync(f.fileno())

        os.replace(tmp_path, path)
    except OSError as exc:
        # Clean up temp file if it exists
        if tmp_path.exists():
            tmp_path.unlink()
        raise CacheError(f"cannot write {path}: {exc}") from exc

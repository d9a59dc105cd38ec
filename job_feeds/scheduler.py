"""Background refresh of all configured feeds.

``FeedScheduler`` is an explicit handle with two states, idle and
running. ``start()`` launches a daemon thread that refreshes every feed
immediately and then once per interval; ``stop()`` signals that thread
and waits for it. Both are no-ops when already in the target state.

Refreshes walk the feed list in batches; feeds within a batch are
fetched concurrently, so the batch size bounds simultaneous outbound
requests. A failing feed only counts towards ``failed``.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor

from job_feeds.cache import FeedCache
from job_feeds.config import PipelineConfig
from job_feeds.models import CacheStats, RefreshSummary

logger = logging.getLogger(__name__)


class FeedScheduler:
    """Periodically force-refreshes the feed cache."""

    def __init__(self, config: PipelineConfig, cache: FeedCache | None = None):
        self.config = config
        self.cache = cache or FeedCache(config)
        self.interval_minutes = config.refresh_interval_minutes
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    # ------------------------------------------------------------------
    # Control surface
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._thread is not None

    def start(self, interval_minutes: float | None = None) -> bool:
        """Start periodic refreshes. Returns False if already running."""
        with self._lock:
            if self._thread is not None:
                logger.debug("Scheduler already running")
                return False

            if interval_minutes is not None:
                if interval_minutes <= 0:
                    raise ValueError("interval_minutes must be positive")
                self.interval_minutes = interval_minutes

            self._stop_event = threading.Event()
            self._thread = threading.Thread(
                target=self._run,
                args=(self._stop_event, self.interval_minutes * 60),
                name="feed-scheduler",
                daemon=True,
            )
            self._thread.start()

        logger.info("Feed scheduler started (every %g minutes)", self.interval_minutes)
        return True

    def stop(self, timeout: float | None = None) -> bool:
        """Stop periodic refreshes. Returns False if not running.

        A refresh pass already in progress is allowed to finish its
        current batch of fetches.
        """
        with self._lock:
            thread = self._thread
            if thread is None:
                logger.debug("Scheduler not running")
                return False
            self._stop_event.set()
            self._thread = None

        if thread is not threading.current_thread():
            thread.join(timeout)
        logger.info("Feed scheduler stopped")
        return True

    def refresh_all(self) -> RefreshSummary:
        """Force-refresh every configured feed in bounded batches."""
        return self._refresh_feeds(self.config.feed_urls)

    def clear_cache(self) -> int:
        return self.cache.clear()

    def stats(self) -> CacheStats:
        return self.cache.stats()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _refresh_feeds(self, feed_urls: list[str], stop_event: threading.Event | None = None) -> RefreshSummary:
        summary = RefreshSummary()
        batch_size = max(1, self.config.refresh_batch_size)
        logger.info("Refreshing %d feeds (batch size %d)", len(feed_urls), batch_size)

        for i in range(0, len(feed_urls), batch_size):
            if stop_event is not None and stop_event.is_set():
                logger.info("Refresh interrupted by stop()")
                break

            batch = feed_urls[i:i + batch_size]
            with ThreadPoolExecutor(max_workers=len(batch)) as pool:
                results = list(pool.map(self.cache.refresh, batch))

            for result in results:
                if result.ok:
                    summary.refreshed += 1
                else:
                    summary.failed += 1

        logger.info("Refresh complete: %d refreshed, %d failed", summary.refreshed, summary.failed)
        return summary

    def _run(self, stop_event: threading.Event, interval_seconds: float) -> None:
        """Worker loop: refresh now, then once per interval until stopped."""
        while not stop_event.is_set():
            try:
                self._refresh_feeds(self.config.feed_urls, stop_event)
            except Exception:
                logger.exception("Scheduled refresh failed")
            if stop_event.wait(interval_seconds):
                break

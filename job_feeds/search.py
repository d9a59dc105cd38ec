"""Search orchestrator: query text in, ranked job listings out.

This is the core pipeline:
  1. Extract keywords from the query (empty set -> empty result)
  2. Look up every configured feed through the cache, concurrently
  3. Concatenate per-feed results in configured feed order
  4. Deduplicate by link (first configured feed wins)
  5. Filter, score, sort and truncate

Feed failures never surface here: the cache turns them into empty
per-feed results.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor

from job_feeds.cache import FeedCache, dedupe_jobs
from job_feeds.config import PipelineConfig, load_config
from job_feeds.keywords import extract_keywords
from job_feeds.models import FeedResult, JobListing, SearchResult
from job_feeds.ranker import rank_jobs

logger = logging.getLogger(__name__)


class JobSearchPipeline:
    """Runs keyword searches across all configured feeds."""

    def __init__(self, config: PipelineConfig, cache: FeedCache | None = None):
        self.config = config
        self.cache = cache or FeedCache(config)

    def search(self, query: str, limit: int | None = None) -> SearchResult:
        """Search all feeds for jobs matching the query.

        Never raises: unexpected internal errors are logged and degrade to
        an empty result.
        """
        if limit is None:
            limit = self.config.default_limit

        try:
            return self._search(query, limit)
        except Exception:
            logger.exception("Search failed for query %r", query)
            return SearchResult(jobs=[], total=0, query=query)

    def _search(self, query: str, limit: int) -> SearchResult:
        keywords = extract_keywords(
            query,
            use_stemming=self.config.use_stemming,
            extra_stopwords=self.config.extra_stopwords,
        )
        logger.info("Search %r: keywords=%s limit=%d", query, keywords, limit)

        if not keywords:
            logger.info("No keywords extracted from %r, returning no results", query)
            return SearchResult(jobs=[], total=0, query=query)

        results = self.collect()
        all_jobs: list[JobListing] = []
        for result in results:
            all_jobs.extend(result.jobs)

        deduped = dedupe_jobs(all_jobs)
        ranked = rank_jobs(deduped, keywords, limit)

        self._log_stats(results, len(all_jobs), len(deduped), len(ranked))
        return SearchResult(jobs=ranked, total=len(ranked), query=query)

    def collect(self) -> list[FeedResult]:
        """Look up all feeds; results come back in configured feed order."""
        feed_urls = self.config.feed_urls
        if not feed_urls:
            return []

        workers = max(1, min(self.config.max_concurrent_fetches, len(feed_urls)))
        # map() yields in submission order, not completion order
        with ThreadPoolExecutor(max_workers=workers) as pool:
            return list(pool.map(self.cache.fetch, feed_urls))

    def _log_stats(
        self,
        results: list[FeedResult],
        total: int,
        deduped: int,
        returned: int,
    ) -> None:
        cached = sum(1 for r in results if r.from_cache)
        failed = sum(1 for r in results if not r.ok)
        logger.info(
            "Feeds: %d (%d cached, %d failed); jobs: %d total, %d after dedup, %d returned",
            len(results),
            cached,
            failed,
            total,
            deduped,
            returned,
        )


def search(query: str, limit: int | None = None, config: PipelineConfig | None = None) -> SearchResult:
    """One-shot search using the given (or default) configuration."""
    pipeline = JobSearchPipeline(config or load_config())
    return pipeline.search(query, limit)

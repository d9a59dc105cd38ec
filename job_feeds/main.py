"""Command line entry point for the job feed pipeline.

Usage:
    python -m job_feeds.main search "flutter developer"      # ranked results
    python -m job_feeds.main search "top 5 python jobs" --json
    python -m job_feeds.main status                          # cache stats
    python -m job_feeds.main refresh                         # refresh all feeds now
    python -m job_feeds.main clear                           # delete cache files
    python -m job_feeds.main scheduler --interval 30         # refresh periodically
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from datetime import datetime

from job_feeds.cache import FeedCache
from job_feeds.config import PipelineConfig, load_config
from job_feeds.keywords import extract_limit
from job_feeds.models import SearchResult
from job_feeds.scheduler import FeedScheduler
from job_feeds.search import JobSearchPipeline

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO") -> None:
    """Configure logging for the pipeline."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Job feed search — aggregate, cache and rank job postings "
        "from public RSS feeds."
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to config.yaml (default: config.yaml in project root)",
    )
    parser.add_argument(
        "--cache-dir",
        type=str,
        default=None,
        help="Override cache directory (default: from config)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug-level logging",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    search_p = sub.add_parser("search", help="Search feeds for matching jobs")
    search_p.add_argument("query", help="Free-text query, e.g. 'flutter developer'")
    search_p.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Maximum results (default: count in the query, else config default_limit)",
    )
    search_p.add_argument("--json", action="store_true", help="Print results as JSON")

    sub.add_parser("status", help="Show cache status and stats")
    sub.add_parser("refresh", help="Refresh all feeds now")
    sub.add_parser("clear", help="Delete all cache files")

    sched_p = sub.add_parser("scheduler", help="Run the periodic refresher until interrupted")
    sched_p.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Minutes between refreshes (default: from config)",
    )

    return parser.parse_args(argv)


def print_results(result: SearchResult, as_json: bool = False) -> None:
    if as_json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        return

    print(f"{result.total} job(s) for {result.query!r}")
    for i, job in enumerate(result.jobs, 1):
        print(f"\n{i}. {job.title}")
        print(f"   {job.link}")
        if job.pub_date:
            print(f"   Posted: {job.pub_date}")
        print(f"   Source: {job.source}")


def _format_size(num_bytes: int) -> str:
    size = float(num_bytes)
    for unit in ("B", "KB", "MB"):
        if size < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} GB"


def run_scheduler(scheduler: FeedScheduler, interval: float | None) -> None:
    scheduler.start(interval)
    try:
        # Block the main thread; the refresh loop runs in the background
        while scheduler.is_running:
            time.sleep(1)
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        scheduler.stop()


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    config: PipelineConfig = load_config(args.config)
    if args.cache_dir:
        config.cache_dir = args.cache_dir
    setup_logging("DEBUG" if args.verbose else config.log_level)
    logger.debug("Loaded config with %d feeds", len(config.feeds))

    cache = FeedCache(config)

    if args.command == "search":
        limit = args.limit
        if limit is None:
            limit = extract_limit(args.query, default=config.default_limit)
        result = JobSearchPipeline(config, cache=cache).search(args.query, limit)
        print_results(result, as_json=args.json)
        return 0

    scheduler = FeedScheduler(config, cache=cache)

    if args.command == "status":
        stats = scheduler.stats()
        print(f"Cache directory: {cache.cache_dir}")
        print(f"Files:  {stats.total_files}")
        print(f"Size:   {_format_size(stats.total_size)}")
        for label, name in (("Oldest", stats.oldest_file), ("Newest", stats.newest_file)):
            if name:
                mtime = datetime.fromtimestamp((cache.cache_dir / name).stat().st_mtime)
                print(f"{label}: {name} ({mtime:%Y-%m-%d %H:%M:%S})")
        return 0

    if args.command == "refresh":
        summary = scheduler.refresh_all()
        print(f"Refreshed: {summary.refreshed}, failed: {summary.failed}")
        return 0 if summary.refreshed or not config.feed_urls else 1

    if args.command == "clear":
        removed = scheduler.clear_cache()
        print(f"Removed {removed} cache file(s)")
        return 0

    if args.command == "scheduler":
        run_scheduler(scheduler, args.interval)
        return 0

    return 2


if __name__ == "__main__":
    sys.exit(main())

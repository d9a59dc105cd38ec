"""Configuration loader for the feed pipeline.

Reads config.yaml and returns typed configuration objects that the
fetcher, cache, search pipeline and scheduler consume.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.yaml"


@dataclass
class FeedSource:
    """A single configured RSS/Atom feed."""

    url: str
    name: str = ""
    enabled: bool = True


@dataclass
class PipelineConfig:
    """Top-level pipeline configuration.

    ``feeds`` order is significant: it decides which duplicate survives
    deduplication (first configured feed wins).
    """

    feeds: list[FeedSource] = field(default_factory=list)
    log_level: str = "INFO"

    # Cache
    cache_dir: str = ".cache/jobs"
    cache_ttl_hours: float = 4.0

    # Fetching
    request_timeout_seconds: float = 8.0
    request_retries: int = 1
    description_max_length: int = 500
    max_concurrent_fetches: int = 5
    user_agent: str = (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )

    # Search
    default_limit: int = 10
    use_stemming: bool = True
    extra_stopwords: list[str] = field(default_factory=list)

    # Scheduler
    refresh_interval_minutes: float = 30.0
    refresh_batch_size: int = 5

    @property
    def enabled_feeds(self) -> list[FeedSource]:
        return [f for f in self.feeds if f.enabled]

    @property
    def feed_urls(self) -> list[str]:
        """Enabled feed URLs in configured order."""
        return [f.url for f in self.enabled_feeds]

    @property
    def cache_ttl_seconds(self) -> float:
        return self.cache_ttl_hours * 60 * 60


def _parse_feed(raw: str | dict) -> FeedSource:
    # Feeds may be listed as bare URLs or as mappings
    if isinstance(raw, str):
        return FeedSource(url=raw)
    return FeedSource(
        url=raw["url"],
        name=raw.get("name", ""),
        enabled=raw.get("enabled", True),
    )


def load_config(path: Path | str | None = None) -> PipelineConfig:
    """Load and validate the pipeline configuration from a YAML file."""
    config_path = Path(path) if path else DEFAULT_CONFIG_PATH

    if not config_path.exists():
        logger.warning("Config file not found at %s — using defaults", config_path)
        return PipelineConfig()

    with open(config_path, "r") as f:
        raw = yaml.safe_load(f)

    if not raw:
        return PipelineConfig()

    feeds = [_parse_feed(item) for item in raw.get("feeds", [])]

    defaults = PipelineConfig()
    return PipelineConfig(
        feeds=feeds,
        log_level=raw.get("log_level", defaults.log_level),
        cache_dir=raw.get("cache_dir", defaults.cache_dir),
        cache_ttl_hours=raw.get("cache_ttl_hours", defaults.cache_ttl_hours),
        request_timeout_seconds=raw.get(
            "request_timeout_seconds", defaults.request_timeout_seconds
        ),
        request_retries=raw.get("request_retries", defaults.request_retries),
        description_max_length=raw.get(
            "description_max_length", defaults.description_max_length
        ),
        max_concurrent_fetches=raw.get(
            "max_concurrent_fetches", defaults.max_concurrent_fetches
        ),
        user_agent=raw.get("user_agent", defaults.user_agent),
        default_limit=raw.get("default_limit", defaults.default_limit),
        use_stemming=raw.get("use_stemming", defaults.use_stemming),
        extra_stopwords=raw.get("extra_stopwords", []),
        refresh_interval_minutes=raw.get(
            "refresh_interval_minutes", defaults.refresh_interval_minutes
        ),
        refresh_batch_size=raw.get("refresh_batch_size", defaults.refresh_batch_size),
    )

"""Tests for configuration loading."""

import tempfile

import yaml

from job_feeds.config import PipelineConfig, load_config


def test_load_default_config():
    """Loading the project's config.yaml should work."""
    config = load_config()
    assert isinstance(config, PipelineConfig)
    assert len(config.feeds) > 0
    assert config.cache_ttl_hours == 4
    assert config.refresh_batch_size == 5


def test_default_config_keeps_feed_order():
    config = load_config()
    assert config.feed_urls[0] == "https://www.smartremotejobs.com/feed/all.rss"
    assert config.feed_urls[-1] == "https://jobicy.com/feed/job_feed"


def test_load_missing_file():
    """Missing config file returns defaults."""
    config = load_config("/nonexistent/path.yaml")
    assert isinstance(config, PipelineConfig)
    assert config.feeds == []
    assert config.default_limit == 10
    assert config.request_timeout_seconds == 8.0
    assert config.refresh_interval_minutes == 30.0


def test_ttl_seconds():
    assert PipelineConfig(cache_ttl_hours=4).cache_ttl_seconds == 4 * 3600


def test_custom_config():
    """Feeds may be bare URLs or mappings; disabled feeds are skipped."""
    data = {
        "log_level": "DEBUG",
        "cache_dir": "/tmp/job-cache",
        "cache_ttl_hours": 1,
        "use_stemming": False,
        "extra_stopwords": ["senior"],
        "feeds": [
            "https://feed-a.test/rss",
            {"name": "b", "url": "https://feed-b.test/rss", "enabled": False},
            {"name": "c", "url": "https://feed-c.test/rss"},
        ],
    }

    with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        yaml.dump(data, f)
        f.flush()
        config = load_config(f.name)

    assert config.log_level == "DEBUG"
    assert config.cache_dir == "/tmp/job-cache"
    assert config.cache_ttl_seconds == 3600
    assert config.use_stemming is False
    assert config.extra_stopwords == ["senior"]
    assert len(config.feeds) == 3
    assert config.feeds[1].name == "b"
    assert config.feed_urls == ["https://feed-a.test/rss", "https://feed-c.test/rss"]
    # Unset keys keep their defaults
    assert config.refresh_batch_size == 5

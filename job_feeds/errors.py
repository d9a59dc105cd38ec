"""Exception types for the feed pipeline.

Fetch and parse errors are raised by the fetcher and caught at the cache
layer, where they become an empty per-feed result. They never reach
callers of ``search()``.
"""

from __future__ import annotations


class FeedError(Exception):
    """Base class for all feed pipeline errors."""


class FetchError(FeedError):
    """A feed could not be turned into job listings this round."""

    def __init__(self, feed_url: str, message: str):
        super().__init__(f"{feed_url}: {message}")
        self.feed_url = feed_url
        self.message = message


class FeedFetchError(FetchError):
    """Network failure, timeout, or non-2xx response."""


class FeedParseError(FetchError):
    """The response body is not a usable RSS/Atom document."""


class CacheError(FeedError):
    """A cache file could not be read or written."""

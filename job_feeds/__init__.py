"""Aggregate, cache and rank job postings from public RSS feeds."""

__version__ = "1.0.0"

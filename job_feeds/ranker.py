"""Relevance ranking of job listings against query keywords.

Matching is plain substring matching on the lowercased title and
description, so a keyword such as "java" also matches "javascript".
Each keyword counts at most once per field.

Score = 2 × (keywords in title) + 1 × (keywords in description).
Listings with a score of zero are dropped. Ties are broken by
publication date, newest first; listings without a usable date sort
as the oldest.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, Sequence

from dateutil import parser as date_parser

from job_feeds.models import JobListing, ScoredJob

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 10

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


# ── Date Parsing ────────────────────────────────────────────────────────────


def parse_pub_date(date_str: str | None) -> datetime | None:
    """Parse a publication date into an aware datetime.

    Naive values are taken as UTC. Returns None if parsing fails.
    """
    if not date_str:
        return None

    try:
        parsed = date_parser.parse(date_str)
    except (ValueError, OverflowError, TypeError) as exc:
        logger.debug("Could not parse date %r: %s", date_str, exc)
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _sort_timestamp(job: JobListing) -> float:
    return (parse_pub_date(job.pub_date) or _EPOCH).timestamp()


# ── Scoring ─────────────────────────────────────────────────────────────────


def count_matches(text: str, keywords: Iterable[str]) -> int:
    """Number of distinct keywords that occur in text (case-insensitive)."""
    text_lower = (text or "").lower()
    return sum(1 for kw in set(keywords) if kw in text_lower)


def score_job(job: JobListing, keywords: Sequence[str]) -> ScoredJob:
    return ScoredJob(
        job=job,
        title_hits=count_matches(job.title, keywords),
        description_hits=count_matches(job.description, keywords),
    )


def filter_matching(jobs: Iterable[JobListing], keywords: Sequence[str]) -> list[ScoredJob]:
    """Score every job and keep those with at least one keyword hit."""
    if not keywords:
        return []

    scored = [score_job(job, keywords) for job in jobs]
    return [s for s in scored if s.relevance_score > 0]


# ── Ranking ─────────────────────────────────────────────────────────────────


def sort_scored(scored: Iterable[ScoredJob]) -> list[ScoredJob]:
    """Score descending, then pubDate descending. Stable for equal keys."""
    return sorted(
        scored,
        key=lambda s: (s.relevance_score, _sort_timestamp(s.job)),
        reverse=True,
    )


def rank_jobs(
    jobs: Iterable[JobListing],
    keywords: Sequence[str],
    limit: int = DEFAULT_LIMIT,
) -> list[JobListing]:
    """Filter, score, sort and truncate.

    Args:
        jobs: Deduplicated listings
        keywords: Extracted query keywords
        limit: Maximum number of listings to return

    Returns:
        Plain listings, best match first
    """
    if limit <= 0:
        return []

    matched = filter_matching(jobs, keywords)
    ranked = sort_scored(matched)

    for s in ranked[:limit]:
        logger.debug(
            "score=%d (title=%d, desc=%d) %r",
            s.relevance_score,
            s.title_hits,
            s.description_hits,
            s.job.title[:60],
        )

    return [s.job for s in ranked[:limit]]

"""Keyword extraction from free-text job queries.

Pipeline order:
1. Lowercase
2. Strip punctuation, except ``.``, ``+`` and ``#`` so that tokens such as
   ``c++``, ``c#`` and ``node.js`` survive
3. Split on whitespace, trim sentence dots from token edges
4. Drop short tokens (length <= 2)
5. Stopword removal (English function words + job boilerplate)
6. Porter stemming of plain alphabetic tokens (optional)
7. Deduplicate, keeping first-seen order

An empty result means "no searchable terms", never "match everything".
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, Optional

from nltk.stem import PorterStemmer

logger = logging.getLogger(__name__)

MIN_KEYWORD_LENGTH = 3

STOPWORDS: frozenset[str] = frozenset({
    # Query verbs and filler
    "find", "show", "latest", "want", "get", "give", "list", "search",
    "looking", "need", "please", "can", "could", "would", "any", "some",
    "new", "recent", "top", "best", "good",
    # Job-posting boilerplate
    "job", "jobs", "hiring", "apply", "remote", "role", "roles",
    "position", "positions", "opening", "openings", "listing", "listings",
    "vacancy", "vacancies", "work", "career", "careers", "opportunity",
    "opportunities", "posting", "postings",
    # Function words
    "the", "and", "for", "are", "was", "were", "with", "from", "about",
    "you", "they", "your", "our", "their", "this", "that", "these", "those",
    "what", "which", "who", "where", "when", "how", "all", "has", "have",
    "had", "not", "but", "into", "onto", "than", "then", "there", "here",
    "also", "just", "like", "been", "being", "its", "them", "more", "most",
    "other", "such", "only", "own", "same", "very", "will", "should",
    "now", "out", "over", "under", "again", "once", "both", "each", "few",
    "off", "too", "does", "did", "doing", "her", "him", "his", "hers",
    "she", "mine", "ours", "yours", "theirs", "myself", "yourself",
})

# Unicode letters and digits only; "_" counts as punctuation
_STRIP_RE = re.compile(r"[^\w\s.+#]|_")
_SPLIT_RE = re.compile(r"\s+")

_COUNT_NOUNS = r"(?:jobs?|roles?|positions?|listings?|openings?|results?|postings?|vacancies)"
_LIMIT_PATTERNS = [
    # "top 5", "first 3", "show me 7"
    re.compile(r"\b(?:top|first|latest|show(?:\s+me)?)\s+(\d{1,3})\b"),
    # "5 jobs", "10 python developer roles"
    re.compile(r"\b(\d{1,3})\s+(?:[\w.+#-]+\s+){0,3}?" + _COUNT_NOUNS + r"\b"),
]
MAX_EXTRACTED_LIMIT = 100

_stemmer = PorterStemmer()


def _stem(token: str) -> str:
    """Stem plain words; leave technical tokens (c++, node.js, k8s) alone."""
    if not token.isalpha():
        return token
    stem = _stemmer.stem(token)
    # Keywords are matched as substrings of unstemmed text, so a stem must
    # be a prefix of the word ("ruby" -> "rubi" would never match "Ruby").
    # A stem that is too short would match far too much.
    if len(stem) < MIN_KEYWORD_LENGTH or not token.startswith(stem):
        return token
    return stem


def tokenize_query(query: str) -> list[str]:
    """Steps 1–3: lowercase, strip punctuation, split."""
    if not query:
        return []
    text = _STRIP_RE.sub("", query.lower())
    tokens = []
    for raw in _SPLIT_RE.split(text):
        token = raw.strip(".")
        if token:
            tokens.append(token)
    return tokens


def extract_keywords(
    query: str,
    use_stemming: bool = True,
    extra_stopwords: Optional[Iterable[str]] = None,
) -> list[str]:
    """Turn a raw query into a deduplicated list of significant keywords.

    Args:
        query: Free-text user query, e.g. "Find me remote Flutter jobs"
        use_stemming: Collapse inflections ("developers" -> "develop")
        extra_stopwords: Additional words to ignore

    Returns:
        Keywords in first-seen order. May be empty.
    """
    stopwords = STOPWORDS
    if extra_stopwords:
        stopwords = stopwords | {w.lower() for w in extra_stopwords}

    keywords: list[str] = []
    seen: set[str] = set()

    for token in tokenize_query(query):
        if len(token) < MIN_KEYWORD_LENGTH or token in stopwords:
            continue
        if use_stemming:
            token = _stem(token)
        if token in seen:
            continue
        seen.add(token)
        keywords.append(token)

    logger.debug("Extracted keywords from %r: %s", query, keywords)
    return keywords


def extract_limit(query: str, default: int = 10) -> int:
    """Find an explicit result count in a query ("top 5 python jobs").

    Returns ``default`` when no count in 1..100 is mentioned.
    """
    if not query:
        return default

    text = query.lower()
    for pattern in _LIMIT_PATTERNS:
        match = pattern.search(text)
        if match:
            value = int(match.group(1))
            if 1 <= value <= MAX_EXTRACTED_LIMIT:
                return value
    return default

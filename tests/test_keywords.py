"""Tests for keyword and limit extraction."""

import pytest

from job_feeds.keywords import extract_keywords, extract_limit, tokenize_query


class TestExtractKeywords:

    def test_job_boilerplate_removed(self):
        assert extract_keywords("flutter jobs") == ["flutter"]

    def test_all_stopwords_yields_empty(self):
        assert extract_keywords("Find me the latest remote jobs") == []

    def test_punctuation_only_yields_empty(self):
        assert extract_keywords("!!! ??? ---") == []

    def test_empty_query(self):
        assert extract_keywords("") == []

    def test_short_tokens_dropped(self):
        assert extract_keywords("go ai ml") == []

    def test_technical_tokens_survive(self):
        keywords = extract_keywords("C++ and Node.js developer")
        assert keywords == ["c++", "node.js", "develop"]

    def test_sentence_dots_trimmed(self):
        assert extract_keywords("I know python.", use_stemming=False) == ["know", "python"]

    def test_hyphens_are_stripped(self):
        assert extract_keywords("full-stack", use_stemming=False) == ["fullstack"]

    def test_stemming_collapses_inflections(self):
        assert extract_keywords("developers developer") == ["develop"]

    def test_without_stemming(self):
        assert extract_keywords("Python developers", use_stemming=False) == ["python", "developers"]

    def test_short_stem_falls_back_to_token(self):
        assert extract_keywords("ios") == ["ios"]

    @pytest.mark.parametrize("query,expected", [
        ("ruby developer", ["ruby", "develop"]),
        ("strategy", ["strategy"]),
        ("company", ["company"]),
    ])
    def test_stem_that_is_not_a_prefix_falls_back_to_token(self, query, expected):
        # "ruby" stems to "rubi", which never occurs in "Ruby on Rails"
        assert extract_keywords(query) == expected

    def test_stemmed_keywords_are_prefixes_of_their_words(self):
        query = "engineering managers strategies analytics companies designers"
        for token, keyword in zip(query.split(), extract_keywords(query)):
            assert token.startswith(keyword)

    def test_underscore_is_punctuation(self):
        assert extract_keywords("machine_learning", use_stemming=False) == ["machinelearning"]
        assert tokenize_query("__init__") == ["init"]

    def test_unicode_letters_kept(self):
        assert extract_keywords("Café Münster", use_stemming=False) == ["café", "münster"]

    def test_deduplicated_case_insensitive(self):
        assert extract_keywords("Python python PYTHON") == ["python"]

    def test_extra_stopwords(self):
        assert extract_keywords("Senior Python", extra_stopwords=["senior"]) == ["python"]

    def test_deterministic(self):
        query = "Senior backend engineers for fintech"
        assert extract_keywords(query) == extract_keywords(query)


def test_tokenize_query_splits_on_whitespace_runs():
    assert tokenize_query("  Rust\t\tand\nGo  ") == ["rust", "and", "go"]


class TestExtractLimit:

    @pytest.mark.parametrize(
        "query,expected",
        [
            ("top 5 python jobs", 5),
            ("show me 3 flutter roles", 3),
            ("10 backend developer positions", 10),
            ("first 7 results for react", 7),
        ],
    )
    def test_explicit_counts(self, query, expected):
        assert extract_limit(query) == expected

    def test_no_count_uses_default(self):
        assert extract_limit("python jobs") == 10
        assert extract_limit("python jobs", default=4) == 4

    def test_out_of_range_ignored(self):
        assert extract_limit("top 500 jobs", default=10) == 10
        assert extract_limit("0 jobs", default=10) == 10

    def test_empty_query(self):
        assert extract_limit("", default=3) == 3

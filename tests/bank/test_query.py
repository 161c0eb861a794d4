"""
Unit tests for the query layer.

The book_bank fixture holds:
    s1_1 PT_1.2   Security
    s1_2 PT_1.1   Security | Networking
    s1_3 PT_1.10  Networking
    s1_4 PT_2.1   (flagged for review, no domain)
    s1_5 AB_1.1   [PIC], General
    s1_6 PT_AS.1  [MULTI], Security
    s1_7 (no ref) [MATCH], Governance
"""

import sqlite3

import pytest

from qbank_toolkit.bank import (
    BookStructure,
    DatasetNotInitializedError,
    DomainStat,
    QueryConfig,
    QuestionTypeFilter,
    ReviewFilter,
    available_count,
    books_and_chapters,
    domain_stats,
    select_questions,
    total_count,
)


def ids(questions):
    return [q.id for q in questions]


class TestQueryConfig:
    """Tests for QueryConfig."""

    def test_init_when_count_not_positive_then_raises_error(self):
        with pytest.raises(ValueError, match="count must be positive"):
            QueryConfig(count=0)

    def test_init_when_string_filters_then_coerced(self):
        config = QueryConfig(count=1, review_filter="only", question_type="image")
        assert config.review_filter is ReviewFilter.ONLY
        assert config.question_type is QuestionTypeFilter.IMAGE

    def test_init_when_unknown_filter_then_raises_error(self):
        with pytest.raises(ValueError):
            QueryConfig(count=1, review_filter="sometimes")

    def test_chapter_set_when_all_or_empty_then_none(self):
        assert QueryConfig(count=1).chapter_set is None
        assert QueryConfig(count=1, chapters=["1", "All"]).chapter_set is None
        assert QueryConfig(count=1, chapters=["1"]).chapter_set == {"1"}


class TestSelectQuestionsBookScope:
    """Tests for select_questions in reading order."""

    def test_select_when_book_and_chapter_then_reading_order(self, book_bank):
        config = QueryConfig(count=10, books=["PT"], chapters=["1"])
        assert ids(select_questions(book_bank, config)) == ["s1_2", "s1_1", "s1_3"]

    def test_select_when_book_only_then_every_chapter(self, book_bank):
        config = QueryConfig(count=10, books=["PT"])
        assert ids(select_questions(book_bank, config)) == ["s1_2", "s1_1", "s1_3", "s1_4", "s1_6"]

    def test_select_when_chapter_all_then_every_chapter(self, book_bank):
        config = QueryConfig(count=10, books=["PT"], chapters=["All"])
        assert len(select_questions(book_bank, config)) == 5

    def test_select_when_count_smaller_then_truncated_in_order(self, book_bank):
        config = QueryConfig(count=2, books=["PT"])
        assert ids(select_questions(book_bank, config)) == ["s1_2", "s1_1"]

    def test_select_when_several_books_then_natural_book_order(self, book_bank):
        config = QueryConfig(count=3, books=["PT", "AB"])
        assert ids(select_questions(book_bank, config)) == ["s1_5", "s1_2", "s1_1"]

    def test_select_when_book_from_source_name_then_matched(self, book_bank):
        config = QueryConfig(count=10, books=["bank"])
        assert ids(select_questions(book_bank, config)) == ["s1_7"]

    def test_select_when_book_scope_and_filters_then_both_applied(self, book_bank):
        config = QueryConfig(count=10, books=["PT"], review_filter="exclude", domains=["Networking"])
        assert ids(select_questions(book_bank, config)) == ["s1_2", "s1_3"]

    def test_select_when_sequential_without_books_then_full_reading_order(self, book_bank):
        config = QueryConfig(count=10, sequential=True)
        assert ids(select_questions(book_bank, config)) == [
            "s1_5", "s1_7", "s1_2", "s1_1", "s1_3", "s1_4", "s1_6",
        ]


class TestSelectQuestionsFilters:
    """Tests for the filters shared by select_questions and available_count."""

    @pytest.mark.parametrize("kwargs,expected", [
        ({"domains": ["Networking"]}, {"s1_2", "s1_3"}),
        ({"domains": ["Uncategorized"]}, {"s1_4"}),
        ({"domains": ["Governance", "Uncategorized"]}, {"s1_4", "s1_7"}),
        ({"review_filter": "only"}, {"s1_4"}),
        ({"question_type": "multi"}, {"s1_6"}),
        ({"question_type": "matching"}, {"s1_7"}),
        ({"question_type": "image"}, {"s1_5"}),
        ({"search_text": "chapter one"}, {"s1_1", "s1_2", "s1_3"}),
        ({"search_text": "%"}, set()),
    ])
    def test_select_when_filtered_then_matching_rows(self, book_bank, kwargs, expected):
        config = QueryConfig(count=50, **kwargs)
        assert set(ids(select_questions(book_bank, config))) == expected
        assert available_count(book_bank, config) == len(expected)

    def test_available_count_when_excluding_then_remaining(self, book_bank):
        assert available_count(book_bank, QueryConfig(count=1, review_filter="exclude")) == 6
        assert available_count(book_bank, QueryConfig(count=1, exclude_images=True)) == 6

    def test_available_count_when_book_scope_then_ignored(self, book_bank):
        assert available_count(book_bank, QueryConfig(count=1, books=["AB"])) == 7

    def test_total_count_when_loaded_then_all_rows(self, book_bank):
        assert total_count(book_bank) == 7


class TestRandomSelection:
    """Tests for random sampling."""

    def test_select_when_random_then_count_distinct_questions(self, book_bank):
        selected = select_questions(book_bank, QueryConfig(count=3, seed=1))
        assert len(set(ids(selected))) == 3

    def test_select_when_same_seed_then_same_sample(self, book_bank):
        config = QueryConfig(count=4, seed=42)
        assert ids(select_questions(book_bank, config)) == ids(select_questions(book_bank, config))

    def test_select_when_count_exceeds_rows_then_all_rows(self, book_bank):
        assert len(select_questions(book_bank, QueryConfig(count=100))) == 7


class TestOutline:
    """Tests for domain_stats and books_and_chapters."""

    def test_domain_stats_when_all_then_counts_per_label(self, book_bank):
        assert domain_stats(book_bank) == [
            DomainStat("Governance", 1),
            DomainStat("Networking", 2),
            DomainStat("Security", 3),
            DomainStat("Uncategorized", 1),
        ]

    def test_domain_stats_when_excluding_flagged_then_not_counted(self, book_bank):
        names = [s.name for s in domain_stats(book_bank, ReviewFilter.EXCLUDE)]
        assert "Uncategorized" not in names

    def test_books_and_chapters_when_loaded_then_natural_order(self, book_bank):
        assert books_and_chapters(book_bank) == [
            BookStructure("AB", ("1",)),
            BookStructure("bank", ("All",)),
            BookStructure("PT", ("1", "2", "AS")),
        ]


class TestErrors:
    """Tests for missing datasets and query failures."""

    def test_query_when_no_dataset_then_raises_error(self):
        config = QueryConfig(count=1)
        with pytest.raises(DatasetNotInitializedError):
            select_questions(None, config)
        with pytest.raises(DatasetNotInitializedError):
            available_count(None, config)
        with pytest.raises(DatasetNotInitializedError):
            total_count(None)
        with pytest.raises(DatasetNotInitializedError):
            domain_stats(None)
        with pytest.raises(DatasetNotInitializedError):
            books_and_chapters(None)

    def test_query_when_sqlite_fails_then_empty_result(self, book_bank, monkeypatch):
        def broken(*args, **kwargs):
            raise sqlite3.OperationalError("disk I/O error")

        monkeypatch.setattr(book_bank, "execute", broken)
        config = QueryConfig(count=5)

        assert select_questions(book_bank, config) == []
        assert available_count(book_bank, config) == 0
        assert total_count(book_bank) == 0
        assert domain_stats(book_bank) == []
        assert books_and_chapters(book_bank) == []

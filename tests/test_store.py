"""Tests for listing (filters, sorting, pagination) and statistics."""

import pytest

from books_api.catalog.store import compute_stats, search_books
from books_api.storage import BookCatalog


@pytest.fixture
def library(empty_catalog: BookCatalog) -> BookCatalog:
    for fields in [
        {"title": "Dune", "author": "Frank Herbert", "year": 1965, "genre": "Science Fiction"},
        {"title": "Children of Dune", "author": "Frank Herbert", "year": 1976, "genre": "Science Fiction"},
        {"title": "Emma", "author": "Jane Austen", "year": 1815, "genre": "Romance"},
        {"title": "Beowulf", "author": "Unknown Poet"},
        {"title": "Neuromancer", "author": "William Gibson", "year": 1984, "genre": "Cyberpunk Fiction"},
    ]:
        empty_catalog.create(fields)
    return empty_catalog


def _titles(result):
    return [b.title for b in result.books]


class TestFilters:
    def test_no_filters_returns_insertion_order(self, library):
        result = search_books(library)

        assert _titles(result) == ["Dune", "Children of Dune", "Emma", "Beowulf", "Neuromancer"]
        assert result.pagination.total_books == 5

    def test_author_substring_case_insensitive(self, library):
        assert _titles(search_books(library, author="HERBERT")) == ["Dune", "Children of Dune"]

    def test_genre_substring_skips_missing_genre(self, library):
        result = search_books(library, genre="fiction")
        assert _titles(result) == ["Dune", "Children of Dune", "Neuromancer"]

    def test_exact_year(self, library):
        assert _titles(search_books(library, year=1815)) == ["Emma"]

    def test_search_matches_title_only(self, library):
        assert _titles(search_books(library, search="dune")) == ["Dune", "Children of Dune"]
        assert _titles(search_books(library, search="gibson")) == []

    def test_filters_are_conjunctive(self, library):
        result = search_books(library, author="herbert", year=1976, search="dune")
        assert _titles(result) == ["Children of Dune"]

    def test_total_counts_filtered_books(self, library):
        result = search_books(library, genre="fiction", limit=2)

        assert result.pagination.total_books == 3
        assert result.pagination.total_pages == 2


class TestSorting:
    def test_sort_by_title(self, library):
        result = search_books(library, sort_by="title")
        assert _titles(result) == ["Beowulf", "Children of Dune", "Dune", "Emma", "Neuromancer"]

    def test_sort_by_year_descending_puts_missing_last(self, library):
        result = search_books(library, sort_by="year", sort_order="desc")
        assert _titles(result) == ["Neuromancer", "Children of Dune", "Dune", "Emma", "Beowulf"]

    def test_sort_by_year_ascending_puts_missing_first(self, library):
        result = search_books(library, sort_by="year")
        assert _titles(result)[0] == "Beowulf"

    def test_sort_is_stable(self, library):
        asc = search_books(library, sort_by="author")
        desc = search_books(library, sort_by="author", sort_order="desc")

        assert _titles(asc)[:2] == ["Dune", "Children of Dune"]
        assert _titles(desc)[-2:] == ["Dune", "Children of Dune"]

    def test_sort_by_camel_case_timestamp(self, library):
        result = search_books(library, sort_by="createdAt", sort_order="desc")
        assert _titles(result)[0] == "Neuromancer"

    def test_unknown_sort_field_keeps_order(self, library):
        assert _titles(search_books(library, sort_by="isbn")) == _titles(search_books(library))


class TestPagination:
    def test_pages_cover_everything_once(self, library):
        full = _titles(search_books(library, sort_by="title", limit=100))
        pages = [search_books(library, sort_by="title", page=p, limit=2) for p in (1, 2, 3)]

        assert [p.pagination.total_pages for p in pages] == [3, 3, 3]
        assert sum((_titles(p) for p in pages), []) == full

    def test_pagination_flags(self, library):
        first = search_books(library, page=1, limit=2).pagination
        last = search_books(library, page=3, limit=2).pagination

        assert (first.current_page, first.has_prev_page, first.has_next_page) == (1, False, True)
        assert (last.current_page, last.has_prev_page, last.has_next_page) == (3, True, False)

    def test_page_past_the_end_is_empty(self, library):
        result = search_books(library, page=9, limit=2)

        assert result.books == []
        assert result.pagination.total_books == 5
        assert result.pagination.has_next_page is False

    def test_empty_catalog(self, empty_catalog):
        pagination = search_books(empty_catalog).pagination

        assert pagination.total_books == 0
        assert pagination.total_pages == 0


class TestStats:
    def test_seeded_stats(self, catalog):
        stats = compute_stats(catalog)

        assert stats.total_books == 3
        assert stats.unique_authors == 3
        assert stats.genre_distribution == {"Programming": 2, "Technology": 1}
        assert (stats.year_range.earliest, stats.year_range.latest) == (1999, 2020)
        assert stats.average_year == 2009

    def test_unknown_genre_and_missing_years(self, library):
        stats = compute_stats(library)

        assert stats.unique_authors == 4
        assert stats.genre_distribution["Unknown"] == 1
        assert stats.year_range.earliest == 1815
        # (1965 + 1976 + 1815 + 1984) / 4 = 1935
        assert stats.average_year == 1935

    def test_average_rounds_half_up(self, empty_catalog):
        empty_catalog.create({"title": "A", "author": "X", "year": 2000})
        empty_catalog.create({"title": "B", "author": "X", "year": 2001})

        assert compute_stats(empty_catalog).average_year == 2001

    def test_no_years(self, empty_catalog):
        empty_catalog.create({"title": "A", "author": "X"})
        stats = compute_stats(empty_catalog)

        assert stats.year_range is None
        assert stats.average_year is None
        assert stats.genre_distribution == {"Unknown": 1}

    def test_empty_catalog(self, empty_catalog):
        stats = compute_stats(empty_catalog)

        assert stats.total_books == 0
        assert stats.unique_authors == 0
        assert stats.genre_distribution == {}
        assert stats.year_range is None

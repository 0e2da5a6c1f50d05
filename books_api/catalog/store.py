"""
Query helpers for the catalogue API.

These functions never mutate a catalogue. They take a snapshot of the
records from a ``BookCatalog`` and compute either one page of a
filtered, sorted listing (``search_books``) or aggregate figures over
every record (``compute_stats``).
"""

from __future__ import annotations

import math
from typing import Any, List, Optional

from ..models import Book
from ..storage import BookCatalog
from .schemas import CatalogStats, PaginatedBooks, Pagination, YearRange


DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10

# Wire name accepted in ``sortBy`` -> attribute on ``Book``.
SORT_FIELDS = {
    "id": "id",
    "title": "title",
    "author": "author",
    "year": "year",
    "genre": "genre",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}


def _norm(s: Optional[str]) -> str:
    """Normalize a string for case-insensitive comparison.

    Parameters
    ----------
    s : Optional[str]
        The string to normalize.

    Returns
    -------
    str
        The lowercased string. An empty string is returned when the
        input is ``None``.
    """
    return (s or "").lower()


def _sort_key(attr: str):
    # None sorts before any value; the flag keeps None away from comparisons.
    def key(book: Book) -> tuple:
        value: Any = getattr(book, attr)
        return (value is not None, value)

    return key


def search_books(
    catalog: BookCatalog,
    author: Optional[str] = None,
    genre: Optional[str] = None,
    year: Optional[int] = None,
    search: Optional[str] = None,
    sort_by: Optional[str] = None,
    sort_order: str = "asc",
    page: int = DEFAULT_PAGE,
    limit: int = DEFAULT_LIMIT,
) -> PaginatedBooks:
    """Filter, sort and paginate the books of ``catalog``.

    Parameters
    ----------
    catalog : BookCatalog
        The catalogue to read. A snapshot is taken once, so concurrent
        writes do not affect the result.
    author : Optional[str]
        Case-insensitive substring of the author.
    genre : Optional[str]
        Case-insensitive substring of the genre. Books without a genre
        never match.
    year : Optional[int]
        Exact publication year.
    search : Optional[str]
        Case-insensitive substring of the title.
    sort_by : Optional[str]
        One of the keys of ``SORT_FIELDS``. Unknown fields keep the
        insertion order.
    sort_order : str
        ``"desc"`` for descending; anything else sorts ascending. The
        sort is stable in both directions.
    page : int
        1-indexed page number.
    limit : int
        Number of books per page.

    Returns
    -------
    PaginatedBooks
        The requested page and pagination metadata. ``total_books``
        counts matches before slicing.
    """
    items = catalog.snapshot()

    if author:
        nauthor = _norm(author)
        items = [b for b in items if nauthor in _norm(b.author)]

    if genre:
        ngenre = _norm(genre)
        items = [b for b in items if b.genre and ngenre in _norm(b.genre)]

    if year is not None:
        items = [b for b in items if b.year == year]

    if search:
        nsearch = _norm(search)
        items = [b for b in items if nsearch in _norm(b.title)]

    attr = SORT_FIELDS.get(sort_by or "")
    if attr:
        items.sort(key=_sort_key(attr), reverse=sort_order == "desc")

    total = len(items)
    start = (page - 1) * limit
    end = start + limit

    return PaginatedBooks(
        books=items[start:end],
        pagination=Pagination(
            current_page=page,
            total_books=total,
            total_pages=math.ceil(total / limit),
            has_next_page=end < total,
            has_prev_page=page > 1,
        ),
    )


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_stats(catalog: BookCatalog) -> CatalogStats:
    """Aggregate figures over every book of ``catalog``.

    Authors are counted by their exact string, so a co-authored entry
    such as ``"David Thomas, Andrew Hunt"`` is a single author.
    """
    books = catalog.snapshot()

    distribution = {}
    for book in books:
        key = book.genre or "Unknown"
        distribution[key] = distribution.get(key, 0) + 1

    years: List[int] = [b.year for b in books if b.year is not None]
    year_range = YearRange(earliest=min(years), latest=max(years)) if years else None
    average_year = _round_half_up(sum(years) / len(years)) if years else None

    return CatalogStats(
        total_books=len(books),
        unique_authors=len({b.author for b in books}),
        genre_distribution=distribution,
        year_range=year_range,
        average_year=average_year,
    )

"""
Pydantic schema definitions for the catalog responses.

Records themselves are ``books_api.models.Book``; the models here wrap
them for the HTTP layer. All field names are emitted in camelCase
(``totalBooks``, ``hasNextPage`` ...) because existing front-end callers
read those exact keys. ``PaginatedBooks`` bundles one page of books with
its pagination metadata, ``CatalogStats`` is the body of ``GET /stats``
and ``ErrorResponse`` documents the shape shared by every error.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ..models import Book


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Pagination(CamelModel):
    """Paging metadata computed after filters, before slicing."""

    current_page: int
    total_books: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool


class PaginatedBooks(CamelModel):
    """A wrapper for paginated results returned from the ``/books`` endpoint."""

    books: List[Book]
    pagination: Pagination


class BookEnvelope(CamelModel):
    message: str
    book: Book


class BulkDeleteResult(CamelModel):
    message: str
    deleted_count: int


class YearRange(CamelModel):
    earliest: int
    latest: int


class CatalogStats(CamelModel):
    """Aggregate figures over the whole catalogue.

    ``genre_distribution`` maps each genre to its record count, with
    records lacking a genre counted under ``"Unknown"``. ``year_range``
    and ``average_year`` only consider records with a year and are
    ``None`` when no record has one.
    """

    total_books: int
    unique_authors: int
    genre_distribution: Dict[str, int]
    year_range: Optional[YearRange] = None
    average_year: Optional[int] = None


class HealthStatus(CamelModel):
    status: str
    timestamp: str
    uptime: float
    environment: str


class ErrorResponse(CamelModel):
    error: str
    code: str
    field: Optional[str] = None

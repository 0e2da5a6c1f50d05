"""
Route definitions for the books API.

Endpoints:
- GET    /books                : list books with filters, sorting and pagination
- GET    /books/{book_id}      : get one book
- POST   /books                : create a book
- PUT    /books/{book_id}      : replace a book
- PATCH  /books/{book_id}      : partially update a book
- DELETE /books/{book_id}      : delete a book
- DELETE /books?confirm=true   : delete every book
- GET    /stats                : aggregate statistics

Handlers only translate HTTP input into catalogue calls. Failures are
raised as ``CatalogError`` subclasses and rendered by the exception
handlers registered in ``books_api.main``.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, Request, status

from ..errors import BookNotFoundError, BookValidationError
from ..models import Book
from ..storage import BookCatalog
from .schemas import BookEnvelope, BulkDeleteResult, CatalogStats, ErrorResponse, PaginatedBooks
from .store import DEFAULT_LIMIT, DEFAULT_PAGE, compute_stats, search_books


router = APIRouter(tags=["books"])

NOT_FOUND = {status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}}
BAD_REQUEST = {status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse}}
CONFLICT = {status.HTTP_409_CONFLICT: {"model": ErrorResponse}}


def get_catalog(request: Request) -> BookCatalog:
    return request.app.state.catalog


def _parse_int(value: Optional[str]) -> Optional[int]:
    try:
        return int(value) if value is not None else None
    except ValueError:
        return None


def _positive_int(value: Optional[str], default: int) -> int:
    number = _parse_int(value)
    return number if number is not None and number > 0 else default


def _book_id(raw: str) -> int:
    # A non-numeric id can never match a record.
    book_id = _parse_int(raw)
    if book_id is None:
        raise BookNotFoundError()
    return book_id


async def read_body(request: Request) -> Dict[str, Any]:
    """Parse a JSON or form-encoded body into a dict.

    An empty body is an empty dict. Form values stay strings, so a form
    ``year`` fails the integer check like a JSON string would.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/x-www-form-urlencoded"):
        form = await request.form()
        return dict(form)
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        payload = json.loads(raw)
    except ValueError:
        raise BookValidationError() from None
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise BookValidationError()
    return payload


@router.get("/books", response_model=PaginatedBooks)
def list_books(
    author: Optional[str] = Query(default=None, description="Author substring (case-insensitive)"),
    genre: Optional[str] = Query(default=None, description="Genre substring (case-insensitive)"),
    year: Optional[str] = Query(default=None, description="Exact publication year"),
    search: Optional[str] = Query(default=None, description="Title substring (case-insensitive)"),
    sort_by: Optional[str] = Query(default=None, alias="sortBy", description="Field to sort on"),
    sort_order: Optional[str] = Query(default=None, alias="sortOrder", description="asc or desc"),
    page: Optional[str] = Query(default=None, description="1-indexed page"),
    limit: Optional[str] = Query(default=None, description="Page size"),
    catalog: BookCatalog = Depends(get_catalog),
) -> PaginatedBooks:
    """
    Returns a paginated list of books.

    Numeric parameters are taken as raw strings: malformed ``page`` or
    ``limit`` values fall back to their defaults and a malformed
    ``year`` disables the year filter instead of failing the request.
    """
    return search_books(
        catalog,
        author=author,
        genre=genre,
        year=_parse_int(year),
        search=search,
        sort_by=sort_by,
        sort_order="desc" if sort_order == "desc" else "asc",
        page=_positive_int(page, DEFAULT_PAGE),
        limit=_positive_int(limit, DEFAULT_LIMIT),
    )


@router.get("/books/{book_id}", response_model=Book, responses=NOT_FOUND)
def get_book(book_id: str, catalog: BookCatalog = Depends(get_catalog)) -> Book:
    return catalog.get(_book_id(book_id))


@router.post(
    "/books",
    response_model=BookEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses={**BAD_REQUEST, **CONFLICT},
)
def create_book(
    payload: Dict[str, Any] = Depends(read_body),
    catalog: BookCatalog = Depends(get_catalog),
) -> BookEnvelope:
    book = catalog.create(payload)
    return BookEnvelope(message="Book created successfully", book=book)


@router.put("/books/{book_id}", response_model=BookEnvelope, responses={**BAD_REQUEST, **NOT_FOUND, **CONFLICT})
def replace_book(
    book_id: str,
    payload: Dict[str, Any] = Depends(read_body),
    catalog: BookCatalog = Depends(get_catalog),
) -> BookEnvelope:
    """Replace a book.

    The body is validated before the id is looked up, so an invalid
    body yields 400 even when the book does not exist.
    """
    book = catalog.replace(_book_id(book_id), payload)
    return BookEnvelope(message="Book updated successfully", book=book)


@router.patch("/books/{book_id}", response_model=BookEnvelope, responses={**BAD_REQUEST, **NOT_FOUND})
def patch_book(
    book_id: str,
    payload: Dict[str, Any] = Depends(read_body),
    catalog: BookCatalog = Depends(get_catalog),
) -> BookEnvelope:
    book = catalog.merge(_book_id(book_id), payload)
    return BookEnvelope(message="Book updated successfully", book=book)


@router.delete("/books/{book_id}", response_model=BookEnvelope, responses=NOT_FOUND)
def delete_book(book_id: str, catalog: BookCatalog = Depends(get_catalog)) -> BookEnvelope:
    book = catalog.delete(_book_id(book_id))
    return BookEnvelope(message="Book deleted successfully", book=book)


@router.delete("/books", response_model=BulkDeleteResult, responses=BAD_REQUEST)
def delete_all_books(
    confirm: Optional[str] = Query(default=None, description="Must be 'true'"),
    catalog: BookCatalog = Depends(get_catalog),
) -> BulkDeleteResult:
    deleted = catalog.delete_all(confirm=confirm == "true")
    return BulkDeleteResult(message=f"Successfully deleted {deleted} books", deleted_count=deleted)


@router.get("/stats", response_model=CatalogStats)
def get_stats(catalog: BookCatalog = Depends(get_catalog)) -> CatalogStats:
    return compute_stats(catalog)

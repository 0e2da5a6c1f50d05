# books_api/storage.py
import logging
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from .errors import (
    BookNotFoundError,
    BookValidationError,
    ConfirmationRequiredError,
    DuplicateBookError,
    NoUpdatesError,
)
from .models import Book, CreateBookRequest, PatchBookRequest


logger = logging.getLogger(__name__)

SEED_BOOKS: List[Dict[str, Any]] = [
    {
        "title": "The Pragmatic Programmer",
        "author": "David Thomas, Andrew Hunt",
        "year": 1999,
        "genre": "Programming",
    },
    {"title": "Clean Code", "author": "Robert C. Martin", "year": 2008, "genre": "Programming"},
    {"title": "System Design Interview", "author": "Alex Xu", "year": 2020, "genre": "Technology"},
]

_ModelT = TypeVar("_ModelT", bound=BaseModel)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision, e.g. ``2024-05-01T10:00:00.000Z``."""
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _parse(model: Type[_ModelT], fields: Union[_ModelT, Mapping[str, Any]]) -> _ModelT:
    if isinstance(fields, model):
        return fields
    if not isinstance(fields, Mapping):
        raise BookValidationError()
    try:
        return model.model_validate(dict(fields))
    except ValidationError as exc:
        raise BookValidationError.from_pydantic(exc) from None


def _same_pair(book: Book, title: str, author: str) -> bool:
    return book.title.lower() == title.lower() and book.author.lower() == author.lower()


class BookCatalog:
    """In-memory collection of books plus the next-id counter.

    All mutations run under one re-entrant lock, covering both the
    uniqueness check and the write, so two concurrent creates can never
    claim the same ``(title, author)`` pair or the same id. Readers take
    a snapshot of the record list under the same lock.
    """

    def __init__(
        self,
        seed: bool = True,
        merge_checks_duplicates: bool = False,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._books: List[Book] = []
        self._next_id = 1
        self._lock = threading.RLock()
        self._clock = clock or utc_now
        self.merge_checks_duplicates = merge_checks_duplicates
        if seed:
            for entry in SEED_BOOKS:
                self.create(entry)

    def __len__(self) -> int:
        with self._lock:
            return len(self._books)

    @property
    def next_id(self) -> int:
        return self._next_id

    def snapshot(self) -> List[Book]:
        """Return a copy of the record list in insertion order."""
        with self._lock:
            return list(self._books)

    def _now(self) -> str:
        return format_timestamp(self._clock())

    def _touch(self, current: Book) -> str:
        # Same fixed-width format, so string order is time order.
        return max(self._now(), current.updated_at, current.created_at)

    def _index_of(self, book_id: int) -> int:
        for index, book in enumerate(self._books):
            if book.id == book_id:
                return index
        raise BookNotFoundError()

    def _ensure_unique(self, title: str, author: str, exclude_id: Optional[int] = None) -> None:
        for book in self._books:
            if book.id != exclude_id and _same_pair(book, title, author):
                raise DuplicateBookError()

    def get(self, book_id: int) -> Book:
        with self._lock:
            return self._books[self._index_of(book_id)]

    def create(self, fields: Union[CreateBookRequest, Mapping[str, Any]]) -> Book:
        req = _parse(CreateBookRequest, fields)
        with self._lock:
            self._ensure_unique(req.title, req.author)
            now = self._now()
            book = Book(
                id=self._next_id,
                title=req.title,
                author=req.author,
                year=req.year,
                genre=req.genre,
                created_at=now,
                updated_at=now,
            )
            self._books.append(book)
            self._next_id += 1
        logger.info("Created book %s (%r by %s)", book.id, book.title, book.author)
        return book

    def replace(self, book_id: int, fields: Union[CreateBookRequest, Mapping[str, Any]]) -> Book:
        """Overwrite a record with a full body.

        ``year`` and ``genre`` keep their stored value when the body
        omits them or sends null.
        """
        req = _parse(CreateBookRequest, fields)
        with self._lock:
            index = self._index_of(book_id)
            current = self._books[index]
            self._ensure_unique(req.title, req.author, exclude_id=book_id)
            book = current.model_copy(
                update={
                    "title": req.title,
                    "author": req.author,
                    "year": req.year if req.year is not None else current.year,
                    "genre": req.genre if req.genre is not None else current.genre,
                    "updated_at": self._touch(current),
                }
            )
            self._books[index] = book
        logger.info("Replaced book %s", book_id)
        return book

    def merge(self, book_id: int, fields: Union[PatchBookRequest, Mapping[str, Any]]) -> Book:
        """Apply a partial update atomically.

        Nothing is written unless every supplied field is valid. An empty
        set of recognised fields raises ``NoUpdatesError``.
        """
        with self._lock:
            index = self._index_of(book_id)
            updates = _parse(PatchBookRequest, fields).updates()
            if not updates:
                raise NoUpdatesError()
            current = self._books[index]
            if self.merge_checks_duplicates and ("title" in updates or "author" in updates):
                self._ensure_unique(
                    updates.get("title", current.title),
                    updates.get("author", current.author),
                    exclude_id=book_id,
                )
            changed = sorted(updates)
            book = current.model_copy(update=dict(updates, updated_at=self._touch(current)))
            self._books[index] = book
        logger.info("Updated book %s fields %s", book_id, changed)
        return book

    def delete(self, book_id: int) -> Book:
        with self._lock:
            book = self._books.pop(self._index_of(book_id))
        logger.info("Deleted book %s", book_id)
        return book

    def delete_all(self, confirm: bool = False) -> int:
        """Remove every record and reset the id counter to 1."""
        if confirm is not True:
            raise ConfirmationRequiredError()
        with self._lock:
            deleted = len(self._books)
            self._books = []
            self._next_id = 1
        logger.warning("Deleted all %d books", deleted)
        return deleted

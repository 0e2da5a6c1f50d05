"""
Error taxonomy for the book catalogue.

Every catalogue operation signals failure by raising a subclass of
``CatalogError``. Each subclass carries the stable ``code`` token and
HTTP status used on the wire, so the application only needs a single
exception handler to turn any of them into a JSON response of the form
``{"error": ..., "code": ...}``.
"""

from typing import Any, Dict, Optional

from pydantic import ValidationError

from .models import FIELD_MESSAGES


class CatalogError(Exception):
    """Base class for every expected catalogue failure."""

    code = "SERVER_ERROR"
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, "code": self.code}


class BookValidationError(CatalogError):
    """A request field is missing or malformed."""

    code = "VALIDATION_ERROR"
    status_code = 400
    default_message = "Request body must be a JSON object"

    def __init__(self, field: Optional[str] = None, message: Optional[str] = None) -> None:
        self.field = field
        super().__init__(message or FIELD_MESSAGES.get(field or ""))

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        if self.field:
            body["field"] = self.field
        return body

    @classmethod
    def from_errors(cls, errors) -> "BookValidationError":
        """Build from a list of pydantic/FastAPI error dicts.

        Only the first error is reported. Its ``loc`` is scanned for a
        known book field; anything else (e.g. a body that is not a JSON
        object) falls back to the generic message.
        """
        for error in errors:
            for part in error.get("loc", ()):
                if part in FIELD_MESSAGES:
                    return cls(part)
            break
        return cls()

    @classmethod
    def from_pydantic(cls, exc: ValidationError) -> "BookValidationError":
        return cls.from_errors(exc.errors())


class DuplicateBookError(CatalogError):
    code = "DUPLICATE_BOOK"
    status_code = 409
    default_message = "Book with same title and author already exists"


class BookNotFoundError(CatalogError):
    code = "BOOK_NOT_FOUND"
    status_code = 404
    default_message = "Book not found"


class NoUpdatesError(CatalogError):
    code = "NO_UPDATES"
    status_code = 400
    default_message = "No valid fields provided for update"


class ConfirmationRequiredError(CatalogError):
    code = "CONFIRMATION_REQUIRED"
    status_code = 400
    default_message = "Add ?confirm=true to confirm bulk deletion"

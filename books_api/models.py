# books_api/models.py
from datetime import date
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    StrictInt,
    StrictStr,
    ValidationInfo,
    field_validator,
)
from pydantic.alias_generators import to_camel


# Wire messages reported for each invalid field, in declaration order.
FIELD_MESSAGES = {
    "title": "Title is required and must be a non-empty string",
    "author": "Author is required and must be a non-empty string",
    "year": "Year must be a valid integer between 0 and current year",
    "genre": "Genre must be a non-empty string if provided",
}

MUTABLE_FIELDS = tuple(FIELD_MESSAGES)


def _required_text(value: Optional[str], field: str) -> str:
    if value is None or not value.strip():
        raise ValueError(FIELD_MESSAGES[field])
    return value.strip()


def _optional_text(value: Optional[str], field: str) -> Optional[str]:
    if value is None:
        return None
    if not value.strip():
        raise ValueError(FIELD_MESSAGES[field])
    return value.strip()


def _year_in_range(value: Optional[int]) -> Optional[int]:
    if value is None:
        return None
    if value < 0 or value > date.today().year:
        raise ValueError(FIELD_MESSAGES["year"])
    return value


class CreateBookRequest(BaseModel):
    """Body accepted by create (POST) and replace (PUT).

    ``title`` and ``author`` are required; ``year`` and ``genre`` may be
    omitted or null. Types are strict so ``"1999"`` is not a year and
    ``42`` is not a title.
    """

    title: StrictStr
    author: StrictStr
    year: Optional[StrictInt] = None
    genre: Optional[StrictStr] = None

    @field_validator("title", "author")
    @classmethod
    def _check_required_text(cls, value: str, info: ValidationInfo) -> str:
        return _required_text(value, info.field_name)

    @field_validator("year")
    @classmethod
    def _check_year(cls, value: Optional[int]) -> Optional[int]:
        return _year_in_range(value)

    @field_validator("genre")
    @classmethod
    def _check_genre(cls, value: Optional[str]) -> Optional[str]:
        return _optional_text(value, "genre")


class PatchBookRequest(BaseModel):
    """Body accepted by partial update (PATCH).

    Every field is optional, but a supplied ``title`` or ``author`` may
    not be null. Which fields were supplied is read back from
    ``model_fields_set``.
    """

    title: Optional[StrictStr] = None
    author: Optional[StrictStr] = None
    year: Optional[StrictInt] = None
    genre: Optional[StrictStr] = None

    @field_validator("title", "author")
    @classmethod
    def _check_required_text(cls, value: Optional[str], info: ValidationInfo) -> str:
        return _required_text(value, info.field_name)

    @field_validator("year")
    @classmethod
    def _check_year(cls, value: Optional[int]) -> Optional[int]:
        return _year_in_range(value)

    @field_validator("genre")
    @classmethod
    def _check_genre(cls, value: Optional[str]) -> Optional[str]:
        return _optional_text(value, "genre")

    def updates(self) -> dict:
        """Return only the fields present in the request body."""
        return self.model_dump(include=self.model_fields_set)


class Book(BaseModel):
    """A stored book record.

    Records are frozen; every mutation replaces the stored instance with
    a copy so readers never observe a half-applied update. Field names
    are exposed in camelCase (``createdAt``, ``updatedAt``) on the wire.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    id: int
    title: str
    author: str
    year: Optional[int] = None
    genre: Optional[str] = None
    created_at: str
    updated_at: str

"""In-memory REST API for a catalogue of books."""

from .main import create_app  # noqa: F401
from .storage import BookCatalog  # noqa: F401

"""
Catalog package for the books API.

This package contains the response schemas, the read-only query
helpers (listing with filters/sorting/pagination, statistics) and the
route definitions exposing a ``BookCatalog`` over HTTP. The catalogue
itself lives in ``books_api.storage``.
"""

from .router import router as catalog_router  # noqa: F401

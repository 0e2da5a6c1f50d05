"""Run the books API with uvicorn.

Usage::

    python -m books_api

Host, port and log level come from ``BOOKS_API_*`` settings. Uvicorn
handles SIGINT/SIGTERM and runs the application's shutdown hook before
the process exits.
"""

import uvicorn

from .config import get_settings
from .main import create_app


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()

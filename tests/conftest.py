from datetime import datetime, timedelta, timezone
from typing import Callable, Generator

import pytest
from fastapi.testclient import TestClient

from books_api.config import Settings
from books_api.main import create_app
from books_api.storage import BookCatalog


class FakeClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start: datetime) -> None:
        self.current = start

    def __call__(self) -> datetime:
        now = self.current
        self.current = now + timedelta(seconds=1)
        return now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 5, 1, 10, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def catalog(clock: FakeClock) -> BookCatalog:
    """Catalogue holding the three sample books."""
    return BookCatalog(clock=clock)


@pytest.fixture
def empty_catalog(clock: FakeClock) -> BookCatalog:
    return BookCatalog(seed=False, clock=clock)


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, environment="test", log_level="WARNING")


@pytest.fixture
def make_client(settings: Settings) -> Callable[[BookCatalog], TestClient]:
    def _make(catalog: BookCatalog) -> TestClient:
        return TestClient(create_app(settings, catalog), raise_server_exceptions=False)

    return _make


@pytest.fixture
def client(make_client, catalog: BookCatalog) -> Generator[TestClient, None, None]:
    with make_client(catalog) as test_client:
        yield test_client


@pytest.fixture
def empty_client(make_client, empty_catalog: BookCatalog) -> Generator[TestClient, None, None]:
    with make_client(empty_catalog) as test_client:
        yield test_client

"""Shared fixtures: temporary SQLite stores and services built on them."""

import os
import tempfile

import pytest

from catalog.repositories import SqliteProductRepository
from catalog.services import ProductService, ResultCache


class FakeClock:
    """Manually advanced monotonic clock for cache expiry tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CountingSqliteRepository(SqliteProductRepository):
    """SQLite repository that records how often listings reach the store."""

    def __init__(self, db_path: str):
        super().__init__(db_path)
        self.list_calls = 0

    async def list_products(self, query):
        self.list_calls += 1
        return await super().list_products(query)


@pytest.fixture
def temp_db_path():
    """Create a temporary database file for testing."""
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    yield path
    # Cleanup
    if os.path.exists(path):
        os.remove(path)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
async def sqlite_repository(temp_db_path):
    """Connected repository over a temporary database."""
    repository = CountingSqliteRepository(temp_db_path)
    await repository.connect()
    yield repository
    await repository.close()


@pytest.fixture
async def product_service(sqlite_repository, clock):
    """ProductService over the temporary SQLite store with a controllable cache clock."""
    return ProductService(sqlite_repository, ResultCache(ttl_seconds=60, clock=clock))

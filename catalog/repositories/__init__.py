"""Product persistence backends."""

from catalog.repositories.base import ProductRepository
from catalog.repositories.cosmosdb_repository import CosmosProductRepository
from catalog.repositories.factory import create_repository
from catalog.repositories.sqlite_repository import SqliteProductRepository

__all__ = [
    "ProductRepository",
    "CosmosProductRepository",
    "SqliteProductRepository",
    "create_repository",
]

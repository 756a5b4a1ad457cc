"""Client modules for the backing stores."""

from catalog.clients.sqlite_client import SqliteClient
from catalog.clients.cosmosdb_client import CosmosDBClient

__all__ = [
    "SqliteClient",
    "CosmosDBClient",
]

"""Build the product repository selected by configuration."""

import logging

from catalog.clients import CosmosDBClient
from catalog.config import AppConfig, ConfigurationError
from catalog.repositories.base import ProductRepository
from catalog.repositories.cosmosdb_repository import CosmosProductRepository
from catalog.repositories.sqlite_repository import SqliteProductRepository

logger = logging.getLogger(__name__)


def create_repository(config: AppConfig) -> ProductRepository:
    """Create an unconnected repository for config.storage.backend."""
    backend = config.storage.backend

    if backend == "sqlite":
        logger.info(f"Using SQLite product store: {config.database.path}")
        return SqliteProductRepository(config.database.path)

    if backend == "cosmosdb":
        if config.cosmosdb is None:
            raise ConfigurationError("Cosmos DB backend selected but cosmosdb settings are missing")
        cosmos = config.cosmosdb
        if cosmos.partition_key_path != "/id":
            raise ConfigurationError("The product container must be partitioned on /id")
        logger.info(f"Using Cosmos DB product store: {cosmos.database_name}/{cosmos.container_name}")
        return CosmosProductRepository(
            CosmosDBClient(
                endpoint=cosmos.endpoint,
                key=cosmos.key,
                database_name=cosmos.database_name,
                container_name=cosmos.container_name,
                partition_key_path=cosmos.partition_key_path,
            )
        )

    raise ConfigurationError(f"Unknown storage backend '{backend}'")

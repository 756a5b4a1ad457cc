"""Azure Cosmos DB client for product document storage."""

import logging
import uuid
from typing import Any, Optional

from azure.cosmos import PartitionKey
from azure.cosmos.aio import ContainerProxy, CosmosClient, DatabaseProxy

logger = logging.getLogger(__name__)


class CosmosDBClient:
    """Async Cosmos DB client bound to a single product container.

    Uses the NoSQL API. The database and container are created on connect()
    when they do not exist yet. Supports the async context manager pattern
    for resource cleanup.
    """

    def __init__(
        self,
        endpoint: str,
        key: str,
        database_name: str,
        container_name: str,
        partition_key_path: str = "/id",
    ):
        """Initialize the Cosmos DB client.

        Args:
            endpoint: Cosmos DB account endpoint URL
            key: Cosmos DB account key
            database_name: Database holding the product container
            container_name: Product container name
            partition_key_path: Partition key path used when the container is
                                created (default: /id)
        """
        self._endpoint = endpoint
        self._key = key
        self._database_name = database_name
        self._container_name = container_name
        self._partition_key_path = partition_key_path

        self._client: Optional[CosmosClient] = None
        self._database: Optional[DatabaseProxy] = None
        self._container: Optional[ContainerProxy] = None

    @property
    def is_connected(self) -> bool:
        """Whether connect() has completed and close() has not been called."""
        return self._container is not None

    async def connect(self) -> None:
        """Open the account client and make sure database and container exist."""
        self._client = CosmosClient(url=self._endpoint, credential=self._key)
        await self._client.__aenter__()

        self._database = await self._client.create_database_if_not_exists(id=self._database_name)
        self._container = await self._database.create_container_if_not_exists(
            id=self._container_name,
            partition_key=PartitionKey(path=self._partition_key_path),
        )
        logger.info(
            f"Connected to Cosmos DB container {self._database_name}/{self._container_name} "
            f"(partition key {self._partition_key_path})"
        )

    async def close(self) -> None:
        """Close the Cosmos DB connection."""
        if self._client:
            await self._client.close()
            self._client = None
            self._database = None
            self._container = None

    async def __aenter__(self) -> "CosmosDBClient":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        await self.close()
        return False

    def _require_container(self) -> ContainerProxy:
        if self._container is None:
            raise RuntimeError("CosmosDB client not connected. Call connect() first.")
        return self._container

    async def create_item(self, item: dict[str, Any]) -> dict[str, Any]:
        """Create a document; fails with a conflict if the id is taken.

        An 'id' is generated when the body has none. Returns the stored
        document including system fields (_rid, _etag, _ts).
        """
        container = self._require_container()
        item.setdefault("id", str(uuid.uuid4()))
        return dict(await container.create_item(body=item))

    async def replace_item(self, item_id: str, item: dict[str, Any]) -> dict[str, Any]:
        """Replace the whole body of an existing document.

        Raises:
            RuntimeError: If client is not connected.
            CosmosResourceNotFoundError: If the document does not exist.
        """
        container = self._require_container()
        return dict(await container.replace_item(item=item_id, body=item))

    async def query_items(
        self,
        query: str,
        parameters: Optional[list[dict[str, Any]]] = None,
        partition_key: Optional[str] = None,
    ) -> list[Any]:
        """Run a SQL query and collect every result.

        Args:
            query: Cosmos SQL query string
            parameters: Query parameters as [{"name": "@param", "value": value}]
            partition_key: Scope the query to one partition; cross-partition otherwise

        Returns:
            Documents as dicts, or bare scalars for SELECT VALUE queries.
        """
        container = self._require_container()

        query_options = {}
        if partition_key is not None:
            query_options["partition_key"] = partition_key

        results = container.query_items(query=query, parameters=parameters, **query_options)
        return [dict(item) if isinstance(item, dict) else item async for item in results]

    async def read_item(self, item_id: str, partition_key: str) -> dict[str, Any]:
        """Point-read a document.

        Raises:
            RuntimeError: If client is not connected.
            CosmosResourceNotFoundError: If the document does not exist.
        """
        container = self._require_container()
        return dict(await container.read_item(item=item_id, partition_key=partition_key))

    async def delete_item(self, item_id: str, partition_key: str) -> None:
        """Delete a document.

        Raises:
            RuntimeError: If client is not connected.
            CosmosResourceNotFoundError: If the document does not exist.
        """
        container = self._require_container()
        await container.delete_item(item=item_id, partition_key=partition_key)

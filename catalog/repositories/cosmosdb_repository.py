"""Cosmos DB-backed product repository.

Products are stored one document per product in a container partitioned on
``/id``; the document id is a UUID assigned on create and doubles as the
partition key value.
"""

import logging
import uuid
from typing import Any, Mapping, Optional

from azure.cosmos.exceptions import CosmosResourceNotFoundError

from catalog.clients import CosmosDBClient
from catalog.exceptions import InvalidIdentifierError
from catalog.models import Product, ProductQuery, ProductStats
from catalog.models.product import (
    PRODUCT_FIELDS,
    format_timestamp,
    next_update_time,
    parse_timestamp,
    utc_now,
)
from catalog.repositories.query_builder import build_cosmos_query, relevance_score

logger = logging.getLogger(__name__)

CATEGORIES_QUERY = "SELECT DISTINCT VALUE c.category FROM c WHERE IS_STRING(c.category)"

# Cross-partition aggregates are only merged by the SDK in SELECT VALUE form,
# so each figure is its own single-aggregate query
TOTAL_QUERY = "SELECT VALUE COUNT(1) FROM c"
LOW_STOCK_QUERY = "SELECT VALUE COUNT(1) FROM c WHERE c.stock > 0 AND c.stock <= 5"
OUT_OF_STOCK_QUERY = "SELECT VALUE COUNT(1) FROM c WHERE c.stock = 0"
TOTAL_VALUE_QUERY = "SELECT VALUE SUM(c.price * c.stock) FROM c"


def _strip_system_fields(document: Mapping[str, Any]) -> dict[str, Any]:
    """Drop Cosmos DB metadata (_rid, _self, _etag, _attachments, _ts)."""
    return {key: value for key, value in document.items() if not key.startswith("_")}


class CosmosProductRepository:
    """Product repository over an Azure Cosmos DB container."""

    def __init__(self, client: CosmosDBClient):
        self._cosmosdb_client = client

    async def connect(self) -> None:
        if not self._cosmosdb_client.is_connected:
            await self._cosmosdb_client.connect()
            logger.info("Cosmos DB product store connected")

    async def close(self) -> None:
        await self._cosmosdb_client.close()

    def parse_id(self, raw_id: Any) -> str:
        try:
            return str(uuid.UUID(str(raw_id)))
        except ValueError:
            raise InvalidIdentifierError(raw_id)

    async def list_products(self, query: ProductQuery) -> tuple[list[Product], int]:
        cosmos_query = build_cosmos_query(query)
        parameters = cosmos_query.parameter_list()

        counts = await self._cosmosdb_client.query_items(
            cosmos_query.count_statement(), parameters=parameters
        )
        total = int(counts[0]) if counts else 0

        documents = await self._cosmosdb_client.query_items(
            cosmos_query.select_statement(), parameters=parameters
        )
        if cosmos_query.ranks_by_relevance:
            # sorted() is stable, so equal scores keep the newest-first order
            documents = sorted(
                documents,
                key=lambda document: relevance_score(document, cosmos_query.search),
                reverse=True,
            )
            documents = documents[cosmos_query.offset:cosmos_query.offset + cosmos_query.limit]

        return [Product.from_record(_strip_system_fields(doc)) for doc in documents], total

    async def get_by_id(self, product_id: str) -> Optional[Product]:
        document = await self._read(product_id)
        if document is None:
            return None
        return Product.from_record(_strip_system_fields(document))

    async def create(self, values: Mapping[str, Any]) -> Product:
        now = format_timestamp(utc_now())
        document = {"id": str(uuid.uuid4())}
        document.update({name: values[name] for name in PRODUCT_FIELDS if name in values})
        document["created_at"] = now
        document["updated_at"] = now

        created = await self._cosmosdb_client.create_item(document)
        logger.debug(f"Created product document {created['id']}")
        return Product.from_record(_strip_system_fields(created))

    async def update(self, product_id: str, changes: Mapping[str, Any]) -> Optional[Product]:
        document = await self._read(product_id)
        if document is None:
            return None

        body = _strip_system_fields(document)
        body.update({name: changes[name] for name in PRODUCT_FIELDS if name in changes})
        body["updated_at"] = format_timestamp(
            next_update_time(parse_timestamp(document["updated_at"]))
        )

        try:
            replaced = await self._cosmosdb_client.replace_item(product_id, body)
        except CosmosResourceNotFoundError:
            # Deleted between the read and the replace
            return None
        return Product.from_record(_strip_system_fields(replaced))

    async def delete(self, product_id: str) -> bool:
        try:
            await self._cosmosdb_client.delete_item(product_id, partition_key=product_id)
        except CosmosResourceNotFoundError:
            return False
        return True

    async def distinct_categories(self) -> list[str]:
        categories = await self._cosmosdb_client.query_items(CATEGORIES_QUERY)
        return sorted(categories)

    async def aggregate_stats(self) -> ProductStats:
        total = await self._scalar(TOTAL_QUERY)
        if not total:
            return ProductStats()

        return ProductStats(
            total=int(total),
            low_stock=int(await self._scalar(LOW_STOCK_QUERY) or 0),
            out_of_stock=int(await self._scalar(OUT_OF_STOCK_QUERY) or 0),
            total_value=float(await self._scalar(TOTAL_VALUE_QUERY) or 0),
        )

    async def _scalar(self, query: str) -> Any:
        """First value of a SELECT VALUE query; None when the aggregate is undefined."""
        values = await self._cosmosdb_client.query_items(query)
        return values[0] if values else None

    async def _read(self, product_id: str) -> Optional[dict[str, Any]]:
        try:
            return await self._cosmosdb_client.read_item(product_id, partition_key=product_id)
        except CosmosResourceNotFoundError:
            return None

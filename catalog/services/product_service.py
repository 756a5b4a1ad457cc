"""Product service: CRUD, listing, categories and stats over a repository.

Validation and identifier checks run before any store access. The default
listing (no filters, page 1, limit 10) is served from the result cache
while it is fresh; every create, update and delete clears the cache.
"""

import logging
from typing import Any, Optional

from catalog.exceptions import NotFoundError
from catalog.models import (
    Product,
    ProductCreate,
    ProductPage,
    ProductQuery,
    ProductStats,
    ProductUpdate,
    parse_payload,
)
from catalog.repositories import ProductRepository
from catalog.services.result_cache import ResultCache

logger = logging.getLogger(__name__)


class ProductService:
    """Orchestrates the product repository and the default-listing cache."""

    def __init__(
        self,
        repository: ProductRepository,
        cache: Optional[ResultCache[ProductPage]] = None,
    ):
        self._repository = repository
        self._cache: ResultCache[ProductPage] = cache if cache is not None else ResultCache()

    @property
    def repository(self) -> ProductRepository:
        return self._repository

    @property
    def cache(self) -> ResultCache[ProductPage]:
        return self._cache

    async def list_products(self, query: ProductQuery) -> ProductPage:
        if query.is_default:
            cached = self._cache.get()
            if cached is not None:
                logger.debug("Default product listing served from cache")
                return cached

        items, total = await self._repository.list_products(query)
        page = ProductPage(items=tuple(items), total=total, page=query.page, limit=query.limit)

        if query.is_default:
            self._cache.put(page)
            logger.debug("Default product listing cached")
        return page

    async def get_product(self, raw_id: Any) -> Product:
        product_id = self._repository.parse_id(raw_id)
        product = await self._repository.get_by_id(product_id)
        if product is None:
            raise NotFoundError()
        return product

    async def create_product(self, payload: Any) -> Product:
        values = parse_payload(ProductCreate, payload).values()

        product = await self._repository.create(values)
        self._cache.clear()

        logger.info(f"Created product {product.id} ({product.name})")
        return product

    async def update_product(self, raw_id: Any, payload: Any) -> Product:
        product_id = self._repository.parse_id(raw_id)
        changes = parse_payload(ProductUpdate, payload).changes()

        if await self._repository.get_by_id(product_id) is None:
            raise NotFoundError()

        product = await self._repository.update(product_id, changes)
        self._cache.clear()
        if product is None:
            raise NotFoundError()

        logger.info(f"Updated product {product_id}: {', '.join(sorted(changes))}")
        return product

    async def delete_product(self, raw_id: Any) -> None:
        product_id = self._repository.parse_id(raw_id)

        if await self._repository.get_by_id(product_id) is None:
            raise NotFoundError()

        deleted = await self._repository.delete(product_id)
        self._cache.clear()
        if not deleted:
            raise NotFoundError()

        logger.info(f"Deleted product {product_id}")

    async def list_categories(self) -> list[str]:
        return await self._repository.distinct_categories()

    async def get_stats(self) -> ProductStats:
        return await self._repository.aggregate_stats()

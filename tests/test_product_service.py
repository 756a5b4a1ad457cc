"""Tests for ProductService over a temporary SQLite store.

These tests verify:
- CRUD orchestration and error kinds (validation, malformed id, not found)
- Default-listing cache hits, expiry and invalidation on every write
- Filtered listings bypassing the cache
- Categories and stats passthrough
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from catalog.exceptions import InvalidIdentifierError, NotFoundError, ValidationError
from catalog.models import ProductQuery
from catalog.services import ProductService


class TestProductServiceCrud:
    """Test CRUD operations."""

    @pytest.mark.asyncio
    async def test_create_and_get(self, product_service):
        """Test that the created id is stable on subsequent reads."""
        created = await product_service.create_product({"name": "Tomato", "price": 2.5, "stock": 10})

        fetched = await product_service.get_product(str(created.id))

        assert fetched.id == created.id
        assert fetched.name == "Tomato"
        assert fetched.unit == "unit"
        assert fetched.created_at == fetched.updated_at

    @pytest.mark.asyncio
    async def test_create_invalid_never_reaches_store(self, product_service):
        """Test that validation short-circuits before any write."""
        with pytest.raises(ValidationError, match="Price is required"):
            await product_service.create_product({"name": "Tomato", "stock": 1})

        stats = await product_service.get_stats()
        assert stats.total == 0

    @pytest.mark.asyncio
    async def test_update_partial(self, product_service):
        """Test that unspecified fields are unchanged and updated_at increases."""
        created = await product_service.create_product(
            {"name": "Tomato", "price": 2.5, "stock": 10, "category": "vegetable"}
        )

        updated = await product_service.update_product(str(created.id), {"stock": 5})

        assert updated.stock == 5
        assert updated.name == "Tomato"
        assert updated.price == 2.5
        assert updated.category == "vegetable"
        assert updated.updated_at > created.updated_at

    @pytest.mark.asyncio
    async def test_repeated_updates_strictly_increase_updated_at(self, product_service):
        """Test monotonic updated_at across back-to-back updates."""
        product = await product_service.create_product({"name": "Tomato", "price": 2.5, "stock": 10})

        previous = product.updated_at
        for stock in range(3):
            product = await product_service.update_product(str(product.id), {"stock": stock})
            assert product.updated_at > previous
            previous = product.updated_at

    @pytest.mark.asyncio
    async def test_update_errors(self, product_service):
        """Test error kinds for update."""
        created = await product_service.create_product({"name": "Tomato", "price": 2.5, "stock": 10})

        with pytest.raises(ValidationError, match="No fields provided"):
            await product_service.update_product(str(created.id), {})

        with pytest.raises(NotFoundError):
            await product_service.update_product("999", {"stock": 1})

        with pytest.raises(InvalidIdentifierError):
            await product_service.update_product("abc", {"stock": 1})

    @pytest.mark.asyncio
    async def test_delete(self, product_service):
        """Test delete then get, and deleting a missing id."""
        created = await product_service.create_product({"name": "Tomato", "price": 2.5, "stock": 10})

        await product_service.delete_product(str(created.id))

        with pytest.raises(NotFoundError):
            await product_service.get_product(str(created.id))
        with pytest.raises(NotFoundError):
            await product_service.delete_product(str(created.id))

    @pytest.mark.asyncio
    async def test_malformed_id_is_validation_error(self, product_service):
        """Test that malformed ids are distinct from missing ones."""
        with pytest.raises(InvalidIdentifierError) as exc_info:
            await product_service.get_product("not-an-id")

        assert isinstance(exc_info.value, ValidationError)
        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_malformed_id_skips_store(self):
        """Test that a malformed id never triggers a lookup."""
        repository = AsyncMock()
        repository.parse_id = MagicMock(side_effect=InvalidIdentifierError("bad"))
        service = ProductService(repository)

        with pytest.raises(InvalidIdentifierError):
            await service.delete_product("bad")

        repository.get_by_id.assert_not_awaited()
        repository.delete.assert_not_awaited()


class TestProductServiceCache:
    """Test the default-listing cache."""

    @pytest.mark.asyncio
    async def test_default_query_served_from_cache(self, product_service, sqlite_repository):
        """Test that a repeated default query does not reach the store."""
        await product_service.create_product({"name": "Tomato", "price": 2.5, "stock": 10})
        sqlite_repository.list_calls = 0

        first = await product_service.list_products(ProductQuery())
        second = await product_service.list_products(ProductQuery())

        assert second is first
        assert sqlite_repository.list_calls == 1

    @pytest.mark.asyncio
    async def test_cache_expires_after_ttl(self, product_service, sqlite_repository, clock):
        """Test that the cached page is recomputed after 60 seconds."""
        await product_service.list_products(ProductQuery())
        clock.advance(60)
        await product_service.list_products(ProductQuery())

        assert sqlite_repository.list_calls == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize("write", ["create", "update", "delete"])
    async def test_any_write_invalidates(self, product_service, sqlite_repository, write):
        """Test that create, update and delete each force a recompute."""
        product = await product_service.create_product({"name": "Tomato", "price": 2.5, "stock": 10})
        before = await product_service.list_products(ProductQuery())
        sqlite_repository.list_calls = 0

        if write == "create":
            await product_service.create_product({"name": "Onion", "price": 1, "stock": 3})
        elif write == "update":
            await product_service.update_product(str(product.id), {"stock": 4})
        else:
            await product_service.delete_product(str(product.id))

        after = await product_service.list_products(ProductQuery())

        assert sqlite_repository.list_calls == 1
        assert after != before

    @pytest.mark.asyncio
    async def test_filtered_queries_bypass_cache(self, product_service, sqlite_repository):
        """Test that only the default shape is cached."""
        await product_service.list_products(ProductQuery(category="fruit"))
        await product_service.list_products(ProductQuery(category="fruit"))
        await product_service.list_products(ProductQuery(limit=20))
        await product_service.list_products(ProductQuery(limit=20))

        assert sqlite_repository.list_calls == 4
        assert product_service.cache.get() is None

    @pytest.mark.asyncio
    async def test_list_pagination(self, product_service):
        """Test total and total_pages on a listing."""
        for i in range(12):
            await product_service.create_product({"name": f"Item {i}", "price": i, "stock": 1})

        page = await product_service.list_products(ProductQuery(page=2, limit=5))

        assert page.total == 12
        assert page.total_pages == 3
        assert len(page.items) == 5


class TestProductServiceAggregates:
    """Test categories and stats."""

    @pytest.mark.asyncio
    async def test_categories_and_stats(self, product_service):
        """Test passthrough of aggregate results."""
        await product_service.create_product({"name": "Apple", "price": 2, "stock": 0, "category": "fruit"})
        await product_service.create_product({"name": "Leek", "price": 1, "stock": 3, "category": "vegetable"})

        categories = await product_service.list_categories()
        stats = await product_service.get_stats()

        assert categories == ["fruit", "vegetable"]
        assert stats.to_dict() == {"total": 2, "lowStock": 1, "outOfStock": 1, "totalValue": 3.0}

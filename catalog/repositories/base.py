"""Storage interface shared by the product backends."""

from typing import Any, Mapping, Optional, Protocol, runtime_checkable

from catalog.models import Product, ProductId, ProductQuery, ProductStats


@runtime_checkable
class ProductRepository(Protocol):
    """
    Protocol for product persistence backends.

    Implementations assign ids and timestamps, and treat every call as
    atomic at the single-record level. Methods taking a product id expect
    a value already returned by parse_id().
    """

    async def connect(self) -> None:
        """Open the store handle and ensure the schema/container exists."""
        ...

    async def close(self) -> None:
        ...

    def parse_id(self, raw_id: Any) -> ProductId:
        """
        Convert a client-supplied id to the store's native id.

        Raises:
            InvalidIdentifierError: If raw_id is not in the native format.
        """
        ...

    async def list_products(self, query: ProductQuery) -> tuple[list[Product], int]:
        """Return one page of matching products and the total match count."""
        ...

    async def get_by_id(self, product_id: ProductId) -> Optional[Product]:
        ...

    async def create(self, values: Mapping[str, Any]) -> Product:
        """Insert a product; created_at and updated_at are set to the same instant."""
        ...

    async def update(self, product_id: ProductId, changes: Mapping[str, Any]) -> Optional[Product]:
        """
        Apply a partial update and refresh updated_at.

        Returns:
            The updated product, or None if it no longer exists.
        """
        ...

    async def delete(self, product_id: ProductId) -> bool:
        """Hard-delete a product. Returns False if it did not exist."""
        ...

    async def distinct_categories(self) -> list[str]:
        ...

    async def aggregate_stats(self) -> ProductStats:
        ...

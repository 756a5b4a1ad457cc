"""Service layer."""

from catalog.services.product_service import ProductService
from catalog.services.result_cache import ResultCache

__all__ = ["ProductService", "ResultCache"]

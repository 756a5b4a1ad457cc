"""Data models module."""

from catalog.models.product import Product, ProductId, ProductPage, ProductStats
from catalog.models.product_payload import ProductCreate, ProductUpdate, parse_payload
from catalog.models.product_query import ProductQuery

__all__ = [
    "Product",
    "ProductId",
    "ProductPage",
    "ProductStats",
    "ProductCreate",
    "ProductUpdate",
    "ProductQuery",
    "parse_payload",
]

"""Product model and the result shapes built from it."""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, Optional, Tuple, Union

ProductId = Union[int, str]

# Columns/attributes every backend persists, in public output order.
PRODUCT_FIELDS = (
    "name",
    "description",
    "description_am",
    "description_om",
    "price",
    "stock",
    "category",
    "image_base64",
    "unit",
    "origin",
)


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def next_update_time(previous: datetime) -> datetime:
    """Timestamp for a mutation that is always later than the previous one."""
    now = utc_now()
    if now <= previous:
        now = previous + timedelta(microseconds=1)
    return now


def format_timestamp(value: datetime) -> str:
    """Serialize a timestamp so that lexical order is chronological order."""
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def parse_timestamp(value: Union[str, datetime]) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class Product:
    """Product record as stored by either backend."""

    id: ProductId  # Store-assigned: integer row id (SQLite) or UUID string (Cosmos DB)
    name: str
    price: float
    stock: int
    created_at: datetime
    updated_at: datetime
    description: Optional[str] = None
    description_am: Optional[str] = None  # Amharic description
    description_om: Optional[str] = None  # Afaan Oromo description
    category: Optional[str] = None
    image_base64: Optional[str] = None  # Inline data URI or http(s) URL
    unit: Optional[str] = None
    origin: Optional[str] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Product":
        """Build a Product from a row or document, ignoring store-internal keys."""
        return cls(
            id=record["id"],
            name=record["name"],
            price=float(record["price"]),
            stock=int(record["stock"]),
            created_at=parse_timestamp(record["created_at"]),
            updated_at=parse_timestamp(record["updated_at"]),
            description=record.get("description"),
            description_am=record.get("description_am"),
            description_om=record.get("description_om"),
            category=record.get("category"),
            image_base64=record.get("image_base64"),
            unit=record.get("unit"),
            origin=record.get("origin"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Public JSON representation."""
        data: dict[str, Any] = {"id": self.id}
        for name in PRODUCT_FIELDS:
            data[name] = getattr(self, name)
        data["created_at"] = format_timestamp(self.created_at)
        data["updated_at"] = format_timestamp(self.updated_at)
        return data


@dataclass(frozen=True)
class ProductPage:
    """One page of a product listing."""

    items: Tuple[Product, ...]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    def pagination(self) -> dict[str, int]:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "totalPages": self.total_pages,
        }


@dataclass(frozen=True)
class ProductStats:
    """Inventory aggregates over the whole collection."""

    total: int = 0
    low_stock: int = 0  # 0 < stock <= 5
    out_of_stock: int = 0  # stock == 0
    total_value: float = 0.0  # sum of price * stock

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "lowStock": self.low_stock,
            "outOfStock": self.out_of_stock,
            "totalValue": self.total_value,
        }


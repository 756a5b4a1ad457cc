"""Filter and pagination parameters for product listings."""

import math
from dataclasses import dataclass
from typing import Optional

from catalog.exceptions import ValidationError

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


def _parse_int(raw: Optional[str], default: int, message: str) -> int:
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(message)


def _parse_price(raw: Optional[str], name: str) -> Optional[float]:
    if raw is None or raw.strip() == "":
        return None
    try:
        value = float(raw)
    except ValueError:
        raise ValidationError(f"{name} must be a number")
    if not math.isfinite(value):
        raise ValidationError(f"{name} must be a number")
    return value


def _clean_text(raw: Optional[str]) -> Optional[str]:
    if raw is None or raw == "":
        return None
    return raw


@dataclass(frozen=True)
class ProductQuery:
    """A product listing request: optional filters plus a page window.

    Invalid pagination bounds raise ValidationError on construction.
    """

    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    category: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    search: Optional[str] = None

    def __post_init__(self):
        if self.page < 1:
            raise ValidationError("Page must be greater than 0")
        if self.limit < 1 or self.limit > MAX_LIMIT:
            raise ValidationError(f"Limit must be between 1 and {MAX_LIMIT}")

    @classmethod
    def from_params(
        cls,
        page: Optional[str] = None,
        limit: Optional[str] = None,
        category: Optional[str] = None,
        min_price: Optional[str] = None,
        max_price: Optional[str] = None,
        search: Optional[str] = None,
    ) -> "ProductQuery":
        """Build a query from raw HTTP query-string values."""
        return cls(
            page=_parse_int(page, DEFAULT_PAGE, "Page must be an integer"),
            limit=_parse_int(limit, DEFAULT_LIMIT, "Limit must be an integer"),
            category=_clean_text(category),
            min_price=_parse_price(min_price, "minPrice"),
            max_price=_parse_price(max_price, "maxPrice"),
            search=_clean_text(search),
        )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def has_filters(self) -> bool:
        return any(
            value is not None
            for value in (self.category, self.min_price, self.max_price, self.search)
        )

    @property
    def is_default(self) -> bool:
        """No filters, first page, default page size: the only cacheable shape."""
        return (
            not self.has_filters
            and self.page == DEFAULT_PAGE
            and self.limit == DEFAULT_LIMIT
        )

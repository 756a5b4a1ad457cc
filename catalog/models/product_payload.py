"""Write payloads for products.

Create requires name, price and stock; update accepts any non-empty subset
of the writable fields. Unknown keys (including id and timestamps) are
dropped. Each rule raises a short message that is returned to the client
as-is.
"""

import re
from typing import Any, ClassVar, Optional, Type, TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictStr,
    field_validator,
    model_validator,
)
from pydantic import ValidationError as PydanticValidationError

from catalog.exceptions import ValidationError

IMAGE_DATA_PATTERN = re.compile(r"^data:image/(png|jpg|jpeg|gif|webp);base64,")
IMAGE_URL_PATTERN = re.compile(r"^https?://")
MAX_IMAGE_BYTES = 5 * 1024 * 1024

# Largest value an SQLite INTEGER column can hold
MAX_STOCK = 2**63 - 1

PayloadT = TypeVar("PayloadT", bound="ProductPayload")


def _plain_price(value: Any) -> float:
    # JSON numbers only; bools and numeric strings are not prices
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError("not a number")
    try:
        return float(value)
    except OverflowError:
        raise ValueError("not a finite number")


def _plain_stock(value: Any) -> Any:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError("not an integer")
    return value


def _non_blank(value: Any) -> Any:
    if not isinstance(value, str) or not value.strip():
        raise ValueError("blank")
    return value


def _check_image(value: Optional[str], allow_url: bool) -> Optional[str]:
    if not value:
        return value

    if IMAGE_DATA_PATTERN.match(value) is None:
        if allow_url and IMAGE_URL_PATTERN.match(value):
            return value
        if allow_url:
            raise ValueError("Invalid image format. Must be a base64 encoded image or a valid URL")
        raise ValueError(
            "Invalid image format. Must be base64 encoded image (png, jpg, jpeg, gif, or webp)"
        )

    # Decoded size estimate from the encoded length, data URI prefix included
    if len(value) * 3 / 4 > MAX_IMAGE_BYTES:
        raise ValueError("Image size must not exceed 5MB")
    return value


class ProductPayload(BaseModel):
    """Fields shared by the create and update payloads."""

    model_config = ConfigDict(extra="ignore")

    # Client-facing message per field, used for any failure on that field
    field_messages: ClassVar[dict[str, str]] = {}

    description: Optional[StrictStr] = None
    description_am: Optional[StrictStr] = None
    description_om: Optional[StrictStr] = None
    category: Optional[StrictStr] = None
    origin: Optional[StrictStr] = None

    @model_validator(mode="before")
    @classmethod
    def require_object(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            raise ValueError("Request body must be a JSON object")
        return data


class ProductCreate(ProductPayload):
    """Payload for creating a product."""

    field_messages: ClassVar[dict[str, str]] = {
        "name": "Product name is required and must be a non-empty string",
        "price": "Price is required and must be a non-negative number",
        "stock": "Stock is required and must be a non-negative integer",
    }

    name: StrictStr
    price: float = Field(ge=0, allow_inf_nan=False)
    stock: int = Field(ge=0, le=MAX_STOCK)
    image_base64: Optional[StrictStr] = None
    unit: Optional[StrictStr] = "unit"

    check_name = field_validator("name", mode="before")(_non_blank)
    check_price = field_validator("price", mode="before")(_plain_price)
    check_stock = field_validator("stock", mode="before")(_plain_stock)

    @field_validator("image_base64")
    @classmethod
    def check_inline_image(cls, value: Optional[str]) -> Optional[str]:
        return _check_image(value, allow_url=False)

    @field_validator("unit")
    @classmethod
    def default_unit(cls, value: Optional[str]) -> str:
        return value if value is not None else "unit"

    def values(self) -> dict[str, Any]:
        """Field values to persist."""
        return self.model_dump()


class ProductUpdate(ProductPayload):
    """Payload for a partial product update."""

    field_messages: ClassVar[dict[str, str]] = {
        "name": "Product name must be a non-empty string",
        "price": "Price must be a non-negative number",
        "stock": "Stock must be a non-negative integer",
    }

    name: Optional[StrictStr] = None
    price: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    stock: Optional[int] = Field(default=None, ge=0, le=MAX_STOCK)
    image_base64: Optional[StrictStr] = None
    unit: Optional[StrictStr] = None

    # Before-validators only run on values the client sent, so explicit nulls are rejected
    check_name = field_validator("name", mode="before")(_non_blank)
    check_price = field_validator("price", mode="before")(_plain_price)
    check_stock = field_validator("stock", mode="before")(_plain_stock)

    @field_validator("image_base64")
    @classmethod
    def check_image_or_url(cls, value: Optional[str]) -> Optional[str]:
        return _check_image(value, allow_url=True)

    @model_validator(mode="after")
    def require_changes(self) -> "ProductUpdate":
        if not self.model_fields_set:
            raise ValueError("No fields provided for update")
        return self

    def changes(self) -> dict[str, Any]:
        """Only the fields the client actually sent."""
        return self.model_dump(exclude_unset=True)


def _error_message(model: Type[ProductPayload], error: PydanticValidationError) -> str:
    details = error.errors()
    if not details:
        return "Invalid request body"
    # Required-field problems are reported ahead of optional ones
    first = next(
        (detail for detail in details if detail.get("loc") and detail["loc"][0] in model.field_messages),
        details[0],
    )

    if first["type"] == "json_invalid":
        return "Request body must be valid JSON"

    location = first.get("loc", ())
    field = str(location[0]) if location else None
    if field in model.field_messages:
        return model.field_messages[field]

    cause = first.get("ctx", {}).get("error")
    if isinstance(cause, Exception):
        return str(cause)
    if field is not None and first["type"] == "string_type":
        return f"{field} must be a string"
    return f"{field}: {first['msg']}" if field else first["msg"]


def parse_payload(model: Type[PayloadT], payload: Any) -> PayloadT:
    """Validate a request body, raising the catalog ValidationError on failure.

    Raw JSON text (str or bytes) is validated directly; anything else is
    treated as already-decoded data.
    """
    try:
        if isinstance(payload, (str, bytes, bytearray)):
            return model.model_validate_json(payload)
        return model.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError(_error_message(model, e)) from e

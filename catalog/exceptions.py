"""Exceptions raised by the catalog services.

Every error carries a short human-readable message and the HTTP status code
the API surface answers with:
- ValidationError: invalid payload, query or identifier (400)
- NotFoundError: the targeted product does not exist (404)
"""


class CatalogError(Exception):
    """Base class for all catalog errors."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(CatalogError):
    """Raised when a request payload or query parameter is invalid."""

    status_code = 400


class InvalidIdentifierError(ValidationError):
    """Raised when a product id is not in the store's native format."""

    def __init__(self, product_id: object):
        self.product_id = product_id
        super().__init__("Invalid product id")


class NotFoundError(CatalogError):
    """Raised when a well-formed product id matches no record."""

    status_code = 404

    def __init__(self, message: str = "Product not found"):
        super().__init__(message)

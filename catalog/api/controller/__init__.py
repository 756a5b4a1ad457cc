"""HTTP controllers."""

from catalog.api.controller.product_controller import get_product_service
from catalog.api.controller.product_controller import router as product_router

__all__ = ["get_product_service", "product_router"]

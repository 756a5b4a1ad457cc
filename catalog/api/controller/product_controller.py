"""REST controller for products."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from catalog.api.responses import paginated_response, success_response
from catalog.exceptions import ValidationError
from catalog.models import ProductQuery
from catalog.services import ProductService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/products", tags=["products"])


def get_product_service(request: Request) -> ProductService:
    """Dependency returning the process-wide ProductService."""
    return request.app.state.product_service


async def _read_body(request: Request) -> bytes:
    """Raw JSON body; parsing and validation happen in the payload models."""
    body = await request.body()
    if not body.strip():
        raise ValidationError("Request body is required")
    return body


@router.get("")
async def list_products(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    min_price: Optional[str] = Query(None, alias="minPrice"),
    max_price: Optional[str] = Query(None, alias="maxPrice"),
    search: Optional[str] = Query(None),
    service: ProductService = Depends(get_product_service),
) -> JSONResponse:
    """
    List products with optional filters.

    Query parameters: page (default 1), limit (1-100, default 10), category,
    minPrice, maxPrice (inclusive) and search (name/description substring).
    """
    query = ProductQuery.from_params(
        page=page,
        limit=limit,
        category=category,
        min_price=min_price,
        max_price=max_price,
        search=search,
    )
    return paginated_response(await service.list_products(query))


@router.get("/categories")
async def list_categories(service: ProductService = Depends(get_product_service)) -> JSONResponse:
    return success_response(await service.list_categories())


@router.get("/stats")
async def get_stats(service: ProductService = Depends(get_product_service)) -> JSONResponse:
    stats = await service.get_stats()
    return success_response(stats.to_dict())


@router.get("/{product_id}")
async def get_product(
    product_id: str,
    service: ProductService = Depends(get_product_service),
) -> JSONResponse:
    product = await service.get_product(product_id)
    return success_response(product.to_dict())


@router.post("")
async def create_product(
    request: Request,
    service: ProductService = Depends(get_product_service),
) -> JSONResponse:
    payload = await _read_body(request)
    product = await service.create_product(payload)
    return success_response(product.to_dict(), "Product created successfully", status_code=201)


@router.put("/{product_id}")
async def update_product(
    product_id: str,
    request: Request,
    service: ProductService = Depends(get_product_service),
) -> JSONResponse:
    payload = await _read_body(request)
    product = await service.update_product(product_id, payload)
    return success_response(product.to_dict(), "Product updated successfully")


@router.delete("/{product_id}")
async def delete_product(
    product_id: str,
    service: ProductService = Depends(get_product_service),
) -> JSONResponse:
    await service.delete_product(product_id)
    return success_response(None, "Product deleted successfully")

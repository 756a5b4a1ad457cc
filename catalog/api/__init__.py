"""FastAPI application setup."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from catalog import __version__
from catalog.api.controller import product_router
from catalog.api.responses import error_response, success_response
from catalog.config import AppConfig, get_config
from catalog.exceptions import CatalogError
from catalog.repositories import create_repository
from catalog.services import ProductService, ResultCache

logger = logging.getLogger(__name__)


def build_product_service(config: AppConfig) -> ProductService:
    """Wire the configured repository and result cache into a ProductService."""
    return ProductService(
        repository=create_repository(config),
        cache=ResultCache(ttl_seconds=config.cache.ttl_seconds),
    )


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(CatalogError)
    async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
        return error_response(exc.message, exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
        return error_response(message, 400)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return error_response(str(exc.detail), exc.status_code)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        return error_response("Internal server error", 500)


def create_app(
    config: Optional[AppConfig] = None,
    service: Optional[ProductService] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Application configuration; loaded via get_config() when omitted
                and no service is given.
        service: Pre-built ProductService (tests inject one over a temp store).
    """
    if service is None:
        service = build_product_service(config or get_config())

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await service.repository.connect()
        logger.info("Product catalog API started")
        try:
            yield
        finally:
            await service.repository.close()
            logger.info("Product catalog API stopped")

    app = FastAPI(
        title="Product Catalog API",
        description="REST API for products, categories and inventory stats",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.product_service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_exception_handlers(app)

    # Include routers
    app.include_router(product_router)

    @app.get("/")
    async def root() -> JSONResponse:
        """Service information."""
        return success_response(
            {"version": __version__, "endpoints": {"products": "/api/products"}},
            "Product Catalog API",
        )

    @app.get("/health")
    async def health_check() -> dict:
        """Health check endpoint."""
        return {"status": "healthy"}

    return app

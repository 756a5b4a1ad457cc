"""Response envelope helpers.

Every response body has the shape {success, data?, message?, error?};
paginated listings additionally carry a pagination object.
"""

from typing import Any, Optional

from fastapi.responses import JSONResponse

from catalog.models import ProductPage


def success_response(data: Any, message: Optional[str] = None, status_code: int = 200) -> JSONResponse:
    content: dict[str, Any] = {"success": True, "data": data}
    if message is not None:
        content["message"] = message
    return JSONResponse(status_code=status_code, content=content)


def error_response(error: str, status_code: int = 400) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": error})


def paginated_response(page: ProductPage) -> JSONResponse:
    return JSONResponse(
        status_code=200,
        content={
            "success": True,
            "data": [product.to_dict() for product in page.items],
            "pagination": page.pagination(),
        },
    )

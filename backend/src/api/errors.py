"""RFC 7807 Problem Details error responses for photo store errors"""

import logging
from typing import Optional
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from src.services.errors import (
    AuthError,
    FormatError,
    MutationInProgressError,
    PhotoNotFoundError,
    PhotoStoreError,
    TransportError,
)

logger = logging.getLogger(__name__)


def create_error_response(
    status_code: int,
    title: str,
    detail: str,
    error_type: Optional[str] = None,
    instance: Optional[str] = None
) -> JSONResponse:
    """
    Create an RFC 7807 compliant error response

    Args:
        status_code: HTTP status code
        title: Short error title
        detail: Detailed error message
        error_type: Error type slug (defaults to one derived from the status code)
        instance: Request path or identifier

    Returns:
        JSONResponse with problem details
    """
    # Default error types based on status code
    error_type_map = {
        400: "validation_error",
        401: "unauthorized",
        404: "not_found",
        409: "conflict",
        500: "internal_server_error",
        502: "bad_gateway",
    }

    if not error_type:
        error_type = error_type_map.get(status_code, "error")

    problem = {
        "type": f"/errors/{error_type}",
        "title": title,
        "status": status_code,
        "detail": detail
    }

    if instance:
        problem["instance"] = instance

    return JSONResponse(
        status_code=status_code,
        content=problem
    )


# Most specific first
ERROR_STATUS = [
    (AuthError, status.HTTP_401_UNAUTHORIZED, "Unauthorized"),
    (PhotoNotFoundError, status.HTTP_404_NOT_FOUND, "Not Found"),
    (MutationInProgressError, status.HTTP_409_CONFLICT, "Conflict"),
    (FormatError, status.HTTP_502_BAD_GATEWAY, "Unrecognized Upstream Format"),
    (TransportError, status.HTTP_502_BAD_GATEWAY, "Upstream Unavailable"),
]


async def photo_store_error_handler(request: Request, exc: PhotoStoreError) -> JSONResponse:
    """Translate photo store errors into problem details"""
    for error_class, status_code, title in ERROR_STATUS:
        if isinstance(exc, error_class):
            break
    else:
        status_code, title = status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error"

    logger.warning(f"{request.method} {request.url.path} failed: {exc}")
    response = create_error_response(
        status_code=status_code,
        title=title,
        detail=str(exc),
        instance=request.url.path,
    )
    if status_code == status.HTTP_401_UNAUTHORIZED:
        response.headers["WWW-Authenticate"] = "Bearer"
    return response


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PhotoStoreError, photo_store_error_handler)

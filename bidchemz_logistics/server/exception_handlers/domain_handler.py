"""
Domain Exception Handlers.

Maps the business-rule errors raised by the services, and request bodies that
fail validation, to ``{"detail": ...}`` responses.
"""

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from bidchemz_logistics.core.errors import DomainError
from bidchemz_logistics.core.logging_config import get_logger

logger = get_logger(__name__)


async def domain_exception_handler(request: Request, exc: DomainError) -> JSONResponse:
    """
    Turn a ``DomainError`` into its HTTP status.

    Any ``extra`` carried by the error (for example the required and available
    amounts of an insufficient balance) is merged into the body.
    """
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} in {request.method} {request.url.path}: {exc.message}")
    else:
        logger.info(f"{type(exc).__name__} in {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message, **exc.extra})


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request data as 400 with the first problem as ``detail``."""
    errors = jsonable_encoder(exc.errors(), exclude={"ctx", "input", "url"})
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    detail = f"{location}: {message}" if location else message
    return JSONResponse(status_code=400, content={"detail": detail, "errors": errors})

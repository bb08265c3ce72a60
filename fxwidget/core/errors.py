"""Error taxonomy and FastAPI exception handlers.

Domain errors:
    - ValidationError: bad user input; its message is shown verbatim.
    - RateProviderError: anything that went wrong talking to the rate API
      (NetworkError, ParseError, InvalidResponseError). Never shown directly.
    - CacheCorruption: stored JSON failed to parse; treated as a cache miss.
"""

from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette import status
import logging

logger = logging.getLogger("fxwidget.errors")


class ConverterError(Exception):
    pass


class ValidationError(ConverterError):
    pass


class RateProviderError(ConverterError):
    pass


class NetworkError(RateProviderError):
    """Transport failure or non-success HTTP status."""


class ParseError(RateProviderError):
    """Response body is not JSON or lacks the expected structure."""


class InvalidResponseError(RateProviderError):
    """API answered but reported failure or omitted expected fields."""


class CacheCorruption(ConverterError):
    pass


def not_found_handler(request: Request, exc):  # type: ignore
    return JSONResponse(
        status_code=getattr(exc, "status_code", status.HTTP_404_NOT_FOUND),
        content={
            "error": "not_found"
            if getattr(exc, "status_code", 404) == 404
            else "http_error",
            "detail": getattr(exc, "detail", None)
            or f"No route for {request.method} {request.url.path}",
        },
    )


def validation_error_handler(request: Request, exc: RequestValidationError):  # type: ignore
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "validation_error",
            "detail": exc.errors(),
        },
    )


def server_error_handler(request: Request, exc: Exception):  # type: ignore
    logger.exception("unhandled exception")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "detail": "An unexpected error occurred.",
        },
    )

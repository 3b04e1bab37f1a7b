"""Exception handlers for the auction API.

Every error response has the body `{"error_message": str}`. Domain
errors keep their own status code, request validation failures become
400 and anything unexpected is logged with its traceback and reported
as 500 with an `error_id` clients can quote.
"""

import logging
import uuid
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from .errors import AuctionError, RateLimitedError

logger = logging.getLogger("auction.api")


async def auction_error_handler(request: Request, exc: AuctionError) -> JSONResponse:
    headers = None
    if isinstance(exc, RateLimitedError):
        headers = {"Retry-After": str(exc.retry_after)}
    return JSONResponse(status_code=exc.status_code, content={"error_message": exc.message}, headers=headers)


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    # loc is e.g. ("body", "amount") or ("path", "item_id")
    loc = [str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path", "header")]
    msg = str(first.get("msg", "invalid value"))
    if loc:
        return f'"{".".join(loc)}" {msg}'
    return msg


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error_message": _validation_message(exc)})


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error_message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unhandled errors with request context and return a 500."""
    error_id = getattr(request.state, "request_id", None) or uuid.uuid4().hex
    logger.error(
        f'Unhandled exception [{error_id}] in {request.method} {request.url.path}: {exc}',
        exc_info=exc,
        extra={
            'error_id': error_id,
            'method': request.method,
            'path': request.url.path,
            'client': request.client.host if request.client else 'unknown',
            'error_type': type(exc).__name__,
        },
    )
    return JSONResponse(
        status_code=500,
        content={'error_message': 'Internal server error', 'error_id': error_id},
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register all handlers on `app`; call once during app setup."""
    app.add_exception_handler(AuctionError, auction_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, global_exception_handler)
    logger.debug("Exception handlers registered")

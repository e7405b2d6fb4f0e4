"""
HTTP error mapping for the market data service.

MarketDataException subclasses become JSON error bodies with a status code
chosen by exception family; anything else is a 500. Routes never build
error responses themselves, they raise.

Usage:
    from services.error_handler import setup_error_handlers

    app = FastAPI()
    setup_error_handlers(app, debug=DEBUG)
"""

import logging
import traceback
from typing import Callable, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from services.exceptions import (
    AnalysisError,
    ConfigurationError,
    ExternalServiceError,
    MarketDataException,
    SessionNotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# First match wins; subclasses must come before their parents
STATUS_BY_FAMILY = (
    (ValidationError, 400),
    (SessionNotFoundError, 404),
    (ConfigurationError, 503),
    (ExternalServiceError, 502),
    (AnalysisError, 422),
)


def get_status_code(exc: MarketDataException) -> int:
    for family, status in STATUS_BY_FAMILY:
        if isinstance(exc, family):
            return status
    return 500


def _request_context(request: Optional[Request]) -> Dict[str, str]:
    if request is None:
        return {}
    context = {"path": str(request.url.path), "method": request.method}
    session_id = request.path_params.get("session_id")
    if session_id:
        context["sessionId"] = session_id
    return context


def create_error_response(
    error: MarketDataException,
    status_code: int = 500,
    request: Optional[Request] = None,
) -> JSONResponse:
    """Error body is the exception's to_dict() plus where it happened."""
    body = error.to_dict()
    body.update(_request_context(request))
    return JSONResponse(status_code=status_code, content=body)


def log_error(exc: MarketDataException, status_code: int, request: Optional[Request] = None):
    where = f" ({request.method} {request.url.path})" if request is not None else ""
    if status_code >= 500:
        logger.error(f"[{exc.code}] {exc}{where}", extra={"details": exc.details})
    else:
        logger.warning(f"[{exc.code}] {exc.message}{where}", extra={"details": exc.details})


def internal_error_response(request: Request, exc: Exception, debug: bool = False) -> JSONResponse:
    logger.error(
        f"[INTERNAL_ERROR] {type(exc).__name__} in {request.url.path}: {exc}",
        exc_info=exc,
    )
    body = {"error": "INTERNAL_ERROR", "message": "An unexpected error occurred"}
    body.update(_request_context(request))
    if debug:
        body["debug"] = {
            "exception": type(exc).__name__,
            "message": str(exc),
            "traceback": "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
        }
    return JSONResponse(status_code=500, content=body)


# ============================================================
# Handlers
# ============================================================

async def handle_market_exception(request: Request, exc: MarketDataException) -> JSONResponse:
    status_code = get_status_code(exc)
    log_error(exc, status_code, request)
    return create_error_response(exc, status_code, request)


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """
    Last line of defence for exceptions that escape the route handlers.

    MarketDataException normally never reaches here (the registered handler
    answers first) but is still mapped if it does.
    """

    def __init__(self, app: FastAPI, debug: bool = False):
        super().__init__(app)
        self.debug = debug

    async def dispatch(self, request: Request, call_next: Callable):
        try:
            return await call_next(request)
        except MarketDataException as exc:
            return await handle_market_exception(request, exc)
        except Exception as exc:
            return internal_error_response(request, exc, self.debug)


def setup_error_handlers(app: FastAPI, debug: bool = False):
    """Register the MarketDataException handler and the catch-all middleware."""
    app.add_middleware(ErrorHandlingMiddleware, debug=debug)
    app.add_exception_handler(MarketDataException, handle_market_exception)

    @app.exception_handler(Exception)
    async def unexpected_exception_handler(request: Request, exc: Exception):
        return internal_error_response(request, exc, debug)

    logger.info(f"[ERROR HANDLER] Configured (debug={debug})")

"""API middleware: CORS, request logging, and error handling.

Provides helper functions and middleware classes to configure cross-origin
resource sharing, structured request logging (via structlog), and automatic
conversion of ``SonicCompassError`` subclasses into JSON ``ErrorResponse``
bodies.

# ─── MIDDLEWARE EXECUTION ORDER ───────────────────────────────────────
#
# Starlette middleware is a stack (last added, first executed):
#
#   In main.py:
#     app.add_middleware(ErrorHandlingMiddleware)    # added 1st → inner
#     app.add_middleware(RequestLoggingMiddleware)   # added 2nd → outermost
#
#   Request flow:
#     Client → RequestLogging → ErrorHandling → route handler
#
# So RequestLoggingMiddleware sees the *final* status code, including the
# one ErrorHandling substituted for the raised error.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import time

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from soniccompass.api.schemas import ErrorResponse
from soniccompass.utils.errors import SonicCompassError
from soniccompass.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------


def configure_cors(app: FastAPI, *, allowed_origins: list[str] | None = None) -> None:
    """Add CORS middleware; defaults to ``["*"]`` for development."""
    origins = allowed_origins or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


# ---------------------------------------------------------------------------
# Request Logging
# ---------------------------------------------------------------------------


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every HTTP request with method, path, status code, and duration."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start = time.perf_counter()
        response: Response | None = None

        try:
            response = await call_next(request)
            return response
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            status_code = response.status_code if response else 500
            _logger.info(
                "http_request",
                method=request.method,
                path=str(request.url.path),
                status=status_code,
                duration_ms=duration_ms,
            )


# ---------------------------------------------------------------------------
# Error Handling
# ---------------------------------------------------------------------------


def _log_application_error(request: Request, exc: SonicCompassError) -> None:
    log = _logger.warning if exc.status_code < 500 else _logger.error
    log(
        "application_error",
        error_type=type(exc).__name__,
        message=exc.message,
        provider=exc.provider_name,
        status=exc.status_code,
        path=str(request.url.path),
    )


def error_response(exc: SonicCompassError) -> JSONResponse:
    """Render *exc* as an :class:`ErrorResponse` with the class's status code."""
    body = ErrorResponse(error=type(exc).__name__, detail=exc.message)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


async def handle_application_error(request: Request, exc: Exception) -> JSONResponse:
    """Exception handler registered for ``SonicCompassError`` on the app."""
    if not isinstance(exc, SonicCompassError):
        raise exc
    _log_application_error(request, exc)
    return error_response(exc)


def install_error_handling(app: FastAPI) -> None:
    """Register the ``SonicCompassError`` handler on *app*."""
    app.add_exception_handler(SonicCompassError, handle_application_error)


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Catch ``SonicCompassError`` subclasses and return structured JSON errors.

    The client sees the exception class name and its message; stack traces
    stay in the server log.  Each error class carries its own HTTP status
    (``status_code``), e.g. 404 for ``NotFoundError``, 502 for upstream
    failures.  Route errors are normally answered by the exception handler
    from :func:`install_error_handling`; this middleware catches the ones
    raised outside a route (e.g. in another middleware).
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)
        except SonicCompassError as exc:
            _log_application_error(request, exc)
            return error_response(exc)

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from monitor_api.errors import InvalidRequest, MonitorError, NotFound, RateLimited

logger = logging.getLogger(__name__)


def error_body(exc: MonitorError, dev_mode: bool) -> dict:
    body: dict = {
        "error": exc.error,
        "message": exc.message,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if isinstance(exc, RateLimited):
        body["retryAfter"] = exc.retry_after_seconds
    if dev_mode and exc.detail:
        body["detail"] = exc.detail
    return body


def error_response(request: Request, exc: MonitorError) -> JSONResponse:
    dev_mode = request.app.state.settings.dev_mode
    headers = {"Cache-Control": "no-store"}
    if isinstance(exc, RateLimited):
        headers["Retry-After"] = str(exc.retry_after_seconds)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc, dev_mode),
        headers=headers,
    )


async def _monitor_error(request: Request, exc: MonitorError) -> JSONResponse:
    return error_response(request, exc)


async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        return error_response(request, NotFound())
    err = MonitorError(str(exc.detail))
    err.status_code = exc.status_code
    err.error = "HTTPError"
    return error_response(request, err)


async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(request, InvalidRequest(detail=str(exc.errors())))


async def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(request, MonitorError(detail=str(exc)))


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(MonitorError, _monitor_error)
    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(RequestValidationError, _validation_error)
    app.add_exception_handler(Exception, _unhandled_error)

"""Translate gateway errors into structured JSON responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from session_gateway.core.errors import GatewayError
from session_gateway.schemas import ErrorBody, ErrorResponse

logger = logging.getLogger(__name__)


def error_response(status_code: int, message: str) -> JSONResponse:
    body = ErrorResponse(error=ErrorBody(message=message))
    return JSONResponse(status_code=status_code, content=body.model_dump())


def register_exception_handlers(app: FastAPI) -> None:
    """Install the handler that maps every :class:`GatewayError` to its status."""

    @app.exception_handler(GatewayError)
    async def handle_gateway_error(request: Request, exc: GatewayError) -> JSONResponse:
        server_side = exc.status_code >= 500
        log_fn = logger.error if server_side else logger.warning
        log_fn(
            "%s on %s %s: %s",
            type(exc).__name__,
            request.method,
            request.url.path,
            exc.message,
            exc_info=exc if server_side else None,
        )
        message = exc.message if exc.expose_detail else exc.public_message
        return error_response(exc.status_code, message)


__all__ = ["error_response", "register_exception_handlers"]

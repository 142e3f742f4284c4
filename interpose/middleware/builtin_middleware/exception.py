"""
Exception handling middleware for interpose.

Captures unhandled exceptions raised by the rest of the chain and turns them
into a 500 JSON response. The level of detail in the body is mode-controlled:
        mode="production":
                {"error": {"type": "HTTP_500_INTERNAL_SERVER_ERROR", "message": "Internal Server Error"}}
        mode="debug":
                {"error": {"type": "ValueError", "message": "Invalid value", "detail": "repr(...)", "traceback": "..."}}
"""

from __future__ import annotations

import json
import logging
import traceback
from typing import Literal

from ...status import HTTPStatus
from ...types import Handler

logger = logging.getLogger(__name__)


class ExceptionMiddleware:
    """Middleware that converts unhandled exceptions to JSON responses.

    Append it last so it wraps everything else.

    Args:
            mode: Either "production" (default) for minimal messages or "debug" for full traceback.
    """

    def __init__(self, mode: Literal["production", "debug"] = "production"):
        self.mode = mode.lower()

    def __call__(self, next_handler: Handler) -> Handler:
        def exception_handler(exchange) -> None:
            try:
                next_handler(exchange)
            except Exception as exc:  # noqa: BLE001 - converted to a 500 below
                request = exchange.request
                logger.exception(
                    "Unhandled exception while serving %s %s",
                    request.method,
                    request.path,
                    extra={"method": request.method, "path": request.path, "status": 500},
                )
                response = exchange.response
                if response.headers_sent:
                    # Status line is already on the wire
                    raise
                response.reset()
                response.set_header("content-type", "application/json; charset=utf-8")
                response.write_header(HTTPStatus.HTTP_500_INTERNAL_SERVER_ERROR)
                response.write(json.dumps(self._payload(exc), ensure_ascii=False))

        return exception_handler

    def _payload(self, exc: Exception) -> dict:
        if self.mode == "debug":
            tb = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
            return {
                "error": {
                    "type": type(exc).__name__,
                    "message": str(exc),
                    "detail": repr(exc),
                    "traceback": tb,
                }
            }
        return {
            "error": {
                "type": HTTPStatus.HTTP_500_INTERNAL_SERVER_ERROR.name,
                "message": "Internal Server Error",
            }
        }


__all__ = ["ExceptionMiddleware"]

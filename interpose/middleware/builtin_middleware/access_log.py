"""
Access log middleware for interpose.

Writes one line per exchange in the Apache combined log format once the rest
of the chain has returned.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Optional, Union

from ...types import Handler

access_logger = logging.getLogger("interpose.access")


def combined_log_line(exchange, timestamp: datetime) -> str:
    """Format an exchange as an Apache combined log line."""
    request, response = exchange.request, exchange.response
    username = exchange.context.get("username") or "-"
    return '%s - %s [%s] "%s %s HTTP/%s" %d %d "%s" "%s"' % (
        request.remote_addr,
        username,
        timestamp.strftime("%d/%b/%Y:%H:%M:%S %z"),
        request.method,
        request.url,
        request.http_version,
        response.status_code,
        response.size,
        request.get_header("referer", ""),
        request.get_header("user-agent", ""),
    )


class AccessLog:
    """
    Log every exchange after it has been served.

    Args:
        logger: Logger or LoggerAdapter to write to (default: interpose.access)
        level: Log level of the access lines
    """

    def __init__(
        self,
        logger: Optional[Union[logging.Logger, logging.LoggerAdapter]] = None,
        level: int = logging.INFO,
    ):
        self.logger = logger or access_logger
        self.level = level

    def __call__(self, next_handler: Handler) -> Handler:
        def access_log_handler(exchange) -> None:
            timestamp = datetime.now(timezone.utc)
            started = time.perf_counter()
            try:
                next_handler(exchange)
            finally:
                request, response = exchange.request, exchange.response
                self.logger.log(
                    self.level,
                    combined_log_line(exchange, timestamp),
                    extra={
                        "remote_addr": request.remote_addr,
                        "method": request.method,
                        "path": request.path,
                        "status": response.status_code,
                        "size": response.size,
                        "duration_ms": round((time.perf_counter() - started) * 1000, 3),
                    },
                )

        return access_log_handler


__all__ = ["AccessLog", "combined_log_line"]

"""
JSON content type middleware for interpose.
"""

from ...types import Handler


def json_content_type(next_handler: Handler) -> Handler:
    """Send an application/json content type, then continue the chain."""

    def json_handler(exchange) -> None:
        exchange.response.set_header("content-type", "application/json")
        next_handler(exchange)

    return json_handler


__all__ = ["json_content_type"]

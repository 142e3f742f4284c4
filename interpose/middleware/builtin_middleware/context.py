"""
Context clearing middleware for interpose.
"""

from ...types import Handler


def clear_context(next_handler: Handler) -> Handler:
    """Empty exchange.context once the rest of the chain returns or raises."""

    def clear_context_handler(exchange) -> None:
        try:
            next_handler(exchange)
        finally:
            exchange.context.clear()

    return clear_context_handler


__all__ = ["clear_context"]

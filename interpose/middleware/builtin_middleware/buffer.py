"""
Output buffering middleware for interpose.

Everything the rest of the chain writes is collected first and applied to the
real response writer afterwards. Headers can therefore be set after the body
was written. Downside: nothing is sent until the chain returns, which breaks
streaming.
"""

from ...response import ResponseWriter
from ...types import Handler


def apply_buffered(buffered: ResponseWriter, response: ResponseWriter) -> None:
    """
    Copy headers, status and body of a buffered writer onto another writer.

    The buffered headers replace the writer's headers, so headers deleted
    downstream stay deleted.
    """
    response.headers.clear()
    response.headers.update(buffered.headers)
    if buffered.written:
        response.write_header(buffered.status_code)
    if buffered.body:
        response.write(buffered.body)


def buffer_output(next_handler: Handler) -> Handler:
    def buffer_handler(exchange) -> None:
        response = exchange.response
        buffered = ResponseWriter()
        buffered.headers.update(response.headers)
        exchange.response = buffered
        try:
            next_handler(exchange)
        finally:
            exchange.response = response
        apply_buffered(buffered, response)

    return buffer_handler


__all__ = ["buffer_output", "apply_buffered"]

"""
Adaptors for foreign middleware.

Many middleware libraries use a call-next signature instead of a transform:

    def unit(writer, request, call_next):
        ...                       # before
        call_next(writer, request)
        ...                       # after

The functions below bridge such a unit into the interpose contract. The unit
sees a ResponseWriterFacade instead of the real writer; buffering and flushing
stay with whatever writer the unit chooses to use.
"""

from typing import Any, Callable, Optional

from .middleware import noop_handler
from .types import Handler, Transform

CallNext = Callable[[Any, Any], None]
CallNextUnit = Callable[[Any, Any, CallNext], None]


class ResponseWriterFacade:
    """
    Writer handed to foreign middleware.

    Forwards headers, status and body writes to the underlying writer. flush()
    is forwarded when the underlying writer can flush. status(), size() and
    written() report the underlying values when available and 0/0/False
    otherwise.
    """

    def __init__(self, writer: Any):
        self.writer = writer

    @property
    def headers(self):
        return self.writer.headers

    def set_header(self, name: str, value: str) -> "ResponseWriterFacade":
        self.writer.set_header(name, value)
        return self

    def get_header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.writer.get_header(name, default)

    def write_header(self, status_code: int) -> None:
        self.writer.write_header(status_code)

    def write(self, data) -> int:
        return self.writer.write(data)

    def flush(self) -> None:
        flush = getattr(self.writer, "flush", None)
        if callable(flush):
            flush()

    def status(self) -> int:
        return int(getattr(self.writer, "status_code", 0) or 0)

    def size(self) -> int:
        return int(getattr(self.writer, "size", 0) or 0)

    def written(self) -> bool:
        return bool(getattr(self.writer, "written", False))

    def __repr__(self) -> str:
        return f"<ResponseWriterFacade {self.writer!r}>"


def _unwrap(writer: Any) -> Any:
    while isinstance(writer, ResponseWriterFacade):
        writer = writer.writer
    return writer


def _serve_with(unit: CallNextUnit, exchange: Any, next_handler: Handler) -> None:
    """Run a call-next unit on the exchange, continuing into next_handler."""
    request = exchange.request
    facade = ResponseWriterFacade(exchange.response)

    def call_next(writer: Any = None, req: Any = None) -> None:
        original_response, original_request = exchange.response, exchange.request
        if writer is not None:
            exchange.response = _unwrap(writer)
        if req is not None:
            exchange.request = req
        try:
            next_handler(exchange)
        finally:
            exchange.response, exchange.request = original_response, original_request

    unit(facade, request, call_next)


def from_call_next(unit: CallNextUnit) -> Transform:
    """
    Turn a call-next style middleware into a transform.

    Args:
        unit: Callable with signature (writer, request, call_next)

    Returns:
        A transform for MiddlewareStack.append()
    """

    def transform(next_handler: Handler) -> Handler:
        def adapted_handler(exchange) -> None:
            _serve_with(unit, exchange, next_handler)

        return adapted_handler

    return transform


def handler_from_call_next(unit: CallNextUnit) -> Handler:
    """
    Turn a call-next style middleware into a plain handler.

    Its call_next reaches nothing; combine with MiddlewareStack.append_handler()
    to run it and continue regardless.
    """

    def adapted_handler(exchange) -> None:
        _serve_with(unit, exchange, noop_handler)

    return adapted_handler


__all__ = [
    "ResponseWriterFacade",
    "from_call_next",
    "handler_from_call_next",
]

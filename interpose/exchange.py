"""
Exchange class for interpose.

An exchange pairs the inbound request view with the outbound response writer,
plus a context bag scoped to the same exchange. It is the single mutable
object passed through the middleware chain.
"""

from typing import Optional

from .context import Context
from .request import Request
from .response import ResponseWriter


class Exchange:
    """One request/response exchange flowing through a middleware stack."""

    def __init__(
        self,
        request: Optional[Request] = None,
        response: Optional[ResponseWriter] = None,
        context: Optional[Context] = None,
    ):
        self.request = request if request is not None else Request()
        self.response = response if response is not None else ResponseWriter()
        self.context = context if context is not None else Context()

    def close(self) -> None:
        """End of the exchange: drop everything stored in the context."""
        self.context.clear()

    def __enter__(self) -> "Exchange":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<Exchange {self.request!r} {self.response!r}>"

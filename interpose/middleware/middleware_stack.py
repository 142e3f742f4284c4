"""
Middleware stack implementation for interpose.

The MiddlewareStack class holds the ordered transforms and composes them into
a single handler for each served exchange.

Middleware is called in nested LIFO fashion: the last transform to be appended
is the outermost layer, so it is entered first and exited last. With
transforms appended in the order A, B, C the calls look like:

    C start
        B start
            A start
            A end
        B end
    C end
"""

from functools import reduce
from typing import Any, List, Optional, Tuple

from ..types import Handler, Transform


def noop_handler(exchange: Any) -> None:
    """Terminal handler: consumes the exchange and does nothing."""


class MiddlewareStack:
    """
    Ordered, append-only collection of transforms.

    A transform has the signature ``transform(next_handler) -> handler``. It
    receives the handler representing the rest of the chain and returns a new
    handler wrapping it. Not calling ``next_handler`` stops the chain there.

    The stack is itself a handler, so one stack can be mounted inside another
    with ``append_handler``.
    """

    def __init__(self):
        """Initialize an empty middleware stack."""
        self._transforms: List[Transform] = []

    def append(self, transform: Transform) -> None:
        """
        Add a transform to the stack.

        Args:
            transform: A callable with signature (next_handler) -> handler
        """
        self._transforms.append(transform)

    def append_handler(self, handler: Handler) -> None:
        """
        Add a plain handler to the stack.

        Unlike ``append``, the rest of the chain is always called after the
        handler returns, so a handler added this way can observe or modify the
        exchange but never stops the chain.

        Args:
            handler: A callable with signature (exchange) -> None
        """

        def transform(next_handler: Handler) -> Handler:
            def forwarding_handler(exchange: Any) -> None:
                handler(exchange)
                next_handler(exchange)

            return forwarding_handler

        self.append(transform)

    # Names used by most Python middleware registries
    use = append
    use_handler = append_handler

    def build(self, terminal: Optional[Handler] = None) -> Handler:
        """
        Compose the transforms into a single handler.

        The transforms are applied in append order, each one wrapping the
        handler built so far, so the last appended ends up outermost:
        ``T_n(... T_2(T_1(terminal)) ...)``.

        Args:
            terminal: Innermost handler. Defaults to a no-op handler.

        Returns:
            The composed handler
        """
        return reduce(
            lambda working, transform: transform(working),
            self._transforms,
            noop_handler if terminal is None else terminal,
        )

    def serve(self, exchange: Any) -> None:
        """
        Build the composed handler and run it against the exchange.

        Exceptions raised by any transform propagate to the caller.
        """
        self.build()(exchange)

    def __call__(self, exchange: Any) -> None:
        self.serve(exchange)

    @property
    def transforms(self) -> Tuple[Transform, ...]:
        """The appended transforms, in append order."""
        return tuple(self._transforms)

    def count(self) -> int:
        """Return the number of transforms in the stack."""
        return len(self._transforms)

    def __len__(self) -> int:
        return len(self._transforms)

    def __repr__(self) -> str:
        return f"<MiddlewareStack {len(self._transforms)} transforms>"

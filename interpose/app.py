"""
ASGI host for interpose.

App serves a MiddlewareStack under any ASGI server (uvicorn for example). The
stack is synchronous, so every exchange runs on a worker thread; concurrent
requests therefore run their chains on separate threads.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from .config import Settings
from .exchange import Exchange
from .middleware import MiddlewareStack
from .request import Request
from .response import ResponseWriter, http_error
from .status import HTTPStatus
from .types import Handler, Transform

logger = logging.getLogger(__name__)


class _ASGIResponseSender:
    """Sends a ResponseWriter's output over an ASGI send channel."""

    def __init__(self, loop: asyncio.AbstractEventLoop, send: Callable):
        self._loop = loop
        self._send = send
        self.started = False

    @staticmethod
    def _asgi_headers(response: ResponseWriter) -> List[List[bytes]]:
        return [
            [name.lower().encode("latin-1"), str(value).encode("latin-1")]
            for name, value in response.headers.items()
        ]

    async def _send_start(self, response: ResponseWriter) -> None:
        await self._send(
            {
                "type": "http.response.start",
                "status": response.status_code,
                "headers": self._asgi_headers(response),
            }
        )
        self.started = True

    async def send_chunk(self, response: ResponseWriter, chunk: bytes) -> None:
        if not self.started:
            await self._send_start(response)
        await self._send({"type": "http.response.body", "body": chunk, "more_body": True})

    def flush_from_thread(self, response: ResponseWriter, chunk: bytes) -> None:
        """Flush sink used by the ResponseWriter on the worker thread."""
        future = asyncio.run_coroutine_threadsafe(
            self.send_chunk(response, chunk), self._loop
        )
        future.result()

    async def finish(self, response: ResponseWriter) -> None:
        if not self.started:
            await self._send_start(response)
        await self._send(
            {"type": "http.response.body", "body": response.body, "more_body": False}
        )


class App:
    """ASGI application serving a middleware stack. To serve a stack, instantiate this class."""

    def __init__(
        self,
        stack: Optional[MiddlewareStack] = None,
        settings: Optional[Settings] = None,
    ):
        """Initialize the application.

        Args:
            stack: Middleware stack to serve. If not provided, a new empty stack is created.
            settings: Optional settings, exposed to handlers as ``exchange.context.settings``
        """
        self.stack = stack if stack is not None else MiddlewareStack()
        self.settings = settings
        self._handler: Optional[Handler] = None

        # Lifespan event handlers
        self._startup_handlers: List[Callable[[], Awaitable[None]]] = []
        self._shutdown_handlers: List[Callable[[], Awaitable[None]]] = []

        # First startup handler freezes the middleware stack
        self._startup_handlers.append(self._freeze_stack)

    @property
    def frozen(self) -> bool:
        return self._handler is not None

    async def _freeze_stack(self) -> None:
        """Compose the stack once; it must not change while serving."""
        if self._handler is None:
            self._handler = self.stack.build()
            logger.debug("Middleware stack frozen with %d transforms", len(self.stack))

    def _check_not_frozen(self) -> None:
        if self.frozen:
            raise RuntimeError(
                "Cannot add middleware after application startup. Add all middleware before starting the server."
            )

    def use(self, transform: Transform) -> None:
        """
        Append a transform to the stack.

        Raises:
            RuntimeError: If called after application startup
        """
        self._check_not_frozen()
        self.stack.append(transform)

    def use_handler(self, handler: Handler) -> None:
        """
        Append a plain handler to the stack.

        Raises:
            RuntimeError: If called after application startup
        """
        self._check_not_frozen()
        self.stack.append_handler(handler)

    def middleware(self):
        """
        Decorator for registering transforms.

        Usage:
            @app.middleware()
            def my_middleware(next_handler):
                def handler(exchange):
                    # pre-processing
                    next_handler(exchange)
                    # post-processing
                return handler
        """

        def decorator(func: Transform) -> Transform:
            self.use(func)
            return func

        return decorator

    # Lifespan event handlers
    def _register_event_handler(
        self, event_type: str, func: Callable[[], Awaitable[None]]
    ) -> None:
        if event_type == "startup":
            self._startup_handlers.append(func)
        elif event_type == "shutdown":
            self._shutdown_handlers.append(func)
        else:
            raise ValueError(
                f"Invalid event type: {event_type}. Must be 'startup' or 'shutdown'"
            )

    def on_event(self, event_type: str):
        """
        Register a function to run on application startup or shutdown.

        Args:
            event_type: Either "startup" or "shutdown"

        Returns:
            Decorator function
        """

        def decorator(
            func: Callable[[], Awaitable[None]],
        ) -> Callable[[], Awaitable[None]]:
            self._register_event_handler(event_type, func)
            return func

        return decorator

    def add_event_handler(
        self, event_type: str, func: Callable[[], Awaitable[None]]
    ) -> None:
        """Add an event handler for startup or shutdown."""
        self._register_event_handler(event_type, func)

    async def startup(self) -> None:
        """Run all registered startup handlers."""
        for handler in self._startup_handlers:
            await handler()

    async def shutdown(self) -> None:
        """Run all registered shutdown handlers."""
        for handler in self._shutdown_handlers:
            await handler()

    async def __call__(self, scope: Dict[str, Any], receive: Callable, send: Callable):
        """
        ASGI application entrypoint.

        Args:
            scope: Connection scope information
            receive: Callable to receive messages from the client
            send: Callable to send messages to the client
        """
        if scope["type"] == "http":
            await self._handle_http(scope, receive, send)
        elif scope["type"] == "lifespan":
            await self._handle_lifespan(scope, receive, send)
        else:
            # For non-HTTP protocols, just close the connection
            await send({"type": "websocket.close", "code": 1000})

    async def _handle_lifespan(
        self, scope: Dict[str, Any], receive: Callable, send: Callable
    ):
        """Handle the ASGI lifespan protocol until shutdown."""
        while True:
            message = await receive()

            if message["type"] == "lifespan.startup":
                try:
                    await self.startup()
                    await send({"type": "lifespan.startup.complete"})
                except Exception as e:
                    logger.exception("Startup failed")
                    await send({"type": "lifespan.startup.failed", "message": str(e)})
                    return
            elif message["type"] == "lifespan.shutdown":
                try:
                    await self.shutdown()
                    await send({"type": "lifespan.shutdown.complete"})
                except Exception as e:
                    logger.exception("Shutdown failed")
                    await send({"type": "lifespan.shutdown.failed", "message": str(e)})
                return

    @staticmethod
    async def _read_body(receive: Callable) -> bytes:
        chunks = []
        while True:
            message = await receive()
            if message["type"] == "http.disconnect":
                break
            chunks.append(message.get("body", b""))
            if not message.get("more_body", False):
                break
        return b"".join(chunks)

    async def _handle_http(
        self, scope: Dict[str, Any], receive: Callable, send: Callable
    ):
        """
        Serve one HTTP request through the frozen middleware stack.
        """
        await self._freeze_stack()

        body = await self._read_body(receive)
        sender = _ASGIResponseSender(asyncio.get_running_loop(), send)
        exchange = Exchange(
            Request.from_scope(scope, body),
            ResponseWriter(on_flush=sender.flush_from_thread),
        )
        if self.settings is not None:
            exchange.context.settings = self.settings

        try:
            await asyncio.to_thread(self._handler, exchange)
        except Exception:
            logger.exception(
                "Unhandled exception while serving %s %s",
                exchange.request.method,
                exchange.request.path,
            )
            if sender.started:
                # Headers are out; end the body as-is
                await send({"type": "http.response.body", "body": b"", "more_body": False})
                return
            exchange.response.reset()
            http_error(
                exchange.response,
                "Internal Server Error",
                HTTPStatus.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        finally:
            exchange.close()

        await sender.finish(exchange.response)

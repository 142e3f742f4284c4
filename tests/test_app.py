"""
Tests for the ASGI host: lifespan, HTTP serving, streaming and error handling.
"""

import threading

import pytest
from unittest.mock import AsyncMock

from interpose import App, MiddlewareStack
from interpose.config import Settings
from interpose.middleware.builtin_middleware import (
    BasicAuth,
    ExceptionMiddleware,
    GZipMiddleware,
)
from interpose.testing import TestClient, TestRequest


class TestLifespanEvents:
    """Test lifespan event handling functionality."""

    def test_event_handler_registration(self):
        app = App()

        @app.on_event("startup")
        async def startup_decorator():
            pass

        async def shutdown_direct():
            pass

        app.add_event_handler("shutdown", shutdown_direct)

        assert len(app._startup_handlers) == 2  # 1 user + 1 built-in
        assert startup_decorator in app._startup_handlers
        assert shutdown_direct in app._shutdown_handlers

    def test_invalid_event_type_handling(self):
        app = App()

        with pytest.raises(ValueError, match="Invalid event type: invalid"):

            @app.on_event("invalid")
            async def invalid_handler():
                pass

    @pytest.mark.asyncio
    async def test_lifespan_protocol(self):
        app = App()
        calls = []

        @app.on_event("startup")
        async def startup_handler():
            calls.append("startup")

        @app.on_event("shutdown")
        async def shutdown_handler():
            calls.append("shutdown")

        receive = AsyncMock(
            side_effect=[{"type": "lifespan.startup"}, {"type": "lifespan.shutdown"}]
        )
        send = AsyncMock()

        await app({"type": "lifespan"}, receive, send)

        assert calls == ["startup", "shutdown"]
        assert app.frozen
        send.assert_any_call({"type": "lifespan.startup.complete"})
        send.assert_any_call({"type": "lifespan.shutdown.complete"})

    @pytest.mark.asyncio
    async def test_lifespan_startup_failure(self):
        app = App()

        @app.on_event("startup")
        async def failing_startup():
            raise RuntimeError("no database")

        receive = AsyncMock(return_value={"type": "lifespan.startup"})
        send = AsyncMock()

        await app({"type": "lifespan"}, receive, send)

        send.assert_called_once_with(
            {"type": "lifespan.startup.failed", "message": "no database"}
        )

    @pytest.mark.asyncio
    async def test_append_after_startup_raises(self):
        app = App()
        await app.startup()

        with pytest.raises(RuntimeError, match="Cannot add middleware"):
            app.use(lambda next_handler: next_handler)
        with pytest.raises(RuntimeError, match="Cannot add middleware"):
            app.use_handler(lambda exchange: None)

    @pytest.mark.asyncio
    async def test_websocket_closed(self):
        send = AsyncMock()
        await App()({"type": "websocket"}, AsyncMock(), send)
        send.assert_called_once_with({"type": "websocket.close", "code": 1000})


class TestHTTP:
    """Test serving HTTP requests through the stack."""

    def test_empty_stack_sends_empty_200(self):
        response = TestClient(App()).get("/")
        assert response.status_code == 200
        assert response.content == b""

    def test_handler_output(self):
        app = App()

        def hello(exchange):
            exchange.response.set_header("content-type", "text/plain; charset=utf-8")
            exchange.response.write(f"Welcome to the home page, {exchange.request.path[1:]}!")

        app.use_handler(hello)
        response = TestClient(app).get("/john")

        assert response.status_code == 200
        assert response.text() == "Welcome to the home page, john!"
        assert response.headers["content-type"] == "text/plain; charset=utf-8"

    def test_request_body_and_query(self):
        app = App()

        @app.middleware()
        def echo(next_handler):
            def handler(exchange):
                payload = exchange.request.json()
                payload["page"] = exchange.request.query_params["page"]
                exchange.response.write_header(201)
                exchange.response.write(repr(sorted(payload.items())))

            return handler

        request = TestRequest().set_json_body({"name": "alice"}).set_query_params(page=3)
        response = TestClient(app).post("/users", request)

        assert response.status_code == 201
        assert response.text() == "[('name', 'alice'), ('page', '3')]"

    def test_form_body(self):
        app = App()
        seen = {}

        def record(exchange):
            seen["content_type"] = exchange.request.content_type
            seen["length"] = exchange.request.get_header("content-length")
            seen["body"] = exchange.request.text()

        app.use_handler(record)

        request = TestRequest().set_form_data(a="1", b="x y")
        response = TestClient(app).post("/form", request)

        assert response.status_code == 200
        assert seen == {
            "content_type": "application/x-www-form-urlencoded",
            "length": "9",
            "body": "a=1&b=x+y",
        }

    def test_ordering_through_host(self):
        app = App()

        def tag(name):
            def transform(next_handler):
                def handler(exchange):
                    exchange.response.write(f"{name}(")
                    next_handler(exchange)
                    exchange.response.write(f"){name}")

                return handler

            return transform

        app.use(tag("A"))
        app.use(tag("B"))

        assert TestClient(app).get("/").text() == "B(A()A)B"

    def test_basic_auth(self):
        app = App()
        app.use_handler(lambda exchange: exchange.response.write("secret"))
        app.use(BasicAuth("john", "doe"))
        client = TestClient(app)

        rejected = client.get("/protected/")
        assert rejected.status_code == 401
        assert rejected.headers["www-authenticate"] == 'Basic realm="Authorization Required"'

        accepted = client.get("/protected/", TestRequest().set_basic_auth("john", "doe"))
        assert accepted.status_code == 200
        assert accepted.text() == "secret"

    def test_gzip(self):
        app = App()

        def page(exchange):
            exchange.response.set_header("content-type", "text/plain")
            exchange.response.write("green " * 200)

        app.use_handler(page)
        app.use(GZipMiddleware())

        response = TestClient(app).get("/", TestRequest().set_headers(accept_encoding="gzip"))

        assert response.headers["content-encoding"] == "gzip"
        assert response.decompressed() == b"green " * 200

    def test_unhandled_exception_becomes_500(self):
        app = App()

        def failing(exchange):
            exchange.response.write("partial")
            raise RuntimeError("boom")

        app.use_handler(failing)
        response = TestClient(app).get("/")

        assert response.status_code == 500
        assert response.text() == "Internal Server Error\n"

    def test_exception_middleware_outermost(self):
        app = App()

        def failing(exchange):
            raise ValueError("Something went wrong")

        app.use_handler(failing)
        app.use(ExceptionMiddleware(mode="debug"))
        response = TestClient(app).get("/error")

        assert response.status_code == 500
        assert response.json()["error"]["type"] == "ValueError"

    def test_streaming_flush(self):
        app = App()

        def stream(exchange):
            exchange.response.write_header(202)
            exchange.response.write("one ")
            exchange.response.flush()
            exchange.response.write("two")

        app.use_handler(stream)
        response = TestClient(app).get("/")

        assert response.status_code == 202
        assert response.chunks == [b"one ", b"two"]
        assert response.content == b"one two"

    def test_exception_after_flush_ends_body(self):
        app = App()

        def stream_then_fail(exchange):
            exchange.response.write("started")
            exchange.response.flush()
            raise RuntimeError("late")

        app.use_handler(stream_then_fail)
        response = TestClient(app).get("/")

        assert response.status_code == 200
        assert response.content == b"started"

    def test_context_cleared_after_exchange(self):
        app = App()
        exchanges = []

        def remember(exchange):
            exchange.context.set("user", "alice")
            exchanges.append(exchange)

        app.use_handler(remember)
        TestClient(app).get("/")

        assert exchanges[0].context.to_dict() == {}

    def test_settings_exposed_in_context(self):
        settings = Settings(port=9000)
        app = App(settings=settings)
        seen = []
        app.use_handler(lambda exchange: seen.append(exchange.context.settings))

        TestClient(app).get("/")

        assert seen == [settings]

    def test_serves_on_worker_thread(self):
        app = App()
        threads = []
        app.use_handler(lambda exchange: threads.append(threading.get_ident()))

        TestClient(app).get("/")

        assert threads and threads[0] != threading.get_ident()

    def test_first_request_freezes_stack(self):
        app = App(MiddlewareStack())
        TestClient(app).get("/")

        assert app.frozen
        with pytest.raises(RuntimeError):
            app.use(lambda next_handler: next_handler)

    @pytest.mark.asyncio
    async def test_client_inside_running_loop(self):
        app = App()
        app.use_handler(lambda exchange: exchange.response.write("async"))

        response = TestClient(app).get("/")

        assert response.text() == "async"

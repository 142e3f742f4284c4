"""
Tests for adapting call-next style middleware into transforms.
"""

from interpose import MiddlewareStack, ResponseWriter
from interpose.adaptors import (
    ResponseWriterFacade,
    from_call_next,
    handler_from_call_next,
)
from interpose.testing import TestRequest


class TestFromCallNext:
    def test_call_next_reaches_inner_chain(self):
        trace = []

        def foreign(writer, request, call_next):
            trace.append("foreign-before")
            call_next(writer, request)
            trace.append("foreign-after")

        stack = MiddlewareStack()
        stack.append_handler(lambda exchange: trace.append("inner"))
        stack.append(from_call_next(foreign))

        stack.serve(TestRequest().build_exchange())

        assert trace == ["foreign-before", "inner", "foreign-after"]

    def test_short_circuit(self):
        trace = []

        def deny(writer, request, call_next):
            writer.write_header(403)
            writer.write("forbidden")

        stack = MiddlewareStack()
        stack.append_handler(lambda exchange: trace.append("inner"))
        stack.append(from_call_next(deny))
        exchange = TestRequest().build_exchange()

        stack.serve(exchange)

        assert trace == []
        assert exchange.response.status_code == 403
        assert exchange.response.text() == "forbidden"

    def test_foreign_unit_sees_request_and_writes_headers(self):
        def tagger(writer, request, call_next):
            writer.set_header("x-path", request.path)
            call_next(writer, request)

        stack = MiddlewareStack()
        stack.append_handler(lambda exchange: exchange.response.write("ok"))
        stack.append(from_call_next(tagger))
        exchange = TestRequest().build_exchange("GET", "/tagged")

        stack.serve(exchange)

        assert exchange.response.get_header("x-path") == "/tagged"
        assert exchange.response.text() == "ok"

    def test_substituted_writer_used_downstream(self):
        """A foreign unit passing its own writer on swaps it for the inner chain."""
        captured = ResponseWriter()

        def capture(writer, request, call_next):
            call_next(captured, request)
            writer.write(captured.body.upper())

        stack = MiddlewareStack()
        stack.append_handler(lambda exchange: exchange.response.write("shout"))
        stack.append(from_call_next(capture))
        exchange = TestRequest().build_exchange()
        original = exchange.response

        stack.serve(exchange)

        assert exchange.response is original
        assert original.text() == "SHOUT"

    def test_call_next_without_arguments(self):
        trace = []

        def lazy(writer, request, call_next):
            call_next()

        stack = MiddlewareStack()
        stack.append_handler(lambda exchange: trace.append(exchange.request.path))
        stack.append(from_call_next(lazy))

        stack.serve(TestRequest().build_exchange("GET", "/x"))

        assert trace == ["/x"]


class TestHandlerFromCallNext:
    def test_runs_and_stack_forwards(self):
        trace = []

        def foreign(writer, request, call_next):
            trace.append("foreign")
            call_next(writer, request)

        stack = MiddlewareStack()
        stack.append_handler(lambda exchange: trace.append("inner"))
        stack.append_handler(handler_from_call_next(foreign))

        stack.serve(TestRequest().build_exchange())

        assert trace == ["foreign", "inner"]


class TestResponseWriterFacade:
    def test_forwards_to_writer(self):
        writer = ResponseWriter()
        facade = ResponseWriterFacade(writer)

        facade.set_header("X-A", "1")
        facade.write_header(201)
        assert facade.write("abc") == 3

        assert writer.get_header("x-a") == "1"
        assert facade.headers is writer.headers
        assert facade.status() == 201
        assert facade.size() == 3
        assert facade.written() is True

    def test_forwards_flush(self):
        chunks = []
        writer = ResponseWriter(on_flush=lambda w, chunk: chunks.append(chunk))
        facade = ResponseWriterFacade(writer)

        facade.write("partial")
        facade.flush()

        assert chunks == [b"partial"]

    def test_stubs_missing_capabilities(self):
        class MinimalWriter:
            headers = {}

            def write(self, data):
                return len(data)

        facade = ResponseWriterFacade(MinimalWriter())
        facade.flush()
        assert facade.status() == 0
        assert facade.size() == 0
        assert facade.written() is False

"""
Response writer for interpose.

Handlers do not return responses; they write into the ResponseWriter carried
by the exchange. Output is buffered until ``flush()`` hands it to the sink the
host attached, or until the host sends everything after the chain returns.
"""

import logging
from typing import Callable, Dict, Optional, Union

from .status import HTTPStatus

logger = logging.getLogger(__name__)

FlushSink = Callable[["ResponseWriter", bytes], None]


class ResponseWriter:
    """
    Outbound response sink.

    Supports:
    - Header manipulation until the headers are sent
    - A status line written once (first call wins)
    - Buffered body writes with byte accounting
    - Flushing partially written output to the host
    """

    def __init__(self, on_flush: Optional[FlushSink] = None):
        """
        Initialize ResponseWriter.

        Args:
            on_flush: Called with (writer, chunk) on every flush. Without a
                sink, flush() is a no-op and everything stays buffered.
        """
        self.headers: Dict[str, str] = {}
        self.status_code: int = int(HTTPStatus.HTTP_200_OK)
        self.size = 0
        self.written = False
        self.headers_sent = False
        self._buffer = bytearray()
        self._on_flush = on_flush

    def set_header(self, name: str, value: str) -> "ResponseWriter":
        """
        Set a response header (supports method chaining).

        Args:
            name: Header name
            value: Header value

        Returns:
            self for method chaining
        """
        if self.headers_sent:
            logger.warning("set_header(%r) after headers were sent, not sent", name)
        self.headers[name.lower()] = str(value)
        return self

    def get_header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.headers.get(name.lower(), default)

    def del_header(self, name: str) -> None:
        self.headers.pop(name.lower(), None)

    def write_header(self, status_code: Union[int, HTTPStatus]) -> None:
        """
        Write the status code. Only the first call has an effect.
        """
        if self.written:
            logger.warning(
                "superfluous write_header(%d), status already %d",
                int(status_code),
                self.status_code,
            )
            return
        self.status_code = int(status_code)
        self.written = True

    def write(self, data: Union[str, bytes]) -> int:
        """
        Append data to the response body.

        Writes status 200 first if no status was written yet.

        Returns:
            Number of bytes written
        """
        if not self.written:
            self.write_header(HTTPStatus.HTTP_200_OK)
        if isinstance(data, str):
            data = data.encode("utf-8")
        self._buffer.extend(data)
        self.size += len(data)
        return len(data)

    def flush(self) -> None:
        """Send buffered output to the sink, if one is attached."""
        if self._on_flush is None:
            return
        if not self.written:
            self.write_header(HTTPStatus.HTTP_200_OK)
        chunk = bytes(self._buffer)
        self._buffer.clear()
        self._on_flush(self, chunk)
        self.headers_sent = True

    @property
    def body(self) -> bytes:
        """Output written and not yet flushed."""
        return bytes(self._buffer)

    def text(self) -> str:
        return self.body.decode("utf-8")

    def reset(self) -> None:
        """Discard status, headers and buffered body. Not allowed once sent."""
        if self.headers_sent:
            raise RuntimeError("Cannot reset a response whose headers were sent")
        self.headers.clear()
        self.status_code = int(HTTPStatus.HTTP_200_OK)
        self.size = 0
        self.written = False
        self._buffer.clear()

    def __repr__(self) -> str:
        return f"<ResponseWriter {self.status_code} {self.size} bytes>"


def http_error(
    response: ResponseWriter,
    message: str,
    status_code: Union[int, HTTPStatus],
) -> None:
    """Reply with a plain-text error message and status code."""
    response.set_header("content-type", "text/plain; charset=utf-8")
    response.set_header("x-content-type-options", "nosniff")
    response.write_header(status_code)
    response.write(message + "\n")

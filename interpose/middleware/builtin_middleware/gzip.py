"""
GZip compression middleware for interpose.
"""

import gzip

from ...response import ResponseWriter
from ...types import Handler
from .buffer import apply_buffered

COMPRESSIBLE_TYPES = (
    "text/",
    "application/json",
    "application/javascript",
    "application/xml",
    "application/atom+xml",
    "application/rss+xml",
)


class GZipMiddleware:
    """
    GZip compression middleware.

    Downstream output is buffered and compressed once the chain returns, so
    flushes issued by inner handlers are held back.
    """

    def __init__(self, compresslevel: int = 9, minimum_size: int = 0):
        """
        Initialize GZip middleware.

        Args:
            compresslevel: Compression level (0-9, 9 is highest compression).
            minimum_size: Minimum response size to compress (bytes).
        """
        self.compresslevel = compresslevel
        self.minimum_size = minimum_size

    def __call__(self, next_handler: Handler) -> Handler:
        def gzip_handler(exchange) -> None:
            response = exchange.response
            response.set_header("vary", "Accept-Encoding")

            # Check if client accepts gzip encoding
            accept_encoding = exchange.request.get_header("accept-encoding", "")
            if "gzip" not in accept_encoding.lower():
                next_handler(exchange)
                return

            buffered = ResponseWriter()
            buffered.headers.update(response.headers)
            exchange.response = buffered
            try:
                next_handler(exchange)
            finally:
                exchange.response = response

            if self._should_compress(buffered):
                self._compress(buffered)
            apply_buffered(buffered, response)

        return gzip_handler

    def _should_compress(self, response: ResponseWriter) -> bool:
        """Check if response should be compressed."""
        # Skip if already compressed
        if response.get_header("content-encoding"):
            return False

        # Check content type
        content_type = response.get_header("content-type", "")
        if not any(content_type.startswith(ct) for ct in COMPRESSIBLE_TYPES):
            return False

        # Check minimum size
        body = response.body
        return bool(body) and len(body) >= self.minimum_size

    def _compress(self, response: ResponseWriter) -> None:
        """Replace the buffered body with its gzip encoding."""
        status_code, written = response.status_code, response.written
        compressed_body = gzip.compress(response.body, compresslevel=self.compresslevel)
        headers = dict(response.headers)

        response.reset()
        response.headers.update(headers)
        response.set_header("content-encoding", "gzip")
        response.set_header("content-length", str(len(compressed_body)))
        if written:
            response.write_header(status_code)
        response.write(compressed_body)


__all__ = ["GZipMiddleware"]

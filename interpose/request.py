"""
Request class for interpose.
"""

import json
import urllib.parse
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union


class Request:
    """
    Read-only view of an inbound HTTP request.

    Provides convenient access to:
    - HTTP method, path, headers
    - Query parameters with automatic parsing
    - Request body as bytes, text or JSON
    - Client address, scheme and HTTP version
    """

    def __init__(
        self,
        method: str = "GET",
        path: str = "/",
        query_string: Union[str, bytes] = b"",
        headers: Optional[
            Union[Dict[str, str], Iterable[Tuple[Union[str, bytes], Union[str, bytes]]]]
        ] = None,
        body: bytes = b"",
        client: Optional[Tuple[str, int]] = None,
        scheme: str = "http",
        http_version: str = "1.1",
    ):
        """
        Initialize a Request.

        Args:
            method: HTTP method
            path: URL path, without the query string
            query_string: Raw query string
            headers: Mapping or sequence of (name, value) pairs
            body: Raw request body
            client: (host, port) of the remote peer, if known
            scheme: "http" or "https"
            http_version: HTTP version string, e.g. "1.1"
        """
        self.method = method.upper()
        self.path = path
        if isinstance(query_string, bytes):
            query_string = query_string.decode("latin-1")
        self.query_string: str = query_string
        self.headers: Dict[str, str] = self._normalize_headers(headers)
        self._body = body
        self.client = client
        self.scheme = scheme
        self.http_version = http_version
        self._query_params: Dict[str, str] | None = None
        self._query_params_multi_values: Dict[str, List[str]] | None = None

    @classmethod
    def from_scope(cls, scope: Dict[str, Any], body: bytes = b"") -> "Request":
        """
        Factory method to create a Request from an ASGI HTTP scope.

        Args:
            scope: ASGI scope dictionary
            body: Request body already read from the ASGI receive channel

        Returns:
            Request object
        """
        return cls(
            method=scope.get("method", "GET"),
            path=scope.get("path", "/"),
            query_string=scope.get("query_string", b""),
            headers=scope.get("headers", []),
            body=body,
            client=tuple(scope["client"]) if scope.get("client") else None,
            scheme=scope.get("scheme", "http"),
            http_version=scope.get("http_version", "1.1"),
        )

    @staticmethod
    def _normalize_headers(headers) -> Dict[str, str]:
        """Lower-case header names; repeated headers are joined with ', '."""
        if not headers:
            return {}
        items = headers.items() if isinstance(headers, dict) else headers
        normalized: Dict[str, str] = {}
        for name, value in items:
            if isinstance(name, bytes):
                name = name.decode("latin-1")
            if isinstance(value, bytes):
                value = value.decode("latin-1")
            name = name.lower()
            if name in normalized:
                normalized[name] = f"{normalized[name]}, {value}"
            else:
                normalized[name] = str(value)
        return normalized

    @property
    def body(self) -> bytes:
        """Raw request body as bytes"""
        return self._body

    def text(self, encoding: str = "utf-8") -> str:
        """Request body decoded as text"""
        return self._body.decode(encoding)

    def json(self) -> Any:
        """
        Parse request body as JSON.

        Returns:
            Parsed JSON data (dict, list, etc.)

        Raises:
            ValueError: If the body is not valid JSON
        """
        try:
            return json.loads(self.text())
        except json.JSONDecodeError as e:
            raise ValueError(f"Request body is not valid JSON: {e}") from e

    def get_header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """
        Get a header value by name (case-insensitive).

        Args:
            name: Header name (case-insensitive)
            default: Default value if header not found

        Returns:
            Header value or default
        """
        return self.headers.get(name.lower(), default)

    @property
    def content_type(self) -> Optional[str]:
        return self.headers.get("content-type")

    @property
    def query_params(self) -> Dict[str, str]:
        """Query parameters; for repeated keys the last value wins."""
        if self._query_params is None:
            self._query_params = {
                key: values[-1] for key, values in self.query_params_multi.items()
            }
        return self._query_params

    @property
    def query_params_multi(self) -> Dict[str, List[str]]:
        """Query parameters with every value of repeated keys."""
        if self._query_params_multi_values is None:
            self._query_params_multi_values = urllib.parse.parse_qs(
                self.query_string, keep_blank_values=True
            )
        return self._query_params_multi_values

    @property
    def url(self) -> str:
        """Path plus query string, as sent on the request line."""
        if self.query_string:
            return f"{self.path}?{self.query_string}"
        return self.path

    @property
    def remote_addr(self) -> str:
        return self.client[0] if self.client else "-"

    def __repr__(self) -> str:
        return f"<Request {self.method} {self.url}>"

"""
interpose Testing Package.

Provides testing utilities for interpose stacks and applications:
- TestClient: runs requests against an App through the ASGI interface
- TestRequest: builder for HTTP requests and bare exchanges
- TestResponse: response examination utilities
"""

from .client import TestClient
from .request import TestRequest
from .response import TestResponse

__all__ = ["TestClient", "TestRequest", "TestResponse"]

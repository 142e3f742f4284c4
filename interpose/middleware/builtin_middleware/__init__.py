"""
Built-in middleware for interpose.

Every entry is a transform (next_handler -> handler) or a factory returning
one, ready for MiddlewareStack.append().
"""

from .access_log import AccessLog
from .basic_auth import BasicAuth, secure_compare
from .buffer import buffer_output
from .context import clear_context
from .exception import ExceptionMiddleware
from .gzip import GZipMiddleware
from .json import json_content_type

__all__ = [
    "AccessLog",
    "BasicAuth",
    "secure_compare",
    "buffer_output",
    "clear_context",
    "ExceptionMiddleware",
    "GZipMiddleware",
    "json_content_type",
]

"""
interpose Middleware Package

This package provides the middleware stack for interpose applications.
Middleware wraps the rest of the chain, so requests and responses are
processed in a nested, pipeline fashion.
"""

from .middleware_stack import MiddlewareStack, noop_handler

__all__ = ["MiddlewareStack", "noop_handler"]

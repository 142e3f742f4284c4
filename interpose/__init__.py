from .app import App
from .context import Context
from .exchange import Exchange
from .middleware import MiddlewareStack, noop_handler
from .request import Request
from .response import ResponseWriter, http_error
from .status import HTTPStatus
from .types import Handler, Transform

__version__ = "0.1.0"
__all__ = [
    "App",
    "Context",
    "Exchange",
    "MiddlewareStack",
    "noop_handler",
    "Request",
    "ResponseWriter",
    "http_error",
    "HTTPStatus",
    "Handler",
    "Transform",
]

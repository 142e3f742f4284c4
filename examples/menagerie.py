"""
Several middleware at once: access log, gzip and a nested stack that adds a
header for every URL under /green.

Middleware that writes the body is appended first; middleware that only looks
at the finished exchange is appended last, so it wraps everything.
"""

from interpose import App, MiddlewareStack
from interpose.config import get_settings
from interpose.logger import configure_logging
from interpose.middleware.builtin_middleware import (
    AccessLog,
    ExceptionMiddleware,
    GZipMiddleware,
)

settings = get_settings()
configure_logging(settings)


def green_page(exchange):
    user = exchange.request.path[len("/green/"):]
    exchange.response.write(f"Welcome to the home page, green {user}!")


def favorite_color(exchange):
    exchange.response.set_header("X-Favorite-Color", "green")


green = MiddlewareStack()
green.append_handler(green_page)
green.append_handler(favorite_color)


def home(exchange):
    if exchange.request.path.startswith("/green/"):
        green.serve(exchange)
        return
    user = exchange.request.path.strip("/")
    exchange.response.set_header("content-type", "text/plain; charset=utf-8")
    exchange.response.write(f"Welcome to the home page, {user}!")


app = App(settings=settings)
app.use_handler(home)
app.use(GZipMiddleware(settings.gzip_level, settings.gzip_minimum_size))
app.use(AccessLog())
app.use(ExceptionMiddleware(mode=settings.error_mode))

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)

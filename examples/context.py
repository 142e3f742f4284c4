"""
Passing values between middleware through the exchange context.

An outer transform stores a random count in exchange.context; the handler
appended first (innermost) reads it back. clear_context empties the bag once
the exchange is done.
"""

import random

from interpose import App
from interpose.config import get_settings
from interpose.middleware.builtin_middleware import clear_context

COUNT_KEY = "count"


def welcome(exchange):
    count, ok = exchange.context.get_ok(COUNT_KEY)
    if not ok:
        count = 0
    user = exchange.request.path.strip("/") or "stranger"
    exchange.response.write(f"Welcome to the home page, {user}!\nCount:{count}")


def set_count(next_handler):
    def handler(exchange):
        exchange.context.set(COUNT_KEY, random.randint(0, 1_000_000))
        next_handler(exchange)

    return handler


app = App()
app.use_handler(welcome)
app.use(set_count)
app.use(clear_context)

if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)

"""
Streaming output with flush(): each line is sent as soon as it is written.
"""

import time

from interpose import App
from interpose.config import get_settings
from interpose.middleware.builtin_middleware import AccessLog


def countdown(exchange):
    response = exchange.response
    response.set_header("content-type", "text/plain; charset=utf-8")
    for n in range(5, 0, -1):
        response.write(f"{n}\n")
        response.flush()
        time.sleep(0.5)
    response.write("liftoff\n")


app = App()
app.use_handler(countdown)
app.use(AccessLog())

if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)

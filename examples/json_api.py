"""
Every response of this stack is sent as application/json.
"""

import json

from interpose import App
from interpose.config import get_settings
from interpose.middleware.builtin_middleware import json_content_type


def user(exchange):
    name = exchange.request.path.strip("/") or "anonymous"
    exchange.response.write(json.dumps({"user": name}))


app = App()
app.use_handler(user)
app.use(json_content_type)

if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)

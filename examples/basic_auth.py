"""
Public page plus a /protected section behind HTTP Basic auth.

Run with:  interpose dev --app-file examples/basic_auth.py
"""

from interpose import App, HTTPStatus, MiddlewareStack, http_error
from interpose.config import get_settings
from interpose.middleware.builtin_middleware import AccessLog, BasicAuth


def public_page(exchange):
    exchange.response.set_header("content-type", "text/html; charset=utf-8")
    exchange.response.write(
        '<h1>Welcome to the public page!</h1><p><a href="/protected/">Rabbit hole</a></p>'
    )


def protected_page(exchange):
    exchange.response.write("Welcome to the protected page!")


settings = get_settings()

protected = MiddlewareStack()
protected.append_handler(protected_page)
protected.append(
    BasicAuth(
        settings.basic_auth_username or "john",
        settings.basic_auth_password or "doe",
    )
)


def router(exchange):
    path = exchange.request.path
    if path == "/":
        public_page(exchange)
    elif path.startswith("/protected"):
        protected.serve(exchange)
    else:
        http_error(exchange.response, "404 page not found", HTTPStatus.HTTP_404_NOT_FOUND)


app = App(settings=settings)
app.use_handler(router)
app.use(AccessLog())

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)

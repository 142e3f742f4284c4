"""
HTTP Basic authentication middleware for interpose.

Rejected requests get a 401 and never reach the rest of the chain.
"""

import base64
import hashlib
import hmac

from ...response import http_error
from ...status import HTTPStatus
from ...types import Handler


def secure_compare(given: str, actual: str) -> bool:
    """Compare two strings in constant time to limit timing attacks."""
    given_sha = hashlib.sha256(given.encode("utf-8")).digest()
    actual_sha = hashlib.sha256(actual.encode("utf-8")).digest()
    return hmac.compare_digest(given_sha, actual_sha)


class BasicAuth:
    """
    Authenticate requests via HTTP Basic auth against one username/password.

    Args:
        username: Expected username
        password: Expected password
        realm: Realm announced in the WWW-Authenticate header
    """

    def __init__(self, username: str, password: str, realm: str = "Authorization Required"):
        credentials = base64.b64encode(f"{username}:{password}".encode("utf-8"))
        self._expected = "Basic " + credentials.decode("ascii")
        self.realm = realm

    def __call__(self, next_handler: Handler) -> Handler:
        def basic_auth_handler(exchange) -> None:
            auth = exchange.request.get_header("authorization", "")
            if not secure_compare(auth, self._expected):
                exchange.response.set_header(
                    "www-authenticate", f'Basic realm="{self.realm}"'
                )
                http_error(
                    exchange.response, "Not Authorized", HTTPStatus.HTTP_401_UNAUTHORIZED
                )
                return
            next_handler(exchange)

        return basic_auth_handler


__all__ = ["BasicAuth", "secure_compare"]

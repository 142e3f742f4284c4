"""
HTTP status codes used by interpose.
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    HTTP_200_OK = 200
    HTTP_204_NO_CONTENT = 204
    HTTP_301_MOVED_PERMANENTLY = 301
    HTTP_302_FOUND = 302
    HTTP_304_NOT_MODIFIED = 304
    HTTP_400_BAD_REQUEST = 400
    HTTP_401_UNAUTHORIZED = 401
    HTTP_403_FORBIDDEN = 403
    HTTP_404_NOT_FOUND = 404
    HTTP_405_METHOD_NOT_ALLOWED = 405
    HTTP_500_INTERNAL_SERVER_ERROR = 500
    HTTP_503_SERVICE_UNAVAILABLE = 503

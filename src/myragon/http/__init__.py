"""
HTTP value objects: Request, Response and their supporting pieces.

    from myragon.http import Request, Response

    request = Request.from_wsgi(environ)
    response = Response.json({"path": request.get_path()})
"""

from .box import Box, HeaderBox, normalize_header_name
from .exceptions import (
    HTTPError,
    HeadersAlreadySentError,
    InvalidHeaderError,
    InvalidStatusCodeError,
    PayloadTooLargeError,
)
from .request import Environment, Request, decode_json_body
from .response import Response
from .status_codes import HTTPStatus, reason_phrase
from .transport import StreamTransport, Transport, WSGITransport

__all__ = [
    "Box",
    "HeaderBox",
    "normalize_header_name",
    "HTTPError",
    "HeadersAlreadySentError",
    "InvalidHeaderError",
    "InvalidStatusCodeError",
    "PayloadTooLargeError",
    "Environment",
    "Request",
    "decode_json_body",
    "Response",
    "HTTPStatus",
    "reason_phrase",
    "StreamTransport",
    "Transport",
    "WSGITransport",
]

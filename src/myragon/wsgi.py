"""
=============================================================================
WSGI ADAPTER
=============================================================================

Wraps a single request handler into a WSGI application:

    environ ──► Request.from_wsgi ──► handler(request) ──► Response
                                                               │
    server ◄── transport.chunks ◄── WSGITransport ◄── response.send()

Errors raised while reading the request (HTTPError subclasses such as
PayloadTooLargeError) become plain-text responses with the error's status
code. Errors raised by the handler propagate to the WSGI server.

=============================================================================
"""

import logging
from typing import Any, Callable, Iterable, Mapping, Optional

from .config import Config
from .http.exceptions import HTTPError
from .http.request import Request
from .http.response import Response
from .http.transport import WSGITransport


logger = logging.getLogger(__name__)

Handler = Callable[[Request], Response]


def make_app(handler: Handler, config: Optional[Config] = None) -> Callable[..., Iterable[bytes]]:
    """
    Create a WSGI application around handler.

    Args:
        handler: Callable taking a Request and returning a Response.
        config: Charset and body size limit. Defaults to Config().

    Returns:
        A PEP 3333 application callable.
    """
    config = config or Config()
    config.validate()

    def app(environ: Mapping[str, Any], start_response: Callable[..., object]) -> Iterable[bytes]:
        try:
            request = Request.from_wsgi(
                environ,
                max_body_size=config.max_body_size,
                charset=config.charset,
            )
        except HTTPError as e:
            logger.warning(f"Rejected request: {e}")
            response = Response(str(e), e.status_code, {"Content-Type": "text/plain"})
        else:
            response = handler(request)
            logger.debug(
                f"{request.get_method()} {request.get_path()} -> {response.get_status_code()}"
            )

        transport = WSGITransport(start_response)
        response.send(transport, charset=config.charset)
        return transport.chunks

    return app

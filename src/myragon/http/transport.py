"""
=============================================================================
OUTPUT TRANSPORTS
=============================================================================

A transport is whatever the response is written to. Response.send() only
needs four things from it:

    ┌──────────────────────────┬──────────────────────────────────────────┐
    │ headers_sent             │ has output already started?              │
    │ send_status(...)         │ queue the status line                    │
    │ send_header(name, value) │ queue one header line                    │
    │ write(data)              │ flush status + headers, then body bytes  │
    └──────────────────────────┴──────────────────────────────────────────┘

Two implementations ship with the package:

    StreamTransport   raw HTTP/1.x bytes onto a binary stream
                      (a socket file, sys.stdout.buffer, io.BytesIO)

    WSGITransport     hands status and headers to a WSGI start_response
                      and collects body chunks for the server

Once the header block is out, queuing more status or header lines raises
HeadersAlreadySentError.

=============================================================================
"""

import logging
import sys
from abc import ABC, abstractmethod
from typing import BinaryIO, Callable, List, Optional, Tuple

from .box import has_forbidden_header_chars
from .exceptions import HeadersAlreadySentError, InvalidHeaderError


logger = logging.getLogger(__name__)


class Transport(ABC):
    """Output side of a request, consumed by Response.send()."""

    @property
    @abstractmethod
    def headers_sent(self) -> bool:
        """True once the status line and headers have been emitted."""

    @abstractmethod
    def send_status(self, version: str, status_code: int, reason: str) -> None:
        """Queue the status line."""

    @abstractmethod
    def send_header(self, name: str, value: str) -> None:
        """Queue a header line. Repeated names produce repeated lines."""

    @abstractmethod
    def write(self, data: bytes) -> None:
        """Emit pending headers (first call only), then data."""

    def _ensure_open(self) -> None:
        if self.headers_sent:
            raise HeadersAlreadySentError("Headers already sent. Cannot modify status or headers.")

    def _check_header(self, name: str, value: str) -> None:
        if has_forbidden_header_chars(name):
            raise InvalidHeaderError(name)
        if has_forbidden_header_chars(value):
            raise InvalidHeaderError(name, value)


class StreamTransport(Transport):
    """
    Writes a raw HTTP message to a binary stream.

    =========================================================================
    OUTPUT FORMAT
    =========================================================================

        HTTP/1.1 200 OK\\r\\n               ← send_status
        Content-Type: text/html\\r\\n       ← send_header
        Set-Cookie: a=1\\r\\n               ← send_header
        Set-Cookie: b=2\\r\\n               ← send_header (repeated name)
        \\r\\n                               ← written on first write()
        <html>...                           ← write()

    =========================================================================

    Args:
        stream: Binary file-like object. Defaults to sys.stdout.buffer,
            the process's single output stream.
    """

    def __init__(self, stream: Optional[BinaryIO] = None):
        self.stream = stream if stream is not None else sys.stdout.buffer
        self._status_line = "HTTP/1.1 200 OK"
        self._header_lines: List[str] = []
        self._headers_sent = False

    @property
    def headers_sent(self) -> bool:
        return self._headers_sent

    def send_status(self, version: str, status_code: int, reason: str) -> None:
        self._ensure_open()
        self._status_line = f"HTTP/{version} {status_code} {reason}"

    def send_header(self, name: str, value: str) -> None:
        self._ensure_open()
        self._check_header(name, value)
        self._header_lines.append(f"{name}: {value}")

    def flush_headers(self) -> None:
        """Write the status line and header block if not already written."""
        if self._headers_sent:
            return

        lines = [self._status_line, *self._header_lines, ""]
        # Empty line separates headers from body
        self.stream.write("\r\n".join(lines).encode("utf-8") + b"\r\n")
        self._headers_sent = True

    def write(self, data: bytes) -> None:
        self.flush_headers()
        if data:
            self.stream.write(data)
        self.stream.flush()


class WSGITransport(Transport):
    """
    Adapts Response.send() to a WSGI start_response callable.

    Usage:
        transport = WSGITransport(start_response)
        response.send(transport)
        return transport.chunks
    """

    def __init__(self, start_response: Callable[..., object]):
        self.start_response = start_response
        self.status = "200 OK"
        self.headers: List[Tuple[str, str]] = []
        self.chunks: List[bytes] = []
        self._headers_sent = False

    @property
    def headers_sent(self) -> bool:
        return self._headers_sent

    def send_status(self, version: str, status_code: int, reason: str) -> None:
        # WSGI status strings carry no protocol version
        self._ensure_open()
        self.status = f"{status_code} {reason}"

    def send_header(self, name: str, value: str) -> None:
        self._ensure_open()
        self._check_header(name, value)
        self.headers.append((name, value))

    def write(self, data: bytes) -> None:
        if not self._headers_sent:
            self.start_response(self.status, self.headers)
            self._headers_sent = True
            logger.debug(f"start_response({self.status!r}) with {len(self.headers)} headers")
        if data:
            self.chunks.append(data)

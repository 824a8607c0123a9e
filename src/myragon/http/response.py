"""
=============================================================================
HTTP RESPONSE
=============================================================================

A mutable builder for the outbound response, consumed exactly once by
send().

=============================================================================
RESPONSE LIFECYCLE
=============================================================================

    Response()  ──setters──►  configured  ──send(transport)──►  consumed
        │                         │                                 │
    body="",                 .set_status_code(201)           status line,
    status_code=200,         .set_header("X-Id", "7")        header lines,
    headers={}               .set_body("...")                body bytes

Setters return self, so they chain:

    response = (Response()
        .set_status_code(201)
        .set_header("content-type", "text/plain")
        .set_body("created"))

=============================================================================
HEADERS
=============================================================================

Header names are normalized on the way in and on lookup, and every header
holds a list of values:

    set_header("x-foo", "a")                  → {"X-Foo": ["a"]}
    set_header("X-FOO", "b", replace=False)   → {"X-Foo": ["a", "b"]}
    set_header("X-Foo", "c")                  → {"X-Foo": ["c"]}

send() writes one header line per value, so multi-value headers such as
Set-Cookie survive.

=============================================================================
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from .box import has_forbidden_header_chars, normalize_header_name
from .exceptions import HeadersAlreadySentError, InvalidHeaderError, InvalidStatusCodeError
from .status_codes import HTTPStatus, is_valid_status_code, reason_phrase
from .transport import StreamTransport, Transport


logger = logging.getLogger(__name__)

HeaderValue = Union[str, Sequence[str]]


@dataclass
class Response:
    """
    Outbound HTTP response.

    Args:
        body: Response body text.
        status_code: Integer in [100, 600).
        headers: Header name → value or list of values.
        version: Protocol version for the status line.

    Raises:
        InvalidStatusCodeError: status_code is out of range.
    """

    body: str = ""
    status_code: int = HTTPStatus.OK
    headers: Dict[str, List[str]] = field(default_factory=dict)
    version: str = "1.1"
    _sent: bool = field(default=False, init=False, repr=False)

    def __post_init__(self):
        self.set_status_code(self.status_code)
        self.set_headers(self.headers)
        self.set_body(self.body)

    # =========================================================================
    # STATUS
    # =========================================================================

    def set_status_code(self, status_code: int) -> "Response":
        if not is_valid_status_code(status_code):
            raise InvalidStatusCodeError(status_code)
        self.status_code = int(status_code)
        return self

    def get_status_code(self) -> int:
        return self.status_code

    @property
    def reason_phrase(self) -> str:
        """Reason phrase for the current code, "Unknown Status" if unlisted."""
        return reason_phrase(self.status_code)

    @property
    def status_line(self) -> str:
        """
        The HTTP status line.

        Format: HTTP/VERSION SP STATUS-CODE SP REASON-PHRASE
        Example: "HTTP/1.1 200 OK"
        """
        return f"HTTP/{self.version} {self.status_code} {self.reason_phrase}"

    # =========================================================================
    # HEADERS
    # =========================================================================

    def set_headers(self, headers: Mapping[str, HeaderValue]) -> "Response":
        """Replace all headers."""
        headers = dict(headers)
        self.headers = {}
        for name, value in headers.items():
            self.set_header(name, value)
        return self

    def set_header(self, name: str, value: HeaderValue, replace: bool = True) -> "Response":
        """
        Set or append a header.

        Args:
            name: Header name, in any case.
            value: A single value or a list of values.
            replace: When False, values are appended to any existing ones.

        Returns:
            Self for method chaining

        Raises:
            InvalidHeaderError: The name or a value contains CR, LF or NUL.
        """
        if has_forbidden_header_chars(name):
            raise InvalidHeaderError(name)

        name = normalize_header_name(name)
        values = [value] if isinstance(value, str) else [str(v) for v in value]

        for item in values:
            if has_forbidden_header_chars(item):
                raise InvalidHeaderError(name, item)

        if replace or name not in self.headers:
            self.headers[name] = values
        else:
            self.headers[name] = self.headers[name] + values
        return self

    def get_headers(self) -> Dict[str, List[str]]:
        return self.headers

    def get_header(self, name: str) -> Optional[List[str]]:
        """Values for a header (case-insensitive), or None if unset."""
        return self.headers.get(normalize_header_name(name))

    # =========================================================================
    # BODY
    # =========================================================================

    def set_body(self, body: str) -> "Response":
        self.body = body
        return self

    def get_body(self) -> str:
        return self.body

    # =========================================================================
    # SENDING
    # =========================================================================

    @property
    def is_sent(self) -> bool:
        return self._sent

    def send(self, transport: Optional[Transport] = None, charset: str = "utf-8") -> None:
        """
        Write the response to the transport.

        =====================================================================
        ORDER OF OUTPUT
        =====================================================================

            1. Status line     HTTP/1.1 200 OK
            2. Header lines    one per value, in insertion order
            3. Body            encoded with charset

        =====================================================================

        Call this once, as the last step of handling a request.

        Args:
            transport: Where to write. Defaults to a StreamTransport on
                standard output.
            charset: Encoding used for the body.

        Raises:
            HeadersAlreadySentError: The response was already sent, or the
                transport has already started output.
        """
        if self._sent:
            raise HeadersAlreadySentError("Response already sent. Cannot send response twice.")

        if transport is None:
            transport = StreamTransport()

        if transport.headers_sent:
            raise HeadersAlreadySentError("Headers already sent. Cannot send response.")

        self._sent = True

        transport.send_status(self.version, self.status_code, self.reason_phrase)

        for name, values in self.headers.items():
            for value in values:
                transport.send_header(name, value)

        transport.write(self.body.encode(charset))

        logger.debug(f"Sent {self.status_line!r} ({len(self.body)} chars)")

    # =========================================================================
    # FACTORIES
    # =========================================================================

    @classmethod
    def json(
        cls,
        data: Any,
        status_code: int = HTTPStatus.OK,
        headers: Optional[Mapping[str, HeaderValue]] = None,
    ) -> "Response":
        """
        Create a JSON response.

        The body is compact JSON ({"a":1}). Data that cannot be serialized,
        including NaN and Infinity floats, produces the body "{}" instead of
        an error.

        Returns:
            Response with Content-Type: application/json
        """
        try:
            body = json.dumps(data, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
        except (TypeError, ValueError, RecursionError) as e:
            logger.warning(f"Could not encode JSON response body, sending '{{}}': {e}")
            body = "{}"

        response = cls(body, status_code, dict(headers or {}))
        return response.set_header("Content-Type", "application/json")

    @classmethod
    def redirect(
        cls,
        location: str,
        status_code: int = HTTPStatus.FOUND,
        headers: Optional[Mapping[str, HeaderValue]] = None,
    ) -> "Response":
        """
        Create a redirect response with an empty body.

            Response.redirect("/login")             → 302, Location: /login
            Response.redirect("/new", 301)          → 301 Moved Permanently
        """
        response = cls("", status_code, dict(headers or {}))
        return response.set_header("Location", location)

"""
=============================================================================
HTTP ERRORS
=============================================================================

Exceptions raised by the request/response objects.

Each error carries the HTTP status code a front controller should answer
with, and also subclasses the matching builtin so callers that only know
about ValueError / RuntimeError keep working:

    ┌──────────────────────────────┬───────────────┬────────┐
    │ Exception                    │ Builtin       │ Status │
    ├──────────────────────────────┼───────────────┼────────┤
    │ InvalidStatusCodeError       │ ValueError    │ 500    │
    │ PayloadTooLargeError         │ ValueError    │ 413    │
    │ InvalidHeaderError           │ ValueError    │ 500    │
    │ HeadersAlreadySentError      │ RuntimeError  │ 500    │
    └──────────────────────────────┴───────────────┴────────┘

=============================================================================
"""


class HTTPError(Exception):
    """
    Base class for all myragon HTTP errors.

    Args:
        message: Human-readable description.
        status_code: HTTP status to return to the client.
    """

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code


class InvalidStatusCodeError(HTTPError, ValueError):
    """Raised when a response status code falls outside [100, 600)."""

    def __init__(self, code: object):
        super().__init__(f"Invalid HTTP status code: {code}")
        self.code = code


class PayloadTooLargeError(HTTPError, ValueError):
    """Raised when a request body exceeds the configured size limit."""

    def __init__(self, size: int, limit: int):
        super().__init__(
            f"Request body too large: {size} bytes (limit {limit})",
            status_code=413,
        )
        self.size = size
        self.limit = limit


class HeadersAlreadySentError(HTTPError, RuntimeError):
    """
    Raised when a response is sent after output has already started.

    The transport state cannot be recovered once the status line and
    headers are out, so this is never retried.
    """


class InvalidHeaderError(HTTPError, ValueError):
    """Raised when a header name or value contains CR, LF or NUL."""

    def __init__(self, name: str, value: str = ""):
        super().__init__(f"Invalid characters in header {name!r}: {value!r}")
        self.name = name
        self.value = value

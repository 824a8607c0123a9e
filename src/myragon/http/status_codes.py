"""
=============================================================================
HTTP STATUS CODES AND REASON PHRASES
=============================================================================

The reason phrase is the text after the code in a response status line:

    HTTP/1.1 404 Not Found
             ─┬─ ────┬────
              │      └── Reason phrase (looked up in REASON_PHRASES)
              └───────── Status code

    ┌────────┬───────────────────────────────────────────────────────────┐
    │  1xx   │ INFORMATIONAL - request received, continuing              │
    │  2xx   │ SUCCESS       - request received, understood, accepted    │
    │  3xx   │ REDIRECTION   - further action needed                     │
    │  4xx   │ CLIENT ERROR  - problem with the request                  │
    │  5xx   │ SERVER ERROR  - problem with the server                   │
    └────────┴───────────────────────────────────────────────────────────┘

A response may carry any code in [100, 600). Codes missing from the table
are sent with the phrase "Unknown Status".

The table is built once at import time and exposed read-only through a
MappingProxyType.

=============================================================================
"""

from enum import IntEnum
from types import MappingProxyType


UNKNOWN_STATUS_PHRASE = "Unknown Status"

MIN_STATUS_CODE = 100
MAX_STATUS_CODE = 600  # exclusive


class HTTPStatus(IntEnum):
    """
    Standard HTTP status codes.

    IntEnum members compare equal to plain ints:

        >>> HTTPStatus.NOT_FOUND == 404
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    # 1xx
    CONTINUE = 100
    SWITCHING_PROTOCOLS = 101
    PROCESSING = 102

    # 2xx
    OK = 200
    CREATED = 201
    ACCEPTED = 202
    NON_AUTHORITATIVE_INFORMATION = 203
    NO_CONTENT = 204
    RESET_CONTENT = 205
    PARTIAL_CONTENT = 206

    # 3xx
    MULTIPLE_CHOICES = 300
    MOVED_PERMANENTLY = 301
    FOUND = 302
    SEE_OTHER = 303
    NOT_MODIFIED = 304
    USE_PROXY = 305
    TEMPORARY_REDIRECT = 307
    PERMANENT_REDIRECT = 308

    # 4xx
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    NOT_ACCEPTABLE = 406
    PROXY_AUTHENTICATION_REQUIRED = 407
    REQUEST_TIMEOUT = 408
    CONFLICT = 409
    GONE = 410
    LENGTH_REQUIRED = 411
    PRECONDITION_FAILED = 412
    PAYLOAD_TOO_LARGE = 413
    URI_TOO_LONG = 414
    UNSUPPORTED_MEDIA_TYPE = 415
    RANGE_NOT_SATISFIABLE = 416
    EXPECTATION_FAILED = 417
    MISDIRECTED_REQUEST = 421
    UNPROCESSABLE_ENTITY = 422
    LOCKED = 423
    FAILED_DEPENDENCY = 424
    UPGRADE_REQUIRED = 426
    PRECONDITION_REQUIRED = 428
    TOO_MANY_REQUESTS = 429
    REQUEST_HEADER_FIELDS_TOO_LARGE = 431
    UNAVAILABLE_FOR_LEGAL_REASONS = 451

    # 5xx
    INTERNAL_SERVER_ERROR = 500
    NOT_IMPLEMENTED = 501
    BAD_GATEWAY = 502
    SERVICE_UNAVAILABLE = 503
    GATEWAY_TIMEOUT = 504
    HTTP_VERSION_NOT_SUPPORTED = 505
    VARIANT_ALSO_NEGOTIATES = 506
    INSUFFICIENT_STORAGE = 507
    LOOP_DETECTED = 508
    NOT_EXTENDED = 510
    NETWORK_AUTHENTICATION_REQUIRED = 511

    @property
    def phrase(self) -> str:
        """Reason phrase for this status code."""
        return reason_phrase(self)

    @property
    def is_informational(self) -> bool:
        return 100 <= self < 200

    @property
    def is_success(self) -> bool:
        return 200 <= self < 300

    @property
    def is_redirect(self) -> bool:
        return 300 <= self < 400

    @property
    def is_client_error(self) -> bool:
        return 400 <= self < 500

    @property
    def is_server_error(self) -> bool:
        return 500 <= self < 600

    @property
    def is_error(self) -> bool:
        """4xx or 5xx."""
        return self >= 400


REASON_PHRASES = MappingProxyType({
    # 1xx Informational
    100: "Continue",
    101: "Switching Protocols",
    102: "Processing",

    # 2xx Success
    200: "OK",
    201: "Created",
    202: "Accepted",
    203: "Non-Authoritative Information",
    204: "No Content",
    205: "Reset Content",
    206: "Partial Content",

    # 3xx Redirection
    300: "Multiple Choices",
    301: "Moved Permanently",
    302: "Found",
    303: "See Other",
    304: "Not Modified",
    305: "Use Proxy",
    307: "Temporary Redirect",
    308: "Permanent Redirect",

    # 4xx Client Errors
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    406: "Not Acceptable",
    407: "Proxy Authentication Required",
    408: "Request Timeout",
    409: "Conflict",
    410: "Gone",
    411: "Length Required",
    412: "Precondition Failed",
    413: "Payload Too Large",
    414: "URI Too Long",
    415: "Unsupported Media Type",
    416: "Range Not Satisfiable",
    417: "Expectation Failed",
    421: "Misdirected Request",
    422: "Unprocessable Entity",
    423: "Locked",
    424: "Failed Dependency",
    426: "Upgrade Required",
    428: "Precondition Required",
    429: "Too Many Requests",
    431: "Request Header Fields Too Large",
    451: "Unavailable For Legal Reasons",

    # 5xx Server Errors
    500: "Internal Server Error",
    501: "Not Implemented",
    502: "Bad Gateway",
    503: "Service Unavailable",
    504: "Gateway Timeout",
    505: "HTTP Version Not Supported",
    506: "Variant Also Negotiates",
    507: "Insufficient Storage",
    508: "Loop Detected",
    510: "Not Extended",
    511: "Network Authentication Required",
})


def reason_phrase(code: int) -> str:
    """
    Look up the reason phrase for a status code.

    Args:
        code: Any integer status code.

    Returns:
        The standard phrase, or "Unknown Status" for unlisted codes.
    """
    return REASON_PHRASES.get(int(code), UNKNOWN_STATUS_PHRASE)


def is_valid_status_code(code: object) -> bool:
    """Check that code is an int (not a bool) in [100, 600)."""
    if isinstance(code, bool) or not isinstance(code, int):
        return False
    return MIN_STATUS_CODE <= code < MAX_STATUS_CODE

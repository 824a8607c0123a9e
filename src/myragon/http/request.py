"""
=============================================================================
HTTP REQUEST
=============================================================================

An immutable snapshot of the inbound request, built once when the request
starts and handed to the application.

=============================================================================
WHERE THE DATA COMES FROM
=============================================================================

The request never reaches into process-global state. The host (a WSGI
server, a test, a CGI shim...) collects the raw inputs into an
Environment and passes it in:

    ┌──────────────┐   Environment    ┌──────────────────────────────────┐
    │  Host server │ ───────────────► │ Request.from_environment(env)    │
    │  (WSGI, ...) │                  │                                  │
    └──────────────┘                  │  query      ← query string       │
                                      │  form       ← url-encoded body   │
                                      │  body       ← raw JSON payload   │
                                      │  files      ← upload metadata    │
                                      │  server     ← CGI/WSGI variables │
                                      │  cookies    ← Cookie header      │
                                      │  headers    ← HTTP_* variables   │
                                      └──────────────────────────────────┘

Every group is wrapped in a read-only Box. Accessors such as get_path()
and get_query() are pure derivations from the server variables:

    REQUEST_URI = "/users/1?active=true"

        get_path()   → "/users/1"
        get_query()  → "active=true"

=============================================================================
JSON BODIES
=============================================================================

The raw body is decoded as JSON only when it is non-empty and strictly
valid (NaN / Infinity are rejected). Anything else (empty payload, a
syntax error, a top-level array or scalar) becomes an empty body mapping.
Decoding never raises.

=============================================================================
"""

import json
import logging
from dataclasses import dataclass, field
from http.cookies import CookieError, SimpleCookie
from typing import Any, Dict, Mapping, Optional, Union
from urllib.parse import parse_qsl, quote, urlsplit

from .box import Box, HeaderBox
from .exceptions import PayloadTooLargeError


logger = logging.getLogger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
JSON_CONTENT_TYPE = "application/json"

# WSGI keys that are headers but do not carry the HTTP_ prefix
_UNPREFIXED_HEADERS = {
    "CONTENT_TYPE": "Content-Type",
    "CONTENT_LENGTH": "Content-Length",
}


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Invalid JSON constant: {name}")


def decode_json_body(raw: Union[str, bytes, None]) -> Dict[str, Any]:
    """
    Decode a raw request payload into a JSON object.

    Args:
        raw: The payload as received, or None when there is none.

    Returns:
        The decoded object, or an empty dict when the payload is absent,
        blank, not valid JSON, or not a JSON object.
    """
    if not raw:
        return {}

    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            logger.debug(f"Ignoring non UTF-8 request body: {e}")
            return {}

    if not raw.strip():
        return {}

    try:
        data = json.loads(raw, parse_constant=_reject_constant)
    except (ValueError, RecursionError) as e:
        logger.debug(f"Ignoring malformed JSON request body: {e}")
        return {}

    if not isinstance(data, dict):
        logger.debug(f"Ignoring JSON request body of type {type(data).__name__}")
        return {}

    return data


def _media_type(content_type: str) -> str:
    """Strip parameters: 'application/json; charset=utf-8' → 'application/json'."""
    return content_type.split(";")[0].strip().lower()


@dataclass
class Environment:
    """
    The raw inputs a host supplies before a Request is built.

    All fields default to empty, so tests only fill in what they need:

        env = Environment(
            server={"REQUEST_METHOD": "POST", "REQUEST_URI": "/users"},
            raw_body=b'{"name": "Ada"}',
        )
        request = Request.from_environment(env)
    """

    query: Mapping = field(default_factory=dict)
    form: Mapping = field(default_factory=dict)
    raw_body: Union[str, bytes, None] = b""
    files: Mapping = field(default_factory=dict)
    server: Mapping = field(default_factory=dict)
    cookie: Mapping = field(default_factory=dict)
    headers: Mapping = field(default_factory=dict)

    @classmethod
    def from_wsgi(
        cls,
        environ: Mapping[str, Any],
        max_body_size: Optional[int] = None,
        charset: str = "utf-8",
    ) -> "Environment":
        """
        Collect request inputs from a WSGI environ (PEP 3333).

        =====================================================================
        MAPPING
        =====================================================================

            QUERY_STRING            → query
            wsgi.input              → raw_body (CONTENT_LENGTH bytes)
            url-encoded raw_body    → form
            HTTP_COOKIE             → cookie
            HTTP_*, CONTENT_*       → headers
            str-valued CGI keys     → server (+ REQUEST_URI, HTTPS)

        Multipart bodies are not decoded; files is always empty here.

        =====================================================================

        Args:
            environ: The WSGI environ dict.
            max_body_size: Largest body to read, in bytes. None means no limit.
            charset: Charset used to decode url-encoded form bodies.

        Raises:
            PayloadTooLargeError: CONTENT_LENGTH exceeds max_body_size.
        """
        query_string = environ.get("QUERY_STRING", "")

        raw_body = cls._read_wsgi_body(environ, max_body_size)

        form: Dict[str, str] = {}
        if _media_type(environ.get("CONTENT_TYPE", "")) == FORM_CONTENT_TYPE:
            form = dict(parse_qsl(
                raw_body.decode(charset, errors="replace"),
                keep_blank_values=True,
            ))

        return cls(
            query=dict(parse_qsl(query_string, keep_blank_values=True)),
            form=form,
            raw_body=raw_body,
            server=cls._server_variables(environ),
            cookie=cls._parse_cookies(environ.get("HTTP_COOKIE", "")),
            headers=cls._wsgi_headers(environ),
        )

    @staticmethod
    def _read_wsgi_body(environ: Mapping[str, Any], max_body_size: Optional[int]) -> bytes:
        try:
            length = int(environ.get("CONTENT_LENGTH") or 0)
        except ValueError:
            length = 0

        if length <= 0 or "wsgi.input" not in environ:
            return b""

        if max_body_size is not None and length > max_body_size:
            raise PayloadTooLargeError(length, max_body_size)

        return environ["wsgi.input"].read(length)

    @staticmethod
    def _server_variables(environ: Mapping[str, Any]) -> Dict[str, str]:
        server = {k: v for k, v in environ.items() if isinstance(v, str)}

        if "REQUEST_URI" not in server:
            path = environ.get("SCRIPT_NAME", "") + environ.get("PATH_INFO", "")
            # PEP 3333 hands paths over as latin-1 decoded bytes
            uri = quote(path, safe="/;=,@:!$&'()*+~", encoding="latin-1") or "/"
            query_string = environ.get("QUERY_STRING", "")
            if query_string:
                uri = f"{uri}?{query_string}"
            server["REQUEST_URI"] = uri

        scheme = environ.get("wsgi.url_scheme")
        if scheme:
            server.setdefault("REQUEST_SCHEME", scheme)
            if scheme == "https":
                server.setdefault("HTTPS", "on")

        return server

    @staticmethod
    def _parse_cookies(header: str) -> Dict[str, str]:
        if not header:
            return {}

        cookie = SimpleCookie()
        try:
            cookie.load(header)
        except CookieError as e:
            logger.debug(f"Ignoring malformed Cookie header: {e}")
            return {}

        return {name: morsel.value for name, morsel in cookie.items()}

    @staticmethod
    def _wsgi_headers(environ: Mapping[str, Any]) -> Dict[str, str]:
        headers = {}
        for key, value in environ.items():
            if key.startswith("HTTP_"):
                headers[key[5:].replace("_", "-")] = value
            elif key in _UNPREFIXED_HEADERS and value:
                headers[_UNPREFIXED_HEADERS[key]] = value
        return headers


@dataclass(frozen=True)
class Request:
    """
    Immutable snapshot of an inbound HTTP request.

    =========================================================================
    ATTRIBUTES
    =========================================================================

        query_params:   Query string parameters      {"page": "1"}
        form_data:      Url-encoded/multipart fields {"name": "Ada"}
        body:           Decoded JSON object body     {"id": 7}
        files:          Upload metadata              {"avatar": {...}}
        server:         CGI/WSGI server variables    {"REQUEST_METHOD": ...}
        cookies:        Cookie name → value          {"session": "abc"}
        headers:        Case-insensitive headers     {"Content-Type": ...}

    Plain dicts passed to the constructor are wrapped in Box / HeaderBox,
    and the dataclass is frozen, so none of the groups can be swapped out
    or modified once the request exists.

    =========================================================================
    """

    query_params: Box = field(default_factory=Box)
    form_data: Box = field(default_factory=Box)
    body: Box = field(default_factory=Box)
    files: Box = field(default_factory=Box)
    server: Box = field(default_factory=Box)
    cookies: Box = field(default_factory=Box)
    headers: HeaderBox = field(default_factory=HeaderBox)

    def __post_init__(self):
        for name in ("query_params", "form_data", "body", "files", "server", "cookies"):
            value = getattr(self, name)
            if type(value) is not Box:
                object.__setattr__(self, name, Box(value))

        if not isinstance(self.headers, HeaderBox):
            object.__setattr__(self, "headers", HeaderBox(self.headers))

    # =========================================================================
    # FACTORIES
    # =========================================================================

    @classmethod
    def from_environment(cls, environment: Environment) -> "Request":
        """
        Build a request from host-supplied inputs.

        The raw body goes through decode_json_body, so a malformed payload
        yields an empty body instead of an error.
        """
        return cls(
            query_params=Box(environment.query),
            form_data=Box(environment.form),
            body=Box(decode_json_body(environment.raw_body)),
            files=Box(environment.files),
            server=Box(environment.server),
            cookies=Box(environment.cookie),
            headers=HeaderBox(environment.headers),
        )

    @classmethod
    def from_wsgi(
        cls,
        environ: Mapping[str, Any],
        max_body_size: Optional[int] = None,
        charset: str = "utf-8",
    ) -> "Request":
        """Shortcut for from_environment(Environment.from_wsgi(environ))."""
        return cls.from_environment(
            Environment.from_wsgi(environ, max_body_size=max_body_size, charset=charset)
        )

    # =========================================================================
    # SERVER-DERIVED ACCESSORS
    # =========================================================================

    def get_method(self) -> str:
        """HTTP method, upper-cased. Defaults to GET."""
        return str(self.server.get("REQUEST_METHOD") or "GET").upper()

    def get_uri(self) -> str:
        """Request target as sent by the client, e.g. "/users/1?active=true"."""
        return str(self.server.get("REQUEST_URI") or "/")

    def get_host(self) -> str:
        """Host name from HTTP_HOST, falling back to SERVER_NAME."""
        return str(self.server.get("HTTP_HOST") or self.server.get("SERVER_NAME") or "")

    def get_scheme(self) -> str:
        """URL scheme: "https" when HTTPS is on, else REQUEST_SCHEME or "http"."""
        https = str(self.server.get("HTTPS", "")).lower()
        if https and https != "off":
            return "https"
        return str(self.server.get("REQUEST_SCHEME") or "http")

    def get_url(self) -> str:
        """
        Absolute URL of the request.

        Example:
            HTTPS=on, HTTP_HOST=example.com, REQUEST_URI=/a?b=1
            → "https://example.com/a?b=1"

        Without a known host the bare URI is returned.
        """
        host = self.get_host()
        if not host:
            return self.get_uri()
        return f"{self.get_scheme()}://{host}{self.get_uri()}"

    def get_path(self) -> str:
        """Path component of the URI, "/" when empty."""
        return urlsplit(self.get_uri()).path or "/"

    def get_query(self) -> str:
        """Raw (undecoded) query string of the URI, "" when absent."""
        return urlsplit(self.get_uri()).query

    # =========================================================================
    # INPUT ACCESSORS
    # =========================================================================

    def form(self, key: Optional[str] = None, default: Any = None) -> Any:
        """
        Get form data.

        Args:
            key: Field name. When omitted, all fields are returned.
            default: Value returned when the field is missing.

        Returns:
            The whole form Box, the field value, or default.
        """
        if key is None:
            return self.form_data
        return self.form_data.get(key, default)

    def json(self, key: Optional[str] = None, default: Any = None) -> Any:
        """Same as form(), for the decoded JSON body."""
        if key is None:
            return self.body
        return self.body.get(key, default)

    def input(self, key: str, default: Any = None) -> Any:
        """Look a key up in the JSON body, then the form, then the query string."""
        for source in (self.body, self.form_data, self.query_params):
            if key in source:
                return source[key]
        return default

    def header(self, name: str, default: Any = None) -> Any:
        return self.headers.get(name, default)

    def cookie(self, name: str, default: Any = None) -> Any:
        return self.cookies.get(name, default)

    def file(self, name: str) -> Optional[Any]:
        """Upload metadata for a file field, or None."""
        return self.files.get(name)

    @property
    def is_json(self) -> bool:
        """Check if the request declares a JSON body via Content-Type."""
        return _media_type(str(self.headers.get("Content-Type", ""))) == JSON_CONTENT_TYPE

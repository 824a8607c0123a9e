"""
pytest configuration and fixtures.
"""

import io
from typing import Any, Callable, Dict

import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from myragon.http import Environment, StreamTransport


@pytest.fixture
def sample_server() -> Dict[str, str]:
    """Server variables for a GET with a query string."""
    return {
        "REQUEST_METHOD": "GET",
        "REQUEST_URI": "/users/1?active=true",
        "HTTP_HOST": "localhost:8080",
        "SERVER_NAME": "localhost",
        "SERVER_PROTOCOL": "HTTP/1.1",
    }


@pytest.fixture
def sample_environment(sample_server: Dict[str, str]) -> Environment:
    """Environment for a POST with a JSON body."""
    server = dict(sample_server, REQUEST_METHOD="POST", REQUEST_URI="/users")
    return Environment(
        query={"page": "1"},
        form={"name": "Form Name"},
        raw_body=b'{"name": "John", "email": "john@example.com"}',
        files={"avatar": {"name": "me.png", "size": 120, "tmp_name": "/tmp/php1", "error": 0}},
        server=server,
        cookie={"session": "abc123"},
        headers={"content-type": "application/json", "host": "localhost:8080"},
    )


@pytest.fixture
def make_environ() -> Callable[..., Dict[str, Any]]:
    """Factory for minimal WSGI environ dicts."""

    def _make(
        method: str = "GET",
        path: str = "/",
        query: str = "",
        body: bytes = b"",
        content_type: str = "",
        **extra: Any,
    ) -> Dict[str, Any]:
        environ = {
            "REQUEST_METHOD": method,
            "SCRIPT_NAME": "",
            "PATH_INFO": path,
            "QUERY_STRING": query,
            "SERVER_NAME": "localhost",
            "SERVER_PORT": "8080",
            "SERVER_PROTOCOL": "HTTP/1.1",
            "HTTP_HOST": "localhost:8080",
            "wsgi.url_scheme": "http",
            "wsgi.input": io.BytesIO(body),
        }
        if body:
            environ["CONTENT_LENGTH"] = str(len(body))
        if content_type:
            environ["CONTENT_TYPE"] = content_type
        environ.update(extra)
        return environ

    return _make


@pytest.fixture
def output() -> io.BytesIO:
    """In-memory output stream."""
    return io.BytesIO()


@pytest.fixture
def stream_transport(output: io.BytesIO) -> StreamTransport:
    """Transport writing raw HTTP bytes into the output fixture."""
    return StreamTransport(output)


class StartResponseRecorder:
    """Records calls made to a WSGI start_response."""

    def __init__(self):
        self.calls = []

    def __call__(self, status, headers, exc_info=None):
        self.calls.append((status, list(headers)))

    @property
    def status(self) -> str:
        return self.calls[-1][0]

    @property
    def headers(self):
        return self.calls[-1][1]


@pytest.fixture
def start_response() -> StartResponseRecorder:
    return StartResponseRecorder()

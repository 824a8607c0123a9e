"""
Unit tests for request construction and accessors.
"""

import dataclasses

import pytest

from myragon.http.box import Box
from myragon.http.exceptions import PayloadTooLargeError
from myragon.http.request import Environment, Request, decode_json_body


class TestDecodeJSONBody:
    """Tests for the JSON body decoder."""

    def test_valid_object(self):
        assert decode_json_body('{"a":1}') == {"a": 1}
        assert decode_json_body(b'{"a": {"b": [1, 2]}}') == {"a": {"b": [1, 2]}}

    @pytest.mark.parametrize("raw", [None, "", b"", "   ", "\n"])
    def test_absent_or_blank(self, raw):
        """Test empty payloads give an empty mapping."""
        assert decode_json_body(raw) == {}

    @pytest.mark.parametrize("raw", ["not json", "{", '{"a":}', "{'a': 1}", b"\xff\xfe"])
    def test_malformed(self, raw):
        """Test malformed payloads never raise."""
        assert decode_json_body(raw) == {}

    @pytest.mark.parametrize("raw", ["NaN", '{"a": Infinity}', '{"a": -Infinity}'])
    def test_non_standard_constants_rejected(self, raw):
        """Test strict validity: NaN/Infinity are not JSON."""
        assert decode_json_body(raw) == {}

    @pytest.mark.parametrize("raw", ["[1, 2]", '"text"', "42", "null", "true"])
    def test_non_object_payloads(self, raw):
        """Test top-level arrays and scalars are dropped."""
        assert decode_json_body(raw) == {}


class TestFromEnvironment:
    """Tests for Request.from_environment()."""

    def test_all_groups(self, sample_environment):
        """Test every input group lands in its Box."""
        request = Request.from_environment(sample_environment)

        assert request.query_params == {"page": "1"}
        assert request.form_data == {"name": "Form Name"}
        assert request.body == {"name": "John", "email": "john@example.com"}
        assert request.files["avatar"]["name"] == "me.png"
        assert request.server["REQUEST_METHOD"] == "POST"
        assert request.cookies == {"session": "abc123"}
        assert request.headers["Content-Type"] == "application/json"

    def test_malformed_body(self):
        """Test a non-JSON raw body becomes an empty mapping."""
        request = Request.from_environment(Environment(raw_body="not json"))

        assert request.body == {}
        assert request.json() == {}

    def test_json_body(self):
        """Test a JSON object raw body is decoded."""
        request = Request.from_environment(Environment(raw_body='{"a":1}'))

        assert request.body == {"a": 1}

    def test_empty_environment(self):
        """Test defaults for a bare environment."""
        request = Request.from_environment(Environment())

        assert request.get_method() == "GET"
        assert request.get_uri() == "/"
        assert request.get_path() == "/"
        assert request.get_query() == ""
        assert len(request.headers) == 0

    def test_source_changes_not_visible(self):
        """Test the request copies its inputs."""
        query = {"a": "1"}
        request = Request.from_environment(Environment(query=query))
        query["a"] = "2"

        assert request.query_params["a"] == "1"


class TestImmutability:
    """Tests that a request cannot be changed after construction."""

    def test_fields_cannot_be_replaced(self):
        request = Request()

        with pytest.raises(dataclasses.FrozenInstanceError):
            request.body = Box({"x": 1})

    def test_boxes_are_read_only(self):
        request = Request(query_params={"a": "1"})

        with pytest.raises(TypeError):
            request.query_params["a"] = "2"

    def test_plain_dicts_are_wrapped(self):
        """Test the constructor wraps dicts passed directly."""
        request = Request(form_data={"a": "1"}, headers={"x-token": "t"})

        assert isinstance(request.form_data, Box)
        assert request.header("X-TOKEN") == "t"


class TestServerAccessors:
    """Tests for accessors derived from server variables."""

    def test_path_and_query(self, sample_server):
        request = Request(server=sample_server)

        assert request.get_path() == "/users/1"
        assert request.get_query() == "active=true"
        assert request.get_uri() == "/users/1?active=true"

    def test_root_uri(self):
        request = Request(server={"REQUEST_URI": "/"})

        assert request.get_path() == "/"
        assert request.get_query() == ""

    def test_empty_path_defaults_to_root(self):
        request = Request(server={"REQUEST_URI": "?a=1"})

        assert request.get_path() == "/"
        assert request.get_query() == "a=1"

    def test_query_is_not_decoded(self):
        request = Request(server={"REQUEST_URI": "/search?q=hello%20world&x=a+b"})

        assert request.get_query() == "q=hello%20world&x=a+b"

    def test_method(self, sample_server):
        assert Request(server=sample_server).get_method() == "GET"
        assert Request(server={"REQUEST_METHOD": "post"}).get_method() == "POST"

    def test_host(self, sample_server):
        assert Request(server=sample_server).get_host() == "localhost:8080"
        assert Request(server={"SERVER_NAME": "example.org"}).get_host() == "example.org"
        assert Request().get_host() == ""

    def test_url(self, sample_server):
        request = Request(server=sample_server)

        assert request.get_url() == "http://localhost:8080/users/1?active=true"

    def test_https_url(self):
        request = Request(server={
            "HTTPS": "on",
            "HTTP_HOST": "example.com",
            "REQUEST_URI": "/a?b=1",
        })

        assert request.get_scheme() == "https"
        assert request.get_url() == "https://example.com/a?b=1"

    def test_https_off(self):
        request = Request(server={"HTTPS": "off", "HTTP_HOST": "example.com"})

        assert request.get_url() == "http://example.com/"

    def test_url_without_host(self):
        assert Request(server={"REQUEST_URI": "/x"}).get_url() == "/x"

    def test_accessors_do_not_mutate(self, sample_server):
        request = Request(server=sample_server)
        before = request.server.all()

        request.get_path()
        request.get_url()

        assert request.server.all() == before


class TestInputAccessors:
    """Tests for form(), json() and friends."""

    def test_form(self):
        request = Request(form_data={"name": "Ada"})

        assert request.form() == {"name": "Ada"}
        assert request.form("name") == "Ada"
        assert request.form("missing") is None
        assert request.form("missing", "default") == "default"

    def test_json(self):
        request = Request(body={"id": 7})

        assert request.json() == {"id": 7}
        assert request.json("id") == 7
        assert request.json("missing", 0) == 0

    def test_input_precedence(self):
        request = Request(
            query_params={"a": "query", "b": "query", "c": "query"},
            form_data={"a": "form", "b": "form"},
            body={"a": "json"},
        )

        assert request.input("a") == "json"
        assert request.input("b") == "form"
        assert request.input("c") == "query"
        assert request.input("d", "none") == "none"

    def test_cookie_and_file(self, sample_environment):
        request = Request.from_environment(sample_environment)

        assert request.cookie("session") == "abc123"
        assert request.cookie("missing", "") == ""
        assert request.file("avatar")["size"] == 120
        assert request.file("missing") is None

    def test_is_json(self):
        assert Request(headers={"content-type": "application/json; charset=utf-8"}).is_json
        assert not Request(headers={"content-type": "text/plain"}).is_json
        assert not Request().is_json


class TestFromWSGI:
    """Tests for building requests from a WSGI environ."""

    def test_get(self, make_environ):
        request = Request.from_wsgi(make_environ(path="/users/1", query="active=true&page=2"))

        assert request.get_method() == "GET"
        assert request.get_uri() == "/users/1?active=true&page=2"
        assert request.get_path() == "/users/1"
        assert request.get_query() == "active=true&page=2"
        assert request.query_params == {"active": "true", "page": "2"}
        assert request.get_url() == "http://localhost:8080/users/1?active=true&page=2"

    def test_json_post(self, make_environ):
        environ = make_environ(
            method="POST",
            path="/users",
            body=b'{"name": "John"}',
            content_type="application/json",
        )
        request = Request.from_wsgi(environ)

        assert request.json("name") == "John"
        assert request.is_json
        assert request.headers["Content-Length"] == "16"
        assert request.form() == {}

    def test_urlencoded_form(self, make_environ):
        environ = make_environ(
            method="POST",
            body=b"name=Ada+Lovelace&empty=",
            content_type="application/x-www-form-urlencoded; charset=utf-8",
        )
        request = Request.from_wsgi(environ)

        assert request.form() == {"name": "Ada Lovelace", "empty": ""}
        assert request.json() == {}

    def test_headers(self, make_environ):
        environ = make_environ(HTTP_X_REQUEST_ID="abc", HTTP_USER_AGENT="pytest")
        request = Request.from_wsgi(environ)

        assert request.header("x-request-id") == "abc"
        assert request.header("User-Agent") == "pytest"
        assert request.header("Host") == "localhost:8080"

    def test_cookies(self, make_environ):
        request = Request.from_wsgi(make_environ(HTTP_COOKIE="session=abc; theme=dark"))

        assert request.cookies == {"session": "abc", "theme": "dark"}

    def test_server_excludes_non_strings(self, make_environ):
        request = Request.from_wsgi(make_environ())

        assert "wsgi.input" not in request.server
        assert request.server["SERVER_PROTOCOL"] == "HTTP/1.1"

    def test_existing_request_uri_kept(self, make_environ):
        request = Request.from_wsgi(make_environ(path="/a", REQUEST_URI="/raw%2Fpath?x=1"))

        assert request.get_uri() == "/raw%2Fpath?x=1"

    def test_path_is_quoted(self, make_environ):
        request = Request.from_wsgi(make_environ(path="/hello world"))

        assert request.get_uri() == "/hello%20world"

    def test_https_scheme(self, make_environ):
        request = Request.from_wsgi(make_environ(**{"wsgi.url_scheme": "https"}))

        assert request.get_url() == "https://localhost:8080/"

    def test_body_too_large(self, make_environ):
        environ = make_environ(method="POST", body=b"x" * 100)

        with pytest.raises(PayloadTooLargeError) as exc_info:
            Request.from_wsgi(environ, max_body_size=10)

        assert exc_info.value.status_code == 413

    def test_invalid_content_length(self, make_environ):
        request = Request.from_wsgi(make_environ(CONTENT_LENGTH="abc"))

        assert request.body == {}

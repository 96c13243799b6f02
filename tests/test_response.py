"""
Unit tests for Response, Stream and the factories.
"""

import json
from datetime import datetime

from crashpage.response import (
    Response,
    ResponseFactory,
    Stream,
    StreamFactory,
    html_response,
    json_response,
    text_response,
)
from crashpage.status import HTTPStatus


class TestResponseInitialization:
    """Test Response initialization behaviors."""

    def test_default_initialization(self):
        """Test Response default initialization values."""
        response = Response()
        assert response.status_code == 200
        assert response.reason_phrase == "OK"
        assert response.headers == {"content-type": "text/plain; charset=utf-8"}
        assert response.body == b""

    def test_none_content_has_no_content_type(self):
        """Test that a None body adds no headers."""
        response = Response(None)
        assert response.headers == {}
        assert response.body == b""

    def test_status_enum(self):
        """Test that HTTPStatus members are stored as ints."""
        response = Response("x", status_code=HTTPStatus.HTTP_404_NOT_FOUND)
        assert response.status_code == 404
        assert type(response.status_code) is int
        assert response.reason_phrase == "Not Found"

    def test_explicit_reason_phrase(self):
        """Test overriding the reason phrase."""
        assert Response("x", 500, reason_phrase="Broken").reason_phrase == "Broken"

    def test_existing_content_type_kept(self):
        """Test that a content type header given in any case is not overridden."""
        response = Response("<h1>x</h1>", headers={"Content-Type": "text/x-custom"})
        assert response.headers == {"Content-Type": "text/x-custom"}

    def test_caller_headers_not_modified(self):
        """Test that the headers argument is copied, not written to."""
        headers = {"X-Trace": "abc"}
        response = Response("x", headers=headers)
        assert headers == {"X-Trace": "abc"}
        assert response.headers == {
            "X-Trace": "abc",
            "content-type": "text/plain; charset=utf-8",
        }


class TestResponseContentDetection:
    """Test automatic content type detection."""

    def test_html_with_doctype(self):
        """Test HTML detection with DOCTYPE."""
        response = Response("<!DOCTYPE html><html></html>")
        assert response.headers["content-type"] == "text/html; charset=utf-8"

    def test_json_dict(self):
        """Test JSON detection for dicts."""
        data = {"key": "value"}
        response = Response(data)
        assert response.headers["content-type"] == "application/json; charset=utf-8"
        assert json.loads(response.body.decode()) == data

    def test_bytes(self):
        """Test bytes content handling."""
        response = Response(b"\x00\x01")
        assert response.headers["content-type"] == "application/octet-stream"

    def test_number(self):
        """Test number content handling."""
        assert Response(42).body == b"42"


class TestResponseHeaders:
    """Test header operations."""

    def test_set_header_replaces_case_insensitively(self):
        """Test that set_header replaces an existing header of any case."""
        response = Response("x").set_header("Content-Type", "text/csv")
        assert response.headers == {"Content-Type": "text/csv"}

    def test_get_header(self):
        """Test case-insensitive lookup."""
        response = Response("x")
        assert response.get_header("CONTENT-TYPE") == "text/plain; charset=utf-8"
        assert response.get_header("x-missing", "none") == "none"

    def test_with_added_header_returns_copy(self):
        """Test that with_added_header leaves the original untouched."""
        original = Response("x")
        updated = original.with_added_header("X-Trace", "1")
        assert updated is not original
        assert "X-Trace" not in original.headers
        assert updated.headers["X-Trace"] == "1"

    def test_with_added_header_appends(self):
        """Test appending to an existing header."""
        response = Response(None, headers={"Vary": "Accept"}).with_added_header(
            "vary", "Cookie"
        )
        assert response.headers == {"Vary": "Accept, Cookie"}

    def test_with_body_stream(self):
        """Test attaching a stream body."""
        original = Response(None)
        updated = original.with_body(StreamFactory().create_stream("héllo"))
        assert updated.body == "héllo".encode("utf-8")
        assert original.body == b""

    def test_with_body_string(self):
        """Test attaching a plain string body."""
        assert Response(None).with_body("abc").body == b"abc"


class TestAsgiConversion:
    """Test conversion to ASGI messages."""

    def test_to_asgi_response(self):
        """Test status, lower-cased headers and content length."""
        asgi = Response("Hello", headers={"X-Custom": "v"}).to_asgi_response()
        assert asgi["status"] == 200
        assert asgi["body"] == b"Hello"
        assert [b"x-custom", b"v"] in asgi["headers"]
        assert [b"content-length", b"5"] in asgi["headers"]

    def test_explicit_content_length_not_duplicated(self):
        """Test that a set content-length header is kept as the only one."""
        asgi = Response("Hello", headers={"Content-Length": "5"}).to_asgi_response()
        names = [name for name, _ in asgi["headers"]]
        assert names.count(b"content-length") == 1


class TestResponseCookies:
    """Test cookie handling."""

    def test_set_cookie(self):
        """Test a cookie with every attribute."""
        response = Response("x").set_cookie(
            "session",
            "abc",
            max_age=60,
            expires=datetime(2030, 1, 2, 3, 4, 5),
            domain="example.com",
            secure=True,
            httponly=True,
            samesite="Lax",
        )
        assert response.cookies == [
            "session=abc; Max-Age=60; Expires=Wed, 02 Jan 2030 03:04:05 GMT; "
            "Path=/; Domain=example.com; Secure; HttpOnly; SameSite=Lax"
        ]

    def test_delete_and_clear(self):
        """Test expiring and dropping cookies."""
        response = Response("x").delete_cookie("session")
        assert response.cookies == ["session=; Max-Age=0; Path=/"]

        response.clear_cookies()
        assert response.cookies == []

    def test_one_header_per_cookie(self):
        """Test that every cookie gets its own Set-Cookie header."""
        response = Response("x").set_cookie("a", "1").set_cookie("b", "2", path="")
        headers = response.to_asgi_response()["headers"]
        assert [value for name, value in headers if name == b"set-cookie"] == [
            b"a=1; Path=/",
            b"b=2",
        ]

    def test_copies_keep_their_own_cookies(self):
        """Test that with_* copies don't share the cookie list."""
        original = Response("x").set_cookie("a", "1")
        clone = original.with_added_header("X-Extra", "1")
        clone.set_cookie("b", "2")
        assert original.cookies == ["a=1; Path=/"]
        assert clone.cookies == ["a=1; Path=/", "b=2; Path=/"]


class TestFactories:
    """Test ResponseFactory and StreamFactory."""

    def test_create_response(self):
        """Test an empty response with the default phrase."""
        response = ResponseFactory().create_response(404)
        assert response.status_code == 404
        assert response.reason_phrase == "Not Found"
        assert response.headers == {}
        assert response.body == b""

    def test_create_response_custom_phrase(self):
        """Test a caller-supplied phrase."""
        response = ResponseFactory().create_response(599, "Network Connect Timeout")
        assert response.reason_phrase == "Network Connect Timeout"

    def test_stream(self):
        """Test Stream accessors."""
        stream = StreamFactory().create_stream("ünï")
        assert isinstance(stream, Stream)
        assert stream.read() == "ünï".encode("utf-8")
        assert stream.size == len("ünï".encode("utf-8"))
        assert str(stream) == "ünï"

    def test_stream_lone_surrogate(self):
        """Test that text which isn't valid UTF-8 is replaced, not rejected."""
        stream = StreamFactory().create_stream("bad \udcff name")
        assert stream.read() == b"bad ? name"


class TestHelpers:
    """Test response helper functions."""

    def test_text_response(self):
        """Test text_response content type."""
        assert text_response("<p>x</p>").headers["content-type"] == "text/plain; charset=utf-8"

    def test_html_response(self):
        """Test html_response content type and status."""
        response = html_response("x", status_code=403)
        assert response.headers["content-type"] == "text/html; charset=utf-8"
        assert response.status_code == 403

    def test_json_response(self):
        """Test json_response body."""
        assert json_response({"a": 1}).body == b'{"a": 1}'

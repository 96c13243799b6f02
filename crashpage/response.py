"""
Response, stream and factory classes for crashpage.
"""

import copy
import json
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol, Union

from .status import HTTPStatus, reason_phrase as default_reason_phrase


class Stream:
    """A response body held in memory."""

    def __init__(self, content: Union[str, bytes] = b"", encoding: str = "utf-8"):
        if isinstance(content, str):
            content = content.encode(encoding, errors="replace")
        self._content = content
        self._encoding = encoding

    @property
    def size(self) -> int:
        return len(self._content)

    def read(self) -> bytes:
        return self._content

    def __str__(self) -> str:
        return self._content.decode(self._encoding, errors="replace")

    def __repr__(self) -> str:
        return f"<Stream size={self.size}>"


class Response:
    """
    Response object for building HTTP responses with automatic content type detection.

    Supports:
    - Automatic content type detection (JSON, HTML, plain text)
    - Custom status codes, reason phrases and headers
    - Mutating header setters (set_header) and copying ones (with_added_header, with_body)
    - Cookies (set_cookie, delete_cookie, clear_cookies)
    - Conversion to ASGI response format
    """

    def __init__(
        self,
        content: Union[str, bytes, dict, list, int, float, None] = "",
        status_code: Union[int, HTTPStatus] = HTTPStatus.HTTP_200_OK,
        headers: Optional[Dict[str, str]] = None,
        content_type: Optional[str] = None,
        reason_phrase: Optional[str] = None,
    ):
        """
        Initialize Response object.

        Args:
            content: Response content (auto-converts dict/list to JSON); None for an
                empty body without a content type
            status_code: HTTP status code (int or HTTPStatus enum)
            headers: Additional response headers
            content_type: Explicit content type (auto-detected if not provided)
            reason_phrase: Reason phrase (looked up from the status code if not provided)
        """
        self.status_code = int(status_code)  # Convert HTTPStatus enum to int
        self.reason_phrase = (
            reason_phrase
            if reason_phrase is not None
            else default_reason_phrase(self.status_code)
        )
        self.headers = dict(headers or {})
        self._cookies: List[str] = []

        self.body, detected_content_type = self._process_content(content)

        # Explicit content type takes precedence over auto-detected
        if content_type:
            self.headers["content-type"] = content_type
        elif detected_content_type and self._find_header("content-type") is None:
            self.headers["content-type"] = detected_content_type

    def _process_content(self, content: Any) -> tuple[bytes, Optional[str]]:
        """
        Process content and determine appropriate content type.

        Returns:
            Tuple of (processed_bytes, detected_content_type)
        """
        if content is None:
            return b"", None
        if isinstance(content, (dict, list)):
            body = json.dumps(content, ensure_ascii=False).encode("utf-8")
            content_type = "application/json; charset=utf-8"
        elif isinstance(content, str):
            body = content.encode("utf-8")
            if content.strip().startswith(("<!DOCTYPE", "<html", "<HTML")):
                content_type = "text/html; charset=utf-8"
            elif any(
                tag in content.lower()
                for tag in ["<h1>", "<h2>", "<p>", "<div>", "<span>", "<body>"]
            ):
                content_type = "text/html; charset=utf-8"
            else:
                content_type = "text/plain; charset=utf-8"
        elif isinstance(content, bytes):
            body = content
            content_type = "application/octet-stream"
        else:
            body = str(content).encode("utf-8")
            content_type = "text/plain; charset=utf-8"

        return body, content_type

    def _find_header(self, name: str) -> Optional[str]:
        """Return the stored key of a header, matching the name case-insensitively."""
        lowered = name.lower()
        for key in self.headers:
            if key.lower() == lowered:
                return key
        return None

    def get_header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Header value by case-insensitive name."""
        key = self._find_header(name)
        return self.headers[key] if key is not None else default

    def set_header(self, name: str, value: str) -> "Response":
        """
        Set a response header in place (supports method chaining).

        Returns:
            self for method chaining
        """
        key = self._find_header(name)
        if key is not None:
            del self.headers[key]
        self.headers[name] = value
        return self

    def set_cookie(
        self,
        name: str,
        value: str,
        max_age: Optional[int] = None,
        expires: Optional[datetime] = None,
        path: str = "/",
        domain: Optional[str] = None,
        secure: bool = False,
        httponly: bool = False,
        samesite: Optional[str] = None,
    ) -> "Response":
        """
        Add a Set-Cookie header (supports method chaining).

        Args:
            name: Cookie name
            value: Cookie value
            max_age: Lifetime in seconds
            expires: Expiry as a UTC datetime
            path: Cookie path
            domain: Cookie domain
            secure: Send only over HTTPS
            httponly: Hide the cookie from scripts
            samesite: 'Strict', 'Lax' or 'None'

        Returns:
            self for method chaining
        """
        parts = [f"{name}={value}"]
        if max_age is not None:
            parts.append(f"Max-Age={max_age}")
        if expires is not None:
            parts.append(f"Expires={expires.strftime('%a, %d %b %Y %H:%M:%S GMT')}")
        if path:
            parts.append(f"Path={path}")
        if domain:
            parts.append(f"Domain={domain}")
        if secure:
            parts.append("Secure")
        if httponly:
            parts.append("HttpOnly")
        if samesite:
            parts.append(f"SameSite={samesite}")

        self._cookies.append("; ".join(parts))
        return self

    def delete_cookie(
        self, name: str, path: str = "/", domain: Optional[str] = None
    ) -> "Response":
        """Expire a cookie on the client; path and domain must match the original."""
        return self.set_cookie(name, "", max_age=0, path=path, domain=domain)

    def clear_cookies(self) -> "Response":
        """Drop every cookie queued on this response."""
        self._cookies.clear()
        return self

    @property
    def cookies(self) -> List[str]:
        """Set-Cookie header values, in the order they were added."""
        return list(self._cookies)

    def _copy(self) -> "Response":
        clone = copy.copy(self)
        clone.headers = dict(self.headers)
        clone._cookies = list(self._cookies)
        return clone

    def with_added_header(self, name: str, value: str) -> "Response":
        """
        Return a copy with a header value added.

        A header that is already present keeps its value and gets the new one
        appended, comma separated.
        """
        clone = self._copy()
        key = clone._find_header(name)
        if key is None:
            clone.headers[name] = value
        else:
            clone.headers[key] = f"{clone.headers[key]}, {value}"
        return clone

    def with_body(self, body: Union[Stream, str, bytes]) -> "Response":
        """Return a copy with the given body."""
        if not isinstance(body, Stream):
            body = Stream(body)
        clone = self._copy()
        clone.body = body.read()
        return clone

    def to_asgi_response(self) -> Dict[str, Any]:
        """
        Convert to ASGI response format.

        Returns:
            Dictionary with 'status', 'headers', and 'body' keys
        """
        asgi_headers = [
            [name.lower().encode("utf-8"), str(value).encode("utf-8")]
            for name, value in self.headers.items()
        ]
        if self._find_header("content-length") is None:
            asgi_headers.append(
                [b"content-length", str(len(self.body)).encode("utf-8")]
            )

        # Multiple cookies need one Set-Cookie header each
        for cookie in self._cookies:
            asgi_headers.append([b"set-cookie", cookie.encode("utf-8")])

        return {"status": self.status_code, "headers": asgi_headers, "body": self.body}

    def __repr__(self) -> str:
        return f"<Response {self.status_code} {self.reason_phrase}>"


class ResponseFactoryProtocol(Protocol):
    def create_response(self, status_code: int, reason_phrase: str = "") -> Response:
        ...


class StreamFactoryProtocol(Protocol):
    def create_stream(self, content: str = "") -> Stream:
        ...


class ResponseFactory:
    """Creates empty responses for a status code."""

    def create_response(self, status_code: int, reason_phrase: str = "") -> Response:
        return Response(
            None,
            status_code=status_code,
            reason_phrase=reason_phrase or None,
        )


class StreamFactory:
    """Wraps strings as response bodies."""

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    def create_stream(self, content: str = "") -> Stream:
        return Stream(content, encoding=self.encoding)


# Convenience functions for common response types
def text_response(
    content: str,
    status_code: Union[int, HTTPStatus] = HTTPStatus.HTTP_200_OK,
    headers: Optional[Dict[str, str]] = None,
) -> Response:
    """Create a plain text response."""
    return Response(
        content,
        status_code=status_code,
        headers=headers,
        content_type="text/plain; charset=utf-8",
    )


def html_response(
    content: str,
    status_code: Union[int, HTTPStatus] = HTTPStatus.HTTP_200_OK,
    headers: Optional[Dict[str, str]] = None,
) -> Response:
    """Create an HTML response."""
    return Response(
        content,
        status_code=status_code,
        headers=headers,
        content_type="text/html; charset=utf-8",
    )


def json_response(
    content: Union[dict, list],
    status_code: Union[int, HTTPStatus] = HTTPStatus.HTTP_200_OK,
    headers: Optional[Dict[str, str]] = None,
) -> Response:
    """Create a JSON response."""
    return Response(
        content,
        status_code=status_code,
        headers=headers,
        content_type="application/json; charset=utf-8",
    )


__all__ = [
    "Stream",
    "Response",
    "ResponseFactory",
    "StreamFactory",
    "ResponseFactoryProtocol",
    "StreamFactoryProtocol",
    "text_response",
    "html_response",
    "json_response",
]

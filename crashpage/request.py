"""
Request class for crashpage.
"""

import json
import urllib.parse
from typing import Any, Awaitable, Callable, Dict, List, Optional


class Request:
    """
    Wraps an ASGI scope and receive channel.

    Provides access to the HTTP method, path, headers, query parameters and
    the request body.
    """

    def __init__(
        self,
        scope: Dict[str, Any],
        receive: Optional[Callable[[], Awaitable[Dict[str, Any]]]] = None,
    ):
        """
        Initialize Request object from ASGI scope and receive callable.

        Args:
            scope: ASGI scope dictionary containing request metadata
            receive: ASGI receive callable for reading the request body
        """
        self._scope = scope
        self._receive = receive
        self._body: Optional[bytes] = None
        self._headers: Optional[Dict[str, str]] = None
        self._query_params: Optional[Dict[str, str]] = None

    @classmethod
    async def from_asgi(
        cls, scope: Dict[str, Any], receive: Callable[[], Awaitable[Dict[str, Any]]]
    ) -> "Request":
        """Create a Request and load its body."""
        request = cls(scope, receive)
        await request.load_body()
        return request

    async def load_body(self) -> None:
        """Read the whole body from the receive channel."""
        if self._body is not None:
            return
        if self._receive is None:
            self._body = b""
            return

        chunks: List[bytes] = []
        while True:
            message = await self._receive()
            if message["type"] == "http.disconnect":
                break
            chunks.append(message.get("body", b""))
            if not message.get("more_body", False):
                break
        self._body = b"".join(chunks)

    @property
    def method(self) -> str:
        return self._scope.get("method", "GET")

    @property
    def path(self) -> str:
        return self._scope.get("path", "/")

    @property
    def scheme(self) -> str:
        return self._scope.get("scheme", "http")

    @property
    def headers(self) -> Dict[str, str]:
        """Request headers with lower-cased names."""
        if self._headers is None:
            self._headers = {
                name.decode("latin-1").lower(): value.decode("latin-1")
                for name, value in self._scope.get("headers", [])
            }
        return self._headers

    @property
    def query_params(self) -> Dict[str, str]:
        """Query parameters; the first value wins for repeated names."""
        if self._query_params is None:
            query_string = self._scope.get("query_string", b"").decode("latin-1")
            parsed = urllib.parse.parse_qs(query_string, keep_blank_values=True)
            self._query_params = {name: values[0] for name, values in parsed.items()}
        return self._query_params

    @property
    def body(self) -> bytes:
        if self._body is None:
            raise RuntimeError("Request body not loaded; await load_body() first")
        return self._body

    def text(self) -> str:
        return self.body.decode("utf-8")

    def json(self) -> Any:
        return json.loads(self.text())

    def __repr__(self) -> str:
        return f"<Request {self.method} {self.path}>"

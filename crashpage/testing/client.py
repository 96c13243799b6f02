"""
TestClient class for executing HTTP requests against crashpage applications.
"""

import asyncio
import concurrent.futures
from typing import Dict, Optional
from urllib.parse import urlencode

from .response import TestResponse


class TestClient:
    """
    Synchronous HTTP test client for an ASGI application.

    Example:
        client = TestClient(Application(endpoint))
        response = client.get("/boom")
        assert response.status_code == 500
    """

    __test__ = False  # not a pytest test class

    def __init__(self, app):
        self.app = app

    def request(
        self,
        method: str,
        path: str,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, str]] = None,
        body: bytes = b"",
    ) -> TestResponse:
        """
        Execute a request against the application.

        Args:
            method: HTTP method
            path: Request path, without query string
            headers: Request headers
            params: Query parameters
            body: Raw request body

        Returns:
            TestResponse with the status, headers and body the app sent
        """
        scope = {
            "type": "http",
            "method": method.upper(),
            "scheme": "http",
            "path": path,
            "query_string": urlencode(params or {}).encode("latin-1"),
            "headers": [
                [key.lower().encode("latin-1"), str(value).encode("latin-1")]
                for key, value in (headers or {}).items()
            ],
        }

        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(self._make_request(scope, body))

        # Called from inside a running loop (pytest-asyncio): run on a fresh loop
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as executor:
            return executor.submit(asyncio.run, self._make_request(scope, body)).result()

    async def _make_request(self, scope: dict, body: bytes) -> TestResponse:
        response_data = {}
        body_parts = []

        async def receive():
            return {"type": "http.request", "body": body, "more_body": False}

        async def send(message):
            if message["type"] == "http.response.start":
                response_data["status"] = message["status"]
                response_data["headers"] = message["headers"]
            elif message["type"] == "http.response.body":
                body_parts.append(message.get("body", b""))

        await self.app(scope, receive, send)

        headers = {
            key.decode("latin-1"): value.decode("latin-1")
            for key, value in response_data.get("headers", [])
        }
        return TestResponse(
            response_data.get("status", 500), headers, b"".join(body_parts), scope["path"]
        )

    def get(self, path: str, **kwargs) -> TestResponse:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs) -> TestResponse:
        return self.request("POST", path, **kwargs)

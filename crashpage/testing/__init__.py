"""
crashpage testing package.

- TestClient: runs requests against an ASGI application synchronously
- TestResponse: what the application sent back
"""

from .client import TestClient
from .response import TestResponse

__all__ = ["TestClient", "TestResponse"]

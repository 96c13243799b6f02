"""
Middleware chain for crashpage.

MiddlewareChain wraps an endpoint in the registered middleware, first
registered outermost.
"""

from typing import Awaitable, Callable, List, Protocol

from ..request import Request
from ..response import Response

Endpoint = Callable[[Request], Awaitable[Response]]


class MiddlewareCallable(Protocol):
    """Protocol for middleware callables."""

    async def __call__(self, request: Request, call_next: Endpoint) -> Response:
        """
        Process a request through the middleware.

        Args:
            request: The incoming HTTP request
            call_next: Function to call the next middleware in the chain

        Returns:
            The HTTP response
        """
        ...


class MiddlewareChain:
    """
    Ordered list of middleware around an endpoint.

    Middleware registered as [A, B, C] run as:
        Request -> A -> B -> C -> endpoint -> C -> B -> A -> Response
    """

    def __init__(self):
        self._middlewares: List[MiddlewareCallable] = []

    def add(self, middleware: MiddlewareCallable) -> None:
        """Append middleware; it becomes the innermost layer so far."""
        self._middlewares.append(middleware)

    def insert_outermost(self, middleware: MiddlewareCallable) -> None:
        """Register middleware ahead of everything already added."""
        self._middlewares.insert(0, middleware)

    def build(self, endpoint: Endpoint) -> Endpoint:
        """
        Build the middleware chain around the given endpoint.

        Args:
            endpoint: The final request handler

        Returns:
            A callable that runs the complete chain; the endpoint itself when
            no middleware is registered
        """
        handler = endpoint
        for middleware in reversed(self._middlewares):
            handler = self._wrap(middleware, handler)
        return handler

    @staticmethod
    def _wrap(middleware: MiddlewareCallable, next_handler: Endpoint) -> Endpoint:
        async def middleware_handler(request: Request) -> Response:
            return await middleware(request, next_handler)

        return middleware_handler

    def count(self) -> int:
        """Return the number of middleware in the chain."""
        return len(self._middlewares)

    def clear(self) -> None:
        """Remove all middleware from the chain."""
        self._middlewares.clear()

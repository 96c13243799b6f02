"""
ASGI application shell for crashpage.

Application serves one async endpoint behind a middleware chain. With the
debug page enabled (the default) an ExceptionMiddleware is the outermost
layer, so any failure raised by other middleware or the endpoint is answered
with the diagnostic page.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from .middleware import ErrorHandler, ExceptionMiddleware, MiddlewareCallable, MiddlewareChain
from .request import Request
from .response import Response, text_response
from .status import HTTPStatus

Endpoint = Callable[[Request], Awaitable[Response]]


class Application:
    """ASGI application wrapping an endpoint in middleware."""

    def __init__(
        self,
        endpoint: Endpoint,
        debug_page: bool = True,
        error_handler: Optional[ErrorHandler] = None,
        logger: Optional[Union[logging.Logger, logging.LoggerAdapter]] = None,
    ):
        """Initialize the application.

        Args:
            endpoint: Async callable producing the response for a request
            debug_page: Install ExceptionMiddleware as the outermost middleware
            error_handler: Passed to ExceptionMiddleware
            logger: Passed to ExceptionMiddleware
        """
        self.endpoint = endpoint
        self.middleware_chain = MiddlewareChain()
        self._app_with_middleware: Optional[Endpoint] = None
        self._middleware_built = False

        self._startup_handlers: List[Callable[[], Awaitable[None]]] = []
        self._shutdown_handlers: List[Callable[[], Awaitable[None]]] = []

        if debug_page:
            self.middleware_chain.add(
                ExceptionMiddleware(error_handler=error_handler, logger=logger)
            )

    def add_middleware(self, middleware: MiddlewareCallable) -> None:
        """
        Add middleware inside the ones already registered.

        Raises:
            RuntimeError: If middleware is added after application startup
        """
        if self._middleware_built:
            raise RuntimeError(
                "Cannot add middleware after application startup. Add all middleware before starting the server."
            )
        self.middleware_chain.add(middleware)

    def middleware(self):
        """
        Decorator for registering middleware.

        Usage:
            @app.middleware()
            async def timing(request, call_next):
                response = await call_next(request)
                response.set_header("X-Served-By", "crashpage")
                return response
        """

        def decorator(func: MiddlewareCallable) -> MiddlewareCallable:
            self.add_middleware(func)
            return func

        return decorator

    def on_event(self, event_type: str):
        """Decorator registering an async startup or shutdown handler."""

        def decorator(
            func: Callable[[], Awaitable[None]],
        ) -> Callable[[], Awaitable[None]]:
            if event_type == "startup":
                self._startup_handlers.append(func)
            elif event_type == "shutdown":
                self._shutdown_handlers.append(func)
            else:
                raise ValueError(
                    f"Invalid event type: {event_type}. Must be 'startup' or 'shutdown'"
                )
            return func

        return decorator

    def build(self) -> Endpoint:
        """Build the middleware chain; later calls return the same handler."""
        if not self._middleware_built:
            self._app_with_middleware = self.middleware_chain.build(self.endpoint)
            self._middleware_built = True
        return self._app_with_middleware  # type: ignore[return-value]

    async def __call__(self, scope: Dict[str, Any], receive: Callable, send: Callable):
        """
        ASGI application entrypoint.

        Args:
            scope: Connection scope information
            receive: Callable to receive messages from the client
            send: Callable to send messages to the client
        """
        if scope["type"] == "http":
            await self._handle_http(scope, receive, send)
        elif scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
        else:
            await send({"type": "websocket.close", "code": 1000})

    async def _handle_lifespan(self, receive: Callable, send: Callable):
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                try:
                    self.build()
                    for handler in self._startup_handlers:
                        await handler()
                except Exception as e:
                    await send({"type": "lifespan.startup.failed", "message": str(e)})
                else:
                    await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                try:
                    for handler in self._shutdown_handlers:
                        await handler()
                except Exception as e:
                    await send({"type": "lifespan.shutdown.failed", "message": str(e)})
                else:
                    await send({"type": "lifespan.shutdown.complete"})
                return

    async def _handle_http(self, scope: Dict[str, Any], receive: Callable, send: Callable):
        handler = self.build()
        try:
            request = await Request.from_asgi(scope, receive)
            response = await handler(request)
        except Exception as e:
            # Body loading failed, or the debug page is disabled
            response = text_response(
                f"Internal Server Error: {e}",
                status_code=HTTPStatus.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        await self._send_response(send, response.to_asgi_response())

    async def _send_response(self, send: Callable, asgi_response: Dict[str, Any]):
        await send(
            {
                "type": "http.response.start",
                "status": asgi_response["status"],
                "headers": asgi_response["headers"],
            }
        )
        await send(
            {
                "type": "http.response.body",
                "body": asgi_response["body"],
                "more_body": False,
            }
        )

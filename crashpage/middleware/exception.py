"""
Exception handling middleware for crashpage.

Captures unhandled exceptions raised by downstream middleware or endpoints and
converts them into an HTML error page showing the message, the throw site and
the call stack. An optional error handler may supply its own response instead:

    async def handler(failure: Failure) -> Optional[Response]:
        if failure.code == 404:
            return html_response("<h1>Nothing here</h1>", status_code=404)
        return None  # fall back to the built-in page

    app.add_middleware(ExceptionMiddleware(error_handler=handler))
"""

from __future__ import annotations

import inspect
import logging
from typing import Awaitable, Callable, Optional, Protocol, Union, TYPE_CHECKING

from ..failure import Failure
from ..page import render_page
from ..response import (
    Response,
    ResponseFactory,
    ResponseFactoryProtocol,
    StreamFactory,
    StreamFactoryProtocol,
)
from ..result import Ok, capture
from ..status import resolve_status

if TYPE_CHECKING:  # pragma: no cover - only for type hints
    from ..request import Request

CONTENT_TYPE = "text/html; charset=utf-8"
CACHE_CONTROL = "no-cache"


class ErrorHandler(Protocol):
    """Returns a response to replace the error page, or None to keep it."""

    def __call__(
        self, failure: Failure
    ) -> Union[Optional[Response], Awaitable[Optional[Response]]]:
        ...


class ExceptionMiddleware:
    """Middleware that converts unhandled exceptions to HTML error pages.

    Args:
            error_handler: Called with the Failure first; a non-None return value is sent as is.
            response_factory: Creates the error response.
            stream_factory: Wraps the rendered page as the response body.
            logger: When given, caught failures are logged at ERROR level.
            guard_handler: If True (default), an exception raised by error_handler falls
                back to the built-in page for the original failure instead of propagating.
    """

    def __init__(
        self,
        error_handler: Optional[ErrorHandler] = None,
        response_factory: Optional[ResponseFactoryProtocol] = None,
        stream_factory: Optional[StreamFactoryProtocol] = None,
        logger: Optional[Union[logging.Logger, logging.LoggerAdapter]] = None,
        guard_handler: bool = True,
    ):
        if error_handler is not None and not callable(error_handler):
            raise TypeError("error_handler must be callable")
        self.error_handler = error_handler
        self.response_factory = response_factory or ResponseFactory()
        self.stream_factory = stream_factory or StreamFactory()
        self.logger = logger
        self.guard_handler = guard_handler

    async def __call__(
        self, request: "Request", call_next: Callable[["Request"], Awaitable[Response]]
    ) -> Response:
        result = await capture(call_next, request)
        if isinstance(result, Ok):
            return result.value
        return await self.handle_failure(result.failure, request)

    process = __call__

    async def handle_failure(
        self, failure: Failure, request: Optional["Request"] = None
    ) -> Response:
        """Turn a failure into a response: the handler's override or the error page."""
        if self.logger is not None:
            self._log_failure(failure, request)

        if self.error_handler is not None:
            override = await self._call_error_handler(failure)
            if override is not None:
                return override

        return self.render(failure)

    def render(self, failure: Failure) -> Response:
        """Build the built-in error page response."""
        outcome = resolve_status(failure)
        page = render_page(failure, outcome)
        return (
            self.response_factory.create_response(
                outcome.status_code, outcome.reason_phrase
            )
            .with_added_header("Content-Type", CONTENT_TYPE)
            .with_added_header("Cache-Control", CACHE_CONTROL)
            .with_body(self.stream_factory.create_stream(page.html))
        )

    async def _call_error_handler(self, failure: Failure) -> Optional[Response]:
        try:
            result = self.error_handler(failure)
            if inspect.isawaitable(result):
                result = await result
        except Exception:
            if not self.guard_handler:
                raise
            if self.logger is not None:
                self.logger.exception(
                    "error_handler raised while handling %s", failure.type_name
                )
            return None
        return result

    def _log_failure(self, failure: Failure, request: Optional["Request"]) -> None:
        extra = {"failure_type": failure.type_name}
        path = getattr(request, "path", None)
        if path is not None:
            extra["request_path"] = path
        exc = failure.exception
        self.logger.error(
            "Unhandled %s: %s",
            failure.type_name,
            failure.message,
            exc_info=(type(exc), exc, exc.__traceback__) if exc is not None else None,
            extra=extra,
        )


__all__ = ["ExceptionMiddleware", "ErrorHandler"]

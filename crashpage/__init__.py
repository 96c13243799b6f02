from .app import Application
from .failure import Failure, Frame
from .middleware import ExceptionMiddleware, ErrorHandler, MiddlewareChain
from .page import RenderedPage, render_page
from .request import Request
from .response import (
    Response,
    ResponseFactory,
    Stream,
    StreamFactory,
    html_response,
    json_response,
    text_response,
)
from .result import Err, Ok, capture
from .status import HTTPStatus, PHRASES, StatusOutcome, resolve_status

__version__ = "0.1.0"
__all__ = [
    "Application",
    "ExceptionMiddleware",
    "ErrorHandler",
    "MiddlewareChain",
    "Failure",
    "Frame",
    "RenderedPage",
    "render_page",
    "Request",
    "Response",
    "ResponseFactory",
    "Stream",
    "StreamFactory",
    "html_response",
    "json_response",
    "text_response",
    "Ok",
    "Err",
    "capture",
    "HTTPStatus",
    "PHRASES",
    "StatusOutcome",
    "resolve_status",
]

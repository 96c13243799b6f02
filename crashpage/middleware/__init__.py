"""
crashpage middleware package.

The exception middleware plus the chain used to stack middleware in front of
an endpoint.
"""

from .middleware_chain import MiddlewareChain, MiddlewareCallable
from .exception import ExceptionMiddleware, ErrorHandler

__all__ = ["MiddlewareChain", "MiddlewareCallable", "ExceptionMiddleware", "ErrorHandler"]

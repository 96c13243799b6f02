"""
Explicit success / failure values for downstream calls.

`capture` runs the rest of the middleware chain and turns its outcome into an
`Ok` holding the response or an `Err` holding the Failure snapshot, so the
exception middleware can translate failures in one place.
"""

from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, TypeVar, Union, TYPE_CHECKING

from .failure import Failure

if TYPE_CHECKING:  # pragma: no cover - only for type hints
    from .request import Request
    from .response import Response

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    failure: Failure

    @property
    def ok(self) -> bool:
        return False


Result = Union[Ok[T], Err]


async def capture(
    call_next: Callable[["Request"], Awaitable["Response"]], request: "Request"
) -> "Result[Response]":
    """
    Await `call_next(request)` and report how it went.

    Only `Exception` subclasses are captured; cancellation and interpreter
    exit propagate.
    """
    try:
        response = await call_next(request)
    except Exception as exc:  # noqa: BLE001 - every failure becomes an Err
        return Err(Failure.from_exception(exc))
    return Ok(response)


__all__ = ["Ok", "Err", "Result", "capture"]

"""
Failure records for crashpage.

A Failure is an immutable snapshot of an exception taken at the moment it is
caught: type name, message, numeric code, throw site and the call stack as
structured frames. Rendering works from the snapshot only, so a badly behaved
exception object cannot break the error page.
"""

from __future__ import annotations

import builtins
import traceback
from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class Frame:
    """One call site in a stack trace."""

    index: int
    path: str
    line: int
    call: str

    def __str__(self) -> str:
        return f"#{self.index} {self.path}({self.line}): {self.call}"


@dataclass(frozen=True)
class Failure:
    """
    A caught failure, ready to be rendered.

    Attributes:
        type_name: Exception class name (module qualified unless builtin)
        message: Human readable message
        code: Numeric code carried by the exception, 0 when absent
        file: Path of the file the exception was raised in
        line: Line number the exception was raised on
        frames: Call stack below the throw site, innermost caller first
        trace: Pre-formatted trace text, only used when no frames were captured
        exception: The original exception object, if any
    """

    type_name: str
    message: str = ""
    code: int = 0
    file: str = ""
    line: int = 0
    frames: Tuple[Frame, ...] = ()
    trace: Optional[str] = None
    exception: Optional[BaseException] = None

    @classmethod
    def from_exception(cls, exc: BaseException) -> "Failure":
        """
        Snapshot an exception.

        Args:
            exc: The caught exception

        Returns:
            Failure describing the exception and where it was raised
        """
        entries = traceback.extract_tb(exc.__traceback__)
        if entries:
            origin = entries[-1]
            file, line = origin.filename, origin.lineno or 0
        else:
            file, line = "", 0

        callers = list(reversed(entries[:-1]))
        frames = tuple(
            Frame(
                index=index,
                path=entry.filename,
                line=entry.lineno or 0,
                call=entry.line or f"{entry.name}()",
            )
            for index, entry in enumerate(callers)
        )

        return cls(
            type_name=_type_name(exc),
            message=_safe_str(exc),
            code=_failure_code(exc),
            file=file,
            line=line,
            frames=frames,
            exception=exc,
        )

    @property
    def trace_text(self) -> str:
        """The call stack as text, one `#<index> <path>(<line>): <call>` line per frame."""
        if self.trace is not None:
            return self.trace
        return format_trace(self.frames)


def main_line(depth: int) -> str:
    """The closing line of a trace, below the last frame."""
    return f"#{depth} {{main}}"


def format_trace(frames: Tuple[Frame, ...]) -> str:
    lines = [str(frame) for frame in frames]
    lines.append(main_line(len(frames)))
    return "\n".join(lines)


def _type_name(exc: BaseException) -> str:
    cls = type(exc)
    if getattr(builtins, cls.__name__, None) is cls:
        return cls.__qualname__
    return f"{cls.__module__}.{cls.__qualname__}"


def _safe_str(exc: BaseException) -> str:
    try:
        return str(exc)
    except Exception:
        return f"<unprintable {type(exc).__name__} object>"


def _failure_code(exc: BaseException) -> int:
    for attr in ("code", "status_code"):
        try:
            value = getattr(exc, attr, None)
        except Exception:
            continue
        if isinstance(value, int) and not isinstance(value, bool):
            return int(value)
    return 0


__all__ = ["Frame", "Failure", "format_trace", "main_line"]

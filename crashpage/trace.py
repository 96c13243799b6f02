"""
Stack trace markup for the crashpage error page.

Frames are rendered as `<div class="trace">` blocks exposing the frame index,
file path, line number and call expression. Traces that only exist as text
(`#<index> <path>(<line>): <call>` per line) are parsed line by line; lines
that don't look like a frame are kept as they are.
"""

import html
import re
from typing import Iterable, Union

from .failure import Frame

_LINE_BREAK = re.compile(r"\r\n|\r|\n")

FRAME_PATTERN = re.compile(
    r"^#(?P<num>\d+) (?P<path>[^(]+)\((?P<line>\d+)\): (?P<call>[^\n\r]*)$"
)

_FRAME_TEMPLATE = """<div class="{css_class}">
    <div class="num">{num}</div>
    <div class="path">{path}</div>
    <div class="line">{line}</div>
    <div class="call"><span class='call-line'>{line}</span>{call}</div>
</div>"""


def frame_block(
    num: Union[int, str],
    path: str,
    line: Union[int, str],
    call: str,
    css_class: str = "trace",
) -> str:
    """
    Build the markup for one frame.

    All values are inserted as given; callers escape them first.
    """
    return _FRAME_TEMPLATE.format(
        css_class=css_class, num=num, path=path, line=line, call=call
    )


def render_frame(frame: Frame) -> str:
    """Render a structured frame record."""
    return frame_block(
        frame.index,
        html.escape(frame.path),
        frame.line,
        html.escape(frame.call),
    )


def render_frames(frames: Iterable[Frame]) -> str:
    """Render frame records in order."""
    return "\n".join(render_frame(frame) for frame in frames)


def _render_match(match: re.Match) -> str:
    return frame_block(
        match.group("num"),
        match.group("path"),
        match.group("line"),
        match.group("call"),
    )


def render_trace_line(line: str) -> str:
    """Render one line of trace text; non-frame lines come back escaped but otherwise untouched."""
    escaped = html.escape(line)
    match = FRAME_PATTERN.match(escaped)
    if match is None:
        return escaped
    return _render_match(match)


def render_trace_text(text: str) -> str:
    """Render trace text, one frame per line."""
    if not text:
        return ""
    return "\n".join(render_trace_line(line) for line in _LINE_BREAK.split(text))


__all__ = [
    "FRAME_PATTERN",
    "frame_block",
    "render_frame",
    "render_frames",
    "render_trace_line",
    "render_trace_text",
]

"""
Diagnostic error page for crashpage.

Builds a single self-contained HTML document for a Failure: the message as
title and headline, the resolved HTTP status, the throw site, and the call
stack. Styles are inlined so the page renders without any other request.

Escaping:
    message           html-escaped once (title, headline)
    quoted message    JSON-encoded, then html-escaped once (synthetic throw line)
    type name, paths  html-escaped once
    call expressions  html-escaped once
    trace text        html-escaped once per line, before frame parsing
"""

import html
import json
from typing import NamedTuple, Optional

from .failure import Failure, main_line
from .status import StatusOutcome, resolve_status
from .trace import frame_block, render_frame, render_trace_text

FIRST_FRAME_MARKER = "⚠️"

_STYLESHEET = """
html, body { font-family: sans-serif; margin: 0; padding: 0; }
.code-thing {
    position: absolute; top: 0.5em; right: 1.3em;
    font-size: 4em; color: #fff; font-style: italic;
}
.code-thing::before { content: "code"; font-size: 0.2em; }
.phrase-thing {
    position: absolute; top: 0.5em; left: 1em;
    font-size: 2em; color: #fff; font-style: italic;
}
h1 { background-color: #aa2244; padding: 2.5em 1em 1em 1em; margin: 0; color: white; }
h1 small {
    position: absolute; margin-top: -1.3em; font-size: 0.5em;
    font-weight: normal; color: rgba(255, 255, 255, 0.8);
}
h1 small strong { color: #fff; }
p { background-color: #ccc; margin: 0; padding: 1em 2em; }
.stackTrace { margin: 0.4em 2em; }
.trace {
    border: 1px solid #eee; border-radius: 0.5em; background-color: #f8f8f8;
    margin: 1em 0 0 0; padding: 0.5em 0 0.5em 5em; line-height: 1em;
}
.trace:hover { background-color: #f0f0f0; }
.trace * { margin: 0; padding: 0; }
.trace .num {
    position: absolute; margin-top: 0.5em; margin-left: -2.2em; width: 1.5em;
    font-size: 2em; color: #ccc; text-align: right;
}
.trace .path, .trace .line { display: inline; font-family: monospace; font-weight: bold; }
.trace .path::before, .trace .line::before {
    font-family: sans-serif; color: #aa2244; font-size: 0.8em; font-weight: normal;
}
.trace .path::before { content: "file: "; }
.trace .line::before { content: "line: "; }
.trace .call {
    margin: 0.5em 0.3em 0.5em 0; padding: 0.4em; border: 1px dashed #cca;
    font-family: monospace; background-color: #eee;
}
.trace:hover .call { background-color: #ffffff; }
.trace .call .call-line { color: rgba(0, 0, 0, 0.6); font-weight: bold; padding-right: 1em; }
.trace.first { background-color: #eee; border: 2px solid #aaa; }
"""

_DOCUMENT_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{title}</title>
<style>{stylesheet}</style>
</head>
<body>
<div class="code-thing">{code}</div>
<div class="phrase-thing">{status_code} {reason_phrase}</div>
<h1><small><strong>{type_name}</strong> thrown in <strong>{file}</strong> on line <strong>{line}</strong></small>{headline}</h1>
<p>An exception occurred in file <strong>{file}</strong> on line <strong>{line}</strong></p>
<div class="stackTrace">
{first_frame}
{trace}
</div>
</body>
</html>
"""


class RenderedPage(NamedTuple):
    html: str
    outcome: StatusOutcome


def quote_message(message: str) -> str:
    """Message as a string literal, safe to place in HTML text."""
    return html.escape(json.dumps(message))


def throw_expression(failure: Failure) -> str:
    """
    The synthetic statement shown for the throw site, already escaped.

    Example:
        throw new PermissionError(&quot;Forbidden&quot;, 403);
    """
    arguments = quote_message(failure.message)
    if failure.code != 0:
        arguments += f", {failure.code}"
    return f"throw new {html.escape(failure.type_name)}({arguments});"


def render_first_frame(failure: Failure) -> str:
    return frame_block(
        FIRST_FRAME_MARKER,
        html.escape(failure.file),
        failure.line,
        f"<em>{throw_expression(failure)}</em>",
        css_class="trace first",
    )


def render_trace(failure: Failure) -> str:
    """Structured frames when captured, otherwise the pre-formatted trace text."""
    if failure.frames or failure.trace is None:
        blocks = [render_frame(frame) for frame in failure.frames]
        blocks.append(main_line(len(failure.frames)))
        return "\n".join(blocks)
    return render_trace_text(failure.trace)


def render_page(
    failure: Failure, outcome: Optional[StatusOutcome] = None
) -> RenderedPage:
    """
    Render the diagnostic page for a failure.

    Args:
        failure: The failure to describe
        outcome: Pre-resolved status; resolved from the failure code when omitted

    Returns:
        RenderedPage with the HTML document and the status it was rendered for
    """
    if outcome is None:
        outcome = resolve_status(failure)

    message = html.escape(failure.message)
    file = html.escape(failure.file)

    document = _DOCUMENT_TEMPLATE.format(
        title=message,
        stylesheet=_STYLESHEET,
        code=failure.code,
        status_code=outcome.status_code,
        reason_phrase=html.escape(outcome.reason_phrase),
        type_name=html.escape(failure.type_name),
        file=file,
        line=failure.line,
        headline=message,
        first_frame=render_first_frame(failure),
        trace=render_trace(failure),
    )
    return RenderedPage(document, outcome)


__all__ = [
    "RenderedPage",
    "FIRST_FRAME_MARKER",
    "quote_message",
    "throw_expression",
    "render_first_frame",
    "render_trace",
    "render_page",
]

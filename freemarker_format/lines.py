"""Logical line construction: macro call accumulation and width splitting."""

from __future__ import annotations

import logging

from .classifier import find_tag_end
from .config import FormatConfig
from .constants import MACRO_OPENER_PATTERN, TAG_LIKE_PATTERN
from .models import AccumulatorState, BuilderContext

logger = logging.getLogger(__name__)


def _starts_accumulation(line: str) -> bool:
    """Return True when a macro call's opening tag continues on the next line."""
    match = MACRO_OPENER_PATTERN.match(line)
    return match is not None and find_tag_end(line, match.end()) is None


def _flush(ctx: BuilderContext) -> list[str]:
    """Return the collected lines unchanged and reset the accumulator."""
    lines = ctx.pending
    ctx.state = AccumulatorState.IDLE
    ctx.pending = []
    return lines


def accumulate(ctx: BuilderContext, line: str) -> list[str]:
    """Feed one stripped physical line through the macro call accumulator.

    A macro call whose opening tag is not closed on its first line is
    collected until a line ending with ``>`` arrives. A call closed on its
    line, even with text after it, passes straight through. Self-closing calls collapse into one line;
    other calls keep their original line structure.

    Args:
        ctx: Accumulator context, updated in place.
        line: Stripped physical line.

    Returns:
        list[str]: Logical lines ready for width splitting; empty while the
            accumulator is still collecting.

    Examples:
        ctx = BuilderContext()
        accumulate(ctx, "<@box")  # []
        accumulate(ctx, 'title="x"')  # []
        accumulate(ctx, "/>")  # ['<@box title="x" />']
    """
    if ctx.state is AccumulatorState.IDLE:
        if _starts_accumulation(line):
            ctx.state = AccumulatorState.ACCUMULATING
            ctx.pending = [line]
            return []
        return [line]

    if not line:
        logger.debug("Blank line inside macro call %r; keeping lines as written", ctx.pending[0])
        return [*_flush(ctx), line]

    ctx.pending.append(line)
    if not line.endswith(">"):
        return []

    joined = " ".join(ctx.pending)
    lines = _flush(ctx)
    if joined.endswith("/>"):
        return [joined]
    return lines


def _next_starts_tag(text: str, position: int) -> bool:
    """Return True when the next non-whitespace character opens a tag."""
    while position < len(text) and text[position].isspace():
        position += 1
    return bool(TAG_LIKE_PATTERN.match(text, position))


def _last_tag_start(text: str) -> int:
    """Index of the last tag-like construct in `text`, or -1 when there is none."""
    last = -1
    for match in TAG_LIKE_PATTERN.finditer(text):
        last = match.start()
    return last


def find_breakpoint(
    text: str, width: int, start: int = 0, last_tag: int | None = None
) -> int | None:
    """Find where to split `text[start:]` so the head fits within `width`.

    Whitespace is a candidate only outside tags, quoted attribute values and
    ``${...}`` interpolations. The boundary between a tag's ``>`` and the
    next tag's ``<`` is always preferred when it lies within `width`.

    Args:
        text: Stripped logical line.
        width: Maximum number of characters for the head.
        start: Index where the remaining, not yet emitted text begins.
        last_tag: Start of the last tag-like construct in `text` (-1 for
            none); computed when omitted.

    Returns:
        int | None: Index into `text` at which to split, or None when no safe
            breakpoint exists.

    Examples:
        find_breakpoint("<b>x</b><i>y</i>", 80)  # 8
        find_breakpoint("<b>x</b><i>y</i>", 80, start=8)  # None
        find_breakpoint("plain text", 4)  # None
    """
    if last_tag is None:
        last_tag = _last_tag_start(text)
    limit = start + width
    allow_whitespace = len(text) > limit and last_tag >= start
    last_space: int | None = None
    in_tag = False
    quote: str | None = None
    expression_depth = 0

    i = start
    while i < len(text):
        character = text[i]

        if quote is not None:
            if character == "\\":
                i += 2
                continue
            if character == quote:
                quote = None
        elif expression_depth:
            if character == "{":
                expression_depth += 1
            elif character == "}":
                expression_depth -= 1
        elif text.startswith("${", i):
            expression_depth = 1
            i += 2
            continue
        elif in_tag:
            if character in "\"'":
                quote = character
            elif character == ">":
                in_tag = False
                boundary = i + 1
                if boundary < len(text) and _next_starts_tag(text, boundary):
                    if boundary <= limit or last_space is None:
                        return boundary
                    return last_space
        elif character == "<" and TAG_LIKE_PATTERN.match(text, i):
            in_tag = True
        elif character.isspace() and allow_whitespace:
            if i <= limit:
                last_space = i
            elif last_space is not None:
                return last_space

        i += 1

    return last_space


def split_long_line(line: str, width: int) -> list[str]:
    """Split a logical line that does not fit within `width`.

    Lines without any tag-like construct are never split, and a line with no
    safe breakpoint is returned whole. Once a split happened, every remaining
    boundary between adjacent tags is split as well.

    Args:
        line: Stripped logical line.
        width: Configured print width.

    Returns:
        list[str]: One or more stripped logical lines.

    Examples:
        split_long_line("<p>short</p>", 80)  # ['<p>short</p>']
        split_long_line("<td>a</td><td>b</td>", 12)  # ['<td>a</td>', '<td>b</td>']
    """
    if len(line) <= width:
        return [line]
    last_tag = _last_tag_start(line)
    if last_tag < 0:
        return [line]

    pieces: list[str] = []
    start = 0
    while start < len(line):
        cut = find_breakpoint(line, width, start, last_tag)
        if cut is None:
            break
        pieces.append(line[start:cut].rstrip())
        start = cut
        while start < len(line) and line[start].isspace():
            start += 1
    if start < len(line):
        pieces.append(line[start:])

    if len(pieces) > 1:
        logger.debug("Split %d-character line into %d lines", len(line), len(pieces))
    return pieces


def build_logical_lines(text: str, config: FormatConfig | None = None) -> list[str]:
    """Turn raw template text into the logical lines to indent.

    Args:
        text: Raw template source.
        config: Formatting options; only `print_width` is used.

    Returns:
        list[str]: Stripped logical lines, blank lines included.

    Examples:
        build_logical_lines('<@box\\ntitle="x"\\n/>')  # ['<@box title="x" />']
    """
    config = config or FormatConfig()
    ctx = BuilderContext()
    logical_lines: list[str] = []

    for physical_line in text.splitlines():
        for line in accumulate(ctx, physical_line.strip()):
            logical_lines.extend(split_long_line(line, config.print_width))

    if ctx.state is AccumulatorState.ACCUMULATING:
        logger.debug("Unterminated macro call %r at end of input", ctx.pending[0])
        for line in _flush(ctx):
            logical_lines.extend(split_long_line(line, config.print_width))

    return logical_lines

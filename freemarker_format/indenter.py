"""Indentation state machine for logical lines."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .classifier import classify_line, find_tag_end
from .models import IndentState, SwitchFrame

logger = logging.getLogger(__name__)


def _decrement(value: int, amount: int = 1) -> int:
    return max(value - amount, 0)


def advance(state: IndentState, line: str, unit: str = "  ") -> tuple[IndentState, str]:
    """Render one logical line and compute the state for the next one.

    Closing constructs dedent before the line is rendered; opening constructs
    indent the lines that follow. The first ``<#case>`` of a switch sits one
    level below the switch and every later case or default returns to that
    same level.

    Args:
        state: State left by the previous line.
        line: Logical line; surrounding whitespace is ignored.
        unit: Text emitted per indentation level.

    Returns:
        tuple[IndentState, str]: State for the following line and the
            rendered line. Blank lines render as an empty string and leave the
            state untouched.

    Examples:
        state, rendered = advance(IndentState(), "<ul>")  # rendered == "<ul>"
        state, rendered = advance(state, "<li>a</li>")  # rendered == "  <li>a</li>"
    """
    line = line.strip()
    if not line:
        return state, ""

    role = classify_line(line)
    if role.inline:
        return state, unit * state.depth + line

    directive_depth = state.directive_depth
    json_depth = state.json_depth
    markup_depth = state.markup_depth
    call_depth = state.call_depth
    switch_frames = list(state.switch_frames)
    pending_markup = state.pending_markup

    # Dedent before rendering
    if role.switch_closer and switch_frames:
        if switch_frames.pop().case_seen:
            directive_depth = _decrement(directive_depth)
    if role.ftl_closer:
        directive_depth = _decrement(directive_depth)
    if role.ftl_intermediate:
        directive_depth = _decrement(directive_depth)
    if role.case_like and switch_frames and switch_frames[-1].case_seen:
        directive_depth = _decrement(directive_depth)
    if role.json_closer:
        json_depth = _decrement(json_depth)
    markup_depth = _decrement(markup_depth, role.leading_closers)
    if role.bare_terminator and pending_markup:
        # "/>" ends a multi-line markup tag, not a macro call
        pending_markup -= 1
        markup_depth = _decrement(markup_depth)
    elif role.macro_closer:
        call_depth = _decrement(call_depth)

    rendered = unit * (directive_depth + json_depth + markup_depth + call_depth) + line

    # Indent the following lines
    if role.ftl_opener and not role.self_closing:
        directive_depth += 1
        if role.switch_opener:
            switch_frames.append(SwitchFrame())
    if role.ftl_intermediate:
        directive_depth += 1
    if role.case_like and switch_frames:
        switch_frames[-1] = SwitchFrame(case_seen=True)
        directive_depth += 1
    if role.json_opener:
        json_depth += 1
    if role.html_opener:
        markup_depth += 1
        if role.open_tag_unterminated:
            pending_markup += 1
    elif pending_markup and not role.bare_terminator:
        tag_end = find_tag_end(line)
        if tag_end is not None:
            pending_markup -= 1
            if line[tag_end - 1 : tag_end + 1] == "/>":
                markup_depth = _decrement(markup_depth)
    if role.macro_opener:
        call_depth += 1
    markup_depth = _decrement(markup_depth, role.trailing_closers)

    next_state = IndentState(
        directive_depth=directive_depth,
        json_depth=json_depth,
        markup_depth=markup_depth,
        call_depth=call_depth,
        switch_frames=tuple(switch_frames),
        pending_markup=pending_markup,
    )
    return next_state, rendered


def render_lines(lines: Iterable[str], unit: str = "  ") -> list[str]:
    """Indent a sequence of logical lines.

    Args:
        lines: Logical lines in document order.
        unit: Text emitted per indentation level.

    Returns:
        list[str]: Rendered lines, one per logical line.

    Examples:
        render_lines(["<ul>", "<li>a</li>", "</ul>"])  # ['<ul>', '  <li>a</li>', '</ul>']
    """
    state = IndentState()
    rendered: list[str] = []
    for line in lines:
        state, text = advance(state, line, unit)
        rendered.append(text)

    if not state.is_balanced:
        logger.debug("Document ended with unbalanced nesting: %s", state)
    return rendered

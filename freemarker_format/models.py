"""Data models for freemarker-format."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto


@dataclass(frozen=True)
class LineRole:
    """Structural facets recognized on a single logical line.

    Facets are independent; several may hold for the same line. When
    `inline` is set the construct opens and closes on the line and the indent
    state machine ignores every other facet.

    Attributes:
        ftl_opener: Line opens a directive block (``<#if>``, ``<#list>``, ...).
        ftl_closer: Line is a closing directive (``</#...>``).
        ftl_intermediate: Line is an alternate branch (``<#else>``, ``<#recover>``).
        case_like: Line is a ``<#case>`` or ``<#default>``.
        switch_opener: Line opens a ``<#switch>``.
        switch_closer: Line closes a ``<#switch>``.
        macro_opener: Line opens a macro call block (``<@name>``).
        macro_closer: Line closes a macro call (``</@name>`` or a bare ``/>``).
        html_opener: Line opens a markup element.
        self_closing: Line ends with ``/>``.
        json_opener: Line ends with ``{`` or ``[`` (one level, however many
            brackets end the line).
        json_closer: Line starts with ``}`` or ``]``.
        inline: The whole construct opens and closes on this line.
        bare_terminator: Line consists of ``/>`` only.
        open_tag_unterminated: The opening tag's ``>`` is not on this line.
        leading_closers: Markup closing tags at the very start of the line.
        trailing_closers: Unbalanced markup closing tags after leading content.
    """

    ftl_opener: bool = False
    ftl_closer: bool = False
    ftl_intermediate: bool = False
    case_like: bool = False
    switch_opener: bool = False
    switch_closer: bool = False
    macro_opener: bool = False
    macro_closer: bool = False
    html_opener: bool = False
    self_closing: bool = False
    json_opener: bool = False
    json_closer: bool = False
    inline: bool = False
    bare_terminator: bool = False
    open_tag_unterminated: bool = False
    leading_closers: int = 0
    trailing_closers: int = 0


@dataclass(frozen=True)
class SwitchFrame:
    """An open ``<#switch>`` and whether a case line was emitted inside it."""

    case_seen: bool = False


@dataclass(frozen=True)
class IndentState:
    """Nesting depth per construct family, threaded through the line fold.

    Attributes:
        directive_depth: Open directive blocks.
        json_depth: Open JSON-like braces and brackets.
        markup_depth: Open markup elements.
        call_depth: Open macro call blocks.
        switch_frames: One frame per open ``<#switch>``, innermost last.
        pending_markup: Opening tags whose ``>`` has not been seen yet.
    """

    directive_depth: int = 0
    json_depth: int = 0
    markup_depth: int = 0
    call_depth: int = 0
    switch_frames: tuple[SwitchFrame, ...] = ()
    pending_markup: int = 0

    @property
    def depth(self) -> int:
        """Total indentation depth in units."""
        return self.directive_depth + self.json_depth + self.markup_depth + self.call_depth

    @property
    def is_balanced(self) -> bool:
        return self.depth == 0 and not self.switch_frames and self.pending_markup == 0


class AccumulatorState(Enum):
    """States of the multi-line macro call accumulator.

    Attributes:
        IDLE: Physical lines pass straight through.
        ACCUMULATING: Collecting the lines of a macro call until its ``>``.
    """

    IDLE = auto()
    ACCUMULATING = auto()


@dataclass
class BuilderContext:
    """Encapsulate accumulator state while walking physical lines.

    Attributes:
        state: Current accumulator state.
        pending: Stripped physical lines collected since accumulation started.
    """

    state: AccumulatorState = AccumulatorState.IDLE
    pending: list[str] = field(default_factory=list)

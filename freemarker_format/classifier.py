"""Line classification for FreeMarker templates.

Every predicate takes a single stripped logical line and answers one
structural question about it. None of them look at neighbouring lines; the
indent state machine combines their answers.
"""

from __future__ import annotations

from collections import Counter

from .constants import (
    BARE_TERMINATOR,
    FTL_BINDING_PATTERN,
    FTL_CASE_PATTERN,
    FTL_CLOSER_PATTERN,
    FTL_INLINE_PATTERN,
    FTL_INTERMEDIATE_PATTERN,
    FTL_OPENER_PATTERN,
    FTL_SWITCH_CLOSER_PATTERN,
    FTL_SWITCH_OPENER_PATTERN,
    HTML_CLOSE_TAG_PATTERN,
    HTML_INLINE_PATTERN,
    HTML_LEADING_CLOSERS_PATTERN,
    HTML_OPENER_PATTERN,
    HTML_TAG_TOKEN_PATTERN,
    INLINE_FLOW_ELEMENTS,
    MACRO_CLOSER_PATTERN,
    MACRO_INLINE_PATTERN,
    MACRO_OPENER_PATTERN,
    MACRO_SELF_CLOSING_PATTERN,
    VOID_ELEMENTS,
)
from .models import LineRole


def find_tag_end(line: str, start: int = 0) -> int | None:
    """Locate the first ``>`` at or after `start` that is not inside quotes.

    Args:
        line: Text to scan.
        start: Zero-based index where scanning begins.

    Returns:
        int | None: Index of the ``>``, or None when the tag is not
            terminated on this line.

    Examples:
        find_tag_end('<a title="x>y">', 2)  # 14
        find_tag_end('<div class="a"')  # None
    """
    quote: str | None = None
    i = start
    while i < len(line):
        character = line[i]
        if quote is not None:
            if character == "\\":
                i += 2
                continue
            if character == quote:
                quote = None
        elif character in "\"'":
            quote = character
        elif character == ">":
            return i
        i += 1
    return None


def is_self_closing(line: str) -> bool:
    return line.endswith("/>")


def is_ftl_opener(line: str) -> bool:
    """Return True when the line opens a directive block.

    Binding directives (``<#assign>``, ``<#local>``, ``<#global>``) only open
    a block in their capturing form, which has no ``=``.
    """
    if FTL_OPENER_PATTERN.match(line):
        return True
    return bool(FTL_BINDING_PATTERN.match(line)) and "=" not in line


def is_ftl_closer(line: str) -> bool:
    return bool(FTL_CLOSER_PATTERN.match(line))


def is_ftl_intermediate(line: str) -> bool:
    return bool(FTL_INTERMEDIATE_PATTERN.match(line))


def is_case_like(line: str) -> bool:
    return bool(FTL_CASE_PATTERN.match(line))


def is_switch_opener(line: str) -> bool:
    return bool(FTL_SWITCH_OPENER_PATTERN.match(line))


def is_switch_closer(line: str) -> bool:
    return bool(FTL_SWITCH_CLOSER_PATTERN.match(line))


def is_macro_opener(line: str) -> bool:
    """Return True when the line opens a macro call with a body."""
    if not MACRO_OPENER_PATTERN.match(line):
        return False
    return not is_self_closing(line) and "</@" not in line


def is_macro_closer(line: str) -> bool:
    return bool(MACRO_CLOSER_PATTERN.match(line)) or line == BARE_TERMINATOR


def is_html_opener(line: str) -> bool:
    """Return True when the line opens a markup element.

    Closing tags, directives, macro calls, comments, processing instructions,
    self-closing and void elements never open. Text-level elements such as
    ``span`` do not open when their closing tag is on the same line.

    Examples:
        is_html_opener('<div class="card">')  # True
        is_html_opener("<br>")  # False
        is_html_opener("<span>a</span> and more")  # False
    """
    match = HTML_OPENER_PATTERN.match(line)
    if not match:
        return False

    tag_end = find_tag_end(line, match.end())
    if tag_end is not None and line[tag_end - 1] == "/":
        return False

    name = match.group("name")
    if name.lower() in VOID_ELEMENTS:
        return False
    if name.lower() in INLINE_FLOW_ELEMENTS and f"</{name}" in line:
        return False
    return True


def is_open_tag_unterminated(line: str) -> bool:
    """Return True when the line's opening tag continues on the next line."""
    match = HTML_OPENER_PATTERN.match(line)
    if not match:
        return False
    return find_tag_end(line, match.end()) is None


def is_json_opener(line: str) -> bool:
    """Return True when the line ends with ``{`` or ``[`` that does not start a ``${``.

    The facet opens a single level; ``[[`` at the end of a line counts once
    and its closing line ``]]`` closes once.
    """
    stripped = line.rstrip()
    return stripped.endswith(("{", "[")) and not stripped.endswith("${")


def is_json_closer(line: str) -> bool:
    return line.startswith(("}", "]"))


def is_inline(line: str) -> bool:
    """Return True when a construct opens and closes on the same line.

    Examples:
        is_inline("<#if user??>Hello</#if>")  # True
        is_inline('<@icon name="x" />')  # True
        is_inline("<li>item</li>")  # True
        is_inline("<ul>")  # False
    """
    return bool(
        FTL_INLINE_PATTERN.match(line)
        or MACRO_INLINE_PATTERN.match(line)
        or MACRO_SELF_CLOSING_PATTERN.match(line)
        or HTML_INLINE_PATTERN.match(line)
    )


def count_leading_closers(line: str) -> int:
    """Count markup closing tags at the very start of the line.

    Examples:
        count_leading_closers("</td></tr>")  # 2
        count_leading_closers("text</p>")  # 0
    """
    match = HTML_LEADING_CLOSERS_PATTERN.match(line)
    if not match:
        return 0
    return len(HTML_CLOSE_TAG_PATTERN.findall(match.group(0)))


def count_trailing_closers(line: str) -> int:
    """Count closing tags after leading content that close an earlier line.

    Closing tags balanced by an opening tag of the same name earlier on the
    line are not counted.

    Examples:
        count_trailing_closers("text</div>")  # 1
        count_trailing_closers("<p>Hello <b>you</b>")  # 0
        count_trailing_closers("</li>")  # 0
    """
    leading = HTML_LEADING_CLOSERS_PATTERN.match(line)
    rest = line[leading.end() :] if leading else line

    open_counts: Counter[str] = Counter()
    unmatched = 0
    for match in HTML_TAG_TOKEN_PATTERN.finditer(rest):
        name = match.group("name")
        if match.group("slash"):
            if open_counts[name]:
                open_counts[name] -= 1
            else:
                unmatched += 1
            continue

        if name.lower() in VOID_ELEMENTS:
            continue
        tag_end = find_tag_end(rest, match.end())
        if tag_end is not None and rest[tag_end - 1] == "/":
            continue
        open_counts[name] += 1

    return unmatched


def classify_line(line: str) -> LineRole:
    """Compute the structural facets of a logical line.

    Args:
        line: Logical line; surrounding whitespace is ignored.

    Returns:
        LineRole: Facets recognized on the line.

    Examples:
        classify_line("<#switch kind>").switch_opener  # True
        classify_line("<li>a</li>").inline  # True
    """
    line = line.strip()
    html_opener = is_html_opener(line)
    return LineRole(
        ftl_opener=is_ftl_opener(line),
        ftl_closer=is_ftl_closer(line),
        ftl_intermediate=is_ftl_intermediate(line),
        case_like=is_case_like(line),
        switch_opener=is_switch_opener(line),
        switch_closer=is_switch_closer(line),
        macro_opener=is_macro_opener(line),
        macro_closer=is_macro_closer(line),
        html_opener=html_opener,
        self_closing=is_self_closing(line),
        json_opener=is_json_opener(line),
        json_closer=is_json_closer(line),
        inline=is_inline(line),
        bare_terminator=line == BARE_TERMINATOR,
        open_tag_unterminated=html_opener and is_open_tag_unterminated(line),
        leading_closers=count_leading_closers(line),
        trailing_closers=count_trailing_closers(line),
    )

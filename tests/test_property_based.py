from __future__ import annotations

from hypothesis import given
from hypothesis import strategies as st

from freemarker_format import FormatConfig, format_template
from freemarker_format.indenter import advance
from freemarker_format.lines import build_logical_lines
from freemarker_format.models import IndentState

LEAVES = [
    "<p>Hello ${name}</p>",
    "text",
    "<#assign x = 1>",
    '<@icon name="star" />',
    "<li>a</li>",
    "<br>",
    "<p>one two three four five six</p>",
    "<td>a</td><td>b</td><td>c</td>",
    '<@icon name="home"/> Home',
    '<@link to="/">Home</@link> |',
    "<br/>",
    "",
]

CONTAINERS = [
    ("<div>", "</div>"),
    ('<section class="main">', "</section>"),
    ("<#if x>", "</#if>"),
    ("<#list xs as x>", "</#list>"),
    ("<@layout>", "</@layout>"),
    ("var o = {", "};"),
]

FRAGMENTS = LEAVES + [line for pair in CONTAINERS for line in pair] + [
    "<#else>",
    "<#switch x>",
    "<#case 1>",
    "<#default>",
    "</#switch>",
    "<div",
    "/>",
    "<@box",
    'title="x"',
    "   ",
    "}",
    "]",
]


def _wrap(pair: tuple[str, str], children: list[list[str]]) -> list[str]:
    opener, closer = pair
    return [opener, *_flatten(children), closer]


def _switch(cases: list[list[str]]) -> list[str]:
    lines = ["<#switch x>"]
    for index, body in enumerate(cases):
        lines.append(f"<#case {index}>")
        lines.extend(body)
    lines.append("</#switch>")
    return lines


def _flatten(blocks: list[list[str]]) -> list[str]:
    return [line for block in blocks for line in block]


leaf_blocks = st.sampled_from(LEAVES).map(lambda line: [line])
case_bodies = st.lists(leaf_blocks, max_size=2).map(_flatten)

documents = st.recursive(
    leaf_blocks,
    lambda children: st.one_of(
        st.builds(_wrap, st.sampled_from(CONTAINERS), st.lists(children, max_size=3)),
        st.lists(children, min_size=1, max_size=3).map(_flatten),
        st.lists(case_bodies, max_size=3).map(_switch),
    ),
    max_leaves=20,
).map("\n".join)

fragment_documents = st.lists(st.sampled_from(FRAGMENTS), max_size=30).map("\n".join)


@given(st.text())
def test_format_is_total(text: str):
    assert isinstance(format_template(text), str)


@given(st.text(), st.integers(min_value=1, max_value=40))
def test_format_is_total_for_any_width(text: str, width: int):
    assert isinstance(format_template(text, FormatConfig(print_width=width)), str)


@given(st.text(max_size=300))
def test_depth_never_negative(text: str):
    state = IndentState()
    for line in build_logical_lines(text, FormatConfig(print_width=20)):
        state, _ = advance(state, line)
        assert state.directive_depth >= 0
        assert state.json_depth >= 0
        assert state.markup_depth >= 0
        assert state.call_depth >= 0
        assert state.pending_markup >= 0


@given(fragment_documents)
def test_blank_lines_are_preserved(text: str):
    formatted = format_template(text)

    source_blanks = sum(1 for line in text.split("\n") if not line.strip())
    output_blanks = sum(1 for line in formatted.split("\n") if not line.strip())
    assert source_blanks == output_blanks


@given(fragment_documents)
def test_format_is_deterministic(text: str):
    assert format_template(text) == format_template(text)


@given(documents)
def test_format_is_idempotent(text: str):
    formatted = format_template(text)

    assert format_template(formatted) == formatted


@given(documents)
def test_format_is_idempotent_with_narrow_width(text: str):
    config = FormatConfig(print_width=20)
    formatted = format_template(text, config)

    assert format_template(formatted, config) == formatted


@given(documents)
def test_balanced_documents_end_at_depth_zero(text: str):
    state = IndentState()
    for line in build_logical_lines(text, FormatConfig(print_width=20)):
        state, _ = advance(state, line)

    assert state.is_balanced


@given(documents)
def test_output_lines_are_stripped_content(text: str):
    source_content = [line.strip() for line in text.split("\n") if line.strip()]
    output_content = [line.strip() for line in format_template(text).split("\n") if line.strip()]

    assert output_content == source_content

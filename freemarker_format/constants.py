"""Constants used across the freemarker-format package."""

from __future__ import annotations

import re

from .config import FormatConfig

DEFAULT_CONFIG = FormatConfig()

DEFAULT_MAX_FILE_SIZE = DEFAULT_CONFIG.max_file_size

TEMPLATE_EXTENSIONS = (".ftl", ".ftlh", ".ftlx")

# Tag names: literal names or a ${...} interpolation used as the name.
TAG_NAME = r"(?:[A-Za-z][\w:.-]*|\$\{[^}]*\})"

# Directive patterns
FTL_BLOCK_DIRECTIVES = (
    "if",
    "list",
    "items",
    "macro",
    "function",
    "switch",
    "attempt",
    "compress",
    "escape",
    "noescape",
    "autoesc",
    "noautoesc",
    "outputformat",
)
FTL_BINDING_DIRECTIVES = ("assign", "local", "global")

FTL_OPENER_PATTERN = re.compile(rf"^<#(?:{'|'.join(FTL_BLOCK_DIRECTIVES)})\b")
FTL_BINDING_PATTERN = re.compile(rf"^<#(?:{'|'.join(FTL_BINDING_DIRECTIVES)})\b")
FTL_CLOSER_PATTERN = re.compile(r"^</#")
FTL_INTERMEDIATE_PATTERN = re.compile(r"^<#(?:else|elseif|recover)\b")
FTL_CASE_PATTERN = re.compile(r"^<#(?:case|default)\b")
FTL_SWITCH_OPENER_PATTERN = re.compile(r"^<#switch\b")
FTL_SWITCH_CLOSER_PATTERN = re.compile(r"^</#switch\b")
FTL_INLINE_PATTERN = re.compile(r"^<#(?P<name>\w+)\b.*</#(?P=name)\s*>", re.DOTALL)

# Macro call patterns
MACRO_NAME = r"[\w.:-]+"
MACRO_OPENER_PATTERN = re.compile(rf"^<@{MACRO_NAME}")
MACRO_CLOSER_PATTERN = re.compile(r"^</@")
MACRO_INLINE_PATTERN = re.compile(
    rf"^<@(?P<name>{MACRO_NAME}).*</@(?:(?P=name))?\s*>", re.DOTALL
)
MACRO_SELF_CLOSING_PATTERN = re.compile(rf"""^<@{MACRO_NAME}(?:"[^"]*"|'[^']*'|[^'">])*/>""")
BARE_TERMINATOR = "/>"

# Markup patterns
HTML_TAG_TOKEN_PATTERN = re.compile(rf"<(?P<slash>/?)(?P<name>{TAG_NAME})")
HTML_OPENER_PATTERN = re.compile(rf"^<(?P<name>{TAG_NAME})")
HTML_CLOSE_TAG_PATTERN = re.compile(rf"</(?P<name>{TAG_NAME})\s*>")
HTML_LEADING_CLOSERS_PATTERN = re.compile(rf"^(?:\s*</{TAG_NAME}\s*>)+")
HTML_INLINE_PATTERN = re.compile(rf"^<(?P<name>{TAG_NAME})(?=[\s/>]).*</(?P=name)\s*>", re.DOTALL)

# Something that looks like the start of a tag or interpolation.
TAG_LIKE_PATTERN = re.compile(r"<[A-Za-z/#@!?$]")

# Text-level elements that usually open and close on the same line.
INLINE_FLOW_ELEMENTS = frozenset(
    {
        "a",
        "abbr",
        "b",
        "bdi",
        "bdo",
        "cite",
        "code",
        "data",
        "del",
        "dfn",
        "em",
        "i",
        "ins",
        "kbd",
        "label",
        "mark",
        "q",
        "s",
        "samp",
        "small",
        "span",
        "strong",
        "sub",
        "sup",
        "time",
        "u",
        "var",
    }
)

# Elements that never have a closing tag.
VOID_ELEMENTS = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    }
)

"""Partial reference matchers.

Patterns reference each other with mustache-style partial markers::

    {{> atoms-button }}
    {{> atoms-button:primary }}
    {{> atoms-button(text: "Buy") }}
    {{> atoms-button:primary|large(text: "Buy") }}
    {{# listItems.three }}

The helpers here only discover those references in template source; resolving
them to actual templates is left to the caller.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

_NAME = r"([\w\-\.\/~]+)"
_MODIFIER = r":[A-Za-z0-9_|-]+"
_PARAMS = r" ?\(.*?"

PARTIALS_RE = re.compile(rf"\{{\{{>\s*{_NAME}(?:{_MODIFIER})?(?:{_PARAMS})?\s*\}}\}}")
PARTIALS_WITH_STYLE_MODIFIERS_RE = re.compile(
    rf"\{{\{{>\s*{_NAME}(?!\()(?:{_MODIFIER})+(?:{_PARAMS})?\s*\}}\}}"
)
PARTIALS_WITH_PATTERN_PARAMETERS_RE = re.compile(
    rf"\{{\{{>\s*{_NAME}(?:{_MODIFIER})?(?:{_PARAMS})\s*\}}\}}"
)
LIST_ITEMS_RE = re.compile(
    r"(\{\{#( )?)(list(I|i)tems\.)"
    r"(one|two|three|four|five|six|seven|eight|nine|ten|eleven|twelve|thirteen"
    r"|fourteen|fifteen|sixteen|seventeen|eighteen|nineteen|twenty)( )?\}\}"
)
# group 1 is the bare pattern name
PARTIAL_KEY_RE = re.compile(rf"\{{\{{>\s*{_NAME}(?:{_MODIFIER})?(?: ?\(.*\))?\s*\}}\}}")


def template_text(pattern: Any) -> str | None:
    """Return the template source of a string or pattern object."""
    if isinstance(pattern, str):
        return pattern
    if isinstance(pattern, Mapping):
        template = pattern.get("template")
    else:
        template = getattr(pattern, "template", None)
    return template if isinstance(template, str) else None


def pattern_matcher(pattern: Any, regex: re.Pattern[str]) -> list[str]:
    """Find regex matches within pattern strings and pattern objects.

    Args:
        pattern: Either template source or an object with a ``template`` string.
        regex: Compiled pattern to search with.

    Returns:
        Every full match in source order; empty when nothing matches.
    """
    text = template_text(pattern)
    if text is None:
        return []
    return [m.group(0) for m in regex.finditer(text)]


def find_partials(pattern: Any) -> list[str]:
    """Find every ``{{> template-name }}`` reference within a pattern."""
    return pattern_matcher(pattern, PARTIALS_RE)


def find_partials_with_style_modifiers(pattern: Any) -> list[str]:
    return pattern_matcher(pattern, PARTIALS_WITH_STYLE_MODIFIERS_RE)


def find_partials_with_pattern_parameters(pattern: Any) -> list[str]:
    """Find ``{{> value(foo: "bar") }}`` and ``{{> value:mod(foo: "bar") }}``."""
    return pattern_matcher(pattern, PARTIALS_WITH_PATTERN_PARAMETERS_RE)


def find_list_items(pattern: Any) -> list[str]:
    return pattern_matcher(pattern, LIST_ITEMS_RE)


def find_partial_new(partial_string: str) -> str:
    """Tease the pattern name out of one partial reference with a single regex."""
    return PARTIAL_KEY_RE.sub(r"\1", partial_string)


def find_partial(partial_string: str) -> str:
    """Tease the pattern name out of one partial reference by stripping markers.

    This is the default extractor; ``find_partial_new`` must agree with it on
    any reference the partial regexes match.
    """
    partial = (
        partial_string.replace("{{> ", "", 1)
        .replace(" }}", "", 1)
        .replace("{{>", "", 1)
        .replace("}}", "", 1)
    )

    # pattern parameters
    paren = partial.find("(")
    if paren > 0:
        partial = partial[:paren]

    # style modifiers
    return partial.split(":")[0].strip()

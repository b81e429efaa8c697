"""
Template helper functions.

Pure text transforms registered on the Jinja2 environment and invoked by CV
templates while rendering a display projection. Output markup is wrapped in
``Markup`` after escaping, so autoescaping does not double-escape it.

Registered names:
- Tests: ``present``
- Filters: ``nl2br``, ``bold_first_line``, ``split_items``, ``split_comma``, ``split_amp``
- Globals: ``if_exists``, ``eq``
"""

import re
from typing import Any, List

from jinja2 import Environment
from markupsafe import Markup, escape

from cvpress.contexts.intake.normalizer import is_empty

YEAR_PATTERN = re.compile(r"\d{4}")


def if_exists(value: Any) -> bool:
    """
    Check that a value is displayable.

    Applies the intake emptiness rule to values that reach the template
    without normalization: non-strings, blank strings, '@', 'none' and
    unfilled placeholders like '@full_name' are treated as absent.
    """
    return not is_empty(value)


def _non_blank_lines(text: str) -> List[str]:
    return [line.strip() for line in text.split("\n") if line.strip()]


def nl2br(text: Any) -> Markup:
    """
    Render each non-blank line as a line item.

    The first line gets an extra ``line-first`` class (reference name), the
    rest are contact details.

    Example:
        >>> nl2br("Jane Doe\\n+27 82 000 0000")
        Markup('<span class="line line-first">Jane Doe</span><span class="line">+27 82 000 0000</span>')
    """
    if not isinstance(text, str) or not text:
        return Markup("")

    rendered = []
    for i, line in enumerate(_non_blank_lines(text)):
        css_class = "line line-first" if i == 0 else "line"
        rendered.append(f'<span class="{css_class}">{escape(line)}</span>')

    return Markup("".join(rendered))


def classify_line(index: int, line: str) -> str:
    """
    Pick the CSS class for line ``index`` of a titled block.

    0 -> entry-title, 1 -> entry-subtitle, lines with a 4-digit run -> entry-date,
    anything else -> entry-description.
    """
    if index == 0:
        return "entry-title"
    if index == 1:
        return "entry-subtitle"
    if YEAR_PATTERN.search(line):
        return "entry-date"
    return "entry-description"


def bold_first_line(text: Any) -> Markup:
    """
    Give a free-text block title/subtitle/date/description structure.

    Used for education and work experience blocks entered as plain text.

    Example:
        >>> bold_first_line("Rhodes University\\nBSc Computer Science\\n2015 - 2018")
        Markup('<div class="entry-title">Rhodes University</div><div class="entry-subtitle">BSc Computer Science</div><div class="entry-date">2015 - 2018</div>')
    """
    if not isinstance(text, str) or not text:
        return Markup("")

    rendered = [
        f'<div class="{classify_line(i, line)}">{escape(line)}</div>'
        for i, line in enumerate(_non_blank_lines(text))
    ]
    return Markup("".join(rendered))


def _split(value: Any, delimiter: str) -> List[str]:
    if not isinstance(value, str):
        return []
    items = [item.strip() for item in value.split(delimiter)]
    return [item for item in items if item]


def split_comma(value: Any) -> List[str]:
    """Split on commas, dropping empty items."""
    return _split(value, ",")


def split_amp(value: Any) -> List[str]:
    """Split on '&', dropping empty items."""
    return _split(value, "&")


def split_items(value: Any) -> List[str]:
    """
    Itemize a delimited value: newlines win, then commas, then '&'.

    Example:
        >>> split_items("Python, SQL")
        ['Python', 'SQL']
        >>> split_items("English & Xhosa")
        ['English', 'Xhosa']
    """
    if not isinstance(value, str):
        return []
    if "\n" in value:
        return _split(value, "\n")
    if "," in value:
        return split_comma(value)
    return split_amp(value)


def eq(left: Any, right: Any) -> bool:
    """Structural equality for template-side branching."""
    return left == right


def register_helpers(env: Environment) -> None:
    """
    Register all CV helpers on a Jinja2 environment.

    Idempotent: re-registering replaces the same functions.
    """
    env.tests["present"] = if_exists
    env.filters["nl2br"] = nl2br
    env.filters["bold_first_line"] = bold_first_line
    env.filters["split_items"] = split_items
    env.filters["split_comma"] = split_comma
    env.filters["split_amp"] = split_amp
    env.globals["if_exists"] = if_exists
    env.globals["eq"] = eq

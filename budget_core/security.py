"""Sanitisation of free-text fields before they enter the ledger."""

from __future__ import annotations

import re

__all__ = ["escape_html", "sanitize_input"]

SCRIPT_SCHEME_PATTERN = re.compile(r"javascript\s*:", re.IGNORECASE)
EVENT_HANDLER_PATTERN = re.compile(r"\son\w+\s*=\s*[\"'][^\"']*[\"']", re.IGNORECASE)

# Ampersand must stay first so later replacements are not escaped twice.
_HTML_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&#39;"),
)


def escape_html(value: str) -> str:
    for char, entity in _HTML_ESCAPES:
        value = value.replace(char, entity)
    return value


def sanitize_input(value: object) -> str:
    """Strip script vectors from ``value`` and escape it for HTML text content.

    ``None`` becomes an empty string and any other non-string is converted
    with ``str()`` first. Inline ``javascript:`` schemes and ``on<event>="..."``
    attributes are removed outright rather than escaped.
    """
    text = "" if value is None else str(value)
    text = SCRIPT_SCHEME_PATTERN.sub("", text)
    text = EVENT_HANDLER_PATTERN.sub("", text)
    return escape_html(text)

"""Query patterns, text matching and highlight markup used by winnow."""

from __future__ import annotations

import re

from chooser.data.parser import escape_expression

_BRACKETS = re.compile(r"[\[\]]")


def normalize_query(raw: str) -> str:
    """Trim the typed query and escape it the way option markup is escaped."""
    return escape_expression(raw.strip())


def build_search_pattern(
    query: str, *, contains: bool = False, case_sensitive: bool = False
) -> re.Pattern[str]:
    prefix = "" if contains else "^"
    flags = 0 if case_sensitive else re.IGNORECASE
    return re.compile(prefix + re.escape(query), flags)


def build_highlight_pattern(
    query: str, *, contains: bool = False, case_sensitive: bool = False
) -> re.Pattern[str]:
    prefix = "" if contains else r"\b"
    flags = 0 if case_sensitive else re.IGNORECASE
    return re.compile(prefix + re.escape(query), flags)


def search_string_match(text: str, pattern: re.Pattern[str], *, split_words: bool = True) -> bool:
    """Match the whole text, then each space-separated word when allowed."""
    if pattern.search(text):
        return True
    if split_words and (" " in text or text.startswith("[")):
        for part in _BRACKETS.sub("", text).split(" "):
            if pattern.search(part):
                return True
    return False


def highlight(text: str, pattern: re.Pattern[str]) -> str:
    """Wrap the first match of ``pattern`` in ``<em>`` markers."""
    match = pattern.search(text)
    if match is None:
        return text
    start, end = match.span()
    return f"{text[:start]}<em>{text[start:end]}</em>{text[end:]}"

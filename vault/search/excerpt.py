"""Excerpt builder for displaying matched sections."""

import re

DEFAULT_EXCERPT_LENGTH = 900
ELLIPSIS = "..."

_WHITESPACE = re.compile(r'\s+')


def excerpt(text: str, limit: int = DEFAULT_EXCERPT_LENGTH) -> str:
    """
    Collapse whitespace and cut text to at most `limit` characters.

    Truncated results get "..." appended, so their length is limit + 3.

    Examples:
        >>> excerpt("  Payment   is\\n due  ")
        'Payment is due'

        >>> len(excerpt("a" * 1000, 100))
        103
    """
    if not isinstance(text, str) or not text:
        return ""

    collapsed = _WHITESPACE.sub(' ', text.strip())
    if len(collapsed) > limit:
        return collapsed[:limit] + ELLIPSIS
    return collapsed

"""
Input sanitization helpers.

User-supplied text is stored as plain text: every HTML tag is stripped before
it reaches the database. Search terms are escaped before they are embedded in
SQL ``LIKE`` patterns so ``%`` and ``_`` match literally.
"""

import html
from typing import Optional

import bleach

LIKE_ESCAPE_CHAR = "\\"


def sanitize_plain_text(content: Optional[str]) -> Optional[str]:
    """
    Strip all HTML tags and surrounding whitespace.

    The result is plain text for a JSON API, so the entities bleach emits for
    stray ``&``, ``<`` and ``>`` are decoded again. Length limits apply to
    this decoded text.

    Args:
        content: Raw content from user input

    Returns:
        Plain text, or None if input is None

    Examples:
        >>> sanitize_plain_text('<script>alert(1)</script>Title')
        'alert(1)Title'
        >>> sanitize_plain_text('  <b>Bold</b> text ')
        'Bold text'
        >>> sanitize_plain_text('Fish & chips, 5 > 3')
        'Fish & chips, 5 > 3'
    """
    if content is None:
        return None

    return html.unescape(bleach.clean(content, tags=[], strip=True)).strip()


def escape_like(term: str) -> str:
    """
    Escape LIKE wildcards in a search term.

    Use together with ``escape=LIKE_ESCAPE_CHAR`` on the SQLAlchemy operator.

    Examples:
        >>> escape_like('50%_off')
        '50\\\\%\\\\_off'
    """
    return (
        term.replace(LIKE_ESCAPE_CHAR, LIKE_ESCAPE_CHAR * 2)
        .replace("%", LIKE_ESCAPE_CHAR + "%")
        .replace("_", LIKE_ESCAPE_CHAR + "_")
    )


def contains_pattern(term: str) -> str:
    """Build a case-insensitive substring pattern for ``ilike``."""
    return f"%{escape_like(term)}%"

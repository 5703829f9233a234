"""Sanitization of user supplied plain text fields."""

import html
from typing import Optional

import bleach


def strip_all_html(content: Optional[str]) -> Optional[str]:
    """
    Remove all HTML tags from content.

    bleach escapes ``&``, ``<`` and ``>`` in the text it keeps; those
    entities are decoded again so the result is plain text, not HTML.

    Args:
        content: Content with potential HTML tags

    Returns:
        Plain text content
    """
    if not content:
        return content

    return html.unescape(bleach.clean(content, tags=[], strip=True))


def clean_text(content: Optional[str]) -> Optional[str]:
    """Strip markup and surrounding whitespace; empty results become None."""
    if content is None:
        return None
    cleaned = (strip_all_html(content) or "").strip()
    return cleaned or None

"""
Content selection for raw feed entries.

Picks the richest text field an entry offers and strips markup tags from it.
Only tags are removed; entities and link text are left exactly as they are.
"""

from __future__ import annotations

import re

from .types import RawEntry


_TAG_RE = re.compile(r"<[^>]*>")

# Highest priority first; title is handled separately as the last resort.
CONTENT_FIELDS: tuple[str, ...] = ("content_encoded", "content", "description", "snippet")


def select_content(entry: RawEntry, min_chars: int = 20) -> str:
    """Return the best available plain-text content for an entry.

    The first field in CONTENT_FIELDS whose trimmed value is longer than
    min_chars wins. When none qualifies the title is used regardless of its
    length. Never raises; returns "" when the entry has nothing usable.

    Args:
        entry: Parsed feed entry
        min_chars: Fields must be longer than this many characters

    Returns:
        Markup-stripped content string
    """
    chosen = ""
    for name in CONTENT_FIELDS:
        value = getattr(entry, name, None)
        if isinstance(value, str) and len(value.strip()) > min_chars:
            chosen = value
            break
    else:
        chosen = entry.title or ""

    return strip_tags(chosen)


def strip_tags(text: str) -> str:
    return _TAG_RE.sub("", text).strip()

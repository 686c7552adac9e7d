"""Deterministic extractive summaries built from leading sentences."""

from __future__ import annotations

import re

from ..core.normalizer import ELLIPSIS


# CJK marks always end a sentence; ASCII marks only before whitespace or the
# end of text, so "3.5" and "example.com" stay intact.
_SENTENCE_END_RE = re.compile(r"[。！？]+|[.!?]+(?=\s|$)")


def extract_leading_sentences(text: str, sentences: int = 2, max_chars: int = 150) -> str:
    """Return the first sentences of text as a summary.

    Args:
        text: Plain-text article content
        sentences: Number of leading sentences to keep
        max_chars: Truncation budget when text has no sentence boundary

    Returns:
        The leading sentences verbatim, or (without any sentence boundary)
        at most max_chars characters followed by "...", or "" for blank input
    """
    text = text.strip()
    if not text:
        return ""

    count = max(1, sentences)
    end = None
    for idx, match in enumerate(_SENTENCE_END_RE.finditer(text), start=1):
        end = match.end()
        if idx >= count:
            break

    if end is None:
        return text[:max_chars].rstrip() + ELLIPSIS
    return text[:end].strip()

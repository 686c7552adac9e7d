"""
Cleaning of raw model output into a single well-formed summary.

Generation models sometimes emit meta-commentary about how they are going to
summarize ("reasoning leakage") instead of, or around, the summary itself.
SummaryNormalizer runs a fixed sequence of filters over the raw text:

1. Trim and drop a literal "AI Summary:" prefix.
2. Remove sentences that begin with a discourse marker ("首先", "First," ...).
3. Reject the text if any leakage keyword survives anywhere in it.
4. Without a delimiter tag, keep only complete sentences and wrap them.
5. Take the tag payload as the candidate.
6. Recover from over-aggressive trimming when the payload is implausibly short.
7. Reject empty, over-long or still-leaky candidates.
8. Terminate the accepted summary with punctuation.

The result is either a non-empty summary or "" (content rejected). Both
marker and keyword sets are heuristics for one working language; they live in
NormalizerConfig so they can be tuned without touching this module.
"""

from __future__ import annotations

import re
from typing import Iterable

from ..config import NormalizerConfig


ELLIPSIS = "..."


class SummaryNormalizer:
    """Deterministic multi-stage filter for model summaries."""

    def __init__(self, cfg: NormalizerConfig | None = None) -> None:
        self.cfg = cfg or NormalizerConfig()
        marks = re.escape(self.cfg.terminal_marks)
        tag = re.escape(self.cfg.tag)
        self._tag_pair_re = re.compile(rf"<{tag}>([\s\S]*?)</{tag}>")
        self._tag_marker_re = re.compile(rf"</?{tag}>")
        self._sentence_re = re.compile(rf"[^{marks}]*[{marks}]")
        self._marker_re = _build_marker_re(self.cfg.discourse_markers, marks)
        self._keywords = [k.lower() for k in self.cfg.leakage_keywords if k]

    def normalize(self, raw: str | None) -> str:
        """Clean raw model output.

        Args:
            raw: Text returned by the generation service

        Returns:
            The accepted summary, or "" when the output is unsuitable
        """
        if not raw:
            return ""
        cfg = self.cfg

        text = raw.strip()
        if cfg.strip_prefix and text.startswith(cfg.strip_prefix):
            text = text[len(cfg.strip_prefix):].strip()

        if self._marker_re is not None:
            text = self._marker_re.sub("", text).strip()

        if self.has_leakage(text):
            return ""

        if not self._tag_pair_re.search(text):
            if not self.ends_with_terminal(text):
                sentences = self._sentence_re.findall(text)
                if not sentences:
                    return ""
                text = "".join(sentences).strip()
            text = f"<{cfg.tag}>{text}</{cfg.tag}>"

        match = self._tag_pair_re.search(text)
        candidate = self._tag_marker_re.sub("", match.group(1)).strip() if match else ""

        if len(candidate) < cfg.min_chars:
            untagged = self._tag_marker_re.sub("", text).strip()
            if len(untagged) > len(candidate):
                candidate = untagged

        if not candidate or self.has_leakage(candidate):
            return ""

        if not self.ends_with_terminal(candidate):
            candidate += cfg.default_terminal

        if len(candidate) > cfg.max_chars:
            return ""
        return candidate

    def finalize(self, text: str | None) -> str:
        """Bound and terminate text that needs no leakage screening.

        Used for extractive summaries, which are article text rather than
        model output. Text that fits is kept (terminated if needed). Longer
        text keeps its longest run of complete leading sentences within
        max_chars, or is hard-truncated with an ellipsis when even the first
        sentence is too long.

        Returns:
            A terminated summary of at most max_chars characters, or ""
        """
        cfg = self.cfg
        text = self._tag_marker_re.sub("", text or "").strip()
        if not text:
            return ""

        if not self.ends_with_terminal(text):
            if len(text) + len(cfg.default_terminal) <= cfg.max_chars:
                return text + cfg.default_terminal
        elif len(text) <= cfg.max_chars:
            return text

        kept = ""
        for sentence in self._sentence_re.findall(text):
            longer = (kept + sentence).strip()
            if len(longer) > cfg.max_chars:
                break
            kept = longer
        if kept:
            return kept

        suffix = ELLIPSIS if self.ends_with_terminal(ELLIPSIS) else ELLIPSIS + cfg.default_terminal
        budget = cfg.max_chars - len(suffix)
        if budget <= 0:
            return ""
        return text[:budget].rstrip() + suffix

    def has_leakage(self, text: str) -> bool:
        lowered = text.lower()
        return any(keyword in lowered for keyword in self._keywords)

    def ends_with_terminal(self, text: str) -> bool:
        return bool(text) and text[-1] in self.cfg.terminal_marks


def _build_marker_re(markers: Iterable[str], marks: str) -> re.Pattern[str] | None:
    """Compile one pattern matching any marker-led sentence.

    A sentence starts at the beginning of the text, after terminal
    punctuation, or right after a tag. It ends at the nearest terminal mark;
    a marker with no terminal mark after it does not match.
    """
    # Longest first so "现在开始处理" wins over "现在".
    ordered = sorted({m for m in markers if m}, key=len, reverse=True)
    if not ordered:
        return None
    alternatives = "|".join(_marker_pattern(m) for m in ordered)
    return re.compile(
        rf"(?:^|(?<=[{marks}>]))\s*(?:{alternatives})[^{marks}<]*[{marks}]",
        re.IGNORECASE,
    )


def _marker_pattern(marker: str) -> str:
    pattern = re.escape(marker)
    last = marker[-1]
    if last.isascii() and last.isalnum():
        pattern += r"\b"
    return pattern

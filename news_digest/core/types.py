"""
Core data types for the news digest pipeline.

This module defines the fundamental data structures used throughout the pipeline:
- Source: A configured feed (name + URL)
- RawEntry: One parsed feed item before content selection
- FeedResult: Entries fetched for one source, or the reason there are none
- SummaryStatus / SummaryOutcome: Terminal states of a summarization attempt
- NewsItem: The externally visible, summarized article
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


@dataclass(frozen=True)
class Source:
    """A configured syndication feed.

    Attributes:
        name: Short identifier shown on every item from this feed
        url: Feed document URL
        extra_fields: Custom namespace elements whose values hold article text
    """
    name: str
    url: str
    extra_fields: tuple[str, ...] = ()


@dataclass
class RawEntry:
    """One feed item as parsed from the feed document.

    Every field is optional; feeds differ in which of them they populate.

    Attributes:
        title: The article headline
        link: URL of the original article
        published: ISO 8601 publish timestamp
        content_encoded: Full HTML body (content:encoded or Atom content)
        content: Plain-text body or a custom namespace field
        description: RSS description / Atom summary
        snippet: Short teaser text (media or iTunes description)
    """
    title: str | None = None
    link: str | None = None
    published: str | None = None
    content_encoded: str | None = None
    content: str | None = None
    description: str | None = None
    snippet: str | None = None


@dataclass
class FeedResult:
    """Result of fetching one source.

    Either entries are populated (success) or error is set (failure).
    """
    source: Source
    entries: list[RawEntry] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class SummaryStatus(str, Enum):
    """How a summary was obtained."""

    GENERATED = "generated"
    FALLBACK = "fallback"
    FAILED = "failed"


@dataclass(frozen=True)
class SummaryOutcome:
    """Terminal state of one summarization.

    text is None exactly when status is FAILED. GENERATED text is raw
    model output and still has to be normalized.

    Attributes:
        status: Which terminal state was reached
        text: Summary text, or None on total failure
        attempts: Number of provider calls made
        error: Last provider error, if any
    """
    status: SummaryStatus
    text: str | None
    attempts: int = 0
    error: str | None = None


@dataclass(frozen=True)
class NewsItem:
    """A summarized article ready to be returned to callers.

    Attributes:
        title: The article headline
        link: URL of the original article
        source: Name of the source it came from
        pub_date: ISO 8601 publish timestamp (fetch time when the feed had none)
        summary: Normalized summary text
    """
    title: str
    link: str
    source: str
    pub_date: str
    summary: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "link": self.link,
            "source": self.source,
            "pubDate": self.pub_date,
            "summary": self.summary,
        }

"""
Core domain models and text processing.

This package contains data types plus the content selection and summary
normalization steps, independent of any network access.
"""

from .types import (
    FeedResult,
    NewsItem,
    RawEntry,
    Source,
    SummaryOutcome,
    SummaryStatus,
)

__all__ = [
    "Source",
    "RawEntry",
    "FeedResult",
    "SummaryStatus",
    "SummaryOutcome",
    "NewsItem",
]

"""
Feed fetching.

This package downloads and parses configured syndication feeds.
"""

from .feeds import FeedClient, FeedFetcher, HttpFeedClient, parse_entry

__all__ = ["FeedClient", "FeedFetcher", "HttpFeedClient", "parse_entry"]

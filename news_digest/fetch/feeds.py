"""
Feed fetching and parsing.

FeedFetcher turns one configured Source into a capped list of RawEntry
objects. Network access goes through an injected FeedClient so tests (or
other transports) can replace it; the default HttpFeedClient downloads the
document with httpx and parses it with feedparser.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
import logging
import time
from typing import Any, Mapping, Protocol

import feedparser
import httpx

from ..config import FetchConfig
from ..core.dates import parse_timestamp, struct_time_to_iso, utc_now
from ..core.types import FeedResult, RawEntry, Source
from ..errors import FeedFetchError
from ..utils.logging import log_event


class FeedClient(Protocol):
    """Anything that can download and parse a feed URL."""

    async def fetch_and_parse(self, url: str) -> Mapping[str, Any]:
        """Return a feedparser-style result with an "entries" list.

        Raises:
            FeedFetchError: The feed could not be downloaded or parsed.
        """
        ...


class HttpFeedClient:
    """Download feeds with httpx and parse them with feedparser."""

    def __init__(self, client: httpx.AsyncClient, cfg: FetchConfig) -> None:
        self.client = client
        self.cfg = cfg

    async def fetch_and_parse(self, url: str) -> Mapping[str, Any]:
        try:
            resp = await self.client.get(
                url,
                headers={"User-Agent": self.cfg.user_agent},
                timeout=self.cfg.timeout_seconds,
                follow_redirects=True,
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise FeedFetchError(f"HTTP {exc.response.status_code} for {url}") from exc
        except httpx.HTTPError as exc:
            raise FeedFetchError(f"{type(exc).__name__}: {exc}") from exc

        # feedparser is synchronous; keep the event loop free while it works.
        feed = await asyncio.to_thread(feedparser.parse, resp.content)
        entries = feed.get("entries") or []
        if feed.get("bozo") and not entries:
            exc = feed.get("bozo_exception")
            msg = f"Invalid RSS/Atom feed: {url}"
            if exc:
                msg += f" ({exc})"
            raise FeedFetchError(msg)
        return feed


class FeedFetcher:
    """Fetch one source into at most `entries_per_source` raw entries."""

    def __init__(
        self,
        client: FeedClient,
        cfg: FetchConfig,
        logger: logging.Logger | None = None,
    ) -> None:
        self.client = client
        self.cfg = cfg
        self.logger = logger

    async def fetch(self, source: Source) -> FeedResult:
        """Fetch and parse a source without ever raising.

        Failures (transport, parse, empty feed) come back as a FeedResult
        with no entries and an error message so sibling sources keep going.
        """
        fetched_at = utc_now()
        try:
            feed = await self.client.fetch_and_parse(source.url)
        except Exception as exc:  # noqa: BLE001
            return self._failed(source, f"{type(exc).__name__}: {exc}")

        raw_entries = feed.get("entries") or []
        if not raw_entries:
            return self._failed(source, "No items found in feed")

        limit = max(0, self.cfg.entries_per_source)
        entries = [
            parse_entry(item, source, fetched_at)
            for item in list(raw_entries)[:limit]
        ]
        log_event(
            self.logger,
            "Feed fetched",
            event="feed_fetched",
            source=source.name,
            available=len(raw_entries),
            kept=len(entries),
        )
        return FeedResult(source=source, entries=entries)

    def _failed(self, source: Source, error: str) -> FeedResult:
        log_event(
            self.logger,
            f"Feed fetch failed for {source.name}",
            level=logging.WARNING,
            event="feed_fetch_failed",
            source=source.name,
            url=source.url,
            error=error,
        )
        return FeedResult(source=source, entries=[], error=error)


def parse_entry(entry: Mapping[str, Any], source: Source, fetched_at: datetime) -> RawEntry:
    """Map a feedparser entry to a RawEntry.

    HTML-typed content (content:encoded, Atom content) becomes
    content_encoded; plain-text content or the source's custom namespace
    fields become content.
    """
    content_encoded: str | None = None
    content_plain: str | None = None
    for item in entry.get("content") or []:
        value = _text(item.get("value")) if isinstance(item, Mapping) else None
        if not value:
            continue
        kind = str(item.get("type") or "").lower()
        if kind == "text/plain":
            content_plain = content_plain or value
        else:
            content_encoded = content_encoded or value

    if content_plain is None:
        for name in source.extra_fields:
            value = _text(entry.get(name))
            if value:
                content_plain = value
                break

    return RawEntry(
        title=_text(entry.get("title")),
        link=_text(entry.get("link")),
        published=_published(entry, fetched_at),
        content_encoded=content_encoded,
        content=content_plain,
        description=_text(entry.get("description")) or _text(entry.get("summary")),
        snippet=_text(entry.get("media_description")) or _text(entry.get("subtitle")),
    )


def _published(entry: Mapping[str, Any], fetched_at: datetime) -> str:
    """Pick an ISO publish timestamp.

    Unparsable strings are skipped, so the result always parses; fetch time
    is used when nothing else does.
    """
    for key in ("published_parsed", "updated_parsed"):
        value = entry.get(key)
        if isinstance(value, time.struct_time):
            try:
                return struct_time_to_iso(value)
            except (TypeError, ValueError):
                continue
    for key in ("published", "updated", "pubDate"):
        parsed = parse_timestamp(_text(entry.get(key)))
        if parsed is not None:
            return parsed.isoformat()
    return fetched_at.isoformat()


def _text(value: Any) -> str | None:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return None

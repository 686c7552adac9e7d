"""
Aggregation orchestration for the news digest.

This module coordinates one aggregation pass:
1. Fetch every configured source concurrently (at most N entries each)
2. Per entry, concurrently: select content, summarize, then normalize model
   output or bound and terminate extractive summaries
3. Drop entries without title/link/content or with a failed/rejected summary
4. Flatten and sort newest first

Failures are isolated at the smallest unit: a broken entry drops only that
entry, a broken source contributes nothing, and neither affects siblings.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
import logging
from pathlib import Path
from typing import Iterable

import httpx

from .api import FeedsResponse, build_feeds_response
from .config import AppConfig
from .core.content import select_content
from .core.dates import parse_timestamp, utc_now
from .core.normalizer import SummaryNormalizer
from .core.types import NewsItem, RawEntry, Source, SummaryStatus
from .fetch.feeds import FeedClient, FeedFetcher, HttpFeedClient
from .llm.providers import create_provider
from .llm.tracing import set_span_output, setup_langfuse, start_span
from .summarize.summarizer import Summarizer
from .utils.logging import log_event, setup_llm_logger, setup_logging


class Aggregator:
    """Fan out fetch + summarize across sources and collect NewsItems."""

    def __init__(
        self,
        fetcher: FeedFetcher,
        summarizer: Summarizer,
        normalizer: SummaryNormalizer,
        min_content_chars: int = 20,
        logger: logging.Logger | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.summarizer = summarizer
        self.normalizer = normalizer
        self.min_content_chars = min_content_chars
        self.logger = logger

    async def aggregate(self, sources: Iterable[Source]) -> list[NewsItem]:
        """Run one aggregation pass over all sources.

        Returns:
            NewsItems from every source, sorted descending by publish time
        """
        sources = list(sources)
        fetched_at = utc_now()
        with start_span(
            "news_digest.aggregate",
            kind="chain",
            input_value={"sources": [s.name for s in sources]},
        ) as span:
            per_source = await asyncio.gather(
                *(self._process_source(source) for source in sources)
            )
            items = [item for batch in per_source for item in batch]
            items = sort_items(items, fetched_at)
            set_span_output(span, {"total": len(items)})

        log_event(
            self.logger,
            "Aggregation complete",
            event="aggregation_complete",
            sources=len(sources),
            total=len(items),
        )
        return items

    async def _process_source(self, source: Source) -> list[NewsItem]:
        try:
            result = await self.fetcher.fetch(source)
            if not result.entries:
                return []
            built = await asyncio.gather(
                *(self._process_entry(source, entry) for entry in result.entries)
            )
        except Exception as exc:  # noqa: BLE001
            log_event(
                self.logger,
                f"Source {source.name} failed",
                level=logging.ERROR,
                event="source_failed",
                source=source.name,
                error=f"{type(exc).__name__}: {exc}",
            )
            return []
        items = [item for item in built if item is not None]
        log_event(
            self.logger,
            f"Source {source.name} done",
            event="source_done",
            source=source.name,
            entries=len(result.entries),
            kept=len(items),
        )
        return items

    async def _process_entry(self, source: Source, entry: RawEntry) -> NewsItem | None:
        title = (entry.title or "").strip()
        link = (entry.link or "").strip()
        try:
            if not title or not link:
                return self._drop(source, entry, "missing_title_or_link")

            content = select_content(entry, self.min_content_chars)
            if not content:
                return self._drop(source, entry, "empty_content")

            outcome = await self.summarizer.summarize(content, title)
            if outcome.text is None:
                return self._drop(source, entry, "summary_failed", error=outcome.error)

            if outcome.status is SummaryStatus.GENERATED:
                summary = self.normalizer.normalize(outcome.text)
            else:
                summary = self.normalizer.finalize(outcome.text)
            if not summary:
                return self._drop(source, entry, f"summary_rejected_{outcome.status.value}")
        except Exception as exc:  # noqa: BLE001
            return self._drop(source, entry, "entry_error", error=f"{type(exc).__name__}: {exc}")

        return NewsItem(
            title=title,
            link=link,
            source=source.name,
            pub_date=entry.published or utc_now().isoformat(),
            summary=summary,
        )

    def _drop(
        self,
        source: Source,
        entry: RawEntry,
        reason: str,
        error: str | None = None,
    ) -> None:
        log_event(
            self.logger,
            "Entry dropped",
            level=logging.DEBUG if error is None else logging.WARNING,
            event="entry_dropped",
            source=source.name,
            title=entry.title,
            reason=reason,
            error=error,
        )
        return None


def sort_items(items: list[NewsItem], fallback: datetime | None = None) -> list[NewsItem]:
    """Sort newest first; unparsable timestamps count as `fallback`."""
    default = fallback or utc_now()
    return sorted(
        items,
        key=lambda item: parse_timestamp(item.pub_date) or default,
        reverse=True,
    )


def build_aggregator(
    cfg: AppConfig,
    http_client: httpx.AsyncClient,
    feed_client: FeedClient | None = None,
    logger: logging.Logger | None = None,
    llm_logger: logging.Logger | None = None,
    use_provider: bool = True,
) -> Aggregator:
    """Wire an Aggregator from config and shared collaborators."""
    provider = create_provider(cfg, http_client, llm_logger) if use_provider else None
    log_event(
        logger,
        "Summarizer mode",
        event="summarizer_mode",
        mode="provider" if provider else "extractive",
        provider=cfg.provider.name if provider else None,
    )
    fetcher = FeedFetcher(feed_client or HttpFeedClient(http_client, cfg.fetch), cfg.fetch, logger)
    summarizer = Summarizer(cfg.summary, provider, logger)
    normalizer = SummaryNormalizer(cfg.normalizer)
    return Aggregator(
        fetcher,
        summarizer,
        normalizer,
        min_content_chars=cfg.summary.min_content_chars,
        logger=logger,
    )


async def aggregate_news(
    cfg: AppConfig,
    feed_client: FeedClient | None = None,
    http_client: httpx.AsyncClient | None = None,
    logger: logging.Logger | None = None,
    llm_logger: logging.Logger | None = None,
    use_provider: bool = True,
) -> list[NewsItem]:
    """Aggregate all configured sources, owning the HTTP client if none is given."""
    if http_client is not None:
        aggregator = build_aggregator(
            cfg, http_client, feed_client, logger, llm_logger, use_provider
        )
        return await aggregator.aggregate(cfg.sources)

    async with httpx.AsyncClient(trust_env=cfg.fetch.trust_env) as client:
        aggregator = build_aggregator(cfg, client, feed_client, logger, llm_logger, use_provider)
        return await aggregator.aggregate(cfg.sources)


def run_pipeline(
    cfg: AppConfig,
    log_dir: Path | None = None,
    use_provider: bool = True,
) -> FeedsResponse:
    """Synchronous entry point: set up logging/tracing and run one pass.

    Args:
        cfg: Application configuration
        log_dir: Directory for run/LLM log files (file logging is skipped if None)
        use_provider: Set False to force extractive summaries

    Returns:
        FeedsResponse with status 200 and the feed list, or 500 on total failure
    """
    logger = setup_logging(cfg.logging, log_dir)
    llm_logger = setup_llm_logger(cfg.logging, log_dir)
    setup_langfuse(cfg.langfuse)
    log_event(
        logger,
        "Pipeline start",
        event="pipeline_start",
        sources=[s.name for s in cfg.sources],
    )

    async def _aggregate() -> list[NewsItem]:
        return await aggregate_news(
            cfg, logger=logger, llm_logger=llm_logger, use_provider=use_provider
        )

    return asyncio.run(build_feeds_response(_aggregate, logger))

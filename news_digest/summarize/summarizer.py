"""
Summary acquisition with bounded retry and extractive fallback.

Summarizer.summarize always resolves to one of three terminal states:

- GENERATED: the provider answered; text is raw model output to be normalized.
- FALLBACK: no provider is configured, or every attempt failed and the
  config asks for a fallback; text is an extractive summary.
- FAILED: the provider answered with an unusable body, or every attempt
  failed and the config asks for null; text is None.

Provider errors never propagate past this module.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import AsyncExitStack

from ..config import SummaryConfig
from ..core.types import SummaryOutcome, SummaryStatus
from ..errors import ProviderResponseError, ProviderTransportError
from ..llm.providers.base import SummaryProvider
from ..utils.logging import log_event
from .extractive import extract_leading_sentences


FAILURE_MODES = ("fallback", "null")


class Summarizer:
    """Summarize article content via a provider, falling back to extraction."""

    def __init__(
        self,
        cfg: SummaryConfig,
        provider: SummaryProvider | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        if cfg.on_provider_failure not in FAILURE_MODES:
            raise ValueError(
                f"on_provider_failure must be one of {FAILURE_MODES}, got {cfg.on_provider_failure!r}"
            )
        self.cfg = cfg
        self.provider = provider
        self.logger = logger
        self._semaphore = asyncio.Semaphore(cfg.max_concurrency) if cfg.max_concurrency > 0 else None

    @property
    def uses_provider(self) -> bool:
        return self.provider is not None

    def fallback(self, content: str) -> str:
        return extract_leading_sentences(
            content,
            sentences=self.cfg.fallback_sentences,
            max_chars=self.cfg.fallback_max_chars,
        )

    async def summarize(self, content: str, title: str | None = None) -> SummaryOutcome:
        """Produce a summary outcome for one article.

        Args:
            content: Plain-text article content
            title: Article title, used for logging and tracing only

        Returns:
            SummaryOutcome in one of the GENERATED/FALLBACK/FAILED states
        """
        if self.provider is None:
            return SummaryOutcome(status=SummaryStatus.FALLBACK, text=self.fallback(content))

        async with AsyncExitStack() as stack:
            if self._semaphore is not None:
                await stack.enter_async_context(self._semaphore)
            return await self._attempt(content, title)

    async def _attempt(self, content: str, title: str | None) -> SummaryOutcome:
        max_attempts = max(0, self.cfg.retries) + 1
        last_error: str | None = None

        for attempt in range(1, max_attempts + 1):
            try:
                text = await asyncio.wait_for(
                    self.provider.generate_summary(content, title),
                    timeout=self.cfg.timeout_seconds,
                )
                return SummaryOutcome(
                    status=SummaryStatus.GENERATED,
                    text=text,
                    attempts=attempt,
                )
            except ProviderResponseError as exc:
                log_event(
                    self.logger,
                    "Provider returned an unusable response",
                    level=logging.WARNING,
                    event="summary_invalid_response",
                    title=title,
                    error=str(exc),
                )
                return SummaryOutcome(
                    status=SummaryStatus.FAILED,
                    text=None,
                    attempts=attempt,
                    error=str(exc),
                )
            except (ProviderTransportError, asyncio.TimeoutError) as exc:
                last_error = str(exc) or type(exc).__name__
                log_event(
                    self.logger,
                    "Provider attempt failed",
                    level=logging.WARNING,
                    event="summary_attempt_failed",
                    title=title,
                    attempt=attempt,
                    max_attempts=max_attempts,
                    error=last_error,
                )
                if attempt < max_attempts:
                    await asyncio.sleep(self.cfg.retry_backoff_seconds)

        if self.cfg.on_provider_failure == "fallback":
            return SummaryOutcome(
                status=SummaryStatus.FALLBACK,
                text=self.fallback(content),
                attempts=max_attempts,
                error=last_error,
            )
        return SummaryOutcome(
            status=SummaryStatus.FAILED,
            text=None,
            attempts=max_attempts,
            error=last_error,
        )

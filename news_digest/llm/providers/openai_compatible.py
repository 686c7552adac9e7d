"""OpenAI-compatible chat completion provider (SiliconFlow, OpenAI, ...)."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ...config import LoggingConfig, NormalizerConfig, ProviderConfig, SummaryConfig
from ...errors import ProviderResponseError, ProviderTransportError
from ...utils.logging import log_event, redact_text, truncate_text
from ..prompts import build_summary_messages
from ..tracing import record_span_error, set_span_output, start_span
from .base import SummaryProvider


class OpenAICompatibleProvider(SummaryProvider):
    """Summarize articles through a /chat/completions endpoint."""

    def __init__(
        self,
        cfg: ProviderConfig,
        summary_cfg: SummaryConfig,
        normalizer_cfg: NormalizerConfig,
        api_key: str | None,
        client: httpx.AsyncClient,
        log_cfg: LoggingConfig | None = None,
        llm_logger: logging.Logger | None = None,
    ):
        if not api_key:
            raise ValueError("Missing provider API key")
        self.cfg = cfg
        self.summary_cfg = summary_cfg
        self.normalizer_cfg = normalizer_cfg
        self.api_key = api_key
        self.client = client
        self.log_cfg = log_cfg or LoggingConfig()
        self.llm_logger = llm_logger

    async def generate_summary(self, content: str, title: str | None = None) -> str:
        messages = build_summary_messages(content, self.summary_cfg, self.normalizer_cfg)
        payload = {
            "model": self.cfg.model,
            "messages": messages,
            "max_tokens": self.cfg.max_tokens,
            "temperature": self.cfg.temperature,
            "top_p": self.cfg.top_p,
        }
        with start_span(
            "openai_compatible.generate_summary",
            kind="llm",
            input_value=messages[1]["content"],
            attributes={
                "llm.model": self.cfg.model,
                "llm.provider": self.cfg.name,
                "article.title": title,
            },
        ) as span:
            try:
                data = await self._post(payload)
                text = _extract_text(data)
            except (ProviderTransportError, ProviderResponseError) as exc:
                record_span_error(span, exc)
                self._log_llm_response(title, status=_status_for(exc), content=str(exc))
                raise
            set_span_output(span, text)
            self._log_llm_response(title, status="ok", content=text)
            return text

    async def _post(self, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.cfg.base_url.rstrip('/')}/chat/completions"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        try:
            resp = await self.client.post(
                url,
                json=payload,
                headers=headers,
                timeout=self.summary_cfg.timeout_seconds,
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise ProviderTransportError(
                f"HTTP {exc.response.status_code}: {exc.response.text[:200]}"
            ) from exc
        except httpx.HTTPError as exc:
            raise ProviderTransportError(f"{type(exc).__name__}: {exc}") from exc

        try:
            data = resp.json()
        except ValueError as exc:
            raise ProviderResponseError(f"Response is not JSON: {resp.text[:200]}") from exc
        if not isinstance(data, dict):
            raise ProviderResponseError("Response is not a JSON object")
        return data

    def _log_llm_response(self, title: str | None, status: str, content: str) -> None:
        if self.llm_logger is None:
            return
        redaction = self.log_cfg.llm_log_redaction
        log_event(
            self.llm_logger,
            "LLM response",
            event="llm_summary_response",
            status=status,
            model=self.cfg.model,
            article_title=title,
            raw_response=truncate_text(redact_text(content, redaction)),
        )


def _extract_text(data: dict[str, Any]) -> str:
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as exc:
        raise ProviderResponseError("Response lacks choices[0].message.content") from exc
    if not isinstance(content, str) or not content.strip():
        raise ProviderResponseError("Response content is empty")
    return content


def _status_for(exc: Exception) -> str:
    if isinstance(exc, ProviderResponseError):
        return "parse_error"
    return "provider_error"

"""Provider factory and registry for swappable generation backends."""

from __future__ import annotations

import logging

import httpx

from ...config import AppConfig, get_api_key
from .base import SummaryProvider
from .openai_compatible import OpenAICompatibleProvider


ProviderBuilder = type[SummaryProvider]

_PROVIDER_REGISTRY: dict[str, ProviderBuilder] = {
    "siliconflow": OpenAICompatibleProvider,
    "openai": OpenAICompatibleProvider,
    "openai_compatible": OpenAICompatibleProvider,
    "openai-compatible": OpenAICompatibleProvider,
}


def available_providers() -> list[str]:
    """Return the set of registered provider names."""
    return sorted(_PROVIDER_REGISTRY.keys())


def create_provider(
    cfg: AppConfig,
    client: httpx.AsyncClient,
    llm_logger: logging.Logger | None = None,
) -> SummaryProvider | None:
    """Build a provider instance from runtime config.

    Returns None when no API key is configured; callers then summarize with
    the extractive fallback only.
    """
    name = cfg.provider.name.lower().strip()
    builder = _PROVIDER_REGISTRY.get(name)
    if builder is None:
        supported = ", ".join(available_providers())
        raise ValueError(f"Unsupported provider: {cfg.provider.name}. Supported: {supported}")
    api_key = get_api_key(cfg.provider)
    if not api_key:
        return None
    return builder(
        cfg.provider,
        cfg.summary,
        cfg.normalizer,
        api_key,
        client,
        cfg.logging,
        llm_logger,
    )

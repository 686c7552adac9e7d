"""
Configuration management using YAML files and dataclasses.

This module defines all configuration dataclasses and provides loading
from YAML files with defaults. Configuration sections:
- ProviderConfig: Text-generation provider settings
- FetchConfig: Feed fetching settings
- SummaryConfig: Summarization, retry and fallback settings
- NormalizerConfig: Model output cleaning rules
- LoggingConfig: Logging behavior
- LangfuseConfig: Langfuse tracing settings
- AppConfig: Root configuration container (includes the source list)
"""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from typing import Any

import yaml

from .core.types import Source


DEFAULT_SOURCES: tuple[Source, ...] = (
    Source(name="36kr", url="https://36kr.com/feed", extra_fields=("36kr",)),
    Source(name="geekpark", url="https://www.geekpark.net/rss", extra_fields=("geekpark",)),
    Source(name="cyzone", url="https://special.cyzone.cn/rss", extra_fields=("cyzone",)),
)


@dataclass
class ProviderConfig:
    """Configuration for the OpenAI-compatible text-generation service.

    Attributes:
        name: Provider name ("siliconflow", "openai", "openai_compatible")
        model: Model identifier sent with every request
        base_url: API base URL; "/chat/completions" is appended
        api_key: Optional inline API key (overrides env var)
        api_key_env: Optional environment variable name holding the key
        max_tokens: Generation budget per request
        temperature: Sampling temperature
        top_p: Nucleus sampling parameter
    """

    name: str = "siliconflow"
    model: str = "deepseek-ai/DeepSeek-R1-Distill-Llama-8B"
    base_url: str = "https://api.siliconflow.cn/v1"
    api_key: str | None = None
    api_key_env: str | None = None
    max_tokens: int = 256
    temperature: float = 0.1
    top_p: float = 0.5


@dataclass
class FetchConfig:
    """Configuration for feed fetching.

    Attributes:
        timeout_seconds: HTTP request timeout for feed documents
        user_agent: HTTP User-Agent header string
        trust_env: Whether to respect system proxy settings (feeds and provider share one client)
        entries_per_source: Maximum number of entries taken from each feed
    """

    timeout_seconds: float = 15.0
    user_agent: str = (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    )
    trust_env: bool = True
    entries_per_source: int = 5


@dataclass
class SummaryConfig:
    """Configuration for summarization.

    Attributes:
        timeout_seconds: Upper bound for a single provider attempt
        retries: Retry attempts after the first failed provider call
        retry_backoff_seconds: Fixed delay between attempts
        on_provider_failure: "fallback" (extractive summary) or "null" once retries run out
        fallback_sentences: Number of leading sentences kept by the extractive fallback
        fallback_max_chars: Truncation budget when no sentence boundary exists
        min_content_chars: Content fields must be longer than this to be selected
        max_input_chars: Maximum characters of article text sent to the provider
        summary_char_limit: Length limit stated in the prompt
        max_concurrency: Concurrent provider calls (0 = unbounded)
    """

    timeout_seconds: float = 10.0
    retries: int = 1
    retry_backoff_seconds: float = 1.0
    on_provider_failure: str = "fallback"
    fallback_sentences: int = 2
    fallback_max_chars: int = 150
    min_content_chars: int = 20
    max_input_chars: int = 4000
    summary_char_limit: int = 100
    max_concurrency: int = 0


@dataclass
class NormalizerConfig:
    """Rules used to clean raw model output.

    The marker and keyword lists are tuned to the working language of the
    configured feeds; false positives and negatives are expected.

    Attributes:
        tag: Delimiter tag name the prompt asks the model to wrap its answer in
        max_chars: Longest accepted summary
        min_chars: Shorter tag payloads fall back to the whole pre-tag text
        terminal_marks: Characters that end a sentence
        default_terminal: Mark appended to accepted summaries lacking one
        strip_prefix: Literal prefix removed from the start of the output
        discourse_markers: Sentences starting with these are dropped
        leakage_keywords: Any of these anywhere rejects the output
    """

    tag: str = "summary"
    max_chars: int = 200
    min_chars: int = 10
    terminal_marks: str = "。！？.!?"
    default_terminal: str = "。"
    strip_prefix: str = "AI Summary:"
    discourse_markers: list[str] = field(
        default_factory=lambda: [
            "现在开始处理",
            "首先",
            "接下来",
            "然后",
            "需要",
            "我们要",
            "让我们",
            "好的",
            "确保",
            "现在",
            "最后",
            "First,",
            "Next,",
            "Then,",
            "Finally,",
            "We need to",
            "Let's",
            "Let me",
        ]
    )
    leakage_keywords: list[str] = field(
        default_factory=lambda: [
            "处理",
            "总结一下",
            "我来",
            "整理",
            "思考",
            "格式要求",
            "标签包裹",
            "不添加",
            "<think>",
            "</think>",
            "let me summarize",
            "format requirement",
            "thinking process",
        ]
    )


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to console
        file: Whether to log to file (requires a log directory)
        format: Log file format ("jsonl" or "plain")
        filename: Name of the main log file
        llm_log_enabled: Whether to record raw model responses separately
        llm_log_redaction: Redaction mode for LLM logs ("none", "redact_content", "redact_urls_authors")
        llm_log_file: Name of the LLM log file
    """

    level: str = "INFO"
    console: bool = True
    file: bool = False
    format: str = "jsonl"
    filename: str = "run.jsonl"
    llm_log_enabled: bool = True
    llm_log_redaction: str = "redact_urls_authors"
    llm_log_file: str = "llm.jsonl"


@dataclass
class LangfuseConfig:
    """Configuration for Langfuse tracing.

    Attributes:
        enabled: Whether to enable Langfuse tracing
        public_key: Langfuse public key (optional)
        secret_key: Langfuse secret key (optional)
        base_url: Langfuse base URL (optional)
        environment: Langfuse environment label (optional)
        release: Langfuse release identifier (optional)
        timeout_seconds: Timeout for Langfuse ingestion requests
        redaction: Redaction mode for prompt/response payloads
        max_text_chars: Maximum characters for prompt/response payloads
    """

    enabled: bool = False
    public_key: str | None = None
    secret_key: str | None = None
    base_url: str | None = None
    environment: str | None = None
    release: str | None = None
    timeout_seconds: int = 30
    redaction: str = "redact_urls_authors"
    max_text_chars: int = 20000


@dataclass
class AppConfig:
    """Root configuration container aggregating all config sections."""

    provider: ProviderConfig = field(default_factory=ProviderConfig)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    summary: SummaryConfig = field(default_factory=SummaryConfig)
    normalizer: NormalizerConfig = field(default_factory=NormalizerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    langfuse: LangfuseConfig = field(default_factory=LangfuseConfig)
    sources: list[Source] = field(default_factory=lambda: list(DEFAULT_SOURCES))


_SECTIONS: dict[str, type] = {
    "provider": ProviderConfig,
    "fetch": FetchConfig,
    "summary": SummaryConfig,
    "normalizer": NormalizerConfig,
    "logging": LoggingConfig,
    "langfuse": LangfuseConfig,
}


def load_config(path: str | None) -> AppConfig:
    """Load configuration from a YAML file with defaults."""
    if not path:
        return AppConfig()

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    return _merge_config(AppConfig(), raw)


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Merge raw YAML config into base AppConfig."""
    data = _asdict(base)
    for key, value in raw.items():
        if key not in data:
            continue
        if isinstance(value, dict) and isinstance(data[key], dict):
            data[key].update(value)
        else:
            data[key] = value
    return _fromdict(data)


def _asdict(cfg: AppConfig) -> dict[str, Any]:
    """Convert AppConfig to nested dictionary."""
    data: dict[str, Any] = {}
    for name in _SECTIONS:
        section = getattr(cfg, name)
        data[name] = dict(vars(section))
    data["sources"] = [
        {"name": s.name, "url": s.url, "extra_fields": list(s.extra_fields)}
        for s in cfg.sources
    ]
    return data


def _fromdict(data: dict[str, Any]) -> AppConfig:
    """Reconstruct AppConfig from nested dictionary."""
    sections = {name: cls(**data[name]) for name, cls in _SECTIONS.items()}
    return AppConfig(sources=_parse_sources(data.get("sources") or []), **sections)


def _parse_sources(raw: Any) -> list[Source]:
    """Accept either a list of {name, url} mappings or a name -> url mapping."""
    if isinstance(raw, dict):
        raw = [{"name": name, "url": url} for name, url in raw.items()]
    sources: list[Source] = []
    for item in raw:
        if isinstance(item, Source):
            sources.append(item)
            continue
        name = str(item.get("name") or "").strip()
        url = str(item.get("url") or "").strip()
        if not name or not url:
            raise ValueError(f"Source entries need both name and url: {item!r}")
        extra = tuple(str(f) for f in item.get("extra_fields") or ())
        sources.append(Source(name=name, url=url, extra_fields=extra))
    return sources


def get_api_key(cfg: ProviderConfig) -> str | None:
    """Get API key from inline config or environment variable."""
    if cfg.api_key:
        return cfg.api_key
    if cfg.api_key_env:
        return os.getenv(cfg.api_key_env) or None
    defaults = {
        "siliconflow": "SILICONFLOW_API_KEY",
        "openai": "OPENAI_API_KEY",
        "openai_compatible": "OPENAI_API_KEY",
        "openai-compatible": "OPENAI_API_KEY",
    }
    env_name = defaults.get(cfg.name.lower(), "SILICONFLOW_API_KEY")
    return os.getenv(env_name) or None


def get_langfuse_base_url(cfg: LangfuseConfig) -> str | None:
    """Get Langfuse base URL from inline config or environment variable."""
    if cfg.base_url:
        return cfg.base_url
    return os.getenv("LANGFUSE_BASE_URL")

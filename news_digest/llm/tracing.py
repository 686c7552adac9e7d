"""
Langfuse tracing for aggregation runs and provider calls.

Spans are only emitted when tracing is enabled, credentials are present and
the optional `langfuse` package is installed. Otherwise every helper here is
a no-op and `start_span` yields None.
"""

from __future__ import annotations

from contextlib import contextmanager, suppress
import json
import os
from typing import Any, Iterator

from ..config import LangfuseConfig, get_langfuse_base_url
from ..utils.logging import redact_text, truncate_text

_TRACER = None
_CFG: LangfuseConfig | None = None


def setup_langfuse(cfg: LangfuseConfig) -> None:
    """Initialize Langfuse tracing if enabled and credentials are available."""
    global _TRACER, _CFG  # noqa: PLW0603
    _CFG = cfg
    _TRACER = None
    if not cfg.enabled:
        return

    public_key = cfg.public_key or os.getenv("LANGFUSE_PUBLIC_KEY")
    secret_key = cfg.secret_key or os.getenv("LANGFUSE_SECRET_KEY")
    if not public_key or not secret_key:
        return

    try:
        from langfuse import Langfuse  # type: ignore
    except ImportError:
        return

    _TRACER = Langfuse(
        public_key=public_key,
        secret_key=secret_key,
        base_url=get_langfuse_base_url(cfg),
        environment=cfg.environment or os.getenv("LANGFUSE_ENVIRONMENT"),
        release=cfg.release or os.getenv("LANGFUSE_RELEASE"),
        timeout=cfg.timeout_seconds,
    )


def get_tracer():
    return _TRACER


@contextmanager
def start_span(
    name: str,
    kind: str,
    input_value: str | dict[str, Any] | None = None,
    attributes: dict[str, Any] | None = None,
) -> Iterator[Any | None]:
    """Run the block inside a Langfuse span, or yield None when tracing is off.

    Tracing failures never reach the caller; exceptions raised inside the
    block propagate unchanged.
    """
    if _TRACER is None:
        yield None
        return

    try:
        span_cm = _TRACER.start_as_current_span(
            name=name,
            input=_payload(input_value),
            metadata=_span_metadata(kind, attributes),
        )
        span = span_cm.__enter__()
    except Exception:  # noqa: BLE001
        yield None
        return

    try:
        yield span
    finally:
        with suppress(Exception):
            span_cm.__exit__(None, None, None)


def set_span_output(span: Any | None, output_value: str | dict[str, Any]) -> None:
    if span is None:
        return
    with suppress(Exception):
        span.update(output=_payload(output_value))


def record_span_error(span: Any | None, exc: BaseException) -> None:
    if span is None:
        return
    with suppress(Exception):
        span.update(level="ERROR", status_message=str(exc))


def flush() -> None:
    """Send pending traces; call before the process exits."""
    if _TRACER is None:
        return
    with suppress(Exception):
        _TRACER.flush()


def _payload(value: str | dict[str, Any] | None) -> str | None:
    """Serialize a span payload, applying the configured redaction and size cap."""
    if value is None:
        return None
    text = value if isinstance(value, str) else json.dumps(value, ensure_ascii=False, default=str)
    if _CFG is None:
        return text
    return truncate_text(redact_text(text, _CFG.redaction), _CFG.max_text_chars)


def _span_metadata(kind: str, attributes: dict[str, Any] | None) -> dict[str, Any]:
    metadata: dict[str, Any] = {"span.kind": kind}
    for key, value in (attributes or {}).items():
        if value is None:
            continue
        metadata[key] = value if isinstance(value, (str, int, float, bool)) else str(value)
    return metadata

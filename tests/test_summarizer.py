"""Tests for provider calls, retries and the extractive fallback."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from news_digest.config import NormalizerConfig, ProviderConfig, SummaryConfig
from news_digest.core.types import SummaryStatus
from news_digest.errors import ProviderResponseError, ProviderTransportError
from news_digest.llm.providers.base import SummaryProvider
from news_digest.llm.providers.openai_compatible import OpenAICompatibleProvider
from news_digest.summarize.summarizer import Summarizer


CONTENT = "A大涨。B持平。C下跌。"


def _completion(text: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": text}}]}


def _run_with_transport(handler, summary_cfg: SummaryConfig, content: str = CONTENT):
    async def _run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            provider = OpenAICompatibleProvider(
                ProviderConfig(api_key="test-key"),
                summary_cfg,
                NormalizerConfig(),
                "test-key",
                client,
            )
            return await Summarizer(summary_cfg, provider).summarize(content, "标题")

    return asyncio.run(_run())


class ScriptedProvider(SummaryProvider):
    """Replays a list of results; exceptions are raised, strings returned."""

    def __init__(self, script):
        self.script = list(script)
        self.calls = 0

    async def generate_summary(self, content, title=None):
        self.calls += 1
        step = self.script.pop(0)
        if isinstance(step, BaseException):
            raise step
        return step


class SlowProvider(SummaryProvider):
    async def generate_summary(self, content, title=None):
        await asyncio.sleep(1)
        return "too late"


def test_without_provider_uses_extractive_fallback():
    outcome = asyncio.run(Summarizer(SummaryConfig()).summarize(CONTENT))
    assert outcome.status is SummaryStatus.FALLBACK
    assert outcome.text == "A大涨。B持平。"
    assert outcome.attempts == 0


def test_without_provider_null_mode_still_falls_back():
    cfg = SummaryConfig(on_provider_failure="null")
    outcome = asyncio.run(Summarizer(cfg).summarize(CONTENT))
    assert outcome.status is SummaryStatus.FALLBACK
    assert outcome.text is not None


def test_rejects_unknown_failure_mode():
    with pytest.raises(ValueError, match="on_provider_failure"):
        Summarizer(SummaryConfig(on_provider_failure="ignore"))


def test_provider_request_payload_and_success():
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=_completion("<summary>新品发布，价格下调。</summary>"))

    outcome = _run_with_transport(handler, SummaryConfig())

    assert outcome.status is SummaryStatus.GENERATED
    assert outcome.text == "<summary>新品发布，价格下调。</summary>"
    assert outcome.attempts == 1

    assert len(requests) == 1
    request = requests[0]
    assert str(request.url) == "https://api.siliconflow.cn/v1/chat/completions"
    assert request.headers["Authorization"] == "Bearer test-key"
    body = json.loads(request.content)
    assert body["model"] == "deepseek-ai/DeepSeek-R1-Distill-Llama-8B"
    assert body["max_tokens"] == 256
    assert body["temperature"] == 0.1
    assert body["top_p"] == 0.5
    assert [m["role"] for m in body["messages"]] == ["system", "user", "assistant"]
    assert CONTENT in body["messages"][1]["content"]
    assert "<summary>" in body["messages"][2]["content"]


def test_input_is_trimmed_to_max_input_chars():
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(200, json=_completion("<summary>好消息传来。</summary>"))

    _run_with_transport(handler, SummaryConfig(max_input_chars=10), content="字" * 50)

    user_message = bodies[0]["messages"][1]["content"]
    assert "字" * 10 in user_message
    assert "字" * 11 not in user_message


def test_retries_after_transport_error_then_succeeds():
    calls = {"n": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["n"] += 1
        if calls["n"] == 1:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(200, json=_completion("<summary>恢复正常了。</summary>"))

    outcome = _run_with_transport(handler, SummaryConfig(retry_backoff_seconds=0))

    assert outcome.status is SummaryStatus.GENERATED
    assert outcome.attempts == 2
    assert calls["n"] == 2


def test_exhausted_retries_fall_back_to_extractive_summary():
    calls = {"n": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["n"] += 1
        return httpx.Response(503, text="overloaded")

    outcome = _run_with_transport(handler, SummaryConfig(retries=2, retry_backoff_seconds=0))

    assert calls["n"] == 3
    assert outcome.status is SummaryStatus.FALLBACK
    assert outcome.text == "A大涨。B持平。"
    assert outcome.attempts == 3
    assert "503" in outcome.error


def test_exhausted_retries_in_null_mode_fail():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="boom")

    cfg = SummaryConfig(retry_backoff_seconds=0, on_provider_failure="null")
    outcome = _run_with_transport(handler, cfg)

    assert outcome.status is SummaryStatus.FAILED
    assert outcome.text is None


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, json={"choices": []}),
        httpx.Response(200, json={"choices": [{"message": {"content": "   "}}]}),
        httpx.Response(200, json=["not", "an", "object"]),
        httpx.Response(200, text="<html>gateway</html>"),
    ],
)
def test_unusable_success_response_fails_without_retry(response):
    calls = {"n": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["n"] += 1
        return response

    outcome = _run_with_transport(handler, SummaryConfig(retries=3, retry_backoff_seconds=0))

    assert calls["n"] == 1
    assert outcome.status is SummaryStatus.FAILED
    assert outcome.text is None
    assert outcome.attempts == 1


def test_attempt_timeout_counts_as_failure():
    cfg = SummaryConfig(timeout_seconds=0.01, retries=0)
    outcome = asyncio.run(Summarizer(cfg, SlowProvider()).summarize(CONTENT))

    assert outcome.status is SummaryStatus.FALLBACK
    assert outcome.text == "A大涨。B持平。"
    assert outcome.attempts == 1


def test_scripted_provider_errors_are_classified():
    provider = ScriptedProvider(
        [ProviderTransportError("down"), ProviderResponseError("garbage")]
    )
    cfg = SummaryConfig(retries=3, retry_backoff_seconds=0)
    outcome = asyncio.run(Summarizer(cfg, provider).summarize(CONTENT))

    assert provider.calls == 2
    assert outcome.status is SummaryStatus.FAILED
    assert outcome.error == "garbage"


def test_concurrency_limit_serializes_provider_calls():
    active = {"now": 0, "peak": 0}

    class TrackingProvider(SummaryProvider):
        async def generate_summary(self, content, title=None):
            active["now"] += 1
            active["peak"] = max(active["peak"], active["now"])
            await asyncio.sleep(0.01)
            active["now"] -= 1
            return "<summary>并发受限。</summary>"

    async def _run():
        summarizer = Summarizer(SummaryConfig(max_concurrency=1), TrackingProvider())
        return await asyncio.gather(*(summarizer.summarize(CONTENT) for _ in range(4)))

    outcomes = asyncio.run(_run())

    assert all(o.status is SummaryStatus.GENERATED for o in outcomes)
    assert active["peak"] == 1

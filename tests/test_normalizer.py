"""Tests for cleaning raw model output into summaries."""

from __future__ import annotations

import pytest

from news_digest.config import NormalizerConfig
from news_digest.core.normalizer import SummaryNormalizer


@pytest.fixture
def normalizer():
    return SummaryNormalizer()


def test_strips_marker_sentence_before_tag(normalizer):
    raw = "首先我们分析一下。<summary>新品发布，价格下调。</summary>"
    assert normalizer.normalize(raw) == "新品发布，价格下调。"


@pytest.mark.parametrize(
    "raw",
    [
        "<summary>我在思考这条新闻的重点。</summary>",
        "思考：新品发布，价格下调。",
        "新品发布。我来总结一下。",
        "<think>the user wants a summary</think><summary>新品发布，价格下调。</summary>",
        "Let me summarize: the product launched today.",
    ],
)
def test_leakage_keyword_rejects_output(normalizer, raw):
    assert normalizer.normalize(raw) == ""


def test_wrapped_text_returns_inner_text(normalizer):
    raw = "<summary>苹果发布了新款手机，售价下调。</summary>"
    assert normalizer.normalize(raw) == "苹果发布了新款手机，售价下调。"


def test_strips_ai_summary_prefix(normalizer):
    raw = "AI Summary: <summary>苹果发布了新款手机，售价下调。</summary>"
    assert normalizer.normalize(raw) == "苹果发布了新款手机，售价下调。"


def test_marker_inside_sentence_is_kept(normalizer):
    raw = "<summary>公司需要新一轮融资来扩张业务。</summary>"
    assert normalizer.normalize(raw) == "公司需要新一轮融资来扩张业务。"


def test_marker_without_terminal_punctuation_is_left_alone(normalizer):
    # No terminal mark follows "然后", so the fragment survives stage two and
    # the tagged payload is used as-is.
    raw = "<summary>然后新品发布价格下调</summary>"
    assert normalizer.normalize(raw) == "然后新品发布价格下调。"


def test_truncated_output_keeps_complete_sentences(normalizer):
    raw = "新品今天正式发布。价格下调了两"
    assert normalizer.normalize(raw) == "新品今天正式发布。"


def test_no_complete_sentence_is_rejected(normalizer):
    assert normalizer.normalize("价格下调了两") == ""


def test_appends_terminal_mark(normalizer):
    assert normalizer.normalize("<summary>新品发布价格下调</summary>") == "新品发布价格下调。"


def test_short_payload_falls_back_to_untagged_text(normalizer):
    raw = "新品今天正式发布，价格下调。<summary>好。</summary>"
    assert normalizer.normalize(raw) == "新品今天正式发布，价格下调。好。"


def test_rejects_over_long_summary(normalizer):
    fits = "<summary>" + "长" * 199 + "。</summary>"
    too_long = "<summary>" + "长" * 200 + "。</summary>"
    assert len(normalizer.normalize(fits)) == 200
    assert normalizer.normalize(too_long) == ""


def test_appended_mark_counts_towards_limit(normalizer):
    assert normalizer.normalize("<summary>" + "长" * 200 + "</summary>") == ""


def test_english_marker_sentence_is_removed(normalizer):
    raw = (
        "First, I will read the article. "
        "<summary>The company raised $10 million in new funding.</summary>"
    )
    assert normalizer.normalize(raw) == "The company raised $10 million in new funding."


def test_empty_and_none_input(normalizer):
    assert normalizer.normalize("") == ""
    assert normalizer.normalize(None) == ""
    assert normalizer.normalize("   ") == ""


def test_output_only_marker_sentences_is_rejected(normalizer):
    assert normalizer.normalize("首先阅读新闻。接下来提炼要点。") == ""


def test_accepted_outputs_are_well_formed(normalizer):
    samples = [
        "首先我们分析一下。<summary>新品发布，价格下调。</summary>",
        "<summary>新品发布价格下调</summary>",
        "新品今天正式发布。价格下调了两",
        "AI Summary: 市场回暖，多家公司股价上涨。",
        "<summary><summary>重复标签的总结内容很长。</summary>",
    ]
    for raw in samples:
        result = normalizer.normalize(raw)
        assert result, raw
        assert result[-1] in normalizer.cfg.terminal_marks
        assert len(result) <= normalizer.cfg.max_chars
        assert "<summary>" not in result
        assert "</summary>" not in result
        assert not normalizer.has_leakage(result)


def test_keyword_and_marker_sets_are_configurable():
    cfg = NormalizerConfig(discourse_markers=["据悉"], leakage_keywords=["禁词"])
    normalizer = SummaryNormalizer(cfg)

    assert normalizer.normalize("<summary>团队正在思考新方向。</summary>") == "团队正在思考新方向。"
    assert normalizer.normalize("<summary>这里有禁词出现。</summary>") == ""
    assert normalizer.normalize("据悉消息属实。<summary>新品发布，价格下调。</summary>") == (
        "新品发布，价格下调。"
    )


def test_finalize_keeps_terminated_text_that_fits(normalizer):
    assert normalizer.finalize("  工厂开始处理积压订单。  ") == "工厂开始处理积压订单。"


def test_finalize_terminates_unpunctuated_text(normalizer):
    assert normalizer.finalize("新品发布价格下调") == "新品发布价格下调。"


def test_finalize_keeps_longest_fitting_sentence_run(normalizer):
    first = "甲" * 150 + "。"
    second = "乙" * 40 + "！"
    third = "丙" * 30 + "。"
    assert normalizer.finalize(first + second + third) == first + second


def test_finalize_truncates_overlong_first_sentence(normalizer):
    result = normalizer.finalize("长" * 300 + "。短句。")
    assert result == "长" * 197 + "..."
    assert len(result) == normalizer.cfg.max_chars


def test_finalize_truncates_overlong_unpunctuated_text(normalizer):
    result = normalizer.finalize("字" * 250)
    assert len(result) <= normalizer.cfg.max_chars
    assert result.endswith("...")


def test_finalize_drops_stray_tags_and_blank_input(normalizer):
    assert normalizer.finalize("<summary>市场回暖。</summary>") == "市场回暖。"
    assert normalizer.finalize("   ") == ""
    assert normalizer.finalize(None) == ""


def test_finalize_appends_default_terminal_after_ellipsis_when_needed():
    normalizer = SummaryNormalizer(NormalizerConfig(terminal_marks="。！？", max_chars=10))
    result = normalizer.finalize("字" * 20)
    assert result == "字" * 6 + "...。"

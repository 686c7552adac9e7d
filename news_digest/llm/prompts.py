"""Prompt building for the summarization request."""

from __future__ import annotations

from ..config import NormalizerConfig, SummaryConfig


SYSTEM_PROMPT = "你是新闻总结机器人。你只会输出最终的新闻总结文本。你被禁止输出任何其他内容。"

USER_TEMPLATE = (
    "新闻内容如下：\n\n{content}\n\n"
    "[格式要求]\n"
    "输出格式：<{tag}>你的总结</{tag}>\n\n"
    "[输出要求]\n"
    "1. 字数限制：{limit}字以内\n"
    "2. 只允许输出<{tag}>标签内的内容\n"
    "3. 禁止输出任何标签外的文字\n"
    "4. 禁止输出思考过程"
)

ASSISTANT_PRIMER = "明白。我只会用<{tag}>标签包裹最终总结，不会输出任何其他内容。"


def build_summary_messages(
    content: str,
    summary_cfg: SummaryConfig,
    normalizer_cfg: NormalizerConfig,
) -> list[dict[str, str]]:
    """Build the ordered chat message list for one article.

    The trailing assistant turn primes the model to answer inside the
    delimiter tag only.
    """
    trimmed = content[: summary_cfg.max_input_chars]
    tag = normalizer_cfg.tag
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {
            "role": "user",
            "content": USER_TEMPLATE.format(
                content=trimmed,
                tag=tag,
                limit=summary_cfg.summary_char_limit,
            ),
        },
        {"role": "assistant", "content": ASSISTANT_PRIMER.format(tag=tag)},
    ]

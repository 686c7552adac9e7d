from news_digest.summarize.extractive import ELLIPSIS, extract_leading_sentences


def test_keeps_first_two_sentences():
    assert extract_leading_sentences("A大涨。B持平。C下跌。") == "A大涨。B持平。"


def test_sentence_count_is_configurable():
    assert extract_leading_sentences("A大涨。B持平。C下跌。", sentences=1) == "A大涨。"
    assert extract_leading_sentences("A大涨。B持平。C下跌。", sentences=5) == "A大涨。B持平。C下跌。"


def test_fewer_sentences_than_requested_keeps_text_up_to_last_boundary():
    assert extract_leading_sentences("唯一的一句话！后面没有结尾") == "唯一的一句话！"


def test_ascii_marks_need_following_whitespace():
    text = "Revenue rose 3.5 percent at example.com. Costs fell! Margins grew."
    assert extract_leading_sentences(text) == "Revenue rose 3.5 percent at example.com. Costs fell!"


def test_no_boundary_long_text_is_truncated_with_ellipsis():
    text = "字" * 200
    result = extract_leading_sentences(text, max_chars=150)
    assert result == "字" * 150 + ELLIPSIS


def test_no_boundary_short_text_still_gets_ellipsis():
    assert extract_leading_sentences("  没有句号的短文本  ") == "没有句号的短文本" + ELLIPSIS


def test_blank_input_returns_empty_string():
    assert extract_leading_sentences("") == ""
    assert extract_leading_sentences("   ") == ""

from WeChatFormat.markdown_parser import parse_markdown, resolve_inline
from WeChatFormat.model import InlineEmphasis, InlineLink, InlineText


def _non_empty(spans):
    return [span for span in spans if not (isinstance(span, InlineText) and not span.value)]


def test_plain_text_is_single_span():
    assert resolve_inline("plain text") == [InlineText("plain text")]
    assert resolve_inline("") == [InlineText("")]


def test_bold_span():
    spans = resolve_inline("Hello **world**")
    assert spans == [InlineText("Hello "), InlineEmphasis("world"), InlineText("")]
    assert _non_empty(spans) == [InlineText("Hello "), InlineEmphasis("world")]


def test_link_span():
    assert resolve_inline("See [docs](http://x.com) now") == [
        InlineText("See "),
        InlineLink(label="docs", href="http://x.com"),
        InlineText(" now"),
    ]


def test_adjacent_tokens_keep_empty_text_between():
    assert resolve_inline("[a](b)[c](d)") == [
        InlineText(""),
        InlineLink(label="a", href="b"),
        InlineText(""),
        InlineLink(label="c", href="d"),
        InlineText(""),
    ]
    assert resolve_inline("**a****b**") == [
        InlineText(""),
        InlineEmphasis("a"),
        InlineText(""),
        InlineEmphasis("b"),
        InlineText(""),
    ]


def test_emphasis_is_non_greedy():
    assert resolve_inline("**a** and **b**") == [
        InlineText(""),
        InlineEmphasis("a"),
        InlineText(" and "),
        InlineEmphasis("b"),
        InlineText(""),
    ]
    assert resolve_inline("***bold***") == [InlineText(""), InlineEmphasis("*bold"), InlineText("*")]


def test_empty_emphasis():
    assert resolve_inline("****") == [InlineText(""), InlineEmphasis(""), InlineText("")]


def test_bold_wrapping_link_is_emphasis():
    assert _non_empty(resolve_inline("**[x](y)**")) == [InlineEmphasis("[x](y)")]


def test_link_wrapping_bold_is_link():
    assert _non_empty(resolve_inline("[**x**](y)")) == [InlineLink(label="**x**", href="y")]


def test_leftmost_token_wins():
    assert _non_empty(resolve_inline("[a](b **c**)")) == [InlineLink(label="a", href="b **c**")]
    assert _non_empty(resolve_inline("**a [b](c)** d")) == [InlineEmphasis("a [b](c)"), InlineText(" d")]


def test_link_label_runs_to_first_bracket_paren():
    assert _non_empty(resolve_inline("[x]y](z)")) == [InlineLink(label="x]y", href="z")]
    assert _non_empty(resolve_inline("[[a](b)")) == [InlineLink(label="[a", href="b")]
    assert _non_empty(resolve_inline("[a](b))")) == [InlineLink(label="a", href="b"), InlineText(")")]


def test_unmatched_markers_stay_literal():
    for text in ["a ** b", "**", "***", "**open", "[label", "[label](open", "[a] (b)", "](x)"]:
        assert resolve_inline(text) == [InlineText(text)]


def test_tokens_do_not_cross_line_breaks():
    assert resolve_inline("**a\nb**") == [InlineText("**a\nb**")]
    assert resolve_inline("[a\n](b)") == [InlineText("[a\n](b)")]
    assert resolve_inline("[a](b\n)") == [InlineText("[a](b\n)")]


def test_images_are_not_special_inline():
    assert resolve_inline("see ![alt](a.png)") == [
        InlineText("see !"),
        InlineLink(label="alt", href="a.png"),
        InlineText(""),
    ]


def test_spans_reconstruct_source():
    samples = [
        "Hello **world**",
        "See [docs](http://x.com) now",
        "**[x](y)** and [**x**](y) then ** stray",
        "中文 **重点** 与 [链接](https://mp.weixin.qq.com)。",
        "***bold*** [a](b)[c](d) [broken](",
    ]
    for text in samples:
        spans = resolve_inline(text)
        assert "".join(span.to_markdown() for span in spans) == text
        assert len(spans) % 2 == 1


def test_resolver_is_repeatable():
    text = "a **b** [c](d)"
    assert resolve_inline(text) == resolve_inline(text)


def test_resolves_parsed_block_text():
    (paragraph,) = parse_markdown("正文 **重点** 段落")
    assert _non_empty(resolve_inline(paragraph.text)) == [
        InlineText("正文 "),
        InlineEmphasis("重点"),
        InlineText(" 段落"),
    ]


def test_long_run_of_open_brackets():
    text = "[" * 20000 + "](x)"
    assert _non_empty(resolve_inline(text)) == [InlineLink(label="[" * 19999, href="x")]
    assert resolve_inline("[" * 20000) == [InlineText("[" * 20000)]


def test_tokens_resume_after_line_break():
    assert resolve_inline("**a\n**b**") == [InlineText("**a\n"), InlineEmphasis("b"), InlineText("")]

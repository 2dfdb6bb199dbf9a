from __future__ import annotations

import logging
from typing import Iterable

from markdown_it import MarkdownIt
from markdown_it.common.utils import escapeHtml

from .markdown_parser import parse_markdown, resolve_inline
from .model import (
    Block,
    Blockquote,
    Heading,
    HorizontalRule,
    ImageBlock,
    InlineEmphasis,
    InlineLink,
    InlineSpan,
    InlineText,
    ListBlock,
    Paragraph,
)
from .themes import Theme, css_declarations

logger = logging.getLogger(__name__)

HR_STYLE = "border-top: 1px solid #eee; margin: 20px 0"

_md = MarkdownIt("commonmark")


def render_markdown(text: str, theme: Theme) -> str:
    return render_html(parse_markdown(text), theme)


def render_html(blocks: Iterable[Block], theme: Theme) -> str:
    """Render blocks as inline-styled HTML ready to paste into the WeChat editor."""
    parts = [_render_block(block, theme) for block in blocks]
    logger.debug("Rendered %d blocks with theme %s", len(parts), theme.id)
    body = "".join(parts)
    return f'<section style="{_style(theme, "container")}">{body}</section>'


def render_inline(spans: Iterable[InlineSpan], theme: Theme) -> str:
    parts: list[str] = []
    for span in spans:
        if isinstance(span, InlineText):
            if span.value:
                parts.append(escapeHtml(span.value))
        elif isinstance(span, InlineEmphasis):
            parts.append(f'<span style="{_style(theme, "strong")}">{escapeHtml(span.value)}</span>')
        elif isinstance(span, InlineLink):
            parts.append(_render_link(span, theme))
    return "".join(parts)


def _render_block(block: Block, theme: Theme) -> str:
    if isinstance(block, Heading):
        tag = f"h{block.level}"
        return _textual(tag, block.text, theme, tag)
    if isinstance(block, Blockquote):
        return _textual("blockquote", block.text, theme, "blockquote")
    if isinstance(block, Paragraph):
        return _textual("p", block.text, theme, "p")
    if isinstance(block, ImageBlock):
        return _render_image(block, theme)
    if isinstance(block, ListBlock):
        return _render_list(block, theme)
    if isinstance(block, HorizontalRule):
        return f'<hr style="{HR_STYLE}">'
    raise TypeError(f"Unsupported block: {type(block).__name__}")


def _textual(tag: str, text: str, theme: Theme, style_key: str) -> str:
    inner = render_inline(resolve_inline(text), theme)
    return f'<{tag} style="{_style(theme, style_key)}">{inner}</{tag}>'


def _render_list(block: ListBlock, theme: Theme) -> str:
    tag = "ol" if block.ordered else "ul"
    item_style = _style(theme, "listItem")
    items = []
    for idx, item in enumerate(block.items, start=1):
        prefix = f"{idx}. " if block.ordered else "• "
        inner = render_inline(resolve_inline(item), theme)
        items.append(f'<li style="{item_style}">{prefix}{inner}</li>')
    return f'<{tag} style="{_style(theme, "list")}">{"".join(items)}</{tag}>'


def _render_image(block: ImageBlock, theme: Theme) -> str:
    attrs = f'alt="{escapeHtml(block.alt)}" style="{_style(theme, "image")}"'
    src = _safe_url(block.src)
    if src is None:
        return f"<img {attrs}>"
    return f'<img src="{escapeHtml(src)}" {attrs}>'


def _render_link(link: InlineLink, theme: Theme) -> str:
    label = escapeHtml(link.label)
    href = _safe_url(link.href)
    if href is None:
        return label
    return (
        f'<a href="{escapeHtml(href)}" style="{_style(theme, "link")}" '
        f'target="_blank" rel="noopener noreferrer">{label}</a>'
    )


def _safe_url(url: str) -> str | None:
    normalized = _md.normalizeLink(url.strip())
    if not _md.validateLink(normalized):
        logger.debug("Dropping unsafe URL %r", url)
        return None
    return normalized


def _style(theme: Theme, key: str) -> str:
    return escapeHtml(css_declarations(theme.style(key)))

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from docx import Document as DocxDocument
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.image.exceptions import UnrecognizedImageError
from docx.shared import Cm

from . import docx_format
from .markdown_parser import resolve_inline
from .model import (
    Block,
    Blockquote,
    Heading,
    HorizontalRule,
    ImageBlock,
    InlineEmphasis,
    InlineLink,
    InlineText,
    ListBlock,
    Paragraph,
)
from .themes import Theme

logger = logging.getLogger(__name__)


@dataclass
class RenderState:
    theme: Theme
    asset_root: Path | None = None


def render_document(
    blocks: Iterable[Block],
    output_path: str | Path,
    theme: Theme,
    asset_root: Path | None = None,
) -> None:
    output_path = Path(output_path)
    state = RenderState(theme=theme, asset_root=asset_root)
    docx = DocxDocument()
    docx_format.apply_page_layout(docx)

    for block in blocks:
        _dispatch_block(docx, block, state)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    docx.save(output_path)


def _dispatch_block(docx: DocxDocument, block: Block, state: RenderState) -> None:
    if isinstance(block, Heading):
        _render_text_block(docx, block.text, f"h{block.level}", state)
    elif isinstance(block, Blockquote):
        paragraph = _render_text_block(docx, block.text, "blockquote", state)
        paragraph.paragraph_format.left_indent = Cm(docx_format.QUOTE_INDENT_CM)
    elif isinstance(block, Paragraph):
        _render_text_block(docx, block.text, "p", state)
    elif isinstance(block, ListBlock):
        _render_list(docx, block, state)
    elif isinstance(block, ImageBlock):
        _render_image_block(docx, block, state)
    elif isinstance(block, HorizontalRule):
        _render_horizontal_rule(docx)


def _block_style(state: RenderState, key: str) -> dict[str, str]:
    style = state.theme.style("container")
    style.update(state.theme.style(key))
    return style


def _render_text_block(docx: DocxDocument, text: str, style_key: str, state: RenderState, prefix: str = ""):
    style = _block_style(state, style_key)
    paragraph = docx.add_paragraph()
    if prefix:
        run = paragraph.add_run(docx_format.xml_text(prefix))
        docx_format.set_run_style(run, style)
    _add_inline_runs(paragraph, text, style, state)
    docx_format.apply_paragraph_style(paragraph, style)
    return paragraph


def _add_inline_runs(paragraph, text: str, base_style: dict[str, str], state: RenderState) -> None:
    for span in resolve_inline(text):
        if isinstance(span, InlineText):
            if not span.value:
                continue
            run = paragraph.add_run(docx_format.xml_text(span.value))
            docx_format.set_run_style(run, base_style)
        elif isinstance(span, InlineEmphasis):
            run = paragraph.add_run(docx_format.xml_text(span.value))
            docx_format.set_run_style(run, {**base_style, **state.theme.style("strong")})
        elif isinstance(span, InlineLink):
            run = paragraph.add_run(docx_format.xml_text(span.label or span.href))
            docx_format.set_run_style(run, {**base_style, **state.theme.style("link")}, underline=True)


def _render_list(docx: DocxDocument, block: ListBlock, state: RenderState) -> None:
    for idx, item in enumerate(block.items, start=1):
        prefix = f"{idx}. " if block.ordered else "• "
        paragraph = _render_text_block(docx, item, "listItem", state, prefix=prefix)
        paragraph.paragraph_format.left_indent = Cm(docx_format.LIST_INDENT_CM)
        paragraph.paragraph_format.first_line_indent = Cm(0)


def _render_horizontal_rule(docx: DocxDocument) -> None:
    paragraph = docx.add_paragraph()
    run = paragraph.add_run("-" * 20)
    docx_format.set_run_style(run, {"color": "#eeeeee"})
    paragraph.alignment = WD_ALIGN_PARAGRAPH.CENTER


def _render_image_block(docx: DocxDocument, block: ImageBlock, state: RenderState) -> None:
    image_path = Path(block.src)
    if state.asset_root:
        candidate = state.asset_root / block.src
        if candidate.exists():
            image_path = candidate

    paragraph = docx.add_paragraph()
    paragraph.alignment = WD_ALIGN_PARAGRAPH.CENTER
    run = paragraph.add_run()
    try:
        run.add_picture(str(image_path))
    except (OSError, UnrecognizedImageError):
        logger.warning("Image not embedded: %s", block.src)
        run.add_text(docx_format.xml_text(f"[Missing image: {block.src}]"))
    docx_format.set_run_style(run, _block_style(state, "p"))

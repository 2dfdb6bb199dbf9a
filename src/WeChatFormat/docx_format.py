from __future__ import annotations

import re
from typing import Mapping, Optional

from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Cm, Pt, RGBColor

# Narrow page, close to the width of the WeChat reading column.
PAGE_WIDTH_CM = 14.8
PAGE_HEIGHT_CM = 21.0
MARGIN_CM = 1.5

FONT_NAME = "Microsoft YaHei"
DEFAULT_FONT_SIZE_PT = 12
PX_TO_PT = 0.75
QUOTE_INDENT_CM = 0.75
LIST_INDENT_CM = 0.5

ALIGNMENTS = {
    "left": WD_ALIGN_PARAGRAPH.LEFT,
    "center": WD_ALIGN_PARAGRAPH.CENTER,
    "right": WD_ALIGN_PARAGRAPH.RIGHT,
    "justify": WD_ALIGN_PARAGRAPH.JUSTIFY,
}

_PX_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)px\s*$")
_HEX_RE = re.compile(r"^#([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")
_NUMBER_RE = re.compile(r"^\d+(?:\.\d+)?$")
# Characters outside the XML 1.0 Char production.
_XML_ILLEGAL_RE = re.compile("[^\t\n\r\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]")


def apply_page_layout(doc) -> None:
    section = doc.sections[0]
    section.page_width = Cm(PAGE_WIDTH_CM)
    section.page_height = Cm(PAGE_HEIGHT_CM)
    section.left_margin = Cm(MARGIN_CM)
    section.right_margin = Cm(MARGIN_CM)
    section.top_margin = Cm(MARGIN_CM)
    section.bottom_margin = Cm(MARGIN_CM)


def xml_text(text: str) -> str:
    """Drop characters Word XML cannot hold, such as a pasted vertical tab."""
    return _XML_ILLEGAL_RE.sub("", text)


def font_size(value: Optional[str]) -> Optional[Pt]:
    """Convert a CSS pixel size such as ``16px`` into points."""
    if not value:
        return None
    match = _PX_RE.match(value)
    if not match:
        return None
    return Pt(round(float(match.group(1)) * PX_TO_PT, 1))


def color(value: Optional[str]) -> Optional[RGBColor]:
    if not value:
        return None
    match = _HEX_RE.match(value.strip())
    if not match:
        return None
    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    return RGBColor.from_string(digits.upper())


def is_bold(weight: Optional[str]) -> bool:
    if not weight:
        return False
    if weight in {"bold", "bolder"}:
        return True
    return weight.isdigit() and int(weight) >= 600


def set_run_style(run, style: Mapping[str, str], underline: bool = False) -> None:
    """Map CSS-like properties onto a python-docx run."""
    run.font.name = FONT_NAME
    _set_east_asian_font(run, FONT_NAME)
    run.font.size = font_size(style.get("fontSize")) or Pt(DEFAULT_FONT_SIZE_PT)
    rgb = color(style.get("color"))
    if rgb is not None:
        run.font.color.rgb = rgb
    run.bold = is_bold(style.get("fontWeight"))
    run.italic = style.get("fontStyle") == "italic"
    if underline or "underline" in style.get("textDecoration", ""):
        run.font.underline = True


def apply_paragraph_style(paragraph, style: Mapping[str, str]) -> None:
    alignment = ALIGNMENTS.get(style.get("textAlign", ""))
    if alignment is not None:
        paragraph.alignment = alignment
    line_height = style.get("lineHeight", "")
    if _NUMBER_RE.match(line_height):
        paragraph.paragraph_format.line_spacing = float(line_height)
    paragraph.paragraph_format.space_before = Pt(0)
    paragraph.paragraph_format.space_after = font_size(style.get("marginBottom")) or Pt(DEFAULT_FONT_SIZE_PT // 2)


def _set_east_asian_font(run, name: str) -> None:
    r_pr = run._element.get_or_add_rPr()
    r_fonts = r_pr.find(qn("w:rFonts"))
    if r_fonts is None:
        r_fonts = OxmlElement("w:rFonts")
        r_pr.append(r_fonts)
    r_fonts.set(qn("w:eastAsia"), name)

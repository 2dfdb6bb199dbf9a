from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

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

# Inline tokens never cross a line terminator.
_LINE_TERMINATOR_RE = re.compile("[\n\r\u2028\u2029]")
_ANY = r"[^\n\r\u2028\u2029]"

# Whitespace and line terminators removed when trimming a line, U+FEFF included.
_TRIM_CHARS = "\t\n\v\f\r \u00a0\u1680\u2000\u2001\u2002\u2003\u2004\u2005\u2006\u2007\u2008\u2009\u200a\u2028\u2029\u202f\u205f\u3000\ufeff"

_IMAGE_RE = re.compile(rf"!\[({_ANY}*?)\]\(({_ANY}*?)\)")
_ORDERED_ITEM_RE = re.compile(r"[0-9]+\.\s")

_HEADING_MARKERS = (("# ", 1), ("## ", 2), ("### ", 3))
_UNORDERED_MARKERS = ("- ", "* ")
_RULES = {"---", "***"}


class ListState(Enum):
    NO_OPEN_LIST = "no_open_list"
    OPEN_LIST = "open_list"


@dataclass
class ListAccumulator:
    """In-progress list run; flushed on a blank line, a kind change or a non-list line."""

    state: ListState = ListState.NO_OPEN_LIST
    ordered: bool = False
    items: List[str] = field(default_factory=list)

    def add(self, item: str, ordered: bool) -> Optional[ListBlock]:
        """Append an item, returning the previous list if the kind changed."""
        flushed = None
        if self.state is ListState.OPEN_LIST and self.ordered != ordered:
            flushed = self.flush()
        if self.state is ListState.NO_OPEN_LIST:
            self.state = ListState.OPEN_LIST
            self.ordered = ordered
            self.items = []
        self.items.append(item)
        return flushed

    def flush(self) -> Optional[ListBlock]:
        if self.state is ListState.NO_OPEN_LIST:
            return None
        block = ListBlock(ordered=self.ordered, items=tuple(self.items))
        self.state = ListState.NO_OPEN_LIST
        self.ordered = False
        self.items = []
        return block


def parse_markdown(text: str) -> list[Block]:
    blocks: list[Block] = []
    pending = ListAccumulator()

    def emit(block: Optional[Block]) -> None:
        if block is not None:
            blocks.append(block)

    for raw_line in text.split("\n"):
        line = raw_line.strip(_TRIM_CHARS)
        if not line:
            emit(pending.flush())
            continue

        block = _classify_line(line)
        if block is None:
            item = _list_item(line)
            if item is not None:
                content, ordered = item
                emit(pending.add(content, ordered))
                continue
            block = Paragraph(text=line)

        # Any non-list line ends the run.
        emit(pending.flush())
        blocks.append(block)

    emit(pending.flush())
    return blocks


def _classify_line(line: str) -> Optional[Block]:
    """Single-line blocks, in precedence order."""
    for marker, level in _HEADING_MARKERS:
        if line.startswith(marker):
            return Heading(level=level, text=line[len(marker) :])
    if line.startswith("> "):
        return Blockquote(text=line[2:])
    match = _IMAGE_RE.fullmatch(line)
    if match:
        return ImageBlock(src=match.group(2), alt=match.group(1))
    if line in _RULES:
        return HorizontalRule()
    return None


def _list_item(line: str) -> Optional[Tuple[str, bool]]:
    if line.startswith(_UNORDERED_MARKERS):
        return line[2:], False
    match = _ORDERED_ITEM_RE.match(line)
    if match:
        return line[match.end() :], True
    return None


def resolve_inline(text: str) -> list[InlineSpan]:
    """Split a block's text into plain, emphasis and link spans.

    Scans left to right. At each position a ``**...**`` token is tried
    before a ``[label](href)`` token, both matched non-greedily. Literal runs
    between tokens are kept even when empty, so N tokens always produce
    2N + 1 spans. Unmatched markers stay in the surrounding text.
    """
    spans: list[InlineSpan] = []
    literal_start = 0
    pos = 0
    line_end = -1
    while pos < len(text):
        if pos > line_end:
            line_end = _line_end(text, pos)
        token = _match_emphasis(text, pos, line_end) or _match_link(text, pos, line_end)
        if token is None:
            pos += 1
            continue
        span, end = token
        spans.append(InlineText(text[literal_start:pos]))
        spans.append(span)
        pos = literal_start = end
    spans.append(InlineText(text[literal_start:]))
    return spans


def _line_end(text: str, pos: int) -> int:
    stop = _LINE_TERMINATOR_RE.search(text, pos)
    return stop.start() if stop else len(text)


def _match_emphasis(text: str, pos: int, line_end: int) -> Optional[Tuple[InlineSpan, int]]:
    if not text.startswith("**", pos, line_end):
        return None
    close = text.find("**", pos + 2, line_end)
    if close < 0:
        return None
    return InlineEmphasis(value=text[pos + 2 : close]), close + 2


def _match_link(text: str, pos: int, line_end: int) -> Optional[Tuple[InlineSpan, int]]:
    if not text.startswith("[", pos, line_end):
        return None
    middle = text.find("](", pos + 1, line_end)
    if middle < 0:
        return None
    close = text.find(")", middle + 2, line_end)
    if close < 0:
        return None
    return InlineLink(label=text[pos + 1 : middle], href=text[middle + 2 : close]), close + 1

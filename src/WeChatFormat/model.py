from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Block(ABC):
    """Base class for block-level nodes."""

    @abstractmethod
    def to_markdown(self) -> str:
        """Source line form of the node."""


@dataclass(frozen=True)
class Heading(Block):
    level: int
    text: str

    def to_markdown(self) -> str:
        return f"{'#' * self.level} {self.text}"


@dataclass(frozen=True)
class Blockquote(Block):
    text: str

    def to_markdown(self) -> str:
        return f"> {self.text}"


@dataclass(frozen=True)
class Paragraph(Block):
    text: str

    def to_markdown(self) -> str:
        return self.text


@dataclass(frozen=True)
class ImageBlock(Block):
    src: str
    alt: str = ""

    def to_markdown(self) -> str:
        return f"![{self.alt}]({self.src})"


@dataclass(frozen=True)
class HorizontalRule(Block):
    """Horizontal rule / thematic break."""

    def to_markdown(self) -> str:
        return "---"


@dataclass(frozen=True)
class ListBlock(Block):
    ordered: bool
    items: Tuple[str, ...]

    def to_markdown(self) -> str:
        if self.ordered:
            return "\n".join(f"{idx}. {item}" for idx, item in enumerate(self.items, start=1))
        return "\n".join(f"- {item}" for item in self.items)


@dataclass(frozen=True)
class InlineSpan(ABC):
    """Base class for inline nodes."""

    @abstractmethod
    def to_markdown(self) -> str:
        """Span text with its markers restored."""


@dataclass(frozen=True)
class InlineText(InlineSpan):
    value: str

    def to_markdown(self) -> str:
        return self.value


@dataclass(frozen=True)
class InlineEmphasis(InlineSpan):
    value: str

    def to_markdown(self) -> str:
        return f"**{self.value}**"


@dataclass(frozen=True)
class InlineLink(InlineSpan):
    label: str
    href: str

    def to_markdown(self) -> str:
        return f"[{self.label}]({self.href})"

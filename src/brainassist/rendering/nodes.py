"""Structured nodes produced by the rich content renderer.

Nodes are plain immutable values; turning them into widgets or Rich
renderables is the job of the presentation layer.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class TextSpan:
    text: str


@dataclass(frozen=True)
class CodeSpan:
    code: str


@dataclass(frozen=True)
class MathSpan:
    """Inline formula, with bare ``*`` already rewritten to ``\\times``."""

    source: str


@dataclass(frozen=True)
class Strong:
    text: str


@dataclass(frozen=True)
class Emphasis:
    text: str


Inline = TextSpan | CodeSpan | MathSpan | Strong | Emphasis


@dataclass(frozen=True)
class CodeBlock:
    """Fenced code with its declared or detected language ("" if unknown)."""

    code: str
    language: str = ""


@dataclass(frozen=True)
class MathBlock:
    """Display formula, rendered centered."""

    source: str


@dataclass(frozen=True)
class Heading:
    level: int
    spans: tuple[Inline, ...]


@dataclass(frozen=True)
class BulletItem:
    spans: tuple[Inline, ...]


@dataclass(frozen=True)
class OrderedItem:
    number: int
    spans: tuple[Inline, ...]


@dataclass(frozen=True)
class Paragraph:
    spans: tuple[Inline, ...]


@dataclass(frozen=True)
class Spacer:
    """Vertical spacing for a blank line."""


Block = CodeBlock | MathBlock | Heading | BulletItem | OrderedItem | Paragraph | Spacer

"""Rich content rendering module for brainassist.

Turns model output (markdown-like prose with fenced code and LaTeX) into
structured nodes, independent of how they are displayed.
"""

from .languages import LANGUAGE_RULES, detect_language
from .math import MathParseError, MathRenderer, to_unicode
from .nodes import (
    Block,
    BulletItem,
    CodeBlock,
    CodeSpan,
    Emphasis,
    Heading,
    Inline,
    MathBlock,
    MathSpan,
    OrderedItem,
    Paragraph,
    Spacer,
    Strong,
    TextSpan,
)
from .parser import parse_inline, plain_text, render

__all__ = [
    "Block",
    "BulletItem",
    "CodeBlock",
    "CodeSpan",
    "Emphasis",
    "Heading",
    "Inline",
    "LANGUAGE_RULES",
    "MathBlock",
    "MathParseError",
    "MathRenderer",
    "MathSpan",
    "OrderedItem",
    "Paragraph",
    "Spacer",
    "Strong",
    "TextSpan",
    "detect_language",
    "parse_inline",
    "plain_text",
    "render",
    "to_unicode",
]

"""Rich content renderer.

Pure function from model output to structured nodes. Processing order:
fenced code blocks, then display math, then line structure (headings,
bullets, ordered items, blank lines, paragraphs) with inline code, inline
math, bold and italic parsed inside each line. Every split is left to
right and non-overlapping.
"""

import re
from collections.abc import Iterable

from .languages import detect_language
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

_FENCE = re.compile(r"(```[\s\S]*?```)")
_FENCE_BODY = re.compile(r"```(\w+)?[ \t]*\n([\s\S]*?)```|```([\s\S]*?)```")
_BLOCK_MATH = re.compile(r"(\$\$[\s\S]*?\$\$)")
_INLINE_CODE = re.compile(r"(`[^`]+`)")
_INLINE_MATH = re.compile(r"(\$[^\n$]+\$)")
_BOLD = re.compile(r"(\*\*.*?\*\*)")
_ITALIC = re.compile(r"(\*[^*]+\*)")
_HEADING = re.compile(r"^#+\s*")
_ORDERED = re.compile(r"^(\d+)\.\s+(.*)")

MAX_HEADING_LEVEL = 3


def math_source(source: str) -> str:
    """Rewrite bare ``*`` as an explicit multiplication operator."""
    return source.replace("*", " \\times ")


def parse_code_block(fenced: str) -> CodeBlock:
    """Build a CodeBlock from a complete triple-backtick segment.

    A language tag is only taken from the fence when it is followed by a
    newline; otherwise the language is detected from the code.
    """
    match = _FENCE_BODY.fullmatch(fenced)
    if match is None:
        code, language = fenced[3:-3], ""
    elif match.group(2) is not None:
        code, language = match.group(2), match.group(1) or ""
    else:
        code, language = match.group(3), ""
    code = code.strip("\n")
    return CodeBlock(code=code, language=language or detect_language(code))


def _split(pattern: re.Pattern[str], text: str) -> list[str]:
    return [part for part in pattern.split(text) if part]


def _emphasis(text: str) -> Iterable[Inline]:
    for part in _split(_BOLD, text):
        if part.startswith("**") and part.endswith("**") and len(part) >= 4:
            yield Strong(part[2:-2])
            continue
        for sub in _split(_ITALIC, part):
            if sub.startswith("*") and sub.endswith("*") and len(sub) >= 3:
                yield Emphasis(sub[1:-1])
            else:
                yield TextSpan(sub)


def parse_inline(text: str) -> tuple[Inline, ...]:
    """Parse inline code, inline math, bold and italic spans."""
    spans: list[Inline] = []
    for code_part in _split(_INLINE_CODE, text):
        if code_part.startswith("`") and code_part.endswith("`") and len(code_part) > 2:
            spans.append(CodeSpan(code_part[1:-1]))
            continue
        for math_part in _split(_INLINE_MATH, code_part):
            if math_part.startswith("$") and math_part.endswith("$") and len(math_part) > 2:
                spans.append(MathSpan(math_source(math_part[1:-1])))
            else:
                spans.extend(_emphasis(math_part))
    return tuple(spans)


def parse_line(line: str, allow_headings: bool = True) -> Block:
    """Classify a single line of prose."""
    trimmed = line.strip()
    if not trimmed:
        return Spacer()
    if allow_headings and trimmed.startswith("#"):
        level = min(len(trimmed) - len(trimmed.lstrip("#")), MAX_HEADING_LEVEL)
        return Heading(level=level, spans=parse_inline(_HEADING.sub("", trimmed)))
    if trimmed.startswith("- ") or trimmed.startswith("* "):
        return BulletItem(spans=parse_inline(trimmed[2:]))
    numbered = _ORDERED.match(trimmed)
    if numbered:
        return OrderedItem(number=int(numbered.group(1)), spans=parse_inline(numbered.group(2)))
    return Paragraph(spans=parse_inline(trimmed))


def _trim_boundaries(text: str, after_block: bool, before_block: bool) -> str:
    """Drop the single newline that separates prose from an adjacent block."""
    if after_block and text.startswith("\n"):
        text = text[1:]
    if before_block and text.endswith("\n"):
        text = text[:-1]
    return text


def _prose(text: str, allow_headings: bool) -> list[Block]:
    blocks: list[Block] = []
    parts = _split(_BLOCK_MATH, text)
    for index, part in enumerate(parts):
        if part.startswith("$$") and part.endswith("$$") and len(part) >= 4:
            blocks.append(MathBlock(math_source(part[2:-2].strip())))
            continue
        part = _trim_boundaries(part, index > 0, index < len(parts) - 1)
        if part:
            blocks.extend(parse_line(line, allow_headings) for line in part.split("\n"))
    return blocks


def render(text: str, allow_headings: bool = True) -> list[Block]:
    """Parse model output into structured blocks.

    Args:
        text: Raw message text
        allow_headings: Treat ``#`` lines as headings (off for user messages)

    Returns:
        Blocks in display order
    """
    blocks: list[Block] = []
    segments = _split(_FENCE, text.replace("\r\n", "\n"))
    for index, segment in enumerate(segments):
        if segment.startswith("```") and segment.endswith("```") and len(segment) >= 6:
            blocks.append(parse_code_block(segment))
            continue
        segment = _trim_boundaries(segment, index > 0, index < len(segments) - 1)
        blocks.extend(_prose(segment, allow_headings))
    return blocks


def inline_text(spans: Iterable[Inline]) -> str:
    """Visible text of inline spans, markup removed."""
    parts = []
    for span in spans:
        if isinstance(span, CodeSpan):
            parts.append(span.code)
        elif isinstance(span, MathSpan):
            parts.append(span.source)
        else:
            parts.append(span.text)
    return "".join(parts)


def plain_text(blocks: Iterable[Block]) -> str:
    """Visible text of rendered blocks, one block per line."""
    lines = []
    for block in blocks:
        if isinstance(block, CodeBlock):
            lines.append(block.code)
        elif isinstance(block, MathBlock):
            lines.append(block.source)
        elif isinstance(block, Spacer):
            lines.append("")
        elif isinstance(block, OrderedItem):
            lines.append(f"{block.number}. {inline_text(block.spans)}")
        elif isinstance(block, BulletItem):
            lines.append(f"- {inline_text(block.spans)}")
        else:
            lines.append(inline_text(block.spans))
    return "\n".join(lines)

"""Rich rendering of structured message nodes.

Hides how renderer nodes become terminal output: styles for inline
spans, bullet and heading layout, centered display math and syntax
highlighted code.
"""

from collections.abc import Iterable, Sequence

from rich.align import Align
from rich.console import Group, RenderableType
from rich.syntax import Syntax
from rich.text import Text

from ..rendering import (
    Block,
    BulletItem,
    CodeBlock,
    CodeSpan,
    Emphasis,
    Heading,
    Inline,
    MathBlock,
    MathRenderer,
    MathSpan,
    OrderedItem,
    Paragraph,
    Spacer,
    Strong,
)
from .config import CODE_THEME

HEADING_STYLES = {
    1: "bold underline",
    2: "bold",
    3: "bold italic",
}


def spans_to_text(spans: Iterable[Inline], math: MathRenderer, accent: str = "") -> Text:
    """Render inline spans as a single Rich Text."""
    text = Text(overflow="fold")
    for span in spans:
        if isinstance(span, CodeSpan):
            text.append(span.code, style="bold on grey23")
        elif isinstance(span, MathSpan):
            text.append(math.render(span.source), style=f"italic {accent}".strip())
        elif isinstance(span, Strong):
            text.append(span.text, style="bold")
        elif isinstance(span, Emphasis):
            text.append(span.text, style="italic")
        else:
            text.append(span.text)
    return text


def render_block(block: Block, math: MathRenderer, accent: str = "") -> RenderableType:
    """Render one non-code block.

    Args:
        block: Renderer node
        math: Math renderer used for formulas
        accent: Rich color for headings, bullets and math

    Returns:
        Rich renderable
    """
    if isinstance(block, Heading):
        text = spans_to_text(block.spans, math, accent)
        text.stylize(f"{HEADING_STYLES[block.level]} {accent}".strip())
        return text
    if isinstance(block, BulletItem):
        return Text.assemble(Text("  • ", style=accent), spans_to_text(block.spans, math, accent))
    if isinstance(block, OrderedItem):
        marker = Text(f"  {block.number}. ", style=f"bold {accent}".strip())
        return Text.assemble(marker, spans_to_text(block.spans, math, accent))
    if isinstance(block, MathBlock):
        return Align.center(Text(math.render(block.source, display=True), style=f"italic {accent}".strip()))
    if isinstance(block, Spacer):
        return Text("")
    if isinstance(block, Paragraph):
        return spans_to_text(block.spans, math, accent)
    raise TypeError(f"Unsupported block: {type(block).__name__}")


def render_prose(blocks: Sequence[Block], math: MathRenderer, accent: str = "") -> Group:
    """Render a run of non-code blocks."""
    return Group(*(render_block(block, math, accent) for block in blocks))


def render_code(block: CodeBlock) -> Syntax:
    """Syntax-highlight a fenced code block."""
    return Syntax(
        block.code,
        block.language or "text",
        theme=CODE_THEME,
        word_wrap=True,
        background_color="default",
    )


def split_code_blocks(blocks: Sequence[Block]) -> list[CodeBlock | list[Block]]:
    """Group consecutive prose blocks, keeping code blocks separate."""
    groups: list[CodeBlock | list[Block]] = []
    for block in blocks:
        if isinstance(block, CodeBlock):
            groups.append(block)
        elif groups and isinstance(groups[-1], list):
            groups[-1].append(block)
        else:
            groups.append([block])
    return groups

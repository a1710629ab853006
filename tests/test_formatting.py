"""Unit tests for Rich rendering of message nodes."""
import pytest
from rich.text import Text

from brainassist.rendering import (
    BulletItem,
    CodeBlock,
    Heading,
    MathRenderer,
    MathSpan,
    OrderedItem,
    Paragraph,
    Spacer,
    Strong,
    TextSpan,
    render,
)
from brainassist.ui.formatting import render_block, render_code, spans_to_text, split_code_blocks


@pytest.fixture
def math():
    """Return a loaded math renderer."""
    return MathRenderer(ready=True)


class TestSpansToText:
    """Tests for spans_to_text()."""

    def test_plain_and_strong(self, math):
        """Test that span text is concatenated."""
        text = spans_to_text((TextSpan("a "), Strong("b")), math)
        assert text.plain == "a b"

    def test_math_rendered(self, math):
        """Test that inline math goes through the math renderer."""
        assert spans_to_text((MathSpan("x^2"),), math).plain == "x²"

    def test_math_placeholder_before_load(self):
        """Test that formulas show the placeholder until loaded."""
        assert spans_to_text((MathSpan("x^2"),), MathRenderer()).plain == "..."


class TestRenderBlock:
    """Tests for render_block()."""

    def test_bullet(self, math):
        """Test the bullet marker."""
        rendered = render_block(BulletItem((TextSpan("un"),)), math)
        assert isinstance(rendered, Text)
        assert rendered.plain == "  • un"

    def test_ordered(self, math):
        """Test that ordered items keep their number."""
        assert render_block(OrderedItem(4, (TextSpan("quatre"),)), math).plain == "  4. quatre"

    def test_heading(self, math):
        """Test that headings render their text."""
        assert render_block(Heading(1, (TextSpan("Titre"),)), math, "#3b82f6").plain == "Titre"

    def test_spacer(self, math):
        """Test that a spacer is an empty line."""
        assert render_block(Spacer(), math).plain == ""

    def test_code_block_rejected(self, math):
        """Test that code blocks must go through render_code."""
        with pytest.raises(TypeError):
            render_block(CodeBlock("x"), math)


class TestSplitCodeBlocks:
    """Tests for split_code_blocks()."""

    def test_groups_prose_between_code(self):
        """Test that prose runs are grouped around code blocks."""
        blocks = render("a\nb\n```python\nx = 1\n```\nc")

        groups = split_code_blocks(blocks)

        assert groups == [
            [Paragraph((TextSpan("a"),)), Paragraph((TextSpan("b"),))],
            CodeBlock("x = 1", "python"),
            [Paragraph((TextSpan("c"),))],
        ]

    def test_empty(self):
        """Test that no blocks give no groups."""
        assert split_code_blocks([]) == []


class TestRenderCode:
    """Tests for render_code()."""

    def test_unknown_language_as_text(self):
        """Test that untagged code is highlighted as plain text."""
        syntax = render_code(CodeBlock("hello"))
        assert syntax.code == "hello"

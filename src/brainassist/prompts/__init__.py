"""Prompt management module.

Externalizes system instructions and meta-prompts to text files for easy
customization. Prompts can be overridden by placing files in the working
directory.

Instruction files may reference the shared protocol blocks with the
``{{MATH_PROTOCOL}}`` and ``{{SAFETY_PROTOCOL}}`` markers. Markers are
replaced literally because the prompts are full of LaTeX braces.
"""

from functools import lru_cache
from pathlib import Path

# Default prompts directory (package location)
_PROMPTS_DIR = Path(__file__).parent

_SHARED_BLOCKS = {
    "{{MATH_PROTOCOL}}": "math_protocol",
    "{{SAFETY_PROTOCOL}}": "safety_protocol",
}


@lru_cache(maxsize=32)
def load_prompt(name: str) -> str:
    """Load a prompt from file.

    Search order:
    1. Current working directory: ./prompts/{name}.txt
    2. Package prompts directory: brainassist/prompts/{name}.txt

    Args:
        name: Prompt name (without .txt extension)

    Returns:
        Prompt text content

    Raises:
        FileNotFoundError: If prompt file not found in any location
    """
    filename = f"{name}.txt"

    # Check working directory first (allows user overrides)
    local_path = Path.cwd() / "prompts" / filename
    if local_path.exists():
        return local_path.read_text(encoding="utf-8")

    # Fall back to package prompts
    package_path = _PROMPTS_DIR / filename
    if package_path.exists():
        return package_path.read_text(encoding="utf-8")

    raise FileNotFoundError(
        f"Prompt '{name}' not found. Searched:\n"
        f"  - {local_path}\n"
        f"  - {package_path}"
    )


def build_instruction(name: str) -> str:
    """Load a system instruction with its shared protocol blocks expanded.

    Args:
        name: Instruction prompt name, usually a mode value

    Returns:
        Instruction text with every marker replaced
    """
    text = load_prompt(name)
    for marker, block_name in _SHARED_BLOCKS.items():
        if marker in text:
            text = text.replace(marker, load_prompt(block_name).strip())
    return text.strip()


def render_prompt(name: str, **values: str) -> str:
    """Load a prompt and substitute ``{{KEY}}`` placeholders.

    Args:
        name: Prompt name
        **values: Replacement text keyed by lowercase placeholder name

    Returns:
        Prompt text with placeholders replaced
    """
    text = load_prompt(name)
    for key, value in values.items():
        text = text.replace("{{" + key.upper() + "}}", value)
    return text.strip()


def clear_cache() -> None:
    """Clear the prompt cache (useful after modifying prompt files)."""
    load_prompt.cache_clear()


__all__ = [
    "build_instruction",
    "clear_cache",
    "load_prompt",
    "render_prompt",
]

"""Theme definitions for the TUI.

This module hides the design decisions about:
- Color palettes and visual appearance
- How each mode's accent color is applied

Every mode gets its own Textual theme, built once from a shared dark
palette with the mode color as primary. Widgets look themes up by mode,
never by building names from strings.
"""

from textual.theme import Theme

from ..modes import ChatMode, resolve

# Catppuccin Mocha base palette
_BASE = {
    "secondary": "#cba6f7",
    "accent": "#f9e2af",
    "foreground": "#cdd6f4",
    "background": "#11111b",
    "success": "#a6e3a1",
    "warning": "#fab387",
    "error": "#f38ba8",
    "surface": "#1e1e2e",
    "panel": "#181825",
}

_VARIABLES = {
    "block-cursor-foreground": "#11111b",
    "block-cursor-text-style": "bold",
    "block-hover-background": "#313244 20%",
    "input-cursor-background": "#cdd6f4",
    "input-cursor-foreground": "#11111b",
    "border": "#45475a",
    "border-blurred": "#313244",
    "scrollbar": "#313244",
    "scrollbar-hover": "#45475a",
    "scrollbar-background": "#181825",
    "footer-foreground": "#bac2de",
    "footer-background": "#11111b",
    "footer-key-foreground": "#f9e2af",
    "footer-key-background": "#313244",
    "text-muted": "#6c7086",
    "button-foreground": "#cdd6f4",
    "button-color-foreground": "#11111b",
}


def theme_name(mode: ChatMode) -> str:
    return f"brainassist-{mode.value.replace('_', '-')}"


def build_mode_theme(mode: ChatMode) -> Theme:
    """Build the theme for one mode from its profile color."""
    color = resolve(mode).color
    variables = {
        **_VARIABLES,
        "block-cursor-background": color,
        "input-selection-background": f"{color} 30%",
        "scrollbar-active": color,
        "link-color": color,
    }
    return Theme(name=theme_name(mode), primary=color, dark=True, variables=variables, **_BASE)


MODE_THEMES: dict[ChatMode, Theme] = {mode: build_mode_theme(mode) for mode in ChatMode}

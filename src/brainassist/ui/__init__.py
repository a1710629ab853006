"""Terminal UI module for brainassist.

Provides a Textual-based TUI over the chat Workspace.

Module structure (Parnas principle - each module hides a design decision):
- config.py: Display constants and log levels
- widgets.py: Custom widgets (messages, code blocks, input bar, metrics, log panel)
- formatting.py: How rendered blocks become Rich renderables
- styles.py: CSS styling (layout decisions)
- themes.py: Per-mode color palettes
- screens.py: Modal dialogs (profile, projects, planning, options)
- callbacks.py: Workspace integration (how the TUI receives transcript updates)
- app.py: Application orchestration (user interaction flow)
"""

from .app import BrainAssistApp, run_textual_tui
from .callbacks import TranscriptBridge
from .config import LogLevel
from .widgets import ChatHistoryWidget, ChatInputBar, DebugPanel, MetricsPanel

__all__ = [
    "BrainAssistApp",
    "ChatHistoryWidget",
    "ChatInputBar",
    "DebugPanel",
    "LogLevel",
    "MetricsPanel",
    "TranscriptBridge",
    "run_textual_tui",
]

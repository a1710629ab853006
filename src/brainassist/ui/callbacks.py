"""Bridges from the chat core to the TUI.

Hides the details of how the TUI receives updates: transcript change
events become widget operations, and debug callbacks become log panel
entries.
"""

import threading
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from ..chat import Message, TranscriptEvent

if TYPE_CHECKING:
    from textual.app import App

    from ..chat import Workspace
    from ..rendering import MathRenderer
    from .widgets import ChatHistoryWidget, DebugPanel


def _call_thread_safe(app: "App", func: Callable[..., Any], *args: Any) -> None:
    """Call func on the app's thread, directly when already there."""
    if app._thread_id != threading.get_ident():
        app.call_from_thread(func, *args)
    else:
        func(*args)


class TranscriptBridge:
    """Mirrors Transcript changes into the ChatHistoryWidget.

    Attach once; the bridge keeps following the same transcript across
    mode switches, which only clear it.
    """

    def __init__(
        self,
        app: "App",
        workspace: "Workspace",
        chat: "ChatHistoryWidget",
        math: "MathRenderer",
    ) -> None:
        self.app = app
        self.workspace = workspace
        self.chat = chat
        self.math = math
        self._unsubscribe: Callable[[], None] | None = None

    def attach(self) -> None:
        if self._unsubscribe is None:
            self._unsubscribe = self.workspace.transcript.subscribe(self)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def __call__(self, event: TranscriptEvent, message: Message | None) -> None:
        _call_thread_safe(self.app, self._apply, event, message)

    def _apply(self, event: TranscriptEvent, message: Message | None) -> None:
        if event is TranscriptEvent.CLEARED:
            self.chat.clear_history()
            return
        if message is None:
            return
        if event is TranscriptEvent.APPENDED:
            streaming = self.workspace.transcript.streaming_message is message
            self.chat.add_message(
                message,
                self.workspace.mode_profile,
                self.math,
                self.workspace.profile.name,
                streaming=streaming,
            )
        elif event is TranscriptEvent.UPDATED:
            self.chat.update_message(message.id)
        elif event is TranscriptEvent.FINALIZED:
            self.chat.finalize_message(message.id)
        elif event is TranscriptEvent.REMOVED:
            self.chat.remove_message(message.id)


def make_debug_router(app: "App", panel: "DebugPanel") -> Callable[[str, str, str], None]:
    """Build a debug callback that routes messages to the log panel."""

    def debug_callback(level: str, component: str, message: str) -> None:
        if level == "info":
            handler = panel.info
        elif level == "warning":
            handler = panel.warning
        elif level == "error":
            handler = panel.error
        else:
            handler = panel.debug
        _call_thread_safe(app, handler, component, message)

    return debug_callback

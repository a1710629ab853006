"""Custom Textual widgets for the TUI.

Hides widget implementation details:
- Message rendering (streaming text, structured content, errors)
- Code block affordances (copy with confirmation, improve)
- Input history and attachment handling
- Metrics display formatting
- Log rendering and level filtering
"""

from datetime import datetime
from pathlib import Path

import pyperclip
from rich.text import Text
from textual import events
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.message import Message as TextualMessage
from textual.widget import Widget
from textual.widgets import Button, OptionList, RichLog, Static, TextArea
from textual.widgets.option_list import Option

from ..chat import Message, UserProfile
from ..chat.attachments import encode_file, guess_mime_type, is_accepted
from ..llm import Attachment
from ..modes import ChatMode, ModeProfile, list_modes
from ..rendering import CodeBlock, MathRenderer, render
from .config import (
    COPY_CONFIRM_SECONDS,
    INPUT_HISTORY_MAX_SIZE,
    LOG_MAX_MESSAGE_LENGTH,
    LOG_TIMESTAMP_FORMAT,
    MESSAGE_TIMESTAMP_FORMAT,
    STREAMING_CURSOR,
    LogLevel,
)
from .formatting import render_code, render_prose, split_code_blocks


def copy_text(widget: Widget, text: str, label: str = "Copié") -> bool:
    """Copy text to the system clipboard, falling back to the terminal.

    Returns:
        True if the system clipboard was used
    """
    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException:
        widget.app.copy_to_clipboard(text)
        widget.app.notify(f"{label} (terminal)", timeout=2)
        return False
    widget.app.notify(label, timeout=2)
    return True


class CodeBlockView(Vertical):
    """Fenced code with a language label, an improve action and a copy action."""

    class ImproveRequested(TextualMessage):
        """Posted when the user asks the model to improve this code."""

        def __init__(self, code: str, language: str) -> None:
            super().__init__()
            self.code = code
            self.language = language

    def __init__(self, block: CodeBlock, improvable: bool = True, **kwargs) -> None:
        super().__init__(classes="code-block", **kwargs)
        self._block = block
        self._improvable = improvable
        self._copy_button = Button("Copier", classes="code-copy")

    @property
    def block(self) -> CodeBlock:
        return self._block

    def compose(self) -> ComposeResult:
        with Horizontal(classes="code-header"):
            yield Static((self._block.language or "text").upper(), classes="code-language")
            if self._improvable:
                yield Button("Améliorer", classes="code-improve").with_tooltip(
                    "Analyser et améliorer ce code"
                )
            yield self._copy_button.with_tooltip("Copier le code")
        yield Static(render_code(self._block), classes="code-body")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        if event.button.has_class("code-copy"):
            self.copy_code()
        elif event.button.has_class("code-improve"):
            self.post_message(self.ImproveRequested(self._block.code, self._block.language))

    def copy_code(self) -> None:
        """Copy the code and show the confirmation state for a moment."""
        copy_text(self, self._block.code, "Code copié")
        self._copy_button.label = "Copié !"
        self._copy_button.add_class("-copied")
        self.set_timer(COPY_CONFIRM_SECONDS, self._reset_copy_button)

    def _reset_copy_button(self) -> None:
        self._copy_button.label = "Copier"
        self._copy_button.remove_class("-copied")

    def on_click(self, event: events.Click) -> None:
        # Keep clicks on code from copying the whole message
        event.stop()


class MessageView(Vertical):
    """One transcript message.

    While its stream is open the body is plain text with a cursor; once
    finalized it is rebuilt from the structured renderer output. Clicking
    the message copies its raw text.
    """

    class RetryRequested(TextualMessage):
        """Posted when the user retries a failed message."""

        def __init__(self, message_id: str) -> None:
            super().__init__()
            self.message_id = message_id

    def __init__(
        self,
        message: Message,
        mode_profile: ModeProfile,
        math: MathRenderer,
        user_name: str = "Vous",
        streaming: bool = False,
    ) -> None:
        role_class = "error-message" if message.is_error else f"{message.role}-message"
        super().__init__(classes=f"chat-message {role_class}")
        self._message = message
        self._profile = mode_profile
        self._math = math
        self._user_name = user_name
        self._streaming = streaming
        self._body = Vertical(classes="message-content")

    @property
    def message_id(self) -> str:
        return self._message.id

    @property
    def text(self) -> str:
        return self._message.text

    def _header(self) -> str:
        timestamp = self._message.timestamp.strftime(MESSAGE_TIMESTAMP_FORMAT)
        if self._message.role == "user":
            return f"👤 {self._user_name}  [{timestamp}]"
        if self._message.is_error:
            return f"⚠ Erreur  [{timestamp}]"
        return f"{self._profile.icon} {self._profile.assistant_label}  [{timestamp}]"

    def compose(self) -> ComposeResult:
        yield Static(Text(self._header()), classes="message-header")
        with self._body:
            yield from self._body_widgets()

    def _body_widgets(self) -> list[Static | Vertical | Button]:
        message = self._message
        if message.is_error:
            widgets: list[Static | Vertical | Button] = [Static(Text(message.text), classes="error-text")]
            if message.is_retryable:
                widgets.append(Button("Réessayer", classes="retry-btn", variant="warning"))
            return widgets
        if self._streaming:
            return [Static(Text(message.text + STREAMING_CURSOR), classes="streaming-text")]

        widgets = []
        if message.attachments:
            names = ", ".join(attachment.name for attachment in message.attachments)
            widgets.append(Static(Text(f"📎 {names}"), classes="message-attachments"))
        is_user = message.role == "user"
        blocks = render(message.text, allow_headings=not is_user)
        for group in split_code_blocks(blocks):
            if isinstance(group, CodeBlock):
                widgets.append(CodeBlockView(group, improvable=not is_user))
            else:
                widgets.append(Static(render_prose(group, self._math, self._profile.color)))
        return widgets

    def update_text(self) -> None:
        """Refresh the streaming body after a fragment."""
        if not self._streaming:
            return
        for static in self._body.query(".streaming-text").results(Static):
            static.update(Text(self._message.text + STREAMING_CURSOR))

    def finalize(self) -> None:
        """Switch from streaming text to structured content."""
        self._streaming = False
        self.refresh_body()

    def refresh_body(self) -> None:
        """Rebuild the body, e.g. once math rendering becomes ready."""
        if not self.is_mounted:
            return
        self._body.remove_children()
        self._body.mount_all(self._body_widgets())

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.has_class("retry-btn"):
            event.stop()
            self.post_message(self.RetryRequested(self._message.id))

    def on_click(self, event: events.Click) -> None:
        """Copy message content to clipboard when clicked."""
        event.stop()
        if self._message.text:
            copy_text(self, self._message.text, "Message copié")


class WelcomeView(Vertical):
    """Mode introduction with suggested prompts."""

    class SuggestionSelected(TextualMessage):
        def __init__(self, prompt: str) -> None:
            super().__init__()
            self.prompt = prompt

    def __init__(self, mode_profile: ModeProfile, profile: UserProfile) -> None:
        super().__init__(id="welcome")
        self._mode_profile = mode_profile
        self._profile = profile

    def compose(self) -> ComposeResult:
        profile = self._mode_profile
        yield Static(Text(f"{profile.icon}  {profile.label}"), classes="welcome-title")
        yield Static(Text(f"Bonjour {self._profile.name} ! {profile.placeholder}"), classes="welcome-text")
        for index, prompt in enumerate(profile.suggested_prompts):
            yield Button(prompt, id=f"suggestion-{index}", classes="suggestion")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        index = int((event.button.id or "suggestion-0").rsplit("-", 1)[1])
        self.post_message(self.SuggestionSelected(self._mode_profile.suggested_prompts[index]))


class ChatHistoryWidget(VerticalScroll):
    """Scrollable transcript mirror keyed by message id."""

    BORDER_TITLE = "Chat"
    BORDER_SUBTITLE = "Nouvelle conversation"
    ALLOW_MAXIMIZE = True

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._views: dict[str, MessageView] = {}

    def show_welcome(self, mode_profile: ModeProfile, profile: UserProfile) -> None:
        """Replace the content with the mode's welcome view."""
        self.clear_history()
        self.mount(WelcomeView(mode_profile, profile))

    def add_message(
        self,
        message: Message,
        mode_profile: ModeProfile,
        math: MathRenderer,
        user_name: str,
        streaming: bool = False,
    ) -> MessageView:
        """Mount a view for a new transcript message."""
        for welcome in self.query(WelcomeView):
            welcome.remove()
        view = MessageView(message, mode_profile, math, user_name, streaming=streaming)
        self._views[message.id] = view
        self.mount(view)
        self.border_subtitle = f"{len(self._views)} messages"
        self.scroll_end(animate=False)
        return view

    def update_message(self, message_id: str) -> None:
        view = self._views.get(message_id)
        if view is not None:
            view.update_text()
            self.scroll_end(animate=False)

    def finalize_message(self, message_id: str) -> None:
        view = self._views.get(message_id)
        if view is not None:
            view.finalize()
            self.scroll_end(animate=False)

    def remove_message(self, message_id: str) -> None:
        view = self._views.pop(message_id, None)
        if view is not None:
            view.remove()
        self.border_subtitle = f"{len(self._views)} messages"

    def refresh_messages(self) -> None:
        """Re-render every finalized message."""
        for view in self._views.values():
            view.refresh_body()

    def clear_history(self) -> None:
        """Remove every message view."""
        self._views.clear()
        self.remove_children()
        self.border_subtitle = "Nouvelle conversation"


class PromptArea(TextArea):
    """TextArea that turns a pasted or dropped file path into an attachment.

    Terminals deliver drag and drop as a paste of the file path.
    """

    class FilePasted(TextualMessage):
        def __init__(self, path: Path) -> None:
            super().__init__()
            self.path = path

    async def _on_paste(self, event: events.Paste) -> None:
        path = _pasted_path(event.text)
        if path is None:
            return
        self.post_message(self.FilePasted(path))
        event.prevent_default()
        event.stop()


def _pasted_path(text: str) -> Path | None:
    """Return the file path a paste refers to, if it is an attachable file."""
    candidate = text.strip().strip("'\"")
    if not candidate or "\n" in candidate or len(candidate) > 1024:
        return None
    path = Path(candidate).expanduser()
    if not path.is_file():
        return None
    if not is_accepted(guess_mime_type(path.name)):
        return None
    return path


class ChatInputBar(Vertical):
    """Chat input with attachment tray, Send and Stop buttons."""

    class Submitted(TextualMessage):
        """Message sent when user submits input."""

        def __init__(self, value: str, attachments: list[Attachment]) -> None:
            super().__init__()
            self.value = value
            self.attachments = attachments

    class StopRequested(TextualMessage):
        """Posted when the user presses Stop."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._history: list[str] = []
        self._history_index: int = -1
        self._attachments: list[Attachment] = []
        self._loading = False

    @property
    def attachments(self) -> list[Attachment]:
        return list(self._attachments)

    @property
    def text(self) -> str:
        return self.query_one("#chat-input", PromptArea).text

    @text.setter
    def text(self, value: str) -> None:
        area = self.query_one("#chat-input", PromptArea)
        area.text = value
        area.move_cursor(area.document.end)

    def compose(self) -> ComposeResult:
        yield Static("", id="attachment-tray")
        with Horizontal(id="input-row"):
            text_area = PromptArea(id="chat-input", show_line_numbers=False)
            text_area.cursor_blink = False
            yield text_area
            yield Button("Envoyer", id="send-btn", variant="success").with_tooltip(
                "Envoyer le message (Ctrl+J)"
            )
            yield Button("Stop", id="stop-btn", variant="error").with_tooltip(
                "Arrêter la génération (Échap)"
            )

    def on_mount(self) -> None:
        text_area = self.query_one("#chat-input", PromptArea)
        text_area.highlight_cursor_line = False
        self.query_one("#stop-btn", Button).display = False
        self._refresh_tray()
        text_area.focus()

    def set_placeholder(self, placeholder: str) -> None:
        self.query_one("#chat-input", PromptArea).placeholder = placeholder

    def set_loading(self, loading: bool) -> None:
        """Disable sending while a reply is streaming."""
        self._loading = loading
        self.query_one("#send-btn", Button).disabled = loading
        self.query_one("#send-btn", Button).display = not loading
        self.query_one("#stop-btn", Button).display = loading

    def add_attachment(self, attachment: Attachment) -> None:
        self._attachments.append(attachment)
        self._refresh_tray()

    def attach_path(self, path: Path) -> Attachment | None:
        """Encode and attach a file, notifying on failure."""
        try:
            attachment = encode_file(path)
        except (OSError, ValueError) as e:
            self.app.notify(f"Pièce jointe refusée : {e}", severity="error", timeout=4)
            return None
        self.add_attachment(attachment)
        self.app.notify(f"Fichier joint : {attachment.name}", timeout=2)
        return attachment

    def clear_attachments(self) -> None:
        self._attachments.clear()
        self._refresh_tray()

    def _refresh_tray(self) -> None:
        tray = self.query_one("#attachment-tray", Static)
        if not self._attachments:
            tray.display = False
            return
        names = "  ".join(f"📎 {attachment.name}" for attachment in self._attachments)
        tray.update(f"{names}  [dim](Suppr pour retirer)[/]")
        tray.display = True

    def on_prompt_area_file_pasted(self, event: PromptArea.FilePasted) -> None:
        self.attach_path(event.path)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "send-btn":
            self._submit()
        elif event.button.id == "stop-btn":
            self.post_message(self.StopRequested())

    def on_key(self, event: events.Key) -> None:
        """Handle keyboard shortcuts.

        Note: ctrl+enter cannot work in terminals (terminal doesn't pass
        ctrl/shift modifiers with Enter). Use ctrl+j as the submit shortcut.
        """
        if event.key == "ctrl+j":
            self._submit()
            event.prevent_default()
            event.stop()
        elif event.key == "delete" and self._attachments and not self.text:
            self._attachments.pop()
            self._refresh_tray()
            event.prevent_default()
            event.stop()
        elif event.key == "up" and self._is_cursor_at_start():
            self._navigate_history(-1)
            event.prevent_default()
            event.stop()
        elif event.key == "down" and self._is_cursor_at_end():
            self._navigate_history(1)
            event.prevent_default()
            event.stop()

    def _is_cursor_at_start(self) -> bool:
        return self.query_one("#chat-input", PromptArea).cursor_location == (0, 0)

    def _is_cursor_at_end(self) -> bool:
        text_area = self.query_one("#chat-input", PromptArea)
        lines = text_area.text.split("\n")
        return text_area.cursor_location == (len(lines) - 1, len(lines[-1]))

    def _navigate_history(self, direction: int) -> None:
        if not self._history:
            return
        text_area = self.query_one("#chat-input", PromptArea)
        if direction < 0:
            if self._history_index == -1:
                self._history_index = len(self._history) - 1
            elif self._history_index > 0:
                self._history_index -= 1
        else:
            if self._history_index < len(self._history) - 1:
                self._history_index += 1
            else:
                self._history_index = -1
                text_area.text = ""
                return
        text_area.text = self._history[self._history_index]

    def _submit(self) -> None:
        if self._loading:
            return
        text_area = self.query_one("#chat-input", PromptArea)
        value = text_area.text.strip()
        if not value and not self._attachments:
            return
        if value and (not self._history or self._history[-1] != value):
            self._history.append(value)
            del self._history[:-INPUT_HISTORY_MAX_SIZE]
        self._history_index = -1
        text_area.text = ""
        attachments = list(self._attachments)
        self.clear_attachments()
        self.post_message(self.Submitted(value, attachments))

    def focus_input(self) -> None:
        """Focus the text input."""
        self.query_one("#chat-input", PromptArea).focus()


class ModeSidebar(OptionList):
    """Mode switcher listing the ten modes."""

    BORDER_TITLE = "Modes"

    def __init__(self, *args, **kwargs) -> None:
        options = [Option(f"{profile.icon} {profile.label}", id=profile.mode.value) for profile in list_modes()]
        super().__init__(*options, *args, **kwargs)

    def select_mode(self, mode: ChatMode) -> None:
        """Highlight a mode without posting a selection."""
        self.highlighted = self.get_option_index(mode.value)


class MetricsPanel(Static):
    """Status line with the active mode, model, state and token usage."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._mode_label = ""
        self._model = ""
        self._temperature = 0.0
        self._state = "idle"
        self._prompt_tokens = 0
        self._response_tokens = 0
        self._total_tokens = 0
        self._started: datetime | None = None
        self._elapsed = 0.0
        self._personalized = False

    def on_mount(self) -> None:
        self._update_display()

    def set_session(self, mode_profile: ModeProfile, personalized: bool = False) -> None:
        self._mode_label = f"{mode_profile.icon} {mode_profile.label}"
        self._model = mode_profile.model_name
        self._temperature = mode_profile.temperature
        self._personalized = personalized
        self._update_display()

    def set_state(self, state: str) -> None:
        """Track the streaming state and time the active send."""
        if state == "sending":
            self._started = datetime.now()
        elif state in ("completed", "cancelled", "failed") and self._started is not None:
            self._elapsed = (datetime.now() - self._started).total_seconds()
            self._started = None
        self._state = state
        self._update_display()

    def update_usage(self, usage: dict | None) -> None:
        usage = usage or {}
        self._prompt_tokens = usage.get("prompt_tokens", 0) or 0
        self._response_tokens = usage.get("completion_tokens", 0) or 0
        self._total_tokens = usage.get("total_tokens", 0) or (self._prompt_tokens + self._response_tokens)
        self._update_display()

    def _update_display(self) -> None:
        parts = [
            f"[bold]{self._mode_label}[/]",
            f"[bold cyan]Modèle:[/] {self._model} [dim](t={self._temperature})[/]",
            f"[bold yellow]État:[/] {self._state}",
            f"[bold green]Temps:[/] {self._elapsed:.1f}s",
            f"[bold magenta]Tokens:[/] {self._total_tokens:,} "
            f"[dim]({self._prompt_tokens:,}/{self._response_tokens:,})[/]",
        ]
        if self._personalized:
            parts.append("[bold blue]Profil injecté[/]")
        self.update("  ".join(parts))

    def get_plain_text(self) -> str:
        """Get metrics as plain text for clipboard."""
        return (
            f"Mode: {self._mode_label}  Model: {self._model}  State: {self._state}  "
            f"Time: {self._elapsed:.1f}s  Tokens: {self._total_tokens} "
            f"({self._prompt_tokens}/{self._response_tokens})"
        )


class DebugPanel(RichLog):
    """Log panel for real-time tracing with level filtering.

    Shows timestamped log messages from all components.
    Hidden by default, shown with --log-level flag or toggled with Ctrl+D.
    """

    BORDER_TITLE = "Log"
    BORDER_SUBTITLE = "Trace log"

    COMPONENT_COLORS = {
        "TUI": "cyan",
        "Session": "green",
        "Stream": "magenta",
        "Workspace": "bright_blue",
        "Storage": "bright_green",
        "Optimizer": "bright_yellow",
    }

    LEVEL_COLORS = {
        LogLevel.DEBUG: "dim white",
        LogLevel.INFO: "cyan",
        LogLevel.WARNING: "yellow",
        LogLevel.ERROR: "red",
    }

    def __init__(self, *args, log_level: int = LogLevel.DEBUG, **kwargs) -> None:
        super().__init__(
            *args,
            markup=True,
            highlight=False,
            auto_scroll=True,
            wrap=True,
            **kwargs
        )
        self._log_level = log_level

    @property
    def log_level(self) -> int:
        """Current log level threshold."""
        return self._log_level

    @log_level.setter
    def log_level(self, level: int) -> None:
        self._log_level = level
        self._update_subtitle()

    def _update_subtitle(self) -> None:
        if self.display:
            self.border_subtitle = f"Level: {LogLevel.name(self._log_level)}"
        else:
            self.border_subtitle = "Hidden"

    def on_mount(self) -> None:
        """Hide by default."""
        self.display = False

    def log_message(self, component: str, message: str, level: int = LogLevel.DEBUG) -> None:
        """Add a log entry if it meets the current level threshold."""
        if level < self._log_level:
            return
        timestamp = datetime.now().strftime(LOG_TIMESTAMP_FORMAT)
        level_color = self.LEVEL_COLORS.get(level, "white")
        comp_color = self.COMPONENT_COLORS.get(component, "white")
        if len(message) > LOG_MAX_MESSAGE_LENGTH:
            message = message[:LOG_MAX_MESSAGE_LENGTH] + "..."
        line = Text.assemble(
            (f"{timestamp} ", "dim"),
            (f"{LogLevel.name(level):<7} ", level_color),
            (f"[{component}] ", comp_color),
            message,
        )
        self.write(line)

    def debug(self, component: str, message: str) -> None:
        self.log_message(component, message, LogLevel.DEBUG)

    def info(self, component: str, message: str) -> None:
        self.log_message(component, message, LogLevel.INFO)

    def warning(self, component: str, message: str) -> None:
        self.log_message(component, message, LogLevel.WARNING)

    def error(self, component: str, message: str) -> None:
        self.log_message(component, message, LogLevel.ERROR)

    def show(self) -> None:
        self.display = True
        self._update_subtitle()

    def hide(self) -> None:
        self.display = False
        self.border_subtitle = "Hidden"

    def toggle(self) -> bool:
        """Toggle visibility. Returns new state."""
        if self.display:
            self.hide()
            return False
        self.show()
        return True

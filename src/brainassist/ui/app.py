"""Main Textual TUI application.

Orchestrates the UI components and routes user interaction to the
Workspace. All chat state lives in the Workspace; the app only mirrors it.
"""

import asyncio
from pathlib import Path

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.widgets import Footer, Header, OptionList

from ..chat import ChatError, StreamOutcome, StreamState, Workspace
from ..modes import ChatMode
from ..rendering import MathRenderer
from .callbacks import TranscriptBridge, make_debug_router
from .config import LogLevel
from .screens import (
    AttachScreen,
    ConfirmationScreen,
    OptionsScreen,
    PlanningScreen,
    ProfileScreen,
    ProjectScreen,
    ProjectsScreen,
)
from .styles import APP_CSS
from .themes import MODE_THEMES
from .widgets import (
    ChatHistoryWidget,
    ChatInputBar,
    CodeBlockView,
    DebugPanel,
    MessageView,
    MetricsPanel,
    ModeSidebar,
    WelcomeView,
    copy_text,
)


class BrainAssistApp(App):
    """Textual TUI for the study assistant."""

    CSS = APP_CSS
    TITLE = "BrainAssist"

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quitter"),
        Binding("ctrl+n", "new_chat", "Nouveau"),
        Binding("escape", "stop", "Stop"),
        Binding("ctrl+o", "attach", "Joindre"),
        Binding("ctrl+w", "optimize_prompt", "Optimiser"),
        Binding("ctrl+t", "retry_last", "Réessayer"),
        Binding("ctrl+s", "save_project", "Projet"),
        Binding("f2", "projects", "Projets"),
        Binding("f3", "planning", "Planning"),
        Binding("f4", "options", "Options"),
        Binding("f5", "toggle_personalize", "Profil IA"),
        Binding("ctrl+e", "profile", "Profil"),
        Binding("ctrl+r", "copy_last_response", "Copier", show=False),
        Binding("ctrl+d", "toggle_debug", "Debug", show=False),
    ]

    def __init__(self, workspace: Workspace, log_level: str | None = None) -> None:
        super().__init__()
        self.workspace = workspace
        self._log_level = log_level
        self._math = MathRenderer()
        self._bridge: TranscriptBridge | None = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield ModeSidebar(id="mode-sidebar")
        with Vertical(id="center-panel"):
            yield ChatHistoryWidget(id="chat-history")
            yield DebugPanel(id="debug-panel")
        with Vertical(id="bottom-bar"):
            yield MetricsPanel(id="metrics")
            yield ChatInputBar(id="chat-input-bar")
        yield Footer()

    def on_mount(self) -> None:
        """Called when app is mounted."""
        for theme in MODE_THEMES.values():
            self.register_theme(theme)

        log_panel = self.query_one("#debug-panel", DebugPanel)
        if self._log_level is not None:
            log_panel.log_level = LogLevel.from_string(self._log_level)
            log_panel.show()
            log_panel.info("TUI", f"Log panel enabled with level: {self._log_level.upper()}")

        self.workspace.set_debug_callback(make_debug_router(self, log_panel))
        self.workspace.controller.set_state_callback(self._on_stream_state)

        self._bridge = TranscriptBridge(
            self, self.workspace, self.query_one("#chat-history", ChatHistoryWidget), self._math
        )
        self._bridge.attach()

        self._apply_mode()
        self._load_workspace()
        self._load_math()

    def on_unmount(self) -> None:
        """Detach from the workspace when the app exits."""
        if self._bridge is not None:
            self._bridge.detach()
        self.workspace.stop()

    @work(group="startup")
    async def _load_workspace(self) -> None:
        await self.workspace.load()
        self._apply_mode()

    @work(group="startup", thread=True)
    def _load_math(self) -> None:
        self._math.load()
        self.call_from_thread(self.query_one("#chat-history", ChatHistoryWidget).refresh_messages)

    def _apply_mode(self) -> None:
        """Apply the workspace's mode to theme, sidebar, input and welcome view."""
        mode_profile = self.workspace.mode_profile
        self.theme = MODE_THEMES[self.workspace.mode].name
        self.sub_title = f"{mode_profile.icon} {mode_profile.label} · {mode_profile.model_name}"
        self.query_one("#mode-sidebar", ModeSidebar).select_mode(self.workspace.mode)
        self.query_one("#metrics", MetricsPanel).set_session(mode_profile, self.workspace.personalize)
        input_bar = self.query_one("#chat-input-bar", ChatInputBar)
        input_bar.set_placeholder(mode_profile.placeholder)
        if self.workspace.transcript.is_empty:
            self.query_one("#chat-history", ChatHistoryWidget).show_welcome(
                mode_profile, self.workspace.profile
            )
        input_bar.focus_input()

    def _on_stream_state(self, state: StreamState) -> None:
        self.query_one("#chat-input-bar", ChatInputBar).set_loading(self.workspace.is_loading)
        self.query_one("#metrics", MetricsPanel).set_state(state.value)

    def _report(self, outcome: StreamOutcome | None) -> None:
        if outcome is None:
            return
        self.query_one("#metrics", MetricsPanel).update_usage(outcome.usage)
        if outcome.state is StreamState.FAILED and outcome.error is not None:
            self.notify(outcome.error.text, severity="error", timeout=5)
        elif outcome.state is StreamState.CANCELLED:
            self.notify("Génération interrompue", severity="warning", timeout=2)

    # Sending

    def on_chat_input_bar_submitted(self, event: ChatInputBar.Submitted) -> None:
        """Handle user input submission."""
        if self.workspace.is_loading:
            return
        self._send(event.value, event.attachments)

    @work(group="chat")
    async def _send(self, text: str, attachments: list) -> None:
        self._report(await self.workspace.send(text, attachments))

    def on_chat_input_bar_stop_requested(self, event: ChatInputBar.StopRequested) -> None:
        self.action_stop()

    def on_message_view_retry_requested(self, event: MessageView.RetryRequested) -> None:
        self._retry(event.message_id)

    @work(group="chat")
    async def _retry(self, message_id: str) -> None:
        try:
            outcome = await self.workspace.retry(message_id)
        except (KeyError, ValueError) as e:
            self.notify(f"Impossible de réessayer : {e}", severity="warning")
            return
        self._report(outcome)

    def on_code_block_view_improve_requested(self, event: CodeBlockView.ImproveRequested) -> None:
        if self.workspace.is_loading:
            self.notify("Une réponse est en cours", severity="warning", timeout=2)
            return
        self._improve(event.code, event.language)

    @work(group="chat")
    async def _improve(self, code: str, language: str) -> None:
        self._report(await self.workspace.improve_code(code, language))

    def on_welcome_view_suggestion_selected(self, event: WelcomeView.SuggestionSelected) -> None:
        input_bar = self.query_one("#chat-input-bar", ChatInputBar)
        input_bar.text = event.prompt
        input_bar.focus_input()

    # Modes

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        if event.option_list.id != "mode-sidebar" or event.option.id is None:
            return
        mode = ChatMode(event.option.id)
        if mode is not self.workspace.mode:
            self.workspace.switch_mode(mode)
            self._apply_mode()

    def action_new_chat(self) -> None:
        """Clear the conversation and start a fresh session."""
        self.workspace.new_chat()
        self._apply_mode()
        self.notify("Nouvelle conversation", timeout=2)

    def action_stop(self) -> None:
        """Cancel the streaming reply."""
        if self.workspace.stop():
            self.query_one("#debug-panel", DebugPanel).info("TUI", "Stop requested")

    def action_retry_last(self) -> None:
        """Retry the most recent failed message."""
        for message in reversed(self.workspace.transcript.messages):
            if message.is_error:
                if message.is_retryable:
                    self._retry(message.id)
                else:
                    self.notify("Cette erreur ne peut pas être réessayée", severity="warning")
                return
        self.notify("Aucune erreur à réessayer", timeout=2)

    # Input helpers

    def action_attach(self) -> None:
        """Pick a file to attach to the next message."""

        def attach(path: str | None) -> None:
            if path:
                self.query_one("#chat-input-bar", ChatInputBar).attach_path(Path(path).expanduser())

        self.push_screen(AttachScreen(), attach)

    @work(group="optimize", exclusive=True)
    async def action_optimize_prompt(self) -> None:
        """Rewrite the draft with the prompt optimizer."""
        input_bar = self.query_one("#chat-input-bar", ChatInputBar)
        draft = input_bar.text
        if not draft.strip():
            self.notify("Écrivez d'abord un brouillon", severity="warning", timeout=2)
            return
        self.notify("Optimisation du prompt...", timeout=2)
        optimized = await self.workspace.optimize_prompt(draft)
        if input_bar.text == draft:
            input_bar.text = optimized

    # Projects, profile and planning

    def action_save_project(self) -> None:
        """Save the current mode as a project."""

        async def save(result: tuple[str, str] | None) -> None:
            if result is None:
                return
            title, description = result
            project = await self.workspace.save_project(title, description)
            self.notify(f"Projet « {project.title} » créé", timeout=2)

        self.push_screen(ProjectScreen(self.workspace.mode_profile.label), save)

    def action_projects(self) -> None:
        """Open or delete a saved project."""

        async def handle(result: tuple[str, str] | None) -> None:
            if result is None:
                return
            action, project_id = result
            if action == "delete":
                self._confirm_delete(project_id)
                return
            project = self.workspace.open_project(project_id)
            self._apply_mode()
            self._send(project.prompt, [])

        self.push_screen(ProjectsScreen(list(self.workspace.projects)), handle)

    @work(group="projects")
    async def _confirm_delete(self, project_id: str) -> None:
        project = self.workspace.get_project(project_id)
        if project is None:
            return
        confirmed = await self.push_screen_wait(
            ConfirmationScreen(f"Supprimer le projet « {project.title} » ?")
        )
        if confirmed:
            await self.workspace.delete_project(project_id)
            self.notify("Projet supprimé", timeout=2)

    def action_profile(self) -> None:
        """Edit the user profile."""

        async def save(values: dict[str, str] | None) -> None:
            if values is None:
                return
            try:
                await self.workspace.save_profile(**values)
            except ValueError as e:
                self.notify(str(e), severity="error")
                return
            self.notify("Profil enregistré", timeout=2)

        self.push_screen(ProfileScreen(self.workspace.profile), save)

    def action_planning(self) -> None:
        """Edit tasks, timetable and study log."""
        self.push_screen(PlanningScreen(self.workspace))

    def action_options(self) -> None:
        """Edit generation options."""

        def apply(options) -> None:
            if options is not None:
                self.workspace.set_options(options)
                self.notify("Options appliquées", timeout=2)

        self.push_screen(OptionsScreen(self.workspace.options), apply)

    def action_toggle_personalize(self) -> None:
        """Toggle profile injection into the first message."""
        self.workspace.personalize = not self.workspace.personalize
        self.query_one("#metrics", MetricsPanel).set_session(
            self.workspace.mode_profile, self.workspace.personalize
        )
        state = "activée" if self.workspace.personalize else "désactivée"
        self.notify(f"Personnalisation {state}", timeout=2)

    # Panels

    def action_toggle_debug(self) -> None:
        """Toggle the log panel visibility."""
        log_panel = self.query_one("#debug-panel", DebugPanel)
        is_visible = log_panel.toggle()
        self.notify(f"Log panel {'shown' if is_visible else 'hidden'}", timeout=2)

    def action_copy_last_response(self) -> None:
        """Copy last assistant response to clipboard."""
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        message = self.workspace.transcript.last_model_message()
        if message and message.text:
            copy_text(chat, message.text, "Réponse copiée")
        else:
            self.notify("Aucune réponse à copier", severity="warning")


async def run_textual_tui(workspace: Workspace, log_level: str | None = None) -> None:
    """Run the Textual TUI.

    Args:
        workspace: Workspace to drive (loaded on mount)
        log_level: Log level for panel (debug/info/warning/error), None to hide
    """
    app = BrainAssistApp(workspace=workspace, log_level=log_level)
    try:
        await app.run_async()
    except (KeyboardInterrupt, asyncio.CancelledError):
        pass
    finally:
        try:
            await workspace.close()
        except ChatError as e:
            app.log.error(f"Failed to close workspace: {e}")

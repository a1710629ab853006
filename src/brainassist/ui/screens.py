"""Modal screens for the TUI.

This module hides the design decisions about:
- Dialog appearance (CSS, layout)
- Form fields and validation feedback
- Keyboard shortcuts for dialogs

Screens never touch storage themselves: they dismiss with the values the
user entered and the app applies them through the Workspace. The
planning screen is the exception, since it edits live lists.
"""

from typing import TYPE_CHECKING

from rich.text import Text
from textual import work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import (
    Button,
    Input,
    Label,
    OptionList,
    Select,
    Static,
    TabbedContent,
    TabPane,
    TextArea,
)
from textual.widgets.option_list import Option

from ..chat.models import AVATARS, FORMATS, LEVELS, TONES, GenerationOptions, Project, UserProfile

if TYPE_CHECKING:
    from ..chat import Workspace

DIALOG_CSS = """
ModalScreen {
    align: center middle;
    background: $background 70%;
}

.dialog {
    width: 70;
    height: auto;
    max-height: 90%;
    border: tall $primary;
    background: $surface;
    padding: 1 2;
}

.dialog-title {
    width: 100%;
    text-align: center;
    text-style: bold;
    color: $primary;
    padding: 0 0 1 0;
    border-bottom: solid $border;
    margin-bottom: 1;
}

.dialog Input, .dialog Select {
    margin-bottom: 1;
}

.dialog-buttons {
    width: 100%;
    height: 3;
    align: center middle;
    margin-top: 1;
}

.dialog-buttons Button {
    margin: 0 1;
    min-width: 10;
}

.field-error {
    color: $error;
    height: auto;
}
"""


class ConfirmationScreen(ModalScreen[bool]):
    """Yes/no confirmation dialog."""

    CSS = DIALOG_CSS

    BINDINGS = [
        Binding("y", "confirm(True)", "Oui", show=False),
        Binding("n", "confirm(False)", "Non", show=False),
        Binding("escape", "confirm(False)", "Annuler", show=False),
    ]

    def __init__(self, prompt: str, title: str = "Confirmation") -> None:
        super().__init__()
        self._prompt = prompt
        self._title = title

    def compose(self) -> ComposeResult:
        with Vertical(classes="dialog"):
            yield Static(self._title, classes="dialog-title")
            yield Static(Text(self._prompt))
            with Horizontal(classes="dialog-buttons"):
                yield Button("Oui", id="btn-yes", variant="success")
                yield Button("Non", id="btn-no", variant="error")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "btn-yes")

    def action_confirm(self, answer: bool) -> None:
        self.dismiss(answer)


class ProfileScreen(ModalScreen[dict[str, str] | None]):
    """Profile editor: name, bio and avatar."""

    CSS = DIALOG_CSS

    BINDINGS = [Binding("escape", "cancel", "Annuler", show=False)]

    def __init__(self, profile: UserProfile) -> None:
        super().__init__()
        self._profile = profile

    def compose(self) -> ComposeResult:
        with Vertical(classes="dialog"):
            yield Static("Mon profil", classes="dialog-title")
            yield Label("Nom")
            yield Input(self._profile.name, id="profile-name")
            yield Label("Bio")
            yield Input(self._profile.bio, id="profile-bio")
            yield Label("Avatar")
            yield Select(
                [(label, avatar_id) for avatar_id, label in AVATARS.items()],
                value=self._profile.avatar_id if self._profile.avatar_id in AVATARS else "student",
                allow_blank=False,
                id="profile-avatar",
            )
            if self._profile.history:
                yield Static(
                    Text(f"{len(self._profile.history)} version(s) précédente(s) enregistrée(s)"),
                    classes="dialog-hint",
                )
            yield Static("", id="profile-error", classes="field-error")
            with Horizontal(classes="dialog-buttons"):
                yield Button("Enregistrer", id="btn-save", variant="success")
                yield Button("Annuler", id="btn-cancel")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-cancel":
            self.dismiss(None)
            return
        name = self.query_one("#profile-name", Input).value.strip()
        if not name:
            self.query_one("#profile-error", Static).update("Le nom est obligatoire.")
            return
        self.dismiss({
            "name": name,
            "bio": self.query_one("#profile-bio", Input).value,
            "avatar_id": str(self.query_one("#profile-avatar", Select).value),
        })

    def action_cancel(self) -> None:
        self.dismiss(None)


class ProjectScreen(ModalScreen[tuple[str, str] | None]):
    """Save the current mode as a project."""

    CSS = DIALOG_CSS

    BINDINGS = [Binding("escape", "cancel", "Annuler", show=False)]

    def __init__(self, mode_label: str) -> None:
        super().__init__()
        self._mode_label = mode_label

    def compose(self) -> ComposeResult:
        with Vertical(classes="dialog"):
            yield Static(f"Nouveau projet ({self._mode_label})", classes="dialog-title")
            yield Label("Titre")
            yield Input(placeholder="Révisions du bac", id="project-title")
            yield Label("Description et objectifs")
            yield Input(placeholder="Chapitres, échéances, niveau visé...", id="project-description")
            yield Static("", id="project-error", classes="field-error")
            with Horizontal(classes="dialog-buttons"):
                yield Button("Créer", id="btn-save", variant="success")
                yield Button("Annuler", id="btn-cancel")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-cancel":
            self.dismiss(None)
            return
        title = self.query_one("#project-title", Input).value.strip()
        if not title:
            self.query_one("#project-error", Static).update("Le titre est obligatoire.")
            return
        self.dismiss((title, self.query_one("#project-description", Input).value))

    def action_cancel(self) -> None:
        self.dismiss(None)


class ProjectsScreen(ModalScreen[tuple[str, str] | None]):
    """Project list. Enter opens a project, d deletes it.

    Dismisses with ("open", project_id) or ("delete", project_id).
    """

    CSS = DIALOG_CSS

    BINDINGS = [
        Binding("escape", "cancel", "Fermer", show=False),
        Binding("d", "delete", "Supprimer"),
    ]

    def __init__(self, projects: list[Project]) -> None:
        super().__init__()
        self._projects = projects

    def compose(self) -> ComposeResult:
        with Vertical(classes="dialog"):
            yield Static("Mes projets", classes="dialog-title")
            if not self._projects:
                yield Static("Aucun projet. Ctrl+S enregistre le mode courant comme projet.")
            else:
                yield OptionList(
                    *(
                        Option(Text(f"{project.title}  ·  {project.mode.value}"), id=project.id)
                        for project in self._projects
                    ),
                    id="project-list",
                )
                yield Static("[dim]Entrée : ouvrir  ·  d : supprimer[/]")

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        if event.option.id:
            self.dismiss(("open", event.option.id))

    def action_delete(self) -> None:
        if not self._projects:
            return
        option_list = self.query_one("#project-list", OptionList)
        if option_list.highlighted is None:
            return
        option = option_list.get_option_at_index(option_list.highlighted)
        if option.id:
            self.dismiss(("delete", option.id))

    def action_cancel(self) -> None:
        self.dismiss(None)


class AttachScreen(ModalScreen[str | None]):
    """Ask for the path of a file to attach."""

    CSS = DIALOG_CSS

    BINDINGS = [Binding("escape", "cancel", "Annuler", show=False)]

    def compose(self) -> ComposeResult:
        with Vertical(classes="dialog"):
            yield Static("Joindre un fichier", classes="dialog-title")
            yield Static("Images, PDF, texte ou Word (.docx)")
            yield Input(placeholder="/chemin/vers/fichier.pdf", id="attach-path")

    def on_input_submitted(self, event: Input.Submitted) -> None:
        value = event.value.strip()
        self.dismiss(value or None)

    def action_cancel(self) -> None:
        self.dismiss(None)


class OptionsScreen(ModalScreen[GenerationOptions | None]):
    """Generation options: target level, answer format and tone."""

    CSS = DIALOG_CSS

    BINDINGS = [Binding("escape", "cancel", "Annuler", show=False)]

    def __init__(self, options: GenerationOptions) -> None:
        super().__init__()
        self._options = options

    def compose(self) -> ComposeResult:
        with Vertical(classes="dialog"):
            yield Static("Options de génération", classes="dialog-title")
            yield Label("Niveau cible")
            yield Select([(v, v) for v in LEVELS], value=self._options.level, allow_blank=False, id="opt-level")
            yield Label("Format de réponse")
            yield Select(
                [(v, v) for v in FORMATS],
                value=self._options.response_format,
                allow_blank=False,
                id="opt-format",
            )
            yield Label("Ton / style")
            yield Select([(v, v) for v in TONES], value=self._options.tone, allow_blank=False, id="opt-tone")
            with Horizontal(classes="dialog-buttons"):
                yield Button("Appliquer", id="btn-save", variant="success")
                yield Button("Réinitialiser", id="btn-reset")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-reset":
            self.dismiss(GenerationOptions())
            return
        self.dismiss(
            GenerationOptions(
                level=str(self.query_one("#opt-level", Select).value),
                response_format=str(self.query_one("#opt-format", Select).value),
                tone=str(self.query_one("#opt-tone", Select).value),
            )
        )

    def action_cancel(self) -> None:
        self.dismiss(None)


class PlanningScreen(ModalScreen[None]):
    """Tasks, timetable and study log editor.

    Edits go straight through the Workspace, which persists them.
    """

    CSS = DIALOG_CSS + """
    PlanningScreen .dialog {
        width: 90;
        height: 90%;
    }

    #task-list, #study-log {
        height: 1fr;
        min-height: 6;
    }

    #timetable-text {
        height: 1fr;
        min-height: 8;
    }

    .form-row {
        height: auto;
    }

    .form-row Input {
        width: 1fr;
    }
    """

    BINDINGS = [
        Binding("escape", "close", "Fermer", show=False),
        Binding("space", "toggle_task", "Terminer", show=False),
        Binding("delete", "remove_task", "Supprimer", show=False),
    ]

    def __init__(self, workspace: "Workspace") -> None:
        super().__init__()
        self._workspace = workspace

    def compose(self) -> ComposeResult:
        with Vertical(classes="dialog"):
            yield Static("Planning & études", classes="dialog-title")
            with TabbedContent():
                with TabPane("Tâches", id="tab-tasks"):
                    yield OptionList(id="task-list")
                    yield Static("[dim]Espace : terminer  ·  Suppr : supprimer[/]")
                    with Horizontal(classes="form-row"):
                        yield Input(placeholder="Titre", id="task-title")
                        yield Input(placeholder="Échéance (AAAA-MM-JJ)", id="task-due")
                        yield Input(placeholder="Note", id="task-comment")
                    yield Select(
                        [("Priorité haute", "high"), ("Priorité moyenne", "medium"), ("Priorité basse", "low")],
                        value="medium",
                        allow_blank=False,
                        id="task-priority",
                    )
                    yield Button("Ajouter la tâche", id="btn-add-task", variant="primary")
                with TabPane("Emploi du temps", id="tab-timetable"):
                    yield TextArea(self._workspace.timetable.content, id="timetable-text")
                    yield Button("Enregistrer", id="btn-save-timetable", variant="success")
                with TabPane("Études", id="tab-study"):
                    yield Static("", id="study-log")
                    with Horizontal(classes="form-row"):
                        yield Input(placeholder="Matière", id="study-subject")
                        yield Input(placeholder="Minutes", id="study-minutes", type="integer")
                        yield Button("Session", id="btn-add-session", variant="primary")
                    with Horizontal(classes="form-row"):
                        yield Input(placeholder="Matière", id="grade-subject")
                        yield Input(placeholder="Note", id="grade-value", type="number")
                        yield Input("20", placeholder="Sur", id="grade-max", type="number")
                        yield Button("Note", id="btn-add-grade", variant="primary")

    def on_mount(self) -> None:
        self._refresh_tasks()
        self._refresh_study_log()

    def _refresh_tasks(self) -> None:
        option_list = self.query_one("#task-list", OptionList)
        option_list.clear_options()
        for task in self._workspace.tasks:
            check = "☑" if task.is_completed else "☐"
            due = f" ({task.due_date})" if task.due_date else ""
            option_list.add_option(Option(Text(f"{check} {task.title}{due}  [{task.priority}]"), id=task.id))

    def _refresh_study_log(self) -> None:
        sessions = self._workspace.study_sessions
        grades = self._workspace.grades
        total = sum(session.duration_minutes for session in sessions)
        hours, minutes = divmod(total, 60)
        lines = [f"Temps total : {hours}h {minutes}m sur {len(sessions)} session(s)"]
        lines += [f"  {grade.subject} : {grade.grade:g}/{grade.max_grade:g}" for grade in grades]
        self.query_one("#study-log", Static).update(Text("\n".join(lines)))

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-add-task":
            self._add_task()
        elif event.button.id == "btn-save-timetable":
            self._save_timetable()
        elif event.button.id == "btn-add-session":
            self._add_session()
        elif event.button.id == "btn-add-grade":
            self._add_grade()

    @work(group="planning")
    async def _add_task(self) -> None:
        title = self.query_one("#task-title", Input)
        try:
            await self._workspace.add_task(
                title.value,
                due_date=self.query_one("#task-due", Input).value,
                comment=self.query_one("#task-comment", Input).value,
                priority=self.query_one("#task-priority", Select).value,
            )
        except ValueError as e:
            self.notify(str(e), severity="error")
            return
        for field_id in ("#task-title", "#task-due", "#task-comment"):
            self.query_one(field_id, Input).value = ""
        self._refresh_tasks()

    @work(group="planning")
    async def _save_timetable(self) -> None:
        await self._workspace.set_timetable(self.query_one("#timetable-text", TextArea).text)
        self.notify("Emploi du temps enregistré", timeout=2)

    @work(group="planning")
    async def _add_session(self) -> None:
        try:
            minutes = int(self.query_one("#study-minutes", Input).value or "0")
            await self._workspace.add_study_session(self.query_one("#study-subject", Input).value, minutes)
        except ValueError as e:
            self.notify(str(e), severity="error")
            return
        self._refresh_study_log()

    @work(group="planning")
    async def _add_grade(self) -> None:
        try:
            grade = float(self.query_one("#grade-value", Input).value)
            max_grade = float(self.query_one("#grade-max", Input).value or "20")
            await self._workspace.add_grade(self.query_one("#grade-subject", Input).value, grade, max_grade)
        except ValueError as e:
            self.notify(str(e), severity="error")
            return
        self._refresh_study_log()

    def _highlighted_task_id(self) -> str | None:
        option_list = self.query_one("#task-list", OptionList)
        if not option_list.has_focus or option_list.highlighted is None:
            return None
        return option_list.get_option_at_index(option_list.highlighted).id

    @work(group="planning")
    async def action_toggle_task(self) -> None:
        task_id = self._highlighted_task_id()
        if task_id is not None:
            await self._workspace.toggle_task(task_id)
            self._refresh_tasks()

    @work(group="planning")
    async def action_remove_task(self) -> None:
        task_id = self._highlighted_task_id()
        if task_id is not None:
            await self._workspace.remove_task(task_id)
            self._refresh_tasks()

    def action_close(self) -> None:
        self.dismiss(None)

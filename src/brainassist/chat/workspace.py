"""Chat workspace.

This module hides how the chat components cooperate: which context block
is injected into which message, when the session is replaced, and how
user state is kept in sync with storage. The TUI and CLI talk to the
Workspace only.
"""

from collections.abc import Sequence
from datetime import datetime
from typing import TYPE_CHECKING, Any

from ..llm import Attachment
from ..modes import ChatMode, ModeProfile, resolve
from .context import (
    apply_generation_options,
    build_analytics_context,
    build_improve_prompt,
    build_organization_context,
    build_profile_context,
    has_planning_data,
    has_study_data,
    wrap_user_request,
)
from .errors import ConfigurationError
from .models import (
    AVATARS,
    PROFILE_HISTORY_LIMIT,
    GenerationOptions,
    Priority,
    ProfileSnapshot,
    Project,
    StudySession,
    SubjectGrade,
    Task,
    Timetable,
    UserProfile,
)
from .projects import create_project
from .session import ChatSessionManager
from .streaming import StreamingController, StreamOutcome
from .transcript import Transcript

if TYPE_CHECKING:
    from ..storage import StateRepository


class Workspace:
    """Everything one user works with: conversation, projects and planning data.

    Usage:
        workspace = Workspace(ChatSessionManager(provider), StateRepository(store))
        await workspace.load()
        outcome = await workspace.send("Explique le théorème de Pythagore.")
    """

    def __init__(
        self,
        session: ChatSessionManager,
        repository: "StateRepository",
        mode: ChatMode | str = ChatMode.LEARNING,
        personalize: bool = False,
    ):
        """Initialize the workspace.

        Args:
            session: Owner of the live chat session
            repository: Persisted user state
            mode: Initial mode
            personalize: Inject the user profile into the first message
        """
        self.session = session
        self.repository = repository
        self.transcript = Transcript()
        self.controller = StreamingController(session, self.transcript)
        self.personalize = personalize
        self.options = GenerationOptions()

        self.projects: list[Project] = []
        self.profile = UserProfile()
        self.tasks: list[Task] = []
        self.timetable = Timetable()
        self.study_sessions: list[StudySession] = []
        self.grades: list[SubjectGrade] = []

        self._mode = ChatMode(mode)
        self._debug_callback: Any | None = None

    @property
    def mode(self) -> ChatMode:
        return self._mode

    @property
    def mode_profile(self) -> ModeProfile:
        return resolve(self._mode)

    @property
    def is_loading(self) -> bool:
        return self.controller.is_loading

    def set_debug_callback(self, callback: Any) -> None:
        """Set the debug callback for every component.

        Args:
            callback: Callable(level: str, component: str, message: str)
        """
        self._debug_callback = callback
        self.session.set_debug_callback(callback)
        self.controller.set_debug_callback(callback)
        self.repository.set_debug_callback(callback)

    def _debug(self, level: str, component: str, message: str) -> None:
        if self._debug_callback:
            self._debug_callback(level, component, message)

    async def load(self) -> None:
        """Load persisted state and open a session in the current mode.

        A missing API credential is logged, not raised: every send will
        then fail with a configuration error message.
        """
        self.projects = await self.repository.load_projects()
        self.profile = await self.repository.load_profile()
        self.tasks = await self.repository.load_tasks()
        self.timetable = await self.repository.load_timetable()
        self.study_sessions = await self.repository.load_study_sessions()
        self.grades = await self.repository.load_grades()
        self._debug(
            "info",
            "Workspace",
            f"Loaded {len(self.projects)} project(s), {len(self.tasks)} task(s), "
            f"{len(self.study_sessions)} session(s), {len(self.grades)} grade(s)",
        )
        self._open_session()

    def _open_session(self) -> None:
        try:
            self.session.reset(self._mode)
        except ConfigurationError as e:
            self._debug("error", "Workspace", str(e))

    # Conversation

    def switch_mode(self, mode: ChatMode | str) -> None:
        """Clear the conversation and start a session in another mode."""
        self._mode = ChatMode(mode)
        self.new_chat()

    def new_chat(self) -> None:
        """Clear the conversation and start a fresh session in the current mode."""
        self.controller.stop()
        self.transcript.clear()
        self._open_session()

    def build_outgoing_text(self, text: str) -> str:
        """Prefix text with the context blocks due on the first turn.

        Context is injected only while the transcript is empty, so it is
        sent exactly once per conversation.
        """
        if not self.transcript.is_empty:
            return text

        blocks = []
        if self._mode is ChatMode.ORGANIZATION and has_planning_data(self.timetable, self.tasks):
            blocks.append(build_organization_context(self.timetable, self.tasks))
        elif self._mode is ChatMode.ANALYTICS and has_study_data(self.study_sessions, self.grades):
            blocks.append(build_analytics_context(self.study_sessions, self.grades))
        if self.personalize:
            blocks.append(build_profile_context(self.profile))
        return wrap_user_request(blocks, text)

    async def send(
        self,
        text: str,
        attachments: Sequence[Attachment] = (),
    ) -> StreamOutcome | None:
        """Submit user input.

        Returns:
            StreamOutcome, or None when the input was empty or a send is in flight
        """
        if not text.strip() and not attachments:
            return None
        return await self._submit(apply_generation_options(text, self.options), attachments)

    async def _submit(
        self,
        text: str,
        attachments: Sequence[Attachment] = (),
        record_user: bool = True,
    ) -> StreamOutcome | None:
        if self.is_loading:
            self._debug("debug", "Workspace", "Send ignored while loading")
            return None
        if not text.strip() and not attachments:
            return None

        outgoing = self.build_outgoing_text(text)
        if record_user:
            self.transcript.append_user(text, list(attachments))
        return await self.controller.run(outgoing, attachments)

    async def retry(self, message_id: str) -> StreamOutcome | None:
        """Remove an error message and re-send the user message before it.

        The request is rebuilt from the transcript. Context blocks injected
        into the original first message are not injected again.

        Raises:
            KeyError: If no message has that id
            ValueError: If the message is not a retryable error
        """
        message = self.transcript.get(message_id)
        if message is None:
            raise KeyError(message_id)
        if not (message.is_error and message.is_retryable):
            raise ValueError("Message is not a retryable error")
        if self.is_loading:
            return None

        original = self.transcript.preceding_user_message(message_id)
        self.transcript.remove(message_id)
        if original is None:
            self._debug("warning", "Workspace", "No user message to retry")
            return None
        self._debug("info", "Workspace", f"Retrying message {original.id}")
        return await self._submit(original.text, original.attachments, record_user=False)

    def stop(self) -> bool:
        """Cancel the in-flight send."""
        return self.controller.stop()

    async def improve_code(self, code: str, language: str = "") -> StreamOutcome | None:
        """Ask the model to review a code block from a reply."""
        return await self._submit(build_improve_prompt(code, language))

    async def optimize_prompt(self, draft: str) -> str:
        """Rewrite a draft prompt for the current mode."""
        return await self.session.optimize_prompt(draft, self._mode)

    def set_options(self, options: GenerationOptions) -> None:
        self.options = options

    # Projects

    async def save_project(self, title: str, description: str = "") -> Project:
        """Save the current mode as a project with a generated starter prompt.

        Raises:
            ValueError: If title is empty
        """
        project = create_project(self._mode, title, description)
        self.projects.insert(0, project)
        await self.repository.save_projects(self.projects)
        return project

    async def delete_project(self, project_id: str) -> bool:
        """Delete a project from memory and storage.

        Returns:
            True if the project existed
        """
        remaining = [project for project in self.projects if project.id != project_id]
        if len(remaining) == len(self.projects):
            return False
        self.projects = remaining
        await self.repository.save_projects(self.projects)
        return True

    def get_project(self, project_id: str) -> Project | None:
        return next((project for project in self.projects if project.id == project_id), None)

    def open_project(self, project_id: str) -> Project:
        """Switch to a project's mode and return it; the caller then sends its prompt.

        Raises:
            KeyError: If no project has that id
        """
        project = self.get_project(project_id)
        if project is None:
            raise KeyError(project_id)
        self.switch_mode(project.mode)
        return project

    # Profile

    async def save_profile(self, name: str, bio: str, avatar_id: str) -> UserProfile:
        """Update the profile, recording the previous values in its history.

        Raises:
            ValueError: If name is empty or avatar_id is unknown
        """
        name = name.strip()
        if not name:
            raise ValueError("Profile name must not be empty")
        if avatar_id not in AVATARS:
            raise ValueError(f"Unknown avatar: {avatar_id}")

        previous = self.profile
        snapshot = ProfileSnapshot(name=previous.name, avatar_id=previous.avatar_id, bio=previous.bio)
        history = (*previous.history, snapshot)[-PROFILE_HISTORY_LIMIT:]
        self.profile = previous.model_copy(
            update={
                "name": name,
                "bio": bio.strip(),
                "avatar_id": avatar_id,
                "updated_at": datetime.now(),
                "history": history,
            }
        )
        await self.repository.save_profile(self.profile)
        return self.profile

    # Planning

    async def add_task(
        self,
        title: str,
        due_date: str = "",
        comment: str = "",
        priority: Priority = "medium",
    ) -> Task:
        """Add a planning task.

        Raises:
            ValueError: If title is empty
        """
        title = title.strip()
        if not title:
            raise ValueError("Task title must not be empty")
        task = Task(title=title, due_date=due_date.strip(), comment=comment.strip(), priority=priority)
        self.tasks.append(task)
        await self.repository.save_tasks(self.tasks)
        return task

    async def toggle_task(self, task_id: str) -> Task:
        """Flip a task's completion flag.

        Raises:
            KeyError: If no task has that id
        """
        for index, task in enumerate(self.tasks):
            if task.id == task_id:
                updated = task.model_copy(update={"is_completed": not task.is_completed})
                self.tasks[index] = updated
                await self.repository.save_tasks(self.tasks)
                return updated
        raise KeyError(task_id)

    async def remove_task(self, task_id: str) -> bool:
        remaining = [task for task in self.tasks if task.id != task_id]
        if len(remaining) == len(self.tasks):
            return False
        self.tasks = remaining
        await self.repository.save_tasks(self.tasks)
        return True

    async def set_timetable(self, content: str) -> Timetable:
        self.timetable = Timetable(content=content)
        await self.repository.save_timetable(self.timetable)
        return self.timetable

    async def add_study_session(self, subject: str, duration_minutes: int) -> StudySession:
        """Log a study session.

        Raises:
            ValueError: If subject is empty or duration is negative
        """
        subject = subject.strip()
        if not subject:
            raise ValueError("Subject must not be empty")
        session = StudySession(subject=subject, duration_minutes=duration_minutes)
        self.study_sessions.append(session)
        await self.repository.save_study_sessions(self.study_sessions)
        return session

    async def add_grade(self, subject: str, grade: float, max_grade: float = 20) -> SubjectGrade:
        """Record a grade.

        Raises:
            ValueError: If subject is empty or the grade is out of range
        """
        subject = subject.strip()
        if not subject:
            raise ValueError("Subject must not be empty")
        if grade > max_grade:
            raise ValueError(f"Grade {grade} exceeds maximum {max_grade}")
        record = SubjectGrade(subject=subject, grade=grade, max_grade=max_grade)
        self.grades.append(record)
        await self.repository.save_grades(self.grades)
        return record

    async def close(self) -> None:
        """Cancel any send and release the session."""
        self.controller.stop()
        await self.session.close()


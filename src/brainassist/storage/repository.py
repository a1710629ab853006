"""Typed access to persisted state.

Hides the key names and the JSON encoding used for each kind of record.
Corrupt or unreadable values never propagate: they are logged through the
debug callback and the default (empty) state is returned instead.
"""

from collections.abc import Sequence
from typing import Any, TypeVar

from pydantic import TypeAdapter

from ..chat.models import Project, StudySession, SubjectGrade, Task, Timetable, UserProfile
from .base import KeyValueStore

PROJECTS_KEY = "brainassist_projects"
PROFILE_KEY = "brainassist_profile"
TASKS_KEY = "brainassist_tasks"
TIMETABLE_KEY = "brainassist_timetable"
SESSIONS_KEY = "brainassist_study_sessions"
GRADES_KEY = "brainassist_grades"

T = TypeVar("T")

_PROJECTS = TypeAdapter(list[Project])
_TASKS = TypeAdapter(list[Task])
_SESSIONS = TypeAdapter(list[StudySession])
_GRADES = TypeAdapter(list[SubjectGrade])
_PROFILE = TypeAdapter(UserProfile)
_TIMETABLE = TypeAdapter(Timetable)


class StateRepository:
    """Load and save user state on top of a KeyValueStore."""

    def __init__(self, store: KeyValueStore):
        self._store = store
        self._debug_callback: Any | None = None

    @property
    def store(self) -> KeyValueStore:
        return self._store

    def set_debug_callback(self, callback: Any) -> None:
        """Set the debug callback.

        Args:
            callback: Callable(level: str, component: str, message: str)
        """
        self._debug_callback = callback

    def _debug(self, level: str, component: str, message: str) -> None:
        if self._debug_callback:
            self._debug_callback(level, component, message)

    async def _load(self, key: str, adapter: TypeAdapter[T], default: T) -> T:
        raw = await self._store.get(key)
        if raw is None:
            return default
        try:
            return adapter.validate_json(raw)
        except ValueError as e:
            self._debug("warning", "Storage", f"Discarding corrupt value for {key}: {e}")
            return default

    async def _save(self, key: str, adapter: TypeAdapter[T], value: T) -> None:
        await self._store.set(key, adapter.dump_json(value).decode("utf-8"))
        self._debug("debug", "Storage", f"Saved {key}")

    async def load_projects(self) -> list[Project]:
        return await self._load(PROJECTS_KEY, _PROJECTS, [])

    async def save_projects(self, projects: Sequence[Project]) -> None:
        await self._save(PROJECTS_KEY, _PROJECTS, list(projects))

    async def load_profile(self) -> UserProfile:
        """Load the profile, or a fresh default one."""
        return await self._load(PROFILE_KEY, _PROFILE, UserProfile())

    async def save_profile(self, profile: UserProfile) -> None:
        await self._save(PROFILE_KEY, _PROFILE, profile)

    async def load_tasks(self) -> list[Task]:
        return await self._load(TASKS_KEY, _TASKS, [])

    async def save_tasks(self, tasks: Sequence[Task]) -> None:
        await self._save(TASKS_KEY, _TASKS, list(tasks))

    async def load_timetable(self) -> Timetable:
        return await self._load(TIMETABLE_KEY, _TIMETABLE, Timetable())

    async def save_timetable(self, timetable: Timetable) -> None:
        await self._save(TIMETABLE_KEY, _TIMETABLE, timetable)

    async def load_study_sessions(self) -> list[StudySession]:
        return await self._load(SESSIONS_KEY, _SESSIONS, [])

    async def save_study_sessions(self, sessions: Sequence[StudySession]) -> None:
        await self._save(SESSIONS_KEY, _SESSIONS, list(sessions))

    async def load_grades(self) -> list[SubjectGrade]:
        return await self._load(GRADES_KEY, _GRADES, [])

    async def save_grades(self, grades: Sequence[SubjectGrade]) -> None:
        await self._save(GRADES_KEY, _GRADES, list(grades))

"""Data models for the chat domain.

These models define messages, projects, planning data and the user
profile, independent of the storage backend used.
"""

from datetime import datetime
from typing import Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from ..llm.models import Attachment
from ..modes import ChatMode

Role = Literal["user", "model"]
Priority = Literal["high", "medium", "low"]

AVATARS: dict[str, str] = {
    "student": "Standard",
    "academic": "Académique",
    "modern": "Moderne",
    "creative": "Créatif",
    "tech": "Tech",
    "calm": "Zen",
    "energy": "Énergie",
    "smart": "Génie",
    "friendly": "Sympa",
}

PROFILE_HISTORY_LIMIT = 10


def _new_id() -> str:
    return uuid4().hex


class Message(BaseModel):
    """A single transcript entry.

    Text is only appended to while the message's stream is open; the
    Transcript enforces that.
    """

    id: str = Field(default_factory=_new_id)
    role: Role
    text: str = ""
    timestamp: datetime = Field(default_factory=datetime.now)
    is_error: bool = False
    is_retryable: bool = False
    attachments: list[Attachment] = Field(default_factory=list)


class Project(BaseModel):
    """Saved, reusable starter prompt bound to a mode."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    title: str
    description: str = ""
    mode: ChatMode
    prompt: str
    created_at: datetime = Field(default_factory=datetime.now)


class Task(BaseModel):
    """A planning task fed to the organization context."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    title: str
    comment: str = ""
    due_date: str = Field(default="", description="ISO date string, empty when unset")
    priority: Priority = "medium"
    is_completed: bool = False


class Timetable(BaseModel):
    """Free-text weekly schedule."""

    model_config = ConfigDict(frozen=True)

    content: str = ""


class ProfileSnapshot(BaseModel):
    """Previous profile values recorded on each save."""

    model_config = ConfigDict(frozen=True)

    name: str
    avatar_id: str
    bio: str
    saved_at: datetime = Field(default_factory=datetime.now)


class UserProfile(BaseModel):
    """Singleton user profile."""

    model_config = ConfigDict(frozen=True)

    name: str = "Student"
    avatar_id: str = "student"
    bio: str = "A hardworking student."
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
    history: tuple[ProfileSnapshot, ...] = ()


class StudySession(BaseModel):
    """One logged study session."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    subject: str
    duration_minutes: int = Field(ge=0)
    date: datetime = Field(default_factory=datetime.now)


class SubjectGrade(BaseModel):
    """One recorded grade."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    subject: str
    grade: float = Field(ge=0)
    max_grade: float = Field(default=20, gt=0)
    date: datetime = Field(default_factory=datetime.now)


LEVELS = ("Adaptatif", "Collège", "Lycée", "Université", "Débutant", "Expert")
FORMATS = (
    "Auto",
    "Cours complet",
    "Fiche de révision",
    "QCM / Quiz",
    "Exercices",
    "Plan détaillé",
    "Tableau comparatif",
)
TONES = ("Pédagogique", "Direct & Concis", "Socratique", "Ludique", "Académique")


class GenerationOptions(BaseModel):
    """Answer-shaping options appended to outgoing messages."""

    model_config = ConfigDict(frozen=True)

    level: str = LEVELS[0]
    response_format: str = FORMATS[0]
    tone: str = TONES[0]

    @property
    def is_default(self) -> bool:
        return (
            self.level == LEVELS[0]
            and self.response_format == FORMATS[0]
            and self.tone == TONES[0]
        )

"""Chat module for brainassist.

This module hides the conversation lifecycle: one live session per mode,
a single in-flight streaming send, context injection and error
classification.
"""

from .attachments import encode_bytes, encode_file, is_accepted
from .errors import ChatError, ConfigurationError, ErrorInfo, ErrorKind, classify_error
from .models import (
    AVATARS,
    GenerationOptions,
    Message,
    Project,
    StudySession,
    SubjectGrade,
    Task,
    Timetable,
    UserProfile,
)
from .session import ChatSessionManager
from .streaming import StreamingController, StreamOutcome, StreamState
from .transcript import Transcript, TranscriptEvent
from .workspace import Workspace

__all__ = [
    "AVATARS",
    "ChatError",
    "ChatSessionManager",
    "ConfigurationError",
    "ErrorInfo",
    "ErrorKind",
    "GenerationOptions",
    "Message",
    "Project",
    "StreamOutcome",
    "StreamState",
    "StreamingController",
    "StudySession",
    "SubjectGrade",
    "Task",
    "Timetable",
    "Transcript",
    "TranscriptEvent",
    "UserProfile",
    "Workspace",
    "classify_error",
    "encode_bytes",
    "encode_file",
    "is_accepted",
]

"""Transcript store.

Hides the ordered message list and the rule that a message's text may only
grow while its stream is open. Observers subscribe to change events; the
UI uses this to mirror the transcript without polling.
"""

from collections.abc import Callable, Iterator
from enum import Enum

from ..llm.models import Attachment
from .models import Message


class TranscriptEvent(str, Enum):
    """Kinds of change notifications."""

    APPENDED = "appended"
    UPDATED = "updated"
    FINALIZED = "finalized"
    REMOVED = "removed"
    CLEARED = "cleared"


TranscriptListener = Callable[[TranscriptEvent, Message | None], None]


class Transcript:
    """Ordered, exclusively owned list of chat messages.

    At most one message is open for streaming at a time. Only the open
    message can have text appended; every other message is immutable
    from the transcript's point of view.
    """

    def __init__(self) -> None:
        self._messages: list[Message] = []
        self._streaming_id: str | None = None
        self._listeners: list[TranscriptListener] = []

    @property
    def messages(self) -> tuple[Message, ...]:
        """Snapshot of the messages in display order."""
        return tuple(self._messages)

    @property
    def streaming_message(self) -> Message | None:
        """The message currently receiving fragments, if any."""
        if self._streaming_id is None:
            return None
        return self.get(self._streaming_id)

    @property
    def is_empty(self) -> bool:
        return not self._messages

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(tuple(self._messages))

    def get(self, message_id: str) -> Message | None:
        """Look up a message by id."""
        for message in self._messages:
            if message.id == message_id:
                return message
        return None

    def append(self, message: Message) -> Message:
        """Append a finished message (user input or error)."""
        self._messages.append(message)
        self._emit(TranscriptEvent.APPENDED, message)
        return message

    def append_user(self, text: str, attachments: list[Attachment] | None = None) -> Message:
        """Append a user message."""
        return self.append(Message(role="user", text=text, attachments=list(attachments or [])))

    def open_stream(self) -> Message:
        """Append an empty model placeholder and open it for streaming.

        Raises:
            RuntimeError: If another message is already streaming
        """
        if self._streaming_id is not None:
            raise RuntimeError("A message is already streaming")
        placeholder = Message(role="model", text="")
        self._messages.append(placeholder)
        self._streaming_id = placeholder.id
        self._emit(TranscriptEvent.APPENDED, placeholder)
        return placeholder

    def append_fragment(self, fragment: str) -> Message:
        """Concatenate a fragment onto the open message.

        Raises:
            RuntimeError: If no message is streaming
        """
        message = self.streaming_message
        if message is None:
            raise RuntimeError("No message is streaming")
        message.text += fragment
        self._emit(TranscriptEvent.UPDATED, message)
        return message

    def close_stream(self) -> Message | None:
        """Finalize the open message. No-op when none is open."""
        message = self.streaming_message
        self._streaming_id = None
        if message is not None:
            self._emit(TranscriptEvent.FINALIZED, message)
        return message

    def remove(self, message_id: str) -> Message:
        """Remove a message by id.

        Raises:
            KeyError: If no message has that id
        """
        message = self.get(message_id)
        if message is None:
            raise KeyError(message_id)
        if self._streaming_id == message_id:
            self._streaming_id = None
        self._messages.remove(message)
        self._emit(TranscriptEvent.REMOVED, message)
        return message

    def clear(self) -> None:
        """Remove every message."""
        self._messages.clear()
        self._streaming_id = None
        self._emit(TranscriptEvent.CLEARED, None)

    def preceding_user_message(self, message_id: str) -> Message | None:
        """Nearest user message before the given message."""
        index = next(
            (i for i, message in enumerate(self._messages) if message.id == message_id),
            None,
        )
        if index is None:
            return None
        for message in reversed(self._messages[:index]):
            if message.role == "user":
                return message
        return None

    def last_model_message(self) -> Message | None:
        """Most recent non-error model message."""
        for message in reversed(self._messages):
            if message.role == "model" and not message.is_error:
                return message
        return None

    def subscribe(self, listener: TranscriptListener) -> Callable[[], None]:
        """Register a change listener.

        Returns:
            Callable that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: TranscriptEvent, message: Message | None) -> None:
        for listener in tuple(self._listeners):
            listener(event, message)

"""Streaming controller.

The one state machine in the system: Idle, Sending, Streaming and then
one of Completed, Cancelled or Failed before returning to Idle. It owns
the cancellation token of the in-flight send and is the only writer of
fragment text into the transcript.
"""

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..llm import Attachment, CancellationToken, StreamingResponse
from .errors import ErrorInfo, classify_error
from .models import Message
from .session import ChatSessionManager
from .transcript import Transcript


class StreamState(str, Enum):
    """States of a send operation."""

    IDLE = "idle"
    SENDING = "sending"
    STREAMING = "streaming"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass
class StreamOutcome:
    """Result of one send operation."""

    state: StreamState
    message: Message | None = None
    error: ErrorInfo | None = None
    error_message: Message | None = None
    fragments: int = 0
    usage: dict[str, Any] | None = None

    @property
    def text(self) -> str:
        return self.message.text if self.message else ""


class StreamingController:
    """Drives one send at a time from submission to a terminal state.

    Sending while a send is in flight is a no-op: run returns None and
    the transcript is untouched.
    """

    def __init__(self, session: ChatSessionManager, transcript: Transcript):
        self._session = session
        self._transcript = transcript
        self._state = StreamState.IDLE
        self._token: CancellationToken | None = None
        self._state_callback: Any | None = None
        self._debug_callback: Any | None = None

    @property
    def state(self) -> StreamState:
        return self._state

    @property
    def is_loading(self) -> bool:
        """Whether a send is in flight."""
        return self._state in (StreamState.SENDING, StreamState.STREAMING)

    def set_state_callback(self, callback: Any) -> None:
        """Set a callback invoked with each new StreamState."""
        self._state_callback = callback

    def set_debug_callback(self, callback: Any) -> None:
        """Set the debug callback.

        Args:
            callback: Callable(level: str, component: str, message: str)
        """
        self._debug_callback = callback

    def _debug(self, level: str, component: str, message: str) -> None:
        if self._debug_callback:
            self._debug_callback(level, component, message)

    def _set_state(self, state: StreamState) -> None:
        self._state = state
        if self._state_callback:
            self._state_callback(state)

    def stop(self) -> bool:
        """Cancel the in-flight send.

        The controller is back to Idle when this returns, so a new send can
        start at once. The cancelled run finishes in the background and
        discards anything the provider still delivers.

        Returns:
            True if a send was in flight
        """
        if self._token is None or not self.is_loading:
            return False
        self._token.cancel()
        self._token = None
        self._transcript.close_stream()
        self._set_state(StreamState.CANCELLED)
        self._set_state(StreamState.IDLE)
        self._debug("info", "Stream", "Send cancelled")
        return True

    async def run(
        self,
        text: str,
        attachments: Sequence[Attachment] = (),
    ) -> StreamOutcome | None:
        """Send a message and stream the reply into the transcript.

        The model placeholder is appended when the first fragment arrives.
        Errors other than cancellation become a separate error message;
        any partial reply already streamed is kept.

        Args:
            text: Outgoing text, already augmented with any context
            attachments: Inline files sent before the text

        Returns:
            StreamOutcome, or None if a send was already in flight
        """
        if self.is_loading:
            self._debug("debug", "Stream", "Send ignored, another send is in flight")
            return None

        token = CancellationToken()
        self._token = token
        self._set_state(StreamState.SENDING)

        outcome = StreamOutcome(state=StreamState.COMPLETED)
        stream: StreamingResponse | None = None
        try:
            stream = self._session.send_and_stream(text, attachments, token)
            async for fragment in stream:
                if outcome.message is None:
                    outcome.message = self._transcript.open_stream()
                    self._set_state(StreamState.STREAMING)
                self._transcript.append_fragment(fragment)
                outcome.fragments += 1
            outcome.usage = stream.usage
            if token.cancelled:
                outcome.state = StreamState.CANCELLED
        except asyncio.CancelledError:
            token.cancel()
            outcome.state = StreamState.CANCELLED
            raise
        except Exception as e:
            info = classify_error(e)
            outcome.error = info
            if info.suppressed or token.cancelled:
                outcome.state = StreamState.CANCELLED
            else:
                outcome.state = StreamState.FAILED
                self._debug("error", "Stream", f"{info.kind.value}: {e}")
                self._close_own_stream(outcome)
                outcome.error_message = self._transcript.append(
                    Message(
                        role="model",
                        text=info.text,
                        is_error=True,
                        is_retryable=info.retryable,
                    )
                )
        finally:
            self._close_own_stream(outcome)
            if stream is not None:
                await stream.aclose()
            # stop() already settled the state of a cancelled run
            if self._token is token:
                self._token = None
                self._set_state(outcome.state)
                self._set_state(StreamState.IDLE)

        self._debug(
            "info",
            "Stream",
            f"Send {outcome.state.value}: {outcome.fragments} fragment(s), "
            f"{len(outcome.text)} chars",
        )
        return outcome

    def _close_own_stream(self, outcome: StreamOutcome) -> None:
        if outcome.message is not None and self._transcript.streaming_message is outcome.message:
            self._transcript.close_stream()

"""Chat session manager.

This module hides the design decision of how the single live conversation
with the remote model is owned. The manager is an explicit resource passed
to whoever needs it: it creates, replaces and disposes the one chat handle,
and no other component holds a reference to that handle.
"""

from collections.abc import Sequence
from typing import Any

from ..llm import Attachment, CancellationToken, ChatHandle, ChatTurn, LLMProvider, StreamingResponse
from ..modes import OPTIMIZER_MODEL, OPTIMIZER_TEMPERATURE, ChatMode, ModeProfile, resolve
from ..prompts import render_prompt
from .errors import ConfigurationError
from .models import Message


def history_to_turns(history: Sequence[Message]) -> list[ChatTurn]:
    """Re-express transcript messages as replayable turns.

    Error messages are display-only and are never replayed. Turns with
    neither text nor attachments are dropped.
    """
    turns = []
    for message in history:
        if message.is_error:
            continue
        if not message.text and not message.attachments:
            continue
        turns.append(
            ChatTurn(
                role=message.role,
                text=message.text,
                attachments=tuple(message.attachments),
            )
        )
    return turns


class ChatSessionManager:
    """Owner of the one active chat session.

    Usage:
        manager = ChatSessionManager(provider)
        manager.initialize(ChatMode.LEARNING)
        stream = manager.send_and_stream("Bonjour", [], token)
        async for fragment in stream:
            ...
    """

    def __init__(self, provider: LLMProvider | None):
        """Initialize the manager.

        Args:
            provider: LLM provider, or None when no API credential is configured
        """
        self._provider = provider
        self._chat: ChatHandle | None = None
        self._profile: ModeProfile | None = None
        self._debug_callback: Any | None = None

    @property
    def provider(self) -> LLMProvider | None:
        return self._provider

    @property
    def is_active(self) -> bool:
        """Whether a session currently exists."""
        return self._chat is not None

    @property
    def profile(self) -> ModeProfile | None:
        """Profile of the active session."""
        return self._profile

    @property
    def mode(self) -> ChatMode | None:
        return self._profile.mode if self._profile else None

    @property
    def model_name(self) -> str | None:
        return self._chat.model if self._chat else None

    def set_debug_callback(self, callback: Any) -> None:
        """Set the debug callback.

        Args:
            callback: Callable(level: str, component: str, message: str)
        """
        self._debug_callback = callback

    def _debug(self, level: str, component: str, message: str) -> None:
        if self._debug_callback:
            self._debug_callback(level, component, message)

    def initialize(self, mode: ChatMode | str, history: Sequence[Message] = ()) -> ChatHandle:
        """Create a session bound to a mode, replacing any previous one.

        Args:
            mode: Mode whose profile configures the session
            history: Prior messages to replay as conversation turns

        Returns:
            The new chat handle

        Raises:
            ConfigurationError: If no provider is configured
            ValueError: If mode is not a known mode
        """
        profile = resolve(mode)
        if self._provider is None:
            self._chat = None
            self._profile = None
            raise ConfigurationError()

        turns = history_to_turns(history)
        self._chat = self._provider.create_chat(
            model=profile.model_name,
            system_instruction=profile.instruction_text,
            temperature=profile.temperature,
            top_k=profile.top_k,
            history=turns,
        )
        self._profile = profile
        self._debug(
            "info",
            "Session",
            f"Session created: mode={profile.mode.value} model={profile.model_name} "
            f"temperature={profile.temperature} top_k={profile.top_k} history={len(turns)}",
        )
        return self._chat

    def reset(self, mode: ChatMode | str, history: Sequence[Message] = ()) -> ChatHandle:
        """Dispose the current session and initialize a new one."""
        self.dispose()
        return self.initialize(mode, history)

    def dispose(self) -> None:
        """Drop the current session, if any."""
        if self._chat is not None:
            self._debug("debug", "Session", "Session disposed")
        self._chat = None
        self._profile = None

    def send_and_stream(
        self,
        text: str,
        attachments: Sequence[Attachment] = (),
        token: CancellationToken | None = None,
    ) -> StreamingResponse:
        """Send a message on the active session and return its fragments.

        A session is created lazily in the learning mode when none exists.

        Raises:
            ConfigurationError: If no provider is configured
        """
        chat = self._chat or self.initialize(self.mode or ChatMode.LEARNING)
        self._debug(
            "debug",
            "Session",
            f"Sending {len(text)} chars with {len(attachments)} attachment(s)",
        )
        return chat.send_message_stream(text, attachments, token)

    async def optimize_prompt(self, draft: str, mode: ChatMode | str | None = None) -> str:
        """Rewrite a draft into a clearer, better-structured prompt.

        The rewrite keeps the draft's language. Failures are logged and the
        draft is returned unchanged.

        Args:
            draft: Raw user input
            mode: Mode whose domain frames the rewrite (defaults to the active one)

        Returns:
            Optimized prompt, "" for a blank draft
        """
        if not draft.strip():
            return ""
        if self._provider is None:
            self._debug("warning", "Optimizer", "No provider configured, keeping draft")
            return draft

        profile = resolve(mode or self.mode or ChatMode.LEARNING)
        prompt = render_prompt(
            "optimize_prompt",
            context=profile.optimization_context,
            input=draft,
        )
        try:
            response = await self._provider.generate(
                prompt,
                model=OPTIMIZER_MODEL,
                temperature=OPTIMIZER_TEMPERATURE,
            )
        except Exception as e:
            self._debug("warning", "Optimizer", f"Optimization failed: {e}")
            return draft

        optimized = response.content.strip()
        return optimized or draft

    async def close(self) -> None:
        """Dispose the session and close the provider."""
        self.dispose()
        if self._provider is not None:
            await self._provider.close()

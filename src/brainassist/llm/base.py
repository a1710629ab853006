from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from .models import Attachment, CancellationToken, ChatTurn, LLMResponse, StreamingResponse


class ChatHandle(ABC):
    """A live conversation with the remote model.

    A handle owns the provider-side conversation history. It is created by
    LLMProvider.create_chat and is replaced wholesale, never reconfigured.
    """

    @property
    @abstractmethod
    def model(self) -> str:
        """Model this conversation is bound to."""

    @abstractmethod
    def send_message_stream(
        self,
        text: str,
        attachments: Sequence[Attachment] = (),
        token: CancellationToken | None = None,
    ) -> StreamingResponse:
        """Send a user message and stream the reply.

        The request is not issued until the returned response is first
        iterated.

        Args:
            text: Message text (may be empty when attachments are present)
            attachments: Inline file parts, sent before the text
            token: Cancellation token checked between fragments

        Returns:
            StreamingResponse yielding text fragments in arrival order

        Raises:
            Exception: Provider-specific errors, raised during iteration
        """


class LLMProvider(ABC):
    """Abstract base class for LLM providers.

    This module hides the design decision of which LLM provider to use.
    Implementations must handle provider-specific details like:
    - API client setup and authentication
    - Request/response format conversion
    - Multimodal part encoding
    - Usage reporting

    Supports async context manager protocol for proper resource cleanup:
        async with provider:
            chat = provider.create_chat(...)
        # Automatically cleaned up
    """

    @abstractmethod
    def create_chat(
        self,
        model: str,
        system_instruction: str,
        temperature: float = 0.7,
        top_k: int | None = None,
        history: Sequence[ChatTurn] = (),
    ) -> ChatHandle:
        """Create a new conversation.

        Args:
            model: Model to bind the conversation to
            system_instruction: System prompt for the whole conversation
            temperature: Sampling temperature (0.0 to 2.0)
            top_k: Top-K sampling cutoff (None uses provider default)
            history: Prior turns to seed the conversation with

        Returns:
            ChatHandle for the new conversation
        """

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        model: str | None = None,
        temperature: float = 0.7,
    ) -> LLMResponse:
        """Generate a one-shot completion outside any conversation.

        Args:
            prompt: Prompt text
            model: Model to use (None uses provider's default)
            temperature: Sampling temperature

        Returns:
            LLMResponse containing generated content and metadata
        """

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections or resources."""

    async def __aenter__(self) -> "LLMProvider":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit with automatic cleanup.

        Note: Suppresses "Event loop is closed" errors during cleanup.
        This is a known harmless race condition in httpx/anyio cleanup:
        https://github.com/encode/httpx/issues/914
        """
        try:
            await self.close()
        except RuntimeError as e:
            if "Event loop is closed" not in str(e):
                raise

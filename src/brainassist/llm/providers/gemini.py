"""Google Gemini LLM provider implementation.

Uses the official Google GenAI SDK for async chat sessions.
Reference: https://github.com/googleapis/python-genai

Note: Gemini can return empty chunks (safety filtering, usage-only chunks).
Those chunks produce no fragment.
"""

import base64
from collections.abc import AsyncIterator, Sequence
from typing import Any

from google import genai
from google.genai import types

from ..base import ChatHandle, LLMProvider
from ..models import (
    Attachment,
    CancellationToken,
    ChatTurn,
    LLMResponse,
    StreamingResponse,
    strip_data_url,
)

# Default safety settings - relaxed so academic content is not blocked
DEFAULT_SAFETY_SETTINGS = [
    types.SafetySetting(category="HARM_CATEGORY_HARASSMENT", threshold="BLOCK_ONLY_HIGH"),
    types.SafetySetting(category="HARM_CATEGORY_HATE_SPEECH", threshold="BLOCK_ONLY_HIGH"),
    types.SafetySetting(category="HARM_CATEGORY_SEXUALLY_EXPLICIT", threshold="BLOCK_ONLY_HIGH"),
    types.SafetySetting(category="HARM_CATEGORY_DANGEROUS_CONTENT", threshold="BLOCK_ONLY_HIGH"),
]


def build_parts(text: str, attachments: Sequence[Attachment] = ()) -> list[types.Part]:
    """Convert a message into Gemini parts.

    Inline data parts come first, then the text part. The text part is
    omitted only when attachments carry the whole message.
    """
    parts = [
        types.Part.from_bytes(
            data=base64.b64decode(strip_data_url(attachment.data)),
            mime_type=attachment.mime_type,
        )
        for attachment in attachments
    ]
    if text.strip() or not parts:
        parts.append(types.Part.from_text(text=text))
    return parts


def _extract_content(response) -> str:
    """Extract text content from a Gemini response chunk.

    Args:
        response: Gemini GenerateContentResponse

    Returns:
        Text content or empty string
    """
    if response.candidates:
        candidate = response.candidates[0]
        if candidate.content and candidate.content.parts:
            texts = [part.text for part in candidate.content.parts if getattr(part, "text", None)]
            if texts:
                return "".join(texts)

    # Fallback to response.text (may raise or return None)
    try:
        return response.text or ""
    except (ValueError, AttributeError):
        return ""


def _extract_usage(response) -> dict[str, int] | None:
    metadata = getattr(response, "usage_metadata", None)
    if not metadata:
        return None
    return {
        "prompt_tokens": metadata.prompt_token_count or 0,
        "completion_tokens": metadata.candidates_token_count or 0,
        "total_tokens": metadata.total_token_count or 0,
    }


class GeminiChat(ChatHandle):
    """Conversation bound to one Gemini model and system instruction."""

    def __init__(self, chat: Any, model: str):
        self._chat = chat
        self._model = model

    @property
    def model(self) -> str:
        return self._model

    def send_message_stream(
        self,
        text: str,
        attachments: Sequence[Attachment] = (),
        token: CancellationToken | None = None,
    ) -> StreamingResponse:
        parts = build_parts(text, attachments)
        response: StreamingResponse | None = None

        async def _fragments() -> AsyncIterator[str]:
            usage = None
            stream = await self._chat.send_message_stream(message=parts)
            async for chunk in stream:
                # usage_metadata is complete on the final chunk
                usage = _extract_usage(chunk) or usage
                fragment = _extract_content(chunk)
                if fragment:
                    yield fragment
            if usage and response is not None:
                response.set_usage(usage)

        response = StreamingResponse(_fragments(), token=token)
        return response


class GeminiProvider(LLMProvider):
    """Google Gemini LLM provider implementation.

    Hidden design decisions:
    - Google GenAI client initialization
    - Conversion of replayed turns and attachments to Content/Part objects
    - Relaxed safety settings
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash",
        **client_kwargs: Any
    ):
        """Initialize Gemini provider.

        Args:
            api_key: Google AI API key
            model: Default model for one-shot generation
            **client_kwargs: Additional kwargs for Client
        """
        self._model = model
        self._client = genai.Client(api_key=api_key, **client_kwargs)

    @property
    def model(self) -> str:
        """Get the default model name."""
        return self._model

    def _convert_history(self, history: Sequence[ChatTurn]) -> list[types.Content]:
        """Convert replayed turns to Gemini contents, dropping empty turns."""
        contents = []
        for turn in history:
            parts = build_parts(turn.text, turn.attachments) if turn.text or turn.attachments else []
            if parts:
                contents.append(types.Content(role=turn.role, parts=parts))
        return contents

    def create_chat(
        self,
        model: str,
        system_instruction: str,
        temperature: float = 0.7,
        top_k: int | None = None,
        history: Sequence[ChatTurn] = (),
    ) -> ChatHandle:
        config = types.GenerateContentConfig(
            system_instruction=system_instruction,
            temperature=temperature,
            top_k=top_k,
            safety_settings=DEFAULT_SAFETY_SETTINGS,
        )
        chat = self._client.aio.chats.create(
            model=model,
            config=config,
            history=self._convert_history(history),
        )
        return GeminiChat(chat, model)

    async def generate(
        self,
        prompt: str,
        model: str | None = None,
        temperature: float = 0.7,
    ) -> LLMResponse:
        model_to_use = model or self._model
        response = await self._client.aio.models.generate_content(
            model=model_to_use,
            contents=prompt,
            config=types.GenerateContentConfig(temperature=temperature),
        )
        return LLMResponse(
            content=_extract_content(response),
            model=model_to_use,
            usage=_extract_usage(response),
        )

    async def close(self) -> None:
        """Close the Gemini client.

        Note: The Google GenAI client doesn't require explicit closing,
        but we implement this for interface consistency.
        """
        pass

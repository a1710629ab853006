from .base import ChatHandle, LLMProvider
from .factory import create_llm_provider
from .models import Attachment, CancellationToken, ChatTurn, LLMResponse, StreamingResponse
from .providers import GeminiChat, GeminiProvider

__all__ = [
    "Attachment",
    "CancellationToken",
    "ChatHandle",
    "ChatTurn",
    "GeminiChat",
    "GeminiProvider",
    "LLMProvider",
    "LLMResponse",
    "StreamingResponse",
    "create_llm_provider",
]

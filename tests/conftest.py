"""Pytest configuration and shared fixtures."""
import asyncio
import os
from collections import deque
from collections.abc import AsyncIterator, Sequence
from dataclasses import dataclass, field

import pytest
import pytest_asyncio

from brainassist.chat import ChatSessionManager, Workspace
from brainassist.llm import (
    Attachment,
    CancellationToken,
    ChatHandle,
    ChatTurn,
    LLMProvider,
    LLMResponse,
    StreamingResponse,
)
from brainassist.storage import InMemoryKeyValueStore, StateRepository


@dataclass
class SentMessage:
    """One message recorded by the fake chat."""

    text: str
    attachments: tuple[Attachment, ...]
    chat: "FakeChat"


@dataclass
class CreatedChat:
    """Arguments of one create_chat call."""

    model: str
    system_instruction: str
    temperature: float
    top_k: int | None
    history: tuple[ChatTurn, ...] = field(default_factory=tuple)


class FakeChat(ChatHandle):
    """Chat handle replaying scripted replies.

    A script is a list of fragments; an Exception item is raised at that
    point of the stream and an asyncio.Event item stalls it until set.
    """

    def __init__(self, provider: "FakeLLMProvider", model: str):
        self._provider = provider
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
        self._provider.sent.append(SentMessage(text, tuple(attachments), self))
        script = self._provider.next_script()
        response: StreamingResponse | None = None

        async def _fragments() -> AsyncIterator[str]:
            for item in script:
                await asyncio.sleep(0)
                if isinstance(item, asyncio.Event):
                    await item.wait()
                    continue
                if isinstance(item, BaseException):
                    raise item
                yield item
            if response is not None:
                total = sum(len(item) for item in script if isinstance(item, str))
                response.set_usage({"prompt_tokens": len(text), "completion_tokens": total, "total_tokens": len(text) + total})

        response = StreamingResponse(_fragments(), token=token)
        return response


class FakeLLMProvider(LLMProvider):
    """Scripted LLM provider recording every request."""

    def __init__(self, replies: Sequence[Sequence] = (), generated: str | Exception = "Optimized prompt"):
        self.replies = deque(list(reply) for reply in replies)
        self.generated = generated
        self.sent: list[SentMessage] = []
        self.chats: list[CreatedChat] = []
        self.prompts: list[dict] = []
        self.closed = False

    def script(self, *replies: Sequence) -> None:
        """Queue replies for the next sends."""
        self.replies.extend(list(reply) for reply in replies)

    def next_script(self) -> list:
        return self.replies.popleft() if self.replies else ["OK"]

    def create_chat(
        self,
        model: str,
        system_instruction: str,
        temperature: float = 0.7,
        top_k: int | None = None,
        history: Sequence[ChatTurn] = (),
    ) -> ChatHandle:
        self.chats.append(CreatedChat(model, system_instruction, temperature, top_k, tuple(history)))
        return FakeChat(self, model)

    async def generate(
        self,
        prompt: str,
        model: str | None = None,
        temperature: float = 0.7,
    ) -> LLMResponse:
        self.prompts.append({"prompt": prompt, "model": model, "temperature": temperature})
        if isinstance(self.generated, Exception):
            raise self.generated
        return LLMResponse(content=self.generated, model=model or "fake")

    async def close(self) -> None:
        self.closed = True


@pytest.fixture(scope="session")
def api_keys():
    """Return API keys from environment."""
    return {"gemini": os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY")}


@pytest.fixture
def fake_llm():
    """Return a scripted LLM provider."""
    return FakeLLMProvider()


@pytest.fixture
def make_provider():
    """Return a factory for scripted providers."""
    return FakeLLMProvider


@pytest.fixture
def memory_store():
    """Return an empty in-memory key-value store."""
    return InMemoryKeyValueStore()


@pytest.fixture
def repository(memory_store):
    """Return a state repository over the in-memory store."""
    return StateRepository(memory_store)


@pytest_asyncio.fixture
async def workspace(fake_llm, repository):
    """Return a loaded workspace driven by the fake provider."""
    ws = Workspace(ChatSessionManager(fake_llm), repository)
    await ws.load()
    return ws


@pytest.fixture
def debug_events():
    """Collect debug callback events as (level, component, message)."""
    events: list[tuple[str, str, str]] = []

    def callback(level: str, component: str, message: str) -> None:
        events.append((level, component, message))

    callback.events = events
    return callback

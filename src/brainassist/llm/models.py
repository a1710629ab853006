import asyncio
from collections.abc import AsyncIterator
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

_END = object()


class CancellationToken:
    """Cancellation signal for one streaming request.

    Consumers waiting on the remote sequence race the pending fragment
    against wait(), so a cancel takes effect without waiting for the next
    fragment to arrive.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        """Whether cancellation has been requested."""
        return self._event.is_set()

    def cancel(self) -> None:
        """Request cancellation. Idempotent."""
        self._event.set()

    async def wait(self) -> None:
        """Block until cancellation is requested."""
        await self._event.wait()


class StreamingResponse:
    """Cancellable wrapper for streaming LLM responses that captures usage info.

    Acts as an async iterator for text fragments while storing token usage
    that becomes available at the end of the stream. When a cancellation
    token is attached, each pending fragment is raced against it: once the
    token is set, iteration ends at once and the underlying generator is
    closed. A fragment that arrives after cancellation is discarded.

    Usage:
        token = CancellationToken()
        stream = chat.send_message_stream("Bonjour", token=token)
        async for fragment in stream:
            print(fragment, end="")
        print(stream.usage, stream.cancelled)
    """

    def __init__(
        self,
        async_iter: AsyncIterator[str],
        token: CancellationToken | None = None,
    ):
        """Initialize with an async iterator of text fragments.

        Args:
            async_iter: Async iterator yielding text fragments
            token: Optional cancellation token checked between fragments
        """
        self._iter = async_iter
        self._token = token
        self._usage: dict[str, Any] | None = None
        self._cancelled = False
        self._closed = False

    @property
    def usage(self) -> dict[str, Any] | None:
        """Get token usage info (available after iteration completes)."""
        return self._usage

    @property
    def cancelled(self) -> bool:
        """Whether iteration stopped because of the cancellation token."""
        return self._cancelled

    @property
    def token(self) -> CancellationToken | None:
        return self._token

    def set_usage(self, usage: dict[str, Any]) -> None:
        """Set token usage info (called by provider at end of stream)."""
        self._usage = usage

    def __aiter__(self) -> "StreamingResponse":
        """Return self as async iterator."""
        return self

    async def __anext__(self) -> str:
        """Get the next fragment, honouring the cancellation token."""
        if self._closed:
            raise StopAsyncIteration
        if self._is_cancel_requested():
            await self._stop()
            raise StopAsyncIteration

        if self._token is None:
            fragment = await self._fetch()
        else:
            fragment = await self._fetch_or_cancel(self._token)

        if fragment is _END:
            self._closed = True
            raise StopAsyncIteration
        if self._is_cancel_requested():
            await self._stop()
            raise StopAsyncIteration
        return fragment

    async def _fetch(self) -> Any:
        try:
            return await self._iter.__anext__()
        except StopAsyncIteration:
            return _END

    async def _fetch_or_cancel(self, token: CancellationToken) -> Any:
        fetch = asyncio.ensure_future(self._fetch())
        cancelled = asyncio.ensure_future(token.wait())
        try:
            await asyncio.wait({fetch, cancelled}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            cancelled.cancel()
            if not fetch.done():
                fetch.cancel()
                # The generator must be idle before it can be closed
                await asyncio.wait({fetch})
        if fetch.cancelled():
            return _END
        return fetch.result()

    async def aclose(self) -> None:
        """Stop consuming and release the underlying generator."""
        if self._closed:
            return
        self._closed = True
        close = getattr(self._iter, "aclose", None)
        if close is not None:
            await close()

    def _is_cancel_requested(self) -> bool:
        return self._token is not None and self._token.cancelled

    async def _stop(self) -> None:
        self._cancelled = True
        await self.aclose()


def strip_data_url(data: str) -> str:
    """Return the raw base64 part of a ``data:`` URL (or the input unchanged)."""
    if data.startswith("data:") and "," in data:
        return data.split(",", 1)[1]
    return data


class Attachment(BaseModel):
    """Inline file payload sent alongside a user message."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Original file name")
    mime_type: str = Field(description="MIME type of the payload")
    data: str = Field(description="Base64-encoded file content")


class ChatTurn(BaseModel):
    """One prior turn replayed into a new chat session."""

    model_config = ConfigDict(frozen=True)

    role: Literal["user", "model"] = Field(description="Author of the turn")
    text: str = Field(default="", description="Text content of the turn")
    attachments: tuple[Attachment, ...] = Field(default=(), description="Inline file parts")


class LLMResponse(BaseModel):
    """Response from an LLM provider."""

    model_config = ConfigDict(frozen=True)

    content: str = Field(description="Generated text content")
    model: str = Field(description="Model that generated the response")
    usage: dict[str, int] | None = Field(
        default=None,
        description="Token usage information"
    )

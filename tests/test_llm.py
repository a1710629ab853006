"""Unit tests for the LLM abstraction."""
import asyncio
import os

import pytest
from hypothesis import given
from hypothesis import strategies as st

from brainassist.llm import (
    Attachment,
    CancellationToken,
    ChatHandle,
    GeminiProvider,
    LLMProvider,
    StreamingResponse,
    create_llm_provider,
)
from brainassist.llm.models import strip_data_url
from brainassist.llm.providers.gemini import build_parts


async def _fragments(items):
    for item in items:
        yield item


async def _collect(stream: StreamingResponse) -> list[str]:
    return [fragment async for fragment in stream]


class TestInterfaces:
    """Tests for the abstract interfaces."""

    def test_provider_is_abstract(self):
        """Test that LLMProvider cannot be instantiated directly."""
        with pytest.raises(TypeError):
            LLMProvider()  # type: ignore

    def test_chat_handle_is_abstract(self):
        """Test that ChatHandle cannot be instantiated directly."""
        with pytest.raises(TypeError):
            ChatHandle()  # type: ignore


class TestCancellationToken:
    """Tests for CancellationToken."""

    def test_cancel_is_idempotent(self):
        """Test that cancel can be called repeatedly."""
        token = CancellationToken()
        assert not token.cancelled

        token.cancel()
        token.cancel()

        assert token.cancelled


class TestStreamingResponse:
    """Tests for StreamingResponse."""

    @pytest.mark.asyncio
    async def test_yields_in_order(self):
        """Test that fragments arrive in order."""
        stream = StreamingResponse(_fragments(["a", "b", "c"]))

        assert await _collect(stream) == ["a", "b", "c"]
        assert not stream.cancelled

    @pytest.mark.asyncio
    async def test_usage(self):
        """Test that usage set by the provider is exposed."""
        stream = StreamingResponse(_fragments([]))
        assert stream.usage is None

        stream.set_usage({"total_tokens": 12})

        assert stream.usage == {"total_tokens": 12}

    @pytest.mark.asyncio
    async def test_cancel_before_first_fragment(self):
        """Test that a pre-cancelled token yields nothing."""
        token = CancellationToken()
        token.cancel()
        stream = StreamingResponse(_fragments(["a"]), token=token)

        assert await _collect(stream) == []
        assert stream.cancelled

    @pytest.mark.asyncio
    async def test_fragment_after_cancel_discarded(self):
        """Test that a fragment arriving after cancellation is dropped."""
        token = CancellationToken()

        async def cancelling():
            yield "kept"
            token.cancel()
            yield "dropped"

        stream = StreamingResponse(cancelling(), token=token)

        assert await _collect(stream) == ["kept"]
        assert stream.cancelled

    @pytest.mark.asyncio
    async def test_cancel_while_waiting(self):
        """Test that cancelling ends iteration without waiting for the next fragment."""
        token = CancellationToken()
        never = asyncio.Event()
        released = []

        async def stalling():
            yield "Bonjour"
            try:
                await never.wait()
                yield "jamais"
            finally:
                released.append(True)

        stream = StreamingResponse(stalling(), token=token)
        assert await stream.__anext__() == "Bonjour"

        rest = asyncio.ensure_future(_collect(stream))
        await asyncio.sleep(0.01)
        token.cancel()

        assert await asyncio.wait_for(rest, timeout=1) == []
        assert stream.cancelled
        assert released == [True]

    @pytest.mark.asyncio
    async def test_provider_error_propagates(self):
        """Test that an error raised by the provider reaches the consumer."""

        async def failing():
            yield "a"
            raise RuntimeError("500 Internal Server Error")

        stream = StreamingResponse(failing(), token=CancellationToken())

        with pytest.raises(RuntimeError):
            await _collect(stream)

    @given(st.lists(st.text(min_size=1, max_size=5), max_size=20), st.integers(min_value=1, max_value=20))
    def test_cancel_after_k(self, fragments: list[str], k: int):
        """Property test: cancelling after k fragments keeps exactly those k."""

        async def consume() -> list[str]:
            token = CancellationToken()
            stream = StreamingResponse(_fragments(fragments), token=token)
            received = []
            async for fragment in stream:
                received.append(fragment)
                if len(received) == k:
                    token.cancel()
            return received

        assert asyncio.run(consume()) == fragments[:k]

    @pytest.mark.asyncio
    async def test_aclose_idempotent(self):
        """Test that aclose can be called after exhaustion."""
        stream = StreamingResponse(_fragments(["a"]))
        await _collect(stream)

        await stream.aclose()
        await stream.aclose()


class TestGeminiParts:
    """Tests for Gemini part conversion."""

    def test_attachments_precede_text(self):
        """Test that inline data parts come before the text part."""
        attachment = Attachment(name="a.txt", mime_type="text/plain", data="Qm9uam91cg==")
        parts = build_parts("Résume", [attachment])

        assert len(parts) == 2
        assert parts[0].inline_data.mime_type == "text/plain"
        assert parts[0].inline_data.data == b"Bonjour"
        assert parts[1].text == "Résume"

    def test_attachment_only_message(self):
        """Test that an empty text is omitted when attachments carry the message."""
        attachment = Attachment(name="a.png", mime_type="image/png", data="data:image/png;base64,AAAA")
        parts = build_parts("", [attachment])

        assert len(parts) == 1
        assert parts[0].inline_data is not None

    def test_text_only(self):
        """Test a plain text message."""
        parts = build_parts("Bonjour")
        assert [part.text for part in parts] == ["Bonjour"]

    def test_data_url_prefix_removed(self):
        """Test that a data URL and bare base64 decode to the same bytes."""
        prefixed = Attachment(name="a.txt", mime_type="text/plain", data="data:text/plain;base64,Qm9uam91cg==")
        bare = Attachment(name="a.txt", mime_type="text/plain", data="Qm9uam91cg==")

        assert build_parts("", [prefixed])[0].inline_data.data == b"Bonjour"
        assert build_parts("", [bare])[0].inline_data.data == b"Bonjour"

    def test_strip_data_url(self):
        """Test that only a data URL prefix is removed."""
        assert strip_data_url("data:image/png;base64,AAAA") == "AAAA"
        assert strip_data_url("AAAA") == "AAAA"


class TestFactory:
    """Tests for create_llm_provider()."""

    def test_unknown_provider(self):
        """Test that unknown providers are rejected."""
        with pytest.raises(ValueError):
            create_llm_provider("unknown", api_key="x")

    def test_gemini_requires_key(self):
        """Test that the Gemini provider needs an API key."""
        with pytest.raises(TypeError):
            create_llm_provider("gemini")

    def test_gemini_provider(self):
        """Test creating the Gemini provider."""
        provider = create_llm_provider("gemini", api_key="test-key", model="gemini-2.5-flash")

        assert isinstance(provider, GeminiProvider)
        assert provider.model == "gemini-2.5-flash"


@pytest.mark.integration
@pytest.mark.skipif(not (os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY")), reason="GEMINI_API_KEY not set")
class TestGeminiIntegration:
    """Tests against the real Gemini API."""

    @pytest.mark.asyncio
    async def test_stream_reply(self, api_keys):
        """Test that a short prompt streams a non-empty reply."""
        provider = create_llm_provider("gemini", api_key=api_keys["gemini"])
        try:
            chat = provider.create_chat(
                model="gemini-2.5-flash",
                system_instruction="Réponds en un mot.",
                temperature=0.0,
            )
            fragments = await _collect(chat.send_message_stream("Capitale de la France ?"))
        finally:
            await provider.close()

        assert "".join(fragments).strip()

"""Unit tests for the chat session manager."""
import pytest

from brainassist.chat import ChatSessionManager, ConfigurationError, Message
from brainassist.chat.session import history_to_turns
from brainassist.llm import Attachment
from brainassist.modes import OPTIMIZER_MODEL, OPTIMIZER_TEMPERATURE, ChatMode, resolve


class TestInitialize:
    """Tests for session creation."""

    def test_initialize_uses_mode_profile(self, fake_llm):
        """Test that the session is configured from the mode profile."""
        manager = ChatSessionManager(fake_llm)

        chat = manager.initialize(ChatMode.MUSIC)

        profile = resolve(ChatMode.MUSIC)
        created = fake_llm.chats[-1]
        assert chat.model == profile.model_name
        assert created.model == profile.model_name
        assert created.system_instruction == profile.instruction_text
        assert created.temperature == 0.9
        assert created.top_k == 60
        assert manager.is_active
        assert manager.mode is ChatMode.MUSIC
        assert manager.model_name == profile.model_name

    def test_initialize_without_provider(self):
        """Test that a missing credential raises ConfigurationError and leaves no session."""
        manager = ChatSessionManager(None)

        with pytest.raises(ConfigurationError):
            manager.initialize(ChatMode.LEARNING)

        assert not manager.is_active
        assert manager.profile is None

    def test_initialize_unknown_mode(self, fake_llm):
        """Test that an unknown mode is rejected."""
        with pytest.raises(ValueError):
            ChatSessionManager(fake_llm).initialize("astrology")

    def test_reset_replaces_session(self, fake_llm):
        """Test that reset creates a brand-new session."""
        manager = ChatSessionManager(fake_llm)
        manager.initialize(ChatMode.LEARNING)

        manager.reset(ChatMode.NOTES)

        assert len(fake_llm.chats) == 2
        assert manager.mode is ChatMode.NOTES

    def test_dispose(self, fake_llm):
        """Test that dispose drops the session."""
        manager = ChatSessionManager(fake_llm)
        manager.initialize(ChatMode.LEARNING)

        manager.dispose()

        assert not manager.is_active
        assert manager.mode is None

    def test_history_replayed(self, fake_llm):
        """Test that history is replayed without error messages."""
        manager = ChatSessionManager(fake_llm)
        history = [
            Message(role="user", text="Bonjour"),
            Message(role="model", text="Salut !"),
            Message(role="model", text="erreur", is_error=True),
        ]

        manager.initialize(ChatMode.LEARNING, history)

        assert [(turn.role, turn.text) for turn in fake_llm.chats[-1].history] == [
            ("user", "Bonjour"),
            ("model", "Salut !"),
        ]

    def test_debug_events(self, fake_llm, debug_events):
        """Test that session creation is logged."""
        manager = ChatSessionManager(fake_llm)
        manager.set_debug_callback(debug_events)

        manager.initialize(ChatMode.ANALYTICS)

        assert any(
            level == "info" and component == "Session" and "mode=analytics" in message
            for level, component, message in debug_events.events
        )


class TestHistoryToTurns:
    """Tests for history_to_turns()."""

    def test_attachment_only_turn_kept(self):
        """Test that a turn with only attachments is replayed."""
        attachment = Attachment(name="a.png", mime_type="image/png", data="AAAA")
        turns = history_to_turns([Message(role="user", text="", attachments=[attachment])])

        assert len(turns) == 1
        assert turns[0].attachments == (attachment,)

    def test_empty_turn_dropped(self):
        """Test that empty turns are not replayed."""
        assert history_to_turns([Message(role="model", text="")]) == []


class TestSendAndStream:
    """Tests for send_and_stream()."""

    @pytest.mark.asyncio
    async def test_lazy_learning_session(self, fake_llm):
        """Test that sending without a session creates one in learning mode."""
        manager = ChatSessionManager(fake_llm)
        fake_llm.script(["Bon", "jour"])

        fragments = [fragment async for fragment in manager.send_and_stream("Salut")]

        assert fragments == ["Bon", "jour"]
        assert manager.mode is ChatMode.LEARNING
        assert fake_llm.sent[0].text == "Salut"

    def test_send_without_provider(self):
        """Test that sending without a credential raises ConfigurationError."""
        with pytest.raises(ConfigurationError):
            ChatSessionManager(None).send_and_stream("Salut")


class TestOptimizePrompt:
    """Tests for optimize_prompt()."""

    @pytest.mark.asyncio
    async def test_blank_draft(self, fake_llm):
        """Test that a blank draft returns an empty string without a request."""
        manager = ChatSessionManager(fake_llm)

        assert await manager.optimize_prompt("   ") == ""
        assert fake_llm.prompts == []

    @pytest.mark.asyncio
    async def test_optimizer_request(self, fake_llm):
        """Test the one-shot optimizer request."""
        fake_llm.generated = "  Prompt optimisé  "
        manager = ChatSessionManager(fake_llm)

        result = await manager.optimize_prompt("explique les fractions", ChatMode.LEARNING)

        request = fake_llm.prompts[0]
        assert result == "Prompt optimisé"
        assert request["model"] == OPTIMIZER_MODEL
        assert request["temperature"] == OPTIMIZER_TEMPERATURE
        assert '"explique les fractions"' in request["prompt"]
        assert resolve(ChatMode.LEARNING).optimization_context in request["prompt"]

    @pytest.mark.asyncio
    async def test_failure_keeps_draft(self, fake_llm, debug_events):
        """Test that a failed optimization returns the draft and logs a warning."""
        fake_llm.generated = RuntimeError("503 overloaded")
        manager = ChatSessionManager(fake_llm)
        manager.set_debug_callback(debug_events)

        assert await manager.optimize_prompt("brouillon") == "brouillon"
        assert any(level == "warning" for level, _, _ in debug_events.events)

    @pytest.mark.asyncio
    async def test_empty_result_keeps_draft(self, fake_llm):
        """Test that an empty rewrite falls back to the draft."""
        fake_llm.generated = "   "
        manager = ChatSessionManager(fake_llm)

        assert await manager.optimize_prompt("brouillon") == "brouillon"

    @pytest.mark.asyncio
    async def test_close_closes_provider(self, fake_llm):
        """Test that close releases the provider."""
        manager = ChatSessionManager(fake_llm)
        manager.initialize(ChatMode.LEARNING)

        await manager.close()

        assert fake_llm.closed
        assert not manager.is_active

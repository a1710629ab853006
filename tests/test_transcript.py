"""Unit tests for the transcript store."""
import pytest
from hypothesis import given
from hypothesis import strategies as st

from brainassist.chat import Message, Transcript, TranscriptEvent


@pytest.fixture
def transcript():
    """Return an empty transcript."""
    return Transcript()


@pytest.fixture
def events(transcript):
    """Record transcript events as (event, message id)."""
    recorded = []
    transcript.subscribe(lambda event, message: recorded.append((event, message.id if message else None)))
    return recorded


class TestAppend:
    """Tests for appending messages."""

    def test_append_user(self, transcript, events):
        """Test appending a user message."""
        message = transcript.append_user("Bonjour")

        assert message.role == "user"
        assert transcript.messages == (message,)
        assert not transcript.is_empty
        assert events == [(TranscriptEvent.APPENDED, message.id)]

    def test_messages_is_a_snapshot(self, transcript):
        """Test that the exposed sequence cannot change the store."""
        transcript.append_user("a")
        assert isinstance(transcript.messages, tuple)
        assert len(transcript) == 1


class TestStreaming:
    """Tests for the streaming placeholder."""

    def test_open_append_close(self, transcript, events):
        """Test the lifecycle of a streamed message."""
        placeholder = transcript.open_stream()
        transcript.append_fragment("Bon")
        transcript.append_fragment("jour")
        transcript.close_stream()

        assert placeholder.text == "Bonjour"
        assert transcript.streaming_message is None
        assert [event for event, _ in events] == [
            TranscriptEvent.APPENDED,
            TranscriptEvent.UPDATED,
            TranscriptEvent.UPDATED,
            TranscriptEvent.FINALIZED,
        ]

    def test_single_open_stream(self, transcript):
        """Test that at most one message streams at a time."""
        transcript.open_stream()
        with pytest.raises(RuntimeError):
            transcript.open_stream()

    def test_fragment_without_stream(self, transcript):
        """Test that fragments need an open stream."""
        with pytest.raises(RuntimeError):
            transcript.append_fragment("x")

    def test_close_without_stream(self, transcript, events):
        """Test that closing with nothing open is a no-op."""
        assert transcript.close_stream() is None
        assert events == []

    def test_finished_message_not_reopened(self, transcript):
        """Test that a closed message is no longer appended to."""
        first = transcript.open_stream()
        transcript.append_fragment("a")
        transcript.close_stream()
        second = transcript.open_stream()
        transcript.append_fragment("b")

        assert first.text == "a"
        assert second.text == "b"

    @given(st.lists(st.text(max_size=10), max_size=30))
    def test_fragments_concatenate(self, fragments: list[str]):
        """Property test: the message text is the ordered concatenation of fragments."""
        transcript = Transcript()
        message = transcript.open_stream()
        for fragment in fragments:
            transcript.append_fragment(fragment)

        assert message.text == "".join(fragments)


class TestRemoveAndClear:
    """Tests for remove() and clear()."""

    def test_remove(self, transcript, events):
        """Test removing a message by id."""
        keep = transcript.append_user("a")
        drop = transcript.append(Message(role="model", text="erreur", is_error=True))

        transcript.remove(drop.id)

        assert transcript.messages == (keep,)
        assert events[-1] == (TranscriptEvent.REMOVED, drop.id)

    def test_remove_missing(self, transcript):
        """Test that removing an unknown id raises KeyError."""
        with pytest.raises(KeyError):
            transcript.remove("missing")

    def test_clear(self, transcript, events):
        """Test that clear empties the store and closes any stream."""
        transcript.append_user("a")
        transcript.open_stream()

        transcript.clear()

        assert transcript.is_empty
        assert transcript.streaming_message is None
        assert events[-1] == (TranscriptEvent.CLEARED, None)


class TestQueries:
    """Tests for transcript lookups."""

    def test_preceding_user_message(self, transcript):
        """Test finding the user message before an error."""
        first = transcript.append_user("q1")
        transcript.append(Message(role="model", text="r1"))
        second = transcript.append_user("q2")
        error = transcript.append(Message(role="model", text="erreur", is_error=True))

        assert transcript.preceding_user_message(error.id) is second
        assert transcript.preceding_user_message(first.id) is None
        assert transcript.preceding_user_message("missing") is None

    def test_last_model_message_skips_errors(self, transcript):
        """Test that error messages are not reported as responses."""
        reply = transcript.append(Message(role="model", text="r1"))
        transcript.append(Message(role="model", text="erreur", is_error=True))

        assert transcript.last_model_message() is reply

    def test_unsubscribe(self, transcript):
        """Test that an unsubscribed listener receives nothing."""
        recorded = []
        unsubscribe = transcript.subscribe(lambda event, message: recorded.append(event))
        unsubscribe()
        unsubscribe()

        transcript.append_user("a")

        assert recorded == []

"""Unit tests for error classification."""
import asyncio

import pytest
from hypothesis import given
from hypothesis import strategies as st

from brainassist.chat import ChatError, ConfigurationError, ErrorKind, classify_error


class StatusError(Exception):
    """Exception exposing HTTP-like attributes, as SDK errors do."""

    def __init__(self, message: str, code: int | None = None, status: str | None = None):
        super().__init__(message)
        self.code = code
        self.status = status


class TestChatErrors:
    """Tests for ChatError hierarchy."""

    def test_configuration_error_not_retryable(self):
        """Test that ConfigurationError is a non-retryable ChatError."""
        error = ConfigurationError()

        assert isinstance(error, ChatError)
        assert not error.is_retryable()
        assert str(error) == "Configuration error: API_KEY environment variable is missing"


class TestClassifyError:
    """Tests for classify_error()."""

    @pytest.mark.parametrize(
        ("exc", "kind", "retryable"),
        [
            (ConfigurationError(), ErrorKind.CONFIGURATION, False),
            (Exception("API key not valid. Please pass a valid API key."), ErrorKind.CONFIGURATION, False),
            (StatusError("Permission denied", code=403), ErrorKind.CONFIGURATION, False),
            (StatusError("models/gemini-x is not found", code=404), ErrorKind.MODEL_UNAVAILABLE, False),
            (Exception("TypeError: Failed to fetch"), ErrorKind.NETWORK, True),
            (ConnectionResetError("peer reset"), ErrorKind.NETWORK, True),
            (TimeoutError(), ErrorKind.NETWORK, True),
            (StatusError("Resource has been exhausted", code=429), ErrorKind.RATE_LIMITED, True),
            (StatusError("The model is overloaded", code=503), ErrorKind.SERVER_OVERLOAD, True),
            (StatusError("Internal error", code=500), ErrorKind.SERVER_OVERLOAD, True),
            (StatusError("Request contains an invalid argument", code=400), ErrorKind.INVALID_REQUEST, False),
            (Exception("Response was blocked due to SAFETY"), ErrorKind.SAFETY_BLOCKED, False),
            (Exception("The user aborted a request"), ErrorKind.CANCELLED, True),
            (asyncio.CancelledError(), ErrorKind.CANCELLED, True),
        ],
    )
    def test_classification(self, exc, kind, retryable):
        """Test the kind and retry flag of each error family."""
        info = classify_error(exc)

        assert info.kind is kind
        assert info.retryable is retryable
        assert info.text

    def test_priority_order(self):
        """Test that the first matching family wins."""
        info = classify_error(Exception("403 quota exhausted"))
        assert info.kind is ErrorKind.CONFIGURATION

        info = classify_error(Exception("404 overloaded"))
        assert info.kind is ErrorKind.MODEL_UNAVAILABLE

    def test_status_attribute_matched(self):
        """Test that the status attribute is part of the match."""
        info = classify_error(StatusError("upstream said no", status="RESOURCE_EXHAUSTED"))
        assert info.kind is ErrorKind.RATE_LIMITED

    def test_french_texts(self):
        """Test the user-facing explanations."""
        assert classify_error(Exception("Failed to fetch")).text == (
            "Problème de connexion internet détecté. Veuillez vérifier votre réseau."
        )
        assert classify_error(Exception("abort")).text == "Génération interrompue."

    def test_cancelled_is_suppressed(self):
        """Test that only cancellation suppresses the error message."""
        assert classify_error(asyncio.CancelledError()).suppressed
        assert not classify_error(Exception("overloaded")).suppressed

    def test_unknown_truncated(self):
        """Test that unknown errors show the first 150 characters."""
        message = "z" * 400
        info = classify_error(RuntimeError(message))

        assert info.kind is ErrorKind.UNKNOWN
        assert info.retryable
        assert info.text == f"Une erreur inattendue est survenue : {'z' * 150}..."

    def test_unknown_empty_message(self):
        """Test that an empty message falls back to the exception type."""
        info = classify_error(RuntimeError())
        assert "RuntimeError" in info.text

    @given(st.text(alphabet="qwz ", max_size=200))
    def test_classification_is_total(self, message: str):
        """Property test: every exception gets exactly one classification."""
        info = classify_error(RuntimeError(message))
        assert info.kind is ErrorKind.UNKNOWN
        assert info.text.startswith("Une erreur inattendue est survenue : ")

"""Unit tests for the attachment encoder."""
import base64

import pytest
from hypothesis import given
from hypothesis import strategies as st

from brainassist.chat.attachments import (
    DOCX_MIME,
    encode_bytes,
    encode_file,
    guess_mime_type,
    is_accepted,
)


class TestMimeTypes:
    """Tests for MIME type detection and filtering."""

    @pytest.mark.parametrize(
        ("name", "mime_type"),
        [
            ("cours.pdf", "application/pdf"),
            ("notes.txt", "text/plain"),
            ("rapport.docx", DOCX_MIME),
            ("schema.png", "image/png"),
            ("PHOTO.JPG", "image/jpeg"),
        ],
    )
    def test_guess(self, name, mime_type):
        """Test MIME type guessing from file names."""
        assert guess_mime_type(name) == mime_type

    def test_accepted_types(self):
        """Test that images, PDF, text and Word are accepted."""
        assert is_accepted("image/webp")
        assert is_accepted("application/pdf")
        assert is_accepted("text/plain")
        assert is_accepted(DOCX_MIME)

    def test_rejected_types(self):
        """Test that other types are rejected."""
        assert not is_accepted(None)
        assert not is_accepted("application/zip")
        assert not is_accepted("text/html")


class TestEncoding:
    """Tests for encode_bytes() and encode_file()."""

    def test_encode_bytes(self):
        """Test base64 encoding with a guessed MIME type."""
        attachment = encode_bytes("notes.txt", b"Bonjour")

        assert attachment.name == "notes.txt"
        assert attachment.mime_type == "text/plain"
        assert attachment.data == base64.b64encode(b"Bonjour").decode("ascii")

    def test_unsupported_type(self):
        """Test that unsupported files are rejected."""
        with pytest.raises(ValueError, match="Unsupported file type"):
            encode_bytes("archive.zip", b"PK")

    def test_explicit_mime_type(self):
        """Test that an explicit MIME type overrides the guess."""
        attachment = encode_bytes("scan", b"\x89PNG", mime_type="image/png")
        assert attachment.mime_type == "image/png"

    def test_encode_file(self, tmp_path):
        """Test reading and encoding a file."""
        path = tmp_path / "exercice.txt"
        path.write_bytes("x² + 1 = 0".encode())

        attachment = encode_file(path)

        assert attachment.name == "exercice.txt"
        assert base64.b64decode(attachment.data) == "x² + 1 = 0".encode()

    def test_encode_missing_file(self, tmp_path):
        """Test that a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            encode_file(tmp_path / "absent.pdf")

    @given(st.binary(max_size=512))
    def test_payload_preserved(self, content: bytes):
        """Property test: decoding returns the original bytes."""
        assert base64.b64decode(encode_bytes("file.pdf", content).data) == content

"""Attachment encoder.

Hides how user files become inline base64 payloads and which file types
the remote model accepts.
"""

import base64
import mimetypes
from pathlib import Path

from ..llm.models import Attachment

DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

ACCEPTED_MIME_TYPES = frozenset({"application/pdf", "text/plain", DOCX_MIME})

_EXTENSION_TYPES = {
    ".docx": DOCX_MIME,
    ".txt": "text/plain",
    ".pdf": "application/pdf",
}


def guess_mime_type(name: str) -> str | None:
    """Guess a MIME type from a file name."""
    suffix = Path(name).suffix.lower()
    if suffix in _EXTENSION_TYPES:
        return _EXTENSION_TYPES[suffix]
    mime_type, _ = mimetypes.guess_type(name)
    return mime_type


def is_accepted(mime_type: str | None) -> bool:
    """Whether a MIME type can be attached (images, PDF, plain text, Word)."""
    if not mime_type:
        return False
    return mime_type.startswith("image/") or mime_type in ACCEPTED_MIME_TYPES


def encode_bytes(name: str, content: bytes, mime_type: str | None = None) -> Attachment:
    """Encode raw bytes as an attachment.

    Args:
        name: File name shown to the user
        content: File content
        mime_type: Explicit MIME type (guessed from the name when omitted)

    Returns:
        Attachment with base64 data

    Raises:
        ValueError: If the file type is not accepted
    """
    mime_type = mime_type or guess_mime_type(name)
    if not is_accepted(mime_type):
        raise ValueError(
            f"Unsupported file type for '{name}': {mime_type or 'unknown'}. "
            f"Accepted: images, PDF, plain text, Word documents"
        )
    return Attachment(
        name=name,
        mime_type=mime_type,
        data=base64.b64encode(content).decode("ascii"),
    )


def encode_file(path: str | Path) -> Attachment:
    """Read a file and encode it as an attachment.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file type is not accepted
    """
    file_path = Path(path).expanduser()
    return encode_bytes(file_path.name, file_path.read_bytes())

"""Abstract base class for persisted state backends.

This module defines the interface for the key-value store that holds
the user's projects, profile and planning data.
The abstraction hides:
- Storage format (SQLite table, dict)
- Persistence mechanism (file, in-memory)
- Connection management

Values are opaque JSON-encoded strings; encoding and decoding belong to
the StateRepository.
"""

from abc import ABC, abstractmethod


class KeyValueStore(ABC):
    """Abstract key-value store backend."""

    @abstractmethod
    async def connect(self) -> None:
        """Initialize the backend."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the backend gracefully."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Get the raw value stored under key, or None."""

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store a raw value under key, replacing any previous value."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove key. No-op if absent."""

    @abstractmethod
    async def keys(self) -> list[str]:
        """List stored keys in sorted order."""

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the backend type identifier."""

"""Persisted state module for brainassist.

This module hides where user state lives (SQLite file or memory) and
how it is encoded.
"""

from .base import KeyValueStore
from .factory import create_store
from .in_memory import InMemoryKeyValueStore
from .repository import StateRepository

__all__ = [
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "StateRepository",
    "create_store",
]

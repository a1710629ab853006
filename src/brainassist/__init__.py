"""
BrainAssist: a multi-mode study assistant that chats with a hosted Gemini model.

This package follows Parnas's information hiding principles,
where each module hides a specific design decision.
"""

__version__ = "0.1.0"

from .modes import ChatMode, ModeProfile, resolve

__all__ = [
    "ChatMode",
    "ModeProfile",
    "resolve",
]

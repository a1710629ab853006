"""Data models for assistant modes.

A mode is a closed configuration key. Everything the rest of the system
needs to know about a mode lives in its ModeProfile.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ChatMode(str, Enum):
    """The ten assistant personas."""

    LEARNING = "learning"
    SUPPORT = "support"
    MUSIC = "music"
    ORGANIZATION = "organization"
    DEEP_RESEARCH = "deep_research"
    ANALYTICS = "analytics"
    POLYGLOT = "polyglot"
    GAMES = "games"
    CHATPDF = "chatpdf"
    NOTES = "notes"


class ModeProfile(BaseModel):
    """Static configuration bundle for one mode."""

    model_config = ConfigDict(frozen=True)

    mode: ChatMode = Field(description="Mode this profile configures")
    instruction_text: str = Field(description="System instruction sent when the session is created")
    model_name: str = Field(description="Remote model identifier")
    temperature: float = Field(ge=0.0, le=2.0, description="Sampling temperature")
    top_k: int = Field(ge=1, description="Top-K sampling cutoff")
    label: str = Field(description="Display label in the mode switcher")
    assistant_label: str = Field(description="Header shown above assistant messages")
    icon: str = Field(description="Single glyph shown next to the label")
    color: str = Field(pattern=r"^#[0-9a-fA-F]{6}$", description="Accent color (hex)")
    placeholder: str = Field(description="Input placeholder text")
    optimization_context: str = Field(description="Domain phrase used by the prompt optimizer")
    suggested_prompts: tuple[str, ...] = Field(default=(), description="Starter prompts for an empty chat")

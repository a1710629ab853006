"""Mode registry module for brainassist.

Maps each assistant mode to its instruction, model and sampling profile.
"""

from .models import ChatMode, ModeProfile
from .registry import (
    FLASH_MODEL,
    OPTIMIZER_MODEL,
    OPTIMIZER_TEMPERATURE,
    PRO_MODEL,
    list_modes,
    resolve,
)

__all__ = [
    "ChatMode",
    "FLASH_MODEL",
    "ModeProfile",
    "OPTIMIZER_MODEL",
    "OPTIMIZER_TEMPERATURE",
    "PRO_MODEL",
    "list_modes",
    "resolve",
]

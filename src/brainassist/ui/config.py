"""UI configuration constants.

Centralizes magic numbers and configuration values for the UI module.
"""


class LogLevel:
    """Numeric levels for the debug panel filter.

    Components report levels as strings ("debug" ... "error"); the panel
    shows an event when its level is at or above the panel's threshold.
    """

    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40

    _by_name = {"debug": DEBUG, "info": INFO, "warning": WARNING, "error": ERROR}

    @classmethod
    def name(cls, level: int) -> str:
        """Get the display name for a level."""
        for name, value in cls._by_name.items():
            if value == level:
                return name.upper()
        return "UNKNOWN"

    @classmethod
    def from_string(cls, level_str: str) -> int:
        """Convert a level name to its value. Unknown names map to DEBUG."""
        return cls._by_name.get(level_str.lower(), cls.DEBUG)


# Seconds the "copied" confirmation stays on a code block
COPY_CONFIRM_SECONDS = 2.0

INPUT_HISTORY_MAX_SIZE = 100

# Debug panel
LOG_TIMESTAMP_FORMAT = "%H:%M:%S"
LOG_MAX_MESSAGE_LENGTH = 500

MESSAGE_TIMESTAMP_FORMAT = "%H:%M"
STREAMING_CURSOR = "▌"

# Pygments style for fenced code
CODE_THEME = "monokai"

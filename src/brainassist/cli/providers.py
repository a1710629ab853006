"""Provider factory functions for CLI.

Centralizes creation of the store, LLM and workspace from environment variables.
Hides configuration details from command implementations.
"""

import os
from typing import Any

from rich.console import Console

from ..chat import ChatSessionManager, Workspace
from ..llm import create_llm_provider
from ..modes import ChatMode
from ..storage import StateRepository, create_store

# Default console for output
_console = Console()

LEVEL_STYLES = {
    "debug": "dim",
    "info": "cyan",
    "warning": "yellow",
    "error": "red",
}

_LEVEL_ORDER = ("debug", "info", "warning", "error")


def get_llm(console: Console | None = None) -> Any | None:
    """Create LLM provider from environment variables.

    Args:
        console: Optional Rich console for output

    Returns:
        Gemini provider instance, or None if no API key is set

    Environment variables:
        GEMINI_API_KEY: Google AI API key (fallback: API_KEY)
        GEMINI_MODEL: Default one-shot model (default: gemini-2.5-flash)
    """
    con = console or _console
    api_key = os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY")
    if not api_key:
        con.print("[yellow]Warning: GEMINI_API_KEY not set, LLM features disabled[/yellow]")
        return None
    model = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
    return create_llm_provider("gemini", api_key=api_key, model=model)


def get_store() -> Any:
    """Create key-value store from environment variables.

    Returns:
        Key-value store instance (not yet connected)

    Raises:
        ValueError: If BRAINASSIST_STORE names an unknown backend

    Environment variables:
        BRAINASSIST_STORE: Backend type, sqlite or memory (default: sqlite)
        BRAINASSIST_DB: SQLite database path (default: ~/.brainassist/state.db)
    """
    backend = os.getenv("BRAINASSIST_STORE", "sqlite").lower()
    if backend == "sqlite" and os.getenv("BRAINASSIST_DB"):
        return create_store("sqlite", path=os.path.expanduser(os.environ["BRAINASSIST_DB"]))
    return create_store(backend)


def console_debug_callback(console: Console, log_level: str) -> Any:
    """Build a debug callback that prints events at or above log_level.

    Raises:
        ValueError: If log_level is not debug, info, warning or error
    """
    threshold = log_level.lower()
    if threshold not in _LEVEL_ORDER:
        raise ValueError(f"Unknown log level: {log_level}")
    minimum = _LEVEL_ORDER.index(threshold)

    def callback(level: str, component: str, message: str) -> None:
        if level in _LEVEL_ORDER and _LEVEL_ORDER.index(level) < minimum:
            return
        style = LEVEL_STYLES.get(level, "white")
        console.print(f"[{style}]{level.upper():<7}[/{style}] [bold]{component}[/bold]: {message}", highlight=False)

    return callback


async def open_workspace(
    console: Console | None = None,
    mode: ChatMode | str = ChatMode.LEARNING,
    personalize: bool = False,
    with_llm: bool = True,
    log_level: str | None = None,
    load: bool = True,
) -> Workspace:
    """Connect the store and load a workspace.

    Args:
        console: Optional Rich console for output
        mode: Initial chat mode
        personalize: Inject the user profile into the first message
        with_llm: Create the LLM provider (commands that only edit state skip it)
        log_level: Print debug events at or above this level
        load: Load persisted state and open the session now

    Returns:
        Workspace; close it with close_workspace()
    """
    con = console or _console
    callback = console_debug_callback(con, log_level) if log_level is not None else None
    llm = get_llm(con) if with_llm else None
    store = get_store()
    await store.connect()

    workspace = Workspace(
        ChatSessionManager(llm),
        StateRepository(store),
        mode=mode,
        personalize=personalize,
    )
    if callback is not None:
        workspace.set_debug_callback(callback)
    if load:
        await workspace.load()
    return workspace


async def close_workspace(workspace: Workspace) -> None:
    """Release the session and disconnect the store."""
    try:
        await workspace.close()
    finally:
        await workspace.repository.store.disconnect()

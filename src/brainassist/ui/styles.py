"""CSS styles for the TUI.

Hides layout and styling decisions from the application logic.
Colors come from the active theme, so the mode accent ($primary)
changes with the mode without any style rebuild.
"""

APP_CSS = """
/* ============================================
   Main Screen Layout - sidebar | chat, bottom bar
   ============================================ */
Screen {
    layout: grid;
    grid-size: 2 2;
    grid-columns: 26 1fr;
    grid-rows: 1fr auto;
    background: $background;
}

/* ============================================
   Mode Sidebar
   ============================================ */
#mode-sidebar {
    height: 100%;
    background: $panel;
    border: round $primary 60%;
    border-title-color: $primary;
    border-title-style: bold;
    padding: 0;

    &:focus {
        border: round $primary;
    }
}

#mode-sidebar > .option-list--option-highlighted {
    background: $primary 30%;
    text-style: bold;
}

/* ============================================
   Center Column - chat + debug log
   ============================================ */
#center-panel {
    height: 100%;
}

#chat-history {
    height: 1fr;
    background: $panel;
    border: round $primary 60%;
    border-title-color: $primary;
    border-title-style: bold;
    border-title-align: left;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
    scrollbar-gutter: stable;

    &:focus-within {
        border: round $primary;
    }
}

#debug-panel {
    height: auto;
    min-height: 6;
    max-height: 14;
    background: $panel;
    border: round $warning 60%;
    border-title-color: $warning;
    border-title-style: bold;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
    scrollbar-gutter: stable;
}

/* ============================================
   Welcome View
   ============================================ */
#welcome {
    height: auto;
    padding: 1 2;
    align: center top;
}

.welcome-title {
    width: 100%;
    text-align: center;
    text-style: bold;
    color: $primary;
    margin-bottom: 1;
}

.welcome-text {
    width: 100%;
    text-align: center;
    color: $text-muted;
    margin-bottom: 1;
}

.suggestion {
    width: 100%;
    height: 3;
    margin: 0 4 1 4;
    background: $surface;
    border: tall $primary 40%;

    &:hover {
        border: tall $primary;
        background: $primary 15%;
    }
}

/* ============================================
   Chat Messages
   ============================================ */
.chat-message {
    width: 100%;
    height: auto;
    margin: 0 0 1 0;
    padding: 0 1;
}

.message-header {
    height: auto;
    text-style: bold;
}

.message-content {
    height: auto;
}

.user-message {
    border-left: tall $primary;
    background: $primary 12%;
    margin-left: 8;

    & .message-header {
        color: $primary-lighten-2;
    }
}

.model-message {
    border-left: tall $primary 60%;
    background: $surface;
    margin-right: 4;

    & .message-header {
        color: $primary;
    }
}

.error-message {
    border-left: tall $error;
    background: $error 10%;
    margin-right: 4;

    & .message-header {
        color: $error;
    }
}

.error-text {
    color: $error;
}

.message-attachments {
    color: $text-muted;
}

.streaming-text {
    color: $foreground;
}

.retry-btn {
    margin-top: 1;
    min-width: 12;
}

/* ============================================
   Code Blocks
   ============================================ */
.code-block {
    height: auto;
    margin: 1 0;
    border: round $border;
    background: $background;
}

.code-header {
    height: 3;
    background: $panel;
    padding: 0 1;
}

.code-language {
    width: 1fr;
    content-align: left middle;
    color: $text-muted;
    text-style: bold;
}

.code-header Button {
    min-width: 12;
    margin-left: 1;
}

.code-copy.-copied {
    background: $success 30%;
    border: tall $success;
    color: $success;
}

.code-body {
    height: auto;
    padding: 0 1;
}

/* ============================================
   Bottom Bar - Metrics + Input
   ============================================ */
#bottom-bar {
    column-span: 2;
    height: auto;
    padding: 0 1;
    background: $panel;
    border-top: solid $border;
}

#metrics {
    height: 1;
    padding: 0 1;
    margin-bottom: 1;
    background: $surface;
}

ChatInputBar {
    height: auto;
}

#attachment-tray {
    height: auto;
    padding: 0 1;
    color: $accent;
}

#input-row {
    height: 5;
    border: round $primary 60%;
    background: $panel;

    &:focus-within {
        border: round $primary;
    }
}

#chat-input {
    width: 1fr;
    height: 100%;
    border: none;
    padding: 0 1;
    background: transparent;
}

#send-btn, #stop-btn {
    width: 12;
    height: 100%;
    margin: 0 0 0 1;
    text-style: bold;
}

/* ============================================
   Notification Toasts
   ============================================ */
Toast {
    background: $surface;
    border: tall $border;
    padding: 0 1;

    &.-information {
        border: tall $primary;
    }

    &.-error {
        border: tall $error;
    }

    &.-warning {
        border: tall $warning;
    }
}

Header {
    background: $panel;
    height: 1;
}

HeaderTitle {
    color: $primary;
    text-style: bold;
}
"""

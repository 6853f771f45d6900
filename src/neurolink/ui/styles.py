"""CSS styles for the TUI.

Hides layout and styling decisions from the application logic.
Reply treatments (normal / resource / escalation / error) are expressed
purely as CSS classes set by ChatHistoryWidget.
"""

APP_CSS = """
Screen {
    layout: vertical;
    background: $background;
}

/* Chat history: takes all space above the input */
#chat-history {
    height: 1fr;
    background: $panel;
    border: round $primary 60%;
    border-title-color: $primary;
    border-title-style: bold;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
    scrollbar-gutter: stable;
}

.chat-message {
    height: auto;
    margin: 1 0 0 0;
    padding: 0 1;
}

.message-header {
    text-style: bold;
    color: $text-muted;
}

.message-content {
    height: auto;
}

.user-message {
    border-left: thick $primary;
    margin-left: 8;
}

.bot-message {
    border-left: thick $secondary;
    margin-right: 8;
}

.bot-message.-resource {
    border-left: thick $accent;
    background: $accent 8%;
}

.bot-message.-escalation {
    border-left: thick $error;
    background: $error 10%;
}

.bot-message.-error {
    border-left: thick $warning;
    background: $warning 8%;
}

.crisis-banner {
    color: $error;
    text-style: bold;
}

#typing-indicator {
    height: 1;
    padding: 0 2;
    color: $text-muted;
    display: none;
}

#typing-indicator.-visible {
    display: block;
}

/* Input bar */
#chat-input-bar {
    height: auto;
    max-height: 8;
    padding: 0 1;
}

#chat-input {
    width: 1fr;
    height: auto;
    min-height: 3;
    max-height: 6;
    border: round $border;

    &:focus {
        border: round $primary;
    }
}

#send-btn {
    width: 10;
    margin-left: 1;
}

#reassurance {
    height: 1;
    content-align: center middle;
    color: $text-muted;
}
"""

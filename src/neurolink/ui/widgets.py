"""Custom Textual widgets for the TUI.

Hides widget implementation details:
- Chat message rendering and reply treatments
- Input history and the submit shortcut
- Locking the input while a reply is pending
"""

from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.message import Message as TextualMessage
from textual.widgets import Button, Static, TextArea

from ..chat.models import DisplayType, Message

CRISIS_BANNER = "Crisis support: call or text 988, or text HELLO to 741741"


class ChatHistoryWidget(VerticalScroll):
    """Scrollable chat history; bot replies are styled by display type."""

    BORDER_TITLE = "Neurolink"
    BORDER_SUBTITLE = "Confidential"

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._rendered_ids: set[int] = set()

    def show_messages(self, messages: list[Message]) -> None:
        """Render any messages not yet on screen (the log is append-only)."""
        for message in messages:
            if message.id not in self._rendered_ids:
                self._render_message(message)
                self._rendered_ids.add(message.id)
        self.scroll_end(animate=False)

    def clear_history(self) -> None:
        self._rendered_ids.clear()
        self.remove_children()

    def _render_message(self, msg: Message) -> None:
        timestamp = msg.timestamp.strftime("%H:%M")
        if msg.is_user:
            classes = "chat-message user-message"
            header = f"You [{timestamp}]"
        else:
            display_type = msg.display_type or DisplayType.NORMAL
            classes = f"chat-message bot-message -{display_type.value}"
            header = f"Neurolink [{timestamp}]"

        container = Vertical(classes=classes)
        container.compose_add_child(Static(header, classes="message-header"))
        if msg.display_type == DisplayType.ESCALATION:
            container.compose_add_child(Static(CRISIS_BANNER, classes="crisis-banner"))
        container.compose_add_child(Static(msg.text, classes="message-content", markup=False))
        self.mount(container)


class ChatInputBar(Horizontal):
    """Chat input bar with TextArea and Send button."""

    class Submitted(TextualMessage):
        """Message sent when user submits input."""

        def __init__(self, value: str) -> None:
            super().__init__()
            self.value = value

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._history: list[str] = []
        self._history_index: int = -1

    def compose(self):
        text_area = TextArea(id="chat-input", show_line_numbers=False)
        text_area.cursor_blink = False
        yield text_area
        yield Button("Send", id="send-btn", variant="primary").with_tooltip(
            "Send message (Ctrl+J)"
        )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "send-btn":
            self._submit()

    def on_key(self, event) -> None:
        """Handle keyboard shortcuts.

        Note: ctrl+enter cannot work in terminals (terminal doesn't pass
        ctrl/shift modifiers with Enter). Use ctrl+j as the submit shortcut.
        """
        if event.key == "ctrl+j":
            self._submit()
            event.prevent_default()
            event.stop()
        elif event.key == "up" and self._text_area.cursor_location == (0, 0):
            self._navigate_history(-1)
            event.prevent_default()
            event.stop()
        elif event.key == "down" and self._history_index != -1:
            self._navigate_history(1)
            event.prevent_default()
            event.stop()

    @property
    def _text_area(self) -> TextArea:
        return self.query_one("#chat-input", TextArea)

    def _navigate_history(self, direction: int) -> None:
        """Step through sent messages; -1 is older, 1 is newer.

        Stepping past the newest entry leaves history browsing with an empty input.
        """
        if not self._history:
            return
        if self._history_index == -1:
            if direction > 0:
                return
            self._history_index = len(self._history) - 1
        else:
            self._history_index = max(0, self._history_index + direction)
            if self._history_index >= len(self._history):
                self._history_index = -1
                self._text_area.text = ""
                return
        self._text_area.text = self._history[self._history_index]

    def _submit(self) -> None:
        if self.disabled:
            return
        value = self._text_area.text.strip()
        if value:
            if not self._history or self._history[-1] != value:
                self._history.append(value)
            self._history_index = -1
            self._text_area.text = ""
            self.post_message(self.Submitted(value))

    def set_locked(self, locked: bool) -> None:
        """Disable input while a reply is pending."""
        self.disabled = locked
        if not locked:
            self.focus_input()

    def focus_input(self) -> None:
        """Focus the text input."""
        self._text_area.focus()

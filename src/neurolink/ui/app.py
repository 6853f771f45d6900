"""Main Textual TUI application.

The screen owns a ChatSession: it appends the optimistic user message,
locks input while the orchestrator works, then appends the reply.
"""

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, Header, Static

from ..chat.orchestrator import ChatOrchestrator
from ..chat.session import ChatSession
from .styles import APP_CSS
from .themes import CALM_DUSK
from .widgets import ChatHistoryWidget, ChatInputBar

REASSURANCE = "Confidential  -  Crisis? Call 988  -  You're not alone"


class NeurolinkChatApp(App):
    """Textual chat screen for the Neurolink companion."""

    CSS = APP_CSS
    TITLE = "Neurolink"
    SUB_TITLE = "Available 24/7"

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit"),
        Binding("ctrl+r", "retry", "Retry", priority=True),
        Binding("ctrl+k", "clear_chat", "Clear Chat", priority=True),
    ]

    def __init__(self, orchestrator: ChatOrchestrator, model_name: str | None = None) -> None:
        super().__init__()
        self._session = ChatSession(orchestrator)
        if model_name:
            self.sub_title = f"{self.SUB_TITLE} | {model_name}"

    @property
    def session(self) -> ChatSession:
        return self._session

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield ChatHistoryWidget(id="chat-history")
        yield Static("Neurolink is thinking...", id="typing-indicator")
        yield ChatInputBar(id="chat-input-bar")
        yield Static(REASSURANCE, id="reassurance")
        yield Footer()

    def on_mount(self) -> None:
        self.register_theme(CALM_DUSK)
        self.theme = "calm-dusk"
        self._refresh_chat()
        self.query_one("#chat-input-bar", ChatInputBar).focus_input()

    def on_chat_input_bar_submitted(self, event: ChatInputBar.Submitted) -> None:
        """Handle user input submission."""
        if not self._session.can_submit(event.value):
            return
        self._session.add_user_message(event.value)
        self._set_pending(True)
        self._refresh_chat()
        self._complete_turn()

    @work(exclusive=True)
    async def _complete_turn(self) -> None:
        try:
            await self._session.complete_turn()
        finally:
            self._set_pending(False)
            self._refresh_chat()

    def action_retry(self) -> None:
        """Ask again for the last message with the slower, patient policy."""
        if self._session.awaiting_reply:
            return
        self._set_pending(True)
        self._retry_turn()

    @work(exclusive=True)
    async def _retry_turn(self) -> None:
        try:
            reply = await self._session.retry()
            if reply is None:
                self.notify("Nothing to retry yet", severity="warning")
        finally:
            self._set_pending(False)
            self._refresh_chat()

    def action_clear_chat(self) -> None:
        if self._session.awaiting_reply:
            return
        self._session.clear()
        self.query_one("#chat-history", ChatHistoryWidget).clear_history()
        self._refresh_chat()
        self.notify("Chat cleared")

    def _refresh_chat(self) -> None:
        self.query_one("#chat-history", ChatHistoryWidget).show_messages(self._session.messages)

    def _set_pending(self, pending: bool) -> None:
        self.query_one("#typing-indicator", Static).set_class(pending, "-visible")
        self.query_one("#chat-input-bar", ChatInputBar).set_locked(pending)


async def run_textual_tui(orchestrator: ChatOrchestrator, model_name: str | None = None) -> None:
    """Run the Textual chat screen until the user quits."""
    app = NeurolinkChatApp(orchestrator, model_name=model_name)
    try:
        await app.run_async()
    except KeyboardInterrupt:
        pass

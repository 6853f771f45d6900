"""Screen-side conversation state.

A screen owns one ChatSession: the append-only message list it renders and
the flag that keeps a single turn in flight.
"""

from .models import Message
from .orchestrator import ChatOrchestrator

GREETING = "Hi! It's really good to hear from you. How's your day going? Anything on your mind?"


class ChatSession:
    """Append-only message log plus the awaiting-reply gate."""

    def __init__(self, orchestrator: ChatOrchestrator, greeting: str | None = GREETING):
        self._orchestrator = orchestrator
        self._greeting = greeting
        self._messages: list[Message] = []
        self._awaiting_reply = False
        self.clear()

    @property
    def messages(self) -> list[Message]:
        """A copy of the visible messages, oldest first."""
        return list(self._messages)

    @property
    def awaiting_reply(self) -> bool:
        return self._awaiting_reply

    def can_submit(self, text: str) -> bool:
        return bool(text.strip()) and not self._awaiting_reply

    def add_user_message(self, text: str) -> Message:
        """Append the optimistic user message and close the gate."""
        if not self.can_submit(text):
            raise RuntimeError("A reply is already pending or the text is blank")
        message = Message.user(text)
        self._messages.append(message)
        self._awaiting_reply = True
        return message

    async def complete_turn(self) -> Message:
        """Fetch the reply for the pending user message and reopen the gate."""
        pending = self._messages[-1]
        try:
            reply = await self._orchestrator.send_turn(self._messages[:-1], pending.text)
        finally:
            self._awaiting_reply = False
        self._messages.append(reply)
        return reply

    async def submit(self, text: str) -> Message | None:
        """Send one turn; blank input or a turn already in flight is ignored."""
        if not self.can_submit(text):
            return None
        self.add_user_message(text)
        return await self.complete_turn()

    async def retry(self) -> Message | None:
        """Ask again for the latest user message (e.g. after a canned reply)."""
        if self._awaiting_reply or not any(m.is_user for m in self._messages):
            return None
        self._awaiting_reply = True
        try:
            reply = await self._orchestrator.retry_turn(self._messages)
        finally:
            self._awaiting_reply = False
        self._messages.append(reply)
        return reply

    def clear(self) -> None:
        """Reset to the greeting; ignored while a turn is in flight."""
        if self._awaiting_reply:
            return
        self._messages = [Message.bot(self._greeting)] if self._greeting else []

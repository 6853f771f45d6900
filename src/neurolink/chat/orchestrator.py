"""Per-turn chat orchestration.

Composes the history window, the completion client wrapped by the
resilience policy, and the reply classifier into the one operation a
screen needs: ``send_turn(messages, text) -> bot message``.
"""

import logging
from collections.abc import Sequence

from ..llm.client import CompletionClient
from ..llm.errors import CompletionError
from .classifier import ReplyClassifier
from .history import build_history
from .models import DisplayType, Message, Sender
from .resilience import ResiliencePolicy

logger = logging.getLogger(__name__)

ERROR_REPLY = (
    "I'm sorry, I couldn't put a reply together just now. "
    "You're not alone in this. Want to try sending that again in a moment?"
)


class ChatOrchestrator:
    """Turns the visible conversation plus a new user text into a bot reply."""

    def __init__(
        self,
        client: CompletionClient,
        policy: ResiliencePolicy,
        history_limit: int = 20,
        classifier: ReplyClassifier | None = None,
        retry_policy: ResiliencePolicy | None = None,
        retry_timeout: float | None = None,
    ):
        """Initialize the orchestrator.

        Args:
            client: Single-attempt completion client
            policy: Retry/fallback policy for interactive turns
            history_limit: Maximum messages in the history window
            classifier: Reply styling (default phrase lists when None)
            retry_policy: Policy for user-requested retries (defaults to policy)
            retry_timeout: Per-attempt deadline for retries (defaults to the client's)
        """
        if history_limit < 1:
            raise ValueError("history_limit must be at least 1")
        self._client = client
        self._policy = policy
        self._history_limit = history_limit
        self._classifier = classifier or ReplyClassifier()
        self._retry_policy = retry_policy or policy
        self._retry_timeout = retry_timeout

    @property
    def client(self) -> CompletionClient:
        return self._client

    async def send_turn(self, messages: Sequence[Message], user_text: str) -> Message:
        """Produce the bot message answering ``user_text``.

        ``messages`` may or may not already end with the optimistic user
        message for ``user_text``; either way the new turn is sent once.

        Raises:
            ValueError: If user_text is blank
        """
        return await self._reply(messages, user_text, self._policy, timeout=None)

    async def retry_turn(self, messages: Sequence[Message]) -> Message:
        """Ask again for the most recent user message with the patient policy.

        Raises:
            ValueError: If the conversation has no user message
        """
        index = next(
            (i for i in range(len(messages) - 1, -1, -1) if messages[i].sender == Sender.USER),
            None,
        )
        if index is None:
            raise ValueError("No user message to retry")
        return await self._reply(
            messages[:index], messages[index].text, self._retry_policy, self._retry_timeout
        )

    async def _reply(
        self,
        messages: Sequence[Message],
        user_text: str,
        policy: ResiliencePolicy,
        timeout: float | None,
    ) -> Message:
        text = user_text.strip()
        if not text:
            raise ValueError("user_text must not be empty")

        history = build_history(_without_pending(messages, text), self._history_limit)
        if history and history[-1].role == "user":
            # Unanswered turn (its reply was an error); the new turn follows as user
            history = history[:-1]

        async def attempt(model: str) -> str:
            return await self._client.complete(history, text, model, timeout=timeout)

        try:
            reply = await policy.run(attempt)
        except CompletionError as e:
            logger.error("Chat turn failed: %s", e)
            return Message.bot(f"{ERROR_REPLY}\n\nDetails: {e}", DisplayType.ERROR)

        return Message.bot(reply, self._classifier.classify(reply))


def _without_pending(messages: Sequence[Message], text: str) -> list[Message]:
    """Drop trailing user messages that duplicate the turn being sent."""
    trimmed = list(messages)
    while trimmed and trimmed[-1].sender == Sender.USER and trimmed[-1].text.strip() == text:
        trimmed.pop()
    return trimmed

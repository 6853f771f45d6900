"""Conversation history window.

Turns the visible message log into the bounded, role-alternating
transcript that a stateful chat call expects.
"""

from collections.abc import Sequence

from ..llm.models import HistoryItem
from .models import DisplayType, Message, Sender


def build_history(messages: Sequence[Message], max_items: int) -> list[HistoryItem]:
    """Build the transcript sent alongside a new user turn.

    The window starts at the first user-authored message (leading bot
    greetings are dropped) and keeps the last ``max_items`` messages of that
    suffix, oldest first. Bot messages styled as errors are diagnostics and
    never enter the transcript. If the log does not alternate senders,
    consecutive entries with the same role are merged into one item so the
    result always alternates.

    The window may end with a user item when the latest reply was an error.
    Callers that append a new user turn must drop that trailing item so the
    request keeps alternating; ``ChatOrchestrator`` does.

    Args:
        messages: Visible messages, oldest first, excluding the turn being sent
        max_items: Maximum number of messages in the window

    Returns:
        History items, oldest first; empty if no user message exists yet

    Raises:
        ValueError: If max_items is less than 1
    """
    if max_items < 1:
        raise ValueError("max_items must be at least 1")

    eligible = [m for m in messages if m.display_type != DisplayType.ERROR]
    first_user = next((i for i, m in enumerate(eligible) if m.sender == Sender.USER), None)
    if first_user is None:
        return []

    window = eligible[first_user:][-max_items:]
    return merge_consecutive_roles(
        HistoryItem(role="user" if m.sender == Sender.USER else "model", parts=[m.text])
        for m in window
    )


def merge_consecutive_roles(items) -> list[HistoryItem]:
    """Collapse runs of same-role items into single multi-part items."""
    merged: list[HistoryItem] = []
    for item in items:
        if merged and merged[-1].role == item.role:
            previous = merged.pop()
            item = HistoryItem(role=item.role, parts=[*previous.parts, *item.parts])
        merged.append(item)
    return merged

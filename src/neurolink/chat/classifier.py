"""Lexical reply styling.

Best-effort flagging for display purposes only. This is not a
crisis-intervention detector and nothing downstream may rely on it as one.
"""

import re
from collections.abc import Iterable

from .models import DisplayType

CRISIS_PHRASES = ("suicide", "kill myself", "hurt myself", "end it all")

# Crisis lines the persona is instructed to mention (988 call, 741741 text)
CRISIS_LINE_PATTERN = re.compile(r"\b(?:988|741741)\b")

RESOURCE_PATTERN = re.compile(r"\b(?:tip|try|exercise|breath|step|guide)")


class ReplyClassifier:
    """Maps reply text to a display type; escalation always wins."""

    def __init__(
        self,
        crisis_phrases: Iterable[str] = CRISIS_PHRASES,
        resource_pattern: re.Pattern[str] = RESOURCE_PATTERN,
        crisis_line_pattern: re.Pattern[str] | None = CRISIS_LINE_PATTERN,
    ):
        self._crisis_phrases = tuple(p.lower() for p in crisis_phrases)
        self._resource_pattern = resource_pattern
        self._crisis_line_pattern = crisis_line_pattern

    def is_crisis(self, text: str) -> bool:
        lower = text.lower()
        if any(phrase in lower for phrase in self._crisis_phrases):
            return True
        return bool(self._crisis_line_pattern and self._crisis_line_pattern.search(lower))

    def classify(self, text: str) -> DisplayType:
        if self.is_crisis(text):
            return DisplayType.ESCALATION
        if self._resource_pattern.search(text.lower()):
            return DisplayType.RESOURCE
        return DisplayType.NORMAL


_default_classifier = ReplyClassifier()


def classify_reply(text: str) -> DisplayType:
    """Classify a reply with the default phrase lists."""
    return _default_classifier.classify(text)

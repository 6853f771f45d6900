"""Data models for the visible conversation.

These models describe what a screen displays, independent of how the
transcript is later shaped for the completion backend.
"""

import threading
import time
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

_id_lock = threading.Lock()
_last_id = 0


def next_message_id() -> int:
    """Return a creation-time-derived id, strictly greater than any issued before."""
    global _last_id
    with _id_lock:
        _last_id = max(time.time_ns() // 1000, _last_id + 1)
        return _last_id


class Sender(str, Enum):
    """Author of a visible message."""

    USER = "user"
    BOT = "bot"


class DisplayType(str, Enum):
    """Visual treatment of a bot message."""

    NORMAL = "normal"
    ESCALATION = "escalation"
    RESOURCE = "resource"
    ERROR = "error"


class Message(BaseModel):
    """One turn in the visible conversation."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(default_factory=next_message_id, description="Monotonic message id")
    text: str = Field(description="Display content")
    sender: Sender
    timestamp: datetime = Field(default_factory=datetime.now)
    display_type: DisplayType | None = Field(
        default=None,
        description="Styling hint, only set on bot messages"
    )

    @classmethod
    def user(cls, text: str) -> "Message":
        return cls(text=text, sender=Sender.USER)

    @classmethod
    def bot(cls, text: str, display_type: DisplayType = DisplayType.NORMAL) -> "Message":
        return cls(text=text, sender=Sender.BOT, display_type=display_type)

    @property
    def is_user(self) -> bool:
        return self.sender == Sender.USER

"""
Neurolink: a student-first mental-health chat companion backed by Gemini.

This package follows Parnas's information hiding principles,
where each module hides a specific design decision.
"""

__version__ = "0.1.0"

from .chat import (
    ChatOrchestrator,
    ChatSession,
    DisplayType,
    Message,
    Sender,
    create_chat_orchestrator,
)
from .config import Settings, get_settings

__all__ = [
    "ChatOrchestrator",
    "ChatSession",
    "DisplayType",
    "Message",
    "Sender",
    "Settings",
    "create_chat_orchestrator",
    "get_settings",
]

"""Chat orchestration module for neurolink.

Module structure (each module hides a design decision):
- models.py: Visible message representation
- history.py: How the transcript window is cut and canonicalized
- classifier.py: How replies are styled
- resilience.py: Retry, fallback and canned-reply policy
- orchestrator.py: How one turn flows through the pieces above
- session.py: Screen-side message log and in-flight gate
- factory.py: Wiring from settings
"""

from .classifier import ReplyClassifier, classify_reply
from .factory import create_backend_from_settings, create_chat_orchestrator
from .history import build_history
from .models import DisplayType, Message, Sender
from .orchestrator import ChatOrchestrator
from .resilience import OVERLOADED_REPLY, TIMEOUT_REPLY, ResiliencePolicy
from .session import ChatSession

__all__ = [
    "OVERLOADED_REPLY",
    "TIMEOUT_REPLY",
    "ChatOrchestrator",
    "ChatSession",
    "DisplayType",
    "Message",
    "ReplyClassifier",
    "ResiliencePolicy",
    "Sender",
    "build_history",
    "classify_reply",
    "create_backend_from_settings",
    "create_chat_orchestrator",
]

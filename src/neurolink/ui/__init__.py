"""Terminal UI module for neurolink.

Provides a Textual-based chat screen for the orchestrator.

Module structure (Parnas principle - each module hides a design decision):
- widgets.py: Custom widgets (message rendering, input bar)
- styles.py: CSS styling (layout and reply treatments)
- themes.py: Color palette
- app.py: Application orchestration (user interaction flow)
"""

from .app import NeurolinkChatApp, run_textual_tui
from .widgets import ChatHistoryWidget, ChatInputBar

__all__ = [
    "ChatHistoryWidget",
    "ChatInputBar",
    "NeurolinkChatApp",
    "run_textual_tui",
]

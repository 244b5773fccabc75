"""
Data models
"""

from .chat import (
    Sender,
    NavigateDirective,
    UiActionDirective,
    ParsedDirective,
    ChatMessage,
    WidgetState,
    ChatTurnResult,
)
from .session import SessionStatus
from .theme import Theme

__all__ = [
    "Sender",
    "NavigateDirective",
    "UiActionDirective",
    "ParsedDirective",
    "ChatMessage",
    "WidgetState",
    "ChatTurnResult",
    "SessionStatus",
    "Theme",
]

"""
Chat widget data models

- ChatMessage: one transcript entry (user or bot)
- ParsedDirective: machine directive extracted from a bot reply
  (NavigateDirective / UiActionDirective, discriminated by ``kind``)
- WidgetState: per-visitor voice/mute flags
- ChatTurnResult: what the browser receives after a send
"""

from enum import Enum
from datetime import datetime
from typing import Optional, List, Literal, Union, Annotated
from pydantic import BaseModel, Field

from .theme import Theme


class Sender(str, Enum):
    """Who wrote a transcript entry"""
    USER = "user"
    BOT = "bot"


class NavigateDirective(BaseModel):
    """[NAVIGATE: <path>]"""
    kind: Literal["navigate"] = "navigate"
    target_path: str = Field(..., description="Captured path, unvalidated")


class UiActionDirective(BaseModel):
    """[ACTION: <name>]"""
    kind: Literal["action"] = "action"
    action_name: str = Field(..., description="Captured action name, unvalidated")


ParsedDirective = Annotated[
    Union[NavigateDirective, UiActionDirective],
    Field(discriminator="kind")
]


def format_display_time(moment: datetime) -> str:
    """Two-digit hour and minute, as shown under each bubble"""
    return moment.strftime("%H:%M")


class ChatMessage(BaseModel):
    """
    One transcript entry

    For bot messages ``display_text`` is ``raw_text`` with directives
    stripped; for user messages the two are identical.
    """
    sender: Sender = Field(..., description="user / bot")
    raw_text: str = Field(..., description="Text as received")
    display_text: str = Field(..., description="Text shown in the transcript")
    directives: List[ParsedDirective] = Field(default_factory=list, description="Extracted directives")
    timestamp: datetime = Field(default_factory=datetime.now, description="Capture time")
    time: str = Field("", description="Display-formatted capture time")

    @classmethod
    def create(
        cls,
        sender: Sender,
        raw_text: str,
        display_text: Optional[str] = None,
        directives: Optional[List[ParsedDirective]] = None
    ) -> "ChatMessage":
        now = datetime.now()
        return cls(
            sender=sender,
            raw_text=raw_text,
            display_text=raw_text if display_text is None else display_text,
            directives=directives or [],
            timestamp=now,
            time=format_display_time(now)
        )

    class Config:
        use_enum_values = True


class WidgetState(BaseModel):
    """Per-visitor widget flags"""
    voice_mode: bool = Field(default=False, description="Replies are spoken")
    muted: bool = Field(default=False, description="Speech suppressed by the visitor")


class ChatTurnResult(BaseModel):
    """Outcome of one send"""
    message: ChatMessage = Field(..., description="Bot message appended to the transcript")
    navigate_to: Optional[str] = Field(None, description="Route change requested by the reply")
    theme: Theme = Field(..., description="Theme after directives were applied")
    speech_text: Optional[str] = Field(None, description="Sanitized text handed to speech synthesis")
    audio_base64: Optional[str] = Field(None, description="Synthesized speech (audio/mpeg), base64")
    offline: bool = Field(default=False, description="Reply came from the offline responder")

    class Config:
        use_enum_values = True


__all__ = [
    "Sender",
    "NavigateDirective",
    "UiActionDirective",
    "ParsedDirective",
    "ChatMessage",
    "WidgetState",
    "ChatTurnResult",
    "format_display_time",
]

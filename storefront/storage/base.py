"""
Storage Base - transcript storage interface
Chat transcripts and widget flags per visitor (Redis, memory, ...)
"""

from abc import ABC, abstractmethod
from typing import List

from ..models.chat import ChatMessage, WidgetState


class TranscriptStorage(ABC):
    """
    Transcript storage interface

    Implementations:
    - RedisTranscriptStorage: shared between workers, expires with TTL
    - MemoryTranscriptStorage: single-process fallback
    """

    async def connect(self) -> None:
        """Open connections (no-op by default)"""
        return None

    @abstractmethod
    async def get_messages(self, visitor_id: str) -> List[ChatMessage]:
        """
        Transcript of a visitor, oldest first

        Args:
            visitor_id: Visitor identifier

        Returns:
            Messages (empty list if none)
        """
        pass

    @abstractmethod
    async def append_message(self, visitor_id: str, message: ChatMessage) -> None:
        """
        Append one message to the transcript

        Args:
            visitor_id: Visitor identifier
            message: Message to append
        """
        pass

    @abstractmethod
    async def clear_messages(self, visitor_id: str) -> None:
        """Remove the whole transcript"""
        pass

    @abstractmethod
    async def get_state(self, visitor_id: str) -> WidgetState:
        """Widget flags (defaults if never saved)"""
        pass

    @abstractmethod
    async def save_state(self, visitor_id: str, state: WidgetState) -> None:
        """Persist widget flags"""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Health check

        Returns:
            Whether the backend is usable
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close connections"""
        pass

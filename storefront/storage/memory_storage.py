"""
Memory Storage - in-process transcript storage
Used when Redis is not configured or unreachable
"""

import logging
import time
from typing import Callable, Dict, List, Optional

from ..models.chat import ChatMessage, WidgetState
from .base import TranscriptStorage

logger = logging.getLogger(__name__)


class MemoryTranscriptStorage(TranscriptStorage):
    """
    Dict-backed storage; lost on restart

    Like the Redis keys, a visitor's transcript and state expire ttl_seconds
    after the last write.
    """

    def __init__(
        self,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Args:
            ttl_seconds: Expiry after the last write (None = never)
            clock: Monotonic time source (tests)
        """
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._messages: Dict[str, List[ChatMessage]] = {}
        self._states: Dict[str, WidgetState] = {}
        # visitor_id -> last write, oldest first
        self._written_at: Dict[str, float] = {}

    def _prune(self) -> None:
        if self.ttl_seconds is None:
            return
        now = self._clock()
        expired = []
        for visitor_id, written_at in self._written_at.items():
            if now - written_at < self.ttl_seconds:
                break
            expired.append(visitor_id)
        for visitor_id in expired:
            self._drop(visitor_id)
        if expired:
            logger.debug(f"Expired {len(expired)} idle transcripts")

    def _drop(self, visitor_id: str) -> None:
        self._messages.pop(visitor_id, None)
        self._states.pop(visitor_id, None)
        self._written_at.pop(visitor_id, None)

    def _touch(self, visitor_id: str) -> None:
        self._written_at.pop(visitor_id, None)
        self._written_at[visitor_id] = self._clock()

    async def get_messages(self, visitor_id: str) -> List[ChatMessage]:
        self._prune()
        return list(self._messages.get(visitor_id, []))

    async def append_message(self, visitor_id: str, message: ChatMessage) -> None:
        self._prune()
        self._messages.setdefault(visitor_id, []).append(message)
        self._touch(visitor_id)

    async def clear_messages(self, visitor_id: str) -> None:
        self._prune()
        self._messages.pop(visitor_id, None)
        if visitor_id not in self._states:
            self._written_at.pop(visitor_id, None)

    async def get_state(self, visitor_id: str) -> WidgetState:
        self._prune()
        state = self._states.get(visitor_id)
        return state.model_copy() if state else WidgetState()

    async def save_state(self, visitor_id: str, state: WidgetState) -> None:
        self._prune()
        self._states[visitor_id] = state.model_copy()
        self._touch(visitor_id)

    def __len__(self) -> int:
        return len(self._written_at)

    async def health_check(self) -> bool:
        return True

    async def close(self) -> None:
        self._messages.clear()
        self._states.clear()
        self._written_at.clear()

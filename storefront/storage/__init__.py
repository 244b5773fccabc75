"""
Storage Layer - transcript storage
Persists chat transcripts and widget flags (Redis / memory)
"""

from .base import TranscriptStorage
from .memory_storage import MemoryTranscriptStorage
from .redis_storage import RedisTranscriptStorage

__all__ = [
    "TranscriptStorage",
    "MemoryTranscriptStorage",
    "RedisTranscriptStorage",
]

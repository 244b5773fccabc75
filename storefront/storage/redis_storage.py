"""
Redis Storage - Redis-backed transcript storage
Transcripts survive restarts and are shared between workers; keys expire
after the configured TTL
"""

import logging
from typing import List, Optional

import redis.asyncio as aioredis
from redis.exceptions import RedisError, ConnectionError as RedisConnectionError

from ..models.chat import ChatMessage, WidgetState
from .base import TranscriptStorage

logger = logging.getLogger(__name__)


class RedisTranscriptStorage(TranscriptStorage):
    """
    Redis transcript storage

    Keys:
    - {prefix}transcript:{visitor_id} -> List[ChatMessage JSON]
    - {prefix}state:{visitor_id} -> Hash (voice_mode, muted)
    """

    def __init__(
        self,
        redis_url: str = "redis://127.0.0.1:6379/0",
        ttl_seconds: int = 86400,
        key_prefix: str = "storefront:",
        max_connections: int = 10,
        username: Optional[str] = None,
        password: Optional[str] = None
    ):
        """
        Args:
            redis_url: Redis connection URL
            ttl_seconds: Key expiry (seconds), refreshed on every write
            key_prefix: Redis key prefix
            max_connections: Connection pool size
            username: Redis ACL username (optional)
            password: Redis password (optional)
        """
        self.redis_url = redis_url
        self.ttl_seconds = ttl_seconds
        self.key_prefix = key_prefix
        self.max_connections = max_connections
        self.username = username
        self.password = password
        self.redis: Optional[aioredis.Redis] = None
        self._connected = False

        auth_status = "enabled" if password else "disabled"
        logger.info(
            "Initializing RedisTranscriptStorage: %s, TTL=%ss, auth %s",
            redis_url,
            ttl_seconds,
            auth_status
        )

    async def connect(self) -> None:
        """Open the Redis connection"""
        if self._connected and self.redis:
            return

        try:
            connection_kwargs = {
                "encoding": "utf-8",
                "decode_responses": True,
                "max_connections": self.max_connections
            }
            if self.username:
                connection_kwargs["username"] = self.username
            if self.password:
                connection_kwargs["password"] = self.password

            self.redis = aioredis.from_url(
                self.redis_url,
                **connection_kwargs
            )
            await self.redis.ping()
            self._connected = True
            logger.info("✅ Redis connected")
        except RedisConnectionError as e:
            logger.error(f"❌ Redis connection failed: {e}")
            self._connected = False
            raise
        except RedisError as e:
            logger.error(f"❌ Redis initialization failed: {e}")
            self._connected = False
            raise

    def _transcript_key(self, visitor_id: str) -> str:
        return f"{self.key_prefix}transcript:{visitor_id}"

    def _state_key(self, visitor_id: str) -> str:
        return f"{self.key_prefix}state:{visitor_id}"

    def _require_connection(self) -> aioredis.Redis:
        if not self._connected or not self.redis:
            raise RuntimeError("Redis not connected")
        return self.redis

    async def get_messages(self, visitor_id: str) -> List[ChatMessage]:
        redis = self._require_connection()
        try:
            raw_items = await redis.lrange(self._transcript_key(visitor_id), 0, -1)
        except RedisError as e:
            logger.error(f"Redis read failed: {e}")
            raise

        return [ChatMessage.model_validate_json(item) for item in raw_items]

    async def append_message(self, visitor_id: str, message: ChatMessage) -> None:
        redis = self._require_connection()
        key = self._transcript_key(visitor_id)
        try:
            async with redis.pipeline() as pipe:
                await pipe.rpush(key, message.model_dump_json())
                await pipe.expire(key, self.ttl_seconds)
                await pipe.execute()
        except RedisError as e:
            logger.error(f"Redis write failed: {e}")
            raise

    async def clear_messages(self, visitor_id: str) -> None:
        redis = self._require_connection()
        try:
            await redis.delete(self._transcript_key(visitor_id))
        except RedisError as e:
            logger.error(f"Redis delete failed: {e}")
            raise

    async def get_state(self, visitor_id: str) -> WidgetState:
        redis = self._require_connection()
        try:
            data = await redis.hgetall(self._state_key(visitor_id))
        except RedisError as e:
            logger.error(f"Redis read failed: {e}")
            raise

        if not data:
            return WidgetState()
        return WidgetState(
            voice_mode=data.get("voice_mode") == "1",
            muted=data.get("muted") == "1"
        )

    async def save_state(self, visitor_id: str, state: WidgetState) -> None:
        redis = self._require_connection()
        key = self._state_key(visitor_id)
        data = {
            "voice_mode": "1" if state.voice_mode else "0",
            "muted": "1" if state.muted else "0"
        }
        try:
            async with redis.pipeline() as pipe:
                await pipe.hset(key, mapping=data)
                await pipe.expire(key, self.ttl_seconds)
                await pipe.execute()
        except RedisError as e:
            logger.error(f"Redis write failed: {e}")
            raise

    async def health_check(self) -> bool:
        try:
            if not self.redis:
                return False
            await self.redis.ping()
            return True
        except RedisError as e:
            logger.warning(f"Redis health check failed: {e}")
            return False

    async def close(self) -> None:
        """Close the Redis connection"""
        if self.redis:
            await self.redis.aclose()
            self._connected = False
            logger.info("Redis connection closed")

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

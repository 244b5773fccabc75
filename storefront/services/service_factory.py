"""
Service Factory - shared service instances

Clients hold connection pools, so one instance per process is shared by all
requests. The transcript storage is chosen at startup (Redis, or memory when
Redis is unreachable) and injected with set_storage().
"""

import logging
from typing import Optional

from ..config.settings import get_settings
from ..storage.base import TranscriptStorage
from ..storage.memory_storage import MemoryTranscriptStorage
from .audit_logger import get_directive_audit_log
from .backend_client import BackendClient
from .chat_client import ChatBackendClient
from .chat_widget import ChatWidgetService
from .offline_responder import OfflineResponder
from .speech import SpeechSynthesizer
from .theme_store import get_theme_registry

logger = logging.getLogger(__name__)


class ServiceFactory:
    """Lazily created singletons"""

    _backend_client: Optional[BackendClient] = None
    _chat_client: Optional[ChatBackendClient] = None
    _storage: Optional[TranscriptStorage] = None
    _chat_widget: Optional[ChatWidgetService] = None

    @classmethod
    def get_backend_client(cls) -> BackendClient:
        if cls._backend_client is None:
            settings = get_settings()
            cls._backend_client = BackendClient(
                base_url=settings.BACKEND_API_URL,
                timeout=settings.REQUEST_TIMEOUT,
                identity_path=settings.ADMIN_IDENTITY_PATH
            )
            logger.info(f"Created backend client for {settings.BACKEND_API_URL}")

        return cls._backend_client

    @classmethod
    def get_chat_client(cls) -> ChatBackendClient:
        if cls._chat_client is None:
            settings = get_settings()
            cls._chat_client = ChatBackendClient(
                url=settings.CHATBOT_API_URL,
                timeout=settings.REQUEST_TIMEOUT
            )
            logger.info(f"Created chat client for {settings.CHATBOT_API_URL}")

        return cls._chat_client

    @classmethod
    def get_storage(cls) -> TranscriptStorage:
        if cls._storage is None:
            cls._storage = MemoryTranscriptStorage(
                ttl_seconds=get_settings().TRANSCRIPT_TTL
            )
            logger.info("Using memory transcript storage")

        return cls._storage

    @classmethod
    def set_storage(cls, storage: TranscriptStorage) -> None:
        cls._storage = storage
        cls._chat_widget = None

    @classmethod
    def get_chat_widget_service(cls) -> ChatWidgetService:
        if cls._chat_widget is None:
            settings = get_settings()
            backend = cls.get_backend_client()
            cls._chat_widget = ChatWidgetService(
                storage=cls.get_storage(),
                chat_client=cls.get_chat_client(),
                offline_responder=OfflineResponder(backend),
                speech=SpeechSynthesizer(
                    backend,
                    elevenlabs_api_key=settings.ELEVENLABS_API_KEY,
                    elevenlabs_voice_id=settings.ELEVENLABS_VOICE_ID,
                    elevenlabs_api_url=settings.ELEVENLABS_API_URL
                ),
                theme_registry=get_theme_registry(),
                audit_log=get_directive_audit_log()
            )
            logger.info("Created chat widget service")

        return cls._chat_widget

    @classmethod
    async def close_all(cls):
        """Close HTTP clients and storage"""
        if cls._backend_client is not None:
            await cls._backend_client.aclose()
        if cls._chat_client is not None:
            await cls._chat_client.aclose()
        if cls._storage is not None:
            await cls._storage.close()

        cls._backend_client = None
        cls._chat_client = None
        cls._storage = None
        cls._chat_widget = None
        logger.info("✅ All services closed")


# Convenience functions (FastAPI dependencies)
def get_backend_client() -> BackendClient:
    return ServiceFactory.get_backend_client()


def get_chat_widget_service() -> ChatWidgetService:
    return ServiceFactory.get_chat_widget_service()


__all__ = [
    'ServiceFactory',
    'get_backend_client',
    'get_chat_widget_service'
]

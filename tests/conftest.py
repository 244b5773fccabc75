"""
Shared fixtures
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from storefront.services.chat_client import ChatBackendClient
from storefront.services.chat_widget import ChatWidgetService
from storefront.services.offline_responder import OfflineResponder
from storefront.services.speech import SpeechSynthesizer
from storefront.services.theme_store import ThemeRegistry
from storefront.storage.memory_storage import MemoryTranscriptStorage


@pytest.fixture
def storage():
    return MemoryTranscriptStorage()


@pytest.fixture
def theme_registry():
    return ThemeRegistry()


@pytest.fixture
def chat_client():
    client = MagicMock(spec=ChatBackendClient)
    client.ask = AsyncMock(return_value="Hello there")
    return client


@pytest.fixture
def offline_responder():
    responder = MagicMock(spec=OfflineResponder)
    responder.respond = AsyncMock(return_value="Offline answer")
    return responder


@pytest.fixture
def speech():
    synthesizer = MagicMock(spec=SpeechSynthesizer)
    synthesizer.synthesize = AsyncMock(return_value=b"mp3-bytes")
    return synthesizer


@pytest.fixture
def widget(storage, chat_client, offline_responder, speech, theme_registry):
    return ChatWidgetService(
        storage=storage,
        chat_client=chat_client,
        offline_responder=offline_responder,
        speech=speech,
        theme_registry=theme_registry
    )


class FakeClock:
    """Manually advanced monotonic clock"""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()

"""
Speech synthesis for chat replies

ElevenLabs when credentials are configured, otherwise (or on failure) the
backend's /voice/speak proxy.
"""

import logging
from typing import Optional

import httpx

from .backend_client import BackendClient

logger = logging.getLogger(__name__)

ELEVENLABS_MODEL_ID = "eleven_multilingual_v2"
ELEVENLABS_VOICE_SETTINGS = {
    "stability": 0.5,
    "similarity_boost": 0.75,
    "style": 0.0,
    "use_speaker_boost": True
}


class SpeechSynthesizer:
    """Turns sanitized reply text into audio bytes"""

    def __init__(
        self,
        backend: BackendClient,
        elevenlabs_api_key: Optional[str] = None,
        elevenlabs_voice_id: Optional[str] = None,
        elevenlabs_api_url: str = "https://api.elevenlabs.io/v1",
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.backend = backend
        self.elevenlabs_api_key = elevenlabs_api_key
        self.elevenlabs_voice_id = elevenlabs_voice_id
        self.elevenlabs_api_url = elevenlabs_api_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    @property
    def elevenlabs_enabled(self) -> bool:
        return bool(self.elevenlabs_api_key and self.elevenlabs_voice_id)

    async def _call_elevenlabs(self, text: str) -> bytes:
        url = f"{self.elevenlabs_api_url}/text-to-speech/{self.elevenlabs_voice_id}"
        headers = {
            "xi-api-key": self.elevenlabs_api_key,
            "Content-Type": "application/json"
        }
        payload = {
            "text": text,
            "model_id": ELEVENLABS_MODEL_ID,
            "voice_settings": ELEVENLABS_VOICE_SETTINGS
        }

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            response = await client.post(url, headers=headers, json=payload)
            response.raise_for_status()
            return response.content

    async def synthesize(self, text: str) -> Optional[bytes]:
        """
        Generate audio for text

        Args:
            text: Already sanitized speech text

        Returns:
            Audio bytes, or None when text is empty or every provider failed
        """
        if not text or not text.strip():
            return None

        if self.elevenlabs_enabled:
            try:
                logger.info("Generating ElevenLabs audio")
                return await self._call_elevenlabs(text)
            except httpx.HTTPError as e:
                logger.error(f"ElevenLabs error, falling back to backend voice proxy: {e}")

        try:
            return await self.backend.speak(text)
        except Exception as e:
            logger.error(f"TTS error: {e}")
            return None

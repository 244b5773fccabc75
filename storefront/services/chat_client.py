"""
Chatbot backend client

POST {"message": ...} -> {"reply": ...}. The reply may carry directives; it
is returned untouched.
"""
import logging
from typing import Optional

import httpx

logger = logging.getLogger(__name__)


class ChatBackendError(Exception):
    """The chat backend could not produce a reply"""
    pass


class ChatBackendClient:
    """Async client for the chatbot endpoint"""

    def __init__(
        self,
        url: str,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.url = url
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def ask(self, message: str) -> str:
        """
        Send one user message

        Args:
            message: User text

        Returns:
            Raw reply text ("" when the backend sent no reply field)

        Raises:
            ChatBackendError: network failure, non-2xx status or a body that
                is not a JSON object
        """
        try:
            response = await self._client.post(self.url, json={"message": message})
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            logger.warning(f"Chat backend request failed: {e}")
            raise ChatBackendError(str(e)) from e
        except ValueError as e:
            logger.warning(f"Chat backend returned malformed JSON: {e}")
            raise ChatBackendError(f"Malformed reply: {e}") from e

        if not isinstance(data, dict):
            raise ChatBackendError(f"Unexpected reply body: {type(data).__name__}")

        reply = data.get("reply") or ""
        if not isinstance(reply, str):
            raise ChatBackendError(f"Unexpected reply type: {type(reply).__name__}")
        return reply

    async def aclose(self) -> None:
        await self._client.aclose()

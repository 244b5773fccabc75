"""
Chat widget service

Runs one chat turn per send:

1. append the user message
2. ask the chat backend (offline responder on failure)
3. parse directives and apply them (navigation, theme)
4. append the bot message
5. speak the sanitized text when voice mode is on

Steps 3-5 are strictly ordered: nothing is shown or spoken before the
directives are stripped and applied.
"""
import base64
import logging
from typing import List, Optional

from ..models.chat import ChatMessage, ChatTurnResult, Sender, WidgetState
from .audit_logger import DirectiveAuditLog
from .chat_client import ChatBackendClient, ChatBackendError
from .directive_handler import DirectiveHandler
from .directive_parser import parse_reply, sanitize_for_speech
from .navigator import Navigator
from .offline_responder import OfflineResponder
from .speech import SpeechSynthesizer
from .theme_store import ThemeRegistry
from ..storage.base import TranscriptStorage

logger = logging.getLogger(__name__)

GREETING_TEXT = "Hello 👋, I’m your SD Herbs Assistant. How can I help you today?"
CLEARED_TEXT = "Chat cleared! 🧹 How can I help you now?"


class ChatWidgetService:
    """Per-visitor chat widget logic"""

    def __init__(
        self,
        storage: TranscriptStorage,
        chat_client: ChatBackendClient,
        offline_responder: OfflineResponder,
        speech: SpeechSynthesizer,
        theme_registry: ThemeRegistry,
        audit_log: Optional[DirectiveAuditLog] = None
    ):
        self.storage = storage
        self.chat_client = chat_client
        self.offline_responder = offline_responder
        self.speech = speech
        self.theme_registry = theme_registry
        self.audit_log = audit_log

    async def open_widget(self, visitor_id: str) -> List[ChatMessage]:
        """Greet on first open; returns the transcript"""
        messages = await self.storage.get_messages(visitor_id)
        if not messages:
            greeting = ChatMessage.create(Sender.BOT, GREETING_TEXT)
            await self.storage.append_message(visitor_id, greeting)
            messages = [greeting]
        return messages

    async def transcript(self, visitor_id: str) -> List[ChatMessage]:
        return await self.storage.get_messages(visitor_id)

    async def clear(self, visitor_id: str) -> List[ChatMessage]:
        """Drop the transcript and re-greet"""
        await self.storage.clear_messages(visitor_id)
        greeting = ChatMessage.create(Sender.BOT, CLEARED_TEXT)
        await self.storage.append_message(visitor_id, greeting)
        logger.info(f"Transcript cleared for visitor {visitor_id}")
        return [greeting]

    async def get_state(self, visitor_id: str) -> WidgetState:
        return await self.storage.get_state(visitor_id)

    async def set_voice_mode(self, visitor_id: str, enabled: bool) -> WidgetState:
        state = await self.storage.get_state(visitor_id)
        if state.voice_mode != enabled:
            state.voice_mode = enabled
            await self.storage.save_state(visitor_id, state)
        return state

    async def set_muted(self, visitor_id: str, muted: bool) -> WidgetState:
        state = await self.storage.get_state(visitor_id)
        if state.muted != muted:
            state.muted = muted
            await self.storage.save_state(visitor_id, state)
        return state

    async def send(
        self,
        visitor_id: str,
        text: str,
        from_voice: bool = False
    ) -> Optional[ChatTurnResult]:
        """
        Handle one user message

        Args:
            visitor_id: Visitor identifier
            text: User text (typed or recognised speech)
            from_voice: Message came from speech recognition

        Returns:
            ChatTurnResult, or None when text is empty
        """
        # Typing switches voice mode off, speaking switches it on
        state = await self.set_voice_mode(visitor_id, from_voice)

        if not text or not text.strip():
            logger.debug("Empty message, not sending")
            return None

        await self.storage.append_message(visitor_id, ChatMessage.create(Sender.USER, text))

        offline = False
        try:
            raw_reply = await self.chat_client.ask(text)
            display_text, directives = parse_reply(raw_reply)
        except ChatBackendError as e:
            logger.warning(f"Chat backend unreachable, using offline reply: {e}")
            raw_reply, display_text = await self._offline_reply(text)
            directives = []
            offline = True

        navigator = Navigator()
        theme_store = self.theme_registry.get(visitor_id)
        handler = DirectiveHandler(navigator, theme_store, self.audit_log, visitor_id)
        await handler.apply(directives)

        if not display_text:
            _fallback_raw, display_text = await self._offline_reply(text)
            offline = True

        bot_message = ChatMessage.create(Sender.BOT, raw_reply, display_text, directives)
        await self.storage.append_message(visitor_id, bot_message)

        speech_text = None
        audio_base64 = None
        if state.voice_mode and not state.muted:
            speech_text = sanitize_for_speech(display_text)
            audio = await self.speech.synthesize(speech_text)
            if audio:
                audio_base64 = base64.b64encode(audio).decode("ascii")

        return ChatTurnResult(
            message=bot_message,
            navigate_to=navigator.last.path if navigator.last else None,
            theme=theme_store.theme,
            speech_text=speech_text,
            audio_base64=audio_base64,
            offline=offline
        )

    async def _offline_reply(self, text: str):
        """(raw, display) for a locally generated reply; never carries directives"""
        raw = await self.offline_responder.respond(text)
        display, _ignored = parse_reply(raw)
        return raw, display

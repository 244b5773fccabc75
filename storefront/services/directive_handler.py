"""
Directive application

Applies parsed directives as side effects, once each, before the bot message
is appended to the transcript.
"""
import logging
from typing import List, Optional

from ..models.chat import NavigateDirective, UiActionDirective, ParsedDirective
from ..models.theme import Theme
from .audit_logger import DirectiveAuditLog
from .navigator import Navigator
from .theme_store import ThemeStore

logger = logging.getLogger(__name__)

# action name -> theme it asks for
THEME_ACTIONS = {
    "THEME_DARK": Theme.DARK,
    "THEME_LIGHT": Theme.LIGHT,
}


class DirectiveHandler:
    """
    Routes directives to the navigator and the visitor's theme store

    Unknown action names are ignored so that newer backends can send
    directives older clients do not understand.
    """

    def __init__(
        self,
        navigator: Navigator,
        theme_store: ThemeStore,
        audit_log: Optional[DirectiveAuditLog] = None,
        visitor_id: Optional[str] = None
    ):
        self.navigator = navigator
        self.theme_store = theme_store
        self.audit_log = audit_log
        self.visitor_id = visitor_id

    async def apply(self, directives: List[ParsedDirective]) -> None:
        """Apply directives in list order"""
        for directive in directives:
            if isinstance(directive, NavigateDirective):
                outcome = self._navigate(directive)
                await self._audit("navigate", directive.target_path, outcome)
            elif isinstance(directive, UiActionDirective):
                outcome = self._ui_action(directive)
                await self._audit("action", directive.action_name, outcome)

    def _navigate(self, directive: NavigateDirective) -> str:
        logger.info(f"Chatbot navigating to: {directive.target_path}")
        self.navigator.navigate(directive.target_path)
        return "applied"

    def _ui_action(self, directive: UiActionDirective) -> str:
        wanted = THEME_ACTIONS.get(directive.action_name)
        if wanted is None:
            logger.debug(f"Ignoring unrecognized UI action: {directive.action_name}")
            return "ignored"

        if self.theme_store.theme is wanted:
            return "noop"

        self.theme_store.toggle()
        logger.info(f"Chatbot UI action {directive.action_name}: theme -> {wanted.value}")
        return "applied"

    async def _audit(self, kind: str, value: str, outcome: str):
        if self.audit_log is not None:
            await self.audit_log.record(self.visitor_id, kind, value, outcome)

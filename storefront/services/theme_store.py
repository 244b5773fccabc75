"""
Theme state

Each visitor has exactly one ThemeStore. The explicit toggle endpoint and the
chat directive handler both obtain it from the registry and both write through
toggle()/set(), so there is never a second copy of the flag.
"""
import logging
import time
from typing import Callable, Dict, List, Optional

from ..models.theme import Theme

logger = logging.getLogger(__name__)

ThemeListener = Callable[[Theme], None]


class ThemeStore:
    """Single owned light/dark cell"""

    def __init__(self, initial: Theme = Theme.LIGHT):
        self._theme = Theme(initial)
        self._listeners: List[ThemeListener] = []

    @property
    def theme(self) -> Theme:
        return self._theme

    def toggle(self) -> Theme:
        """Flip the theme and return the new value"""
        self._theme = self._theme.opposite
        logger.debug(f"Theme toggled to {self._theme.value}")
        for listener in self._listeners:
            listener(self._theme)
        return self._theme

    def set(self, value: Theme) -> Theme:
        """Set the theme; goes through toggle() so listeners see one write path"""
        if Theme(value) is not self._theme:
            self.toggle()
        return self._theme

    def subscribe(self, listener: ThemeListener) -> None:
        self._listeners.append(listener)


class ThemeRegistry:
    """
    visitor_id -> ThemeStore

    With ttl_seconds set, a store not used for that long is dropped; the
    visitor starts again from the default theme.
    """

    def __init__(
        self,
        default_theme: Theme = Theme.LIGHT,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        self.default_theme = Theme(default_theme)
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._stores: Dict[str, ThemeStore] = {}
        self._last_seen: Dict[str, float] = {}

    def get(self, visitor_id: str) -> ThemeStore:
        """Return the visitor's store, creating it on first use"""
        now = self._clock()
        self._prune(now)

        store = self._stores.get(visitor_id)
        if store is None:
            store = ThemeStore(self.default_theme)
            self._stores[visitor_id] = store
        # re-insert so _last_seen stays ordered oldest first
        self._last_seen.pop(visitor_id, None)
        self._last_seen[visitor_id] = now
        return store

    def forget(self, visitor_id: str) -> bool:
        self._last_seen.pop(visitor_id, None)
        return self._stores.pop(visitor_id, None) is not None

    def _prune(self, now: float) -> None:
        if self.ttl_seconds is None:
            return
        expired = []
        for visitor_id, seen in self._last_seen.items():
            if now - seen < self.ttl_seconds:
                break
            expired.append(visitor_id)
        for visitor_id in expired:
            self.forget(visitor_id)
        if expired:
            logger.debug(f"Dropped {len(expired)} idle theme stores")

    def __len__(self) -> int:
        return len(self._stores)


# Global singleton
_theme_registry: Optional[ThemeRegistry] = None


def get_theme_registry() -> ThemeRegistry:
    """
    Get the ThemeRegistry singleton

    Returns:
        ThemeRegistry instance
    """
    global _theme_registry

    if _theme_registry is None:
        from ..config.settings import get_settings

        settings = get_settings()
        _theme_registry = ThemeRegistry(
            Theme(settings.DEFAULT_THEME),
            ttl_seconds=settings.TRANSCRIPT_TTL
        )

    return _theme_registry


__all__ = [
    "ThemeStore",
    "ThemeRegistry",
    "get_theme_registry",
]

"""
Admin session guard state
"""

from enum import Enum


class SessionStatus(str, Enum):
    """
    Guard state for one protected-view mount

    Checking -> Authenticated | Unauthenticated, never back.
    """
    CHECKING = "checking"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"

    @property
    def resolved(self) -> bool:
        return self is not SessionStatus.CHECKING

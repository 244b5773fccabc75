"""
Session Guard - admin route protection

One guard instance per protected-view mount (one request):

    [Checking] --probe succeeds--> [Authenticated]
    [Checking] --probe fails-----> [Unauthenticated] --> redirect to login

Nothing is applied after unmount: the liveness flag is checked before every
state change and before the redirect.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from ..models.session import SessionStatus
from .navigator import Navigator

logger = logging.getLogger(__name__)

IdentityProbe = Callable[[], Awaitable[Any]]

LOADING_VIEW: Dict[str, str] = {
    "status": SessionStatus.CHECKING.value,
    "message": "Checking session…",
}


class SessionGuard:
    """
    Gates admin content behind a server-confirmed identity

    Args:
        probe: Coroutine factory performing the identity request. Any
            exception counts as a failed probe.
        navigator: Receives the login redirect
        login_path: Route of the login view
    """

    def __init__(
        self,
        probe: IdentityProbe,
        navigator: Navigator,
        login_path: str = "/admin/login"
    ):
        self.probe = probe
        self.navigator = navigator
        self.login_path = login_path

        self.status = SessionStatus.CHECKING
        self.identity: Optional[Any] = None

        self._alive = False
        self._probe_task: Optional[asyncio.Task] = None

    # ===== lifecycle =====

    def mount(self) -> None:
        self._alive = True

    def unmount(self) -> None:
        """Drop the liveness flag; a pending probe result will be discarded"""
        if self._alive:
            logger.debug("Session guard unmounted")
        self._alive = False

    @property
    def is_mounted(self) -> bool:
        return self._alive

    # ===== probe =====

    async def check_session(self) -> SessionStatus:
        """
        Run the identity probe once and resolve the guard

        Returns:
            The guard status afterwards. Stays CHECKING when the guard was
            unmounted before the probe finished.
        """
        if self.status.resolved:
            return self.status

        if self._probe_task is None:
            self._probe_task = asyncio.ensure_future(self.probe())

        try:
            identity = await self._probe_task
        except asyncio.CancelledError:
            if self._alive:
                raise
            logger.debug("Identity probe cancelled after unmount")
            return self.status
        except Exception as e:
            if not self._alive:
                logger.debug(f"Discarding failed identity probe after unmount: {e}")
                return self.status
            if not self.status.resolved:
                logger.info(f"Admin session check failed: {e}")
                self._transition(SessionStatus.UNAUTHENTICATED)
                self.navigator.navigate(self.login_path, replace=True)
            return self.status

        if not self._alive:
            logger.debug("Discarding identity probe result after unmount")
            return self.status

        if not self.status.resolved:
            self.identity = identity
            self._transition(SessionStatus.AUTHENTICATED)
        return self.status

    def _transition(self, new_status: SessionStatus) -> None:
        if self.status.resolved:
            raise RuntimeError(
                f"Session guard already resolved to {self.status.value}"
            )
        logger.debug(f"Session guard: {self.status.value} -> {new_status.value}")
        self.status = new_status

    # ===== rendering =====

    def render(self, content: Callable[[], Any]) -> Any:
        """
        What a protected view shows for the current status

        Args:
            content: Builds the protected content; only called once
                authenticated

        Returns:
            The loading affordance while checking, the content when
            authenticated, None when unauthenticated (the redirect has
            already been issued)
        """
        if self.status is SessionStatus.CHECKING:
            return dict(LOADING_VIEW)
        if self.status is SessionStatus.AUTHENTICATED:
            return content()
        return None


__all__ = [
    "IdentityProbe",
    "LOADING_VIEW",
    "SessionGuard",
]

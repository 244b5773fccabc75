"""
Shared FastAPI dependencies

- visitor identification (cookie)
- admin credentials extraction
- Session Guard for protected admin views
"""
import asyncio
import contextlib
import logging
import uuid

from fastapi import Depends, HTTPException, Request, Response

from storefront.config.settings import get_settings
from storefront.models.session import SessionStatus
from storefront.services.backend_client import AdminCredentials, BackendClient
from storefront.services.navigator import Navigator
from storefront.services.service_factory import get_backend_client
from storefront.services.session_guard import SessionGuard

logger = logging.getLogger(__name__)

VISITOR_COOKIE = "visitor_id"
VISITOR_COOKIE_MAX_AGE = 365 * 86400
TOKEN_COOKIE = "token"
DISCONNECT_POLL_INTERVAL = 0.1  # seconds


class LoginRedirect(Exception):
    """Turned into a 303 redirect by the app exception handler"""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Redirect to {path}")


def get_visitor_id(request: Request, response: Response) -> str:
    """Visitor id from the cookie, issuing a new one on first visit"""
    visitor_id = request.cookies.get(VISITOR_COOKIE)
    if not visitor_id:
        visitor_id = uuid.uuid4().hex
        response.set_cookie(
            VISITOR_COOKIE,
            visitor_id,
            max_age=VISITOR_COOKIE_MAX_AGE,
            httponly=True,
            samesite="lax"
        )
        logger.debug(f"Issued visitor id {visitor_id}")
    return visitor_id


def get_admin_credentials(request: Request) -> AdminCredentials:
    """Token from the Authorization header or the token cookie, plus all cookies"""
    token = None
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        token = auth_header[len("Bearer "):].strip() or None
    if token is None:
        token = request.cookies.get(TOKEN_COOKIE)
    return AdminCredentials(token=token, cookies=dict(request.cookies))


async def _unmount_on_disconnect(request: Request, guard: SessionGuard):
    while guard.is_mounted:
        if await request.is_disconnected():
            logger.info("Client disconnected during session check")
            guard.unmount()
            return
        await asyncio.sleep(DISCONNECT_POLL_INTERVAL)


async def require_admin_session(
    request: Request,
    backend: BackendClient = Depends(get_backend_client)
):
    """
    Mount a SessionGuard for this request

    Yields the resolved guard when authenticated. Unauthenticated visitors
    get a redirect to the login view; a client that went away before the
    probe finished gets nothing.
    """
    settings = get_settings()
    credentials = get_admin_credentials(request)
    navigator = Navigator()
    guard = SessionGuard(
        probe=lambda: backend.get_admin_identity(credentials),
        navigator=navigator,
        login_path=settings.LOGIN_PATH
    )

    # buffer the body first; the disconnect watcher reads the same receive channel
    await request.body()

    guard.mount()
    check = asyncio.ensure_future(guard.check_session())
    watcher = asyncio.ensure_future(_unmount_on_disconnect(request, guard))
    try:
        await asyncio.wait({check, watcher}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        watcher.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await watcher
        # after a disconnect the guard is unmounted and discards the probe
        if not check.done():
            check.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await check

    try:
        if guard.status is SessionStatus.UNAUTHENTICATED:
            raise LoginRedirect(navigator.last.path)
        if guard.status is SessionStatus.CHECKING:
            raise HTTPException(status_code=499, detail="Client closed request")
        yield guard
    finally:
        guard.unmount()

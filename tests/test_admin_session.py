"""
require_admin_session dependency tests (request lifecycle around the guard)
"""

import asyncio
import pytest
from fastapi import HTTPException
from unittest.mock import AsyncMock, MagicMock, patch

from storefront.api.deps import LoginRedirect, require_admin_session
from storefront.models.session import SessionStatus
from storefront.services.backend_client import AdminAuthRequired, BackendClient
from storefront.services.navigator import Navigator


def make_request(disconnected: bool):
    request = MagicMock()
    request.cookies = {}
    request.headers = {"Authorization": "Bearer t0k"}
    request.body = AsyncMock(return_value=b"")
    request.is_disconnected = AsyncMock(return_value=disconnected)
    return request


@pytest.fixture
def navigators():
    """Every Navigator the dependency creates"""
    created = []

    def make_navigator():
        navigator = Navigator()
        created.append(navigator)
        return navigator

    with patch("storefront.api.deps.Navigator", side_effect=make_navigator):
        yield created


@pytest.fixture
def backend():
    return MagicMock(spec=BackendClient)


class TestClientDisconnect:

    @pytest.mark.asyncio
    async def test_disconnect_while_identity_check_pending_gives_499(self, backend, navigators):
        release = asyncio.Event()

        async def pending_identity(credentials):
            await release.wait()
            return {"email": "admin@sdherbs.com"}

        backend.get_admin_identity = AsyncMock(side_effect=pending_identity)
        request = make_request(disconnected=True)

        dependency = require_admin_session(request, backend=backend)
        with pytest.raises(HTTPException) as exc_info:
            await dependency.__anext__()

        assert exc_info.value.status_code == 499
        backend.get_admin_identity.assert_called_once()
        assert navigators[0].requests == []
        request.is_disconnected.assert_awaited()

    @pytest.mark.asyncio
    async def test_disconnect_before_failed_identity_check_issues_no_redirect(self, backend, navigators):
        release = asyncio.Event()

        async def failed_identity_check(credentials):
            await release.wait()
            raise AdminAuthRequired()

        backend.get_admin_identity = AsyncMock(side_effect=failed_identity_check)

        dependency = require_admin_session(make_request(disconnected=True), backend=backend)
        with pytest.raises(HTTPException) as exc_info:
            await dependency.__anext__()

        assert exc_info.value.status_code == 499
        assert not isinstance(exc_info.value, LoginRedirect)
        assert navigators[0].requests == []


class TestConnectedClient:

    @pytest.mark.asyncio
    async def test_authenticated_guard_is_yielded_then_unmounted(self, backend, navigators):
        backend.get_admin_identity = AsyncMock(return_value={"email": "admin@sdherbs.com"})

        dependency = require_admin_session(make_request(disconnected=False), backend=backend)
        guard = await dependency.__anext__()

        assert guard.status is SessionStatus.AUTHENTICATED
        assert guard.identity == {"email": "admin@sdherbs.com"}
        assert guard.is_mounted is True
        credentials = backend.get_admin_identity.await_args.args[0]
        assert credentials.token == "t0k"

        with pytest.raises(StopAsyncIteration):
            await dependency.__anext__()
        assert guard.is_mounted is False

    @pytest.mark.asyncio
    async def test_rejected_identity_raises_login_redirect(self, backend, navigators):
        backend.get_admin_identity = AsyncMock(side_effect=AdminAuthRequired())

        dependency = require_admin_session(make_request(disconnected=False), backend=backend)
        with pytest.raises(LoginRedirect) as exc_info:
            await dependency.__anext__()

        assert exc_info.value.path == "/admin/login"
        assert len(navigators[0].requests) == 1
        assert navigators[0].requests[0].replace is True

    @pytest.mark.asyncio
    async def test_watcher_is_finished_before_yield(self, backend, navigators):
        backend.get_admin_identity = AsyncMock(return_value={})
        tasks_before = asyncio.all_tasks()

        dependency = require_admin_session(make_request(disconnected=False), backend=backend)
        await dependency.__anext__()

        assert asyncio.all_tasks() - tasks_before == set()
        await dependency.aclose()

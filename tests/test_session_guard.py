"""
SessionGuard unit tests
"""

import asyncio
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from storefront.models.session import SessionStatus
from storefront.services.backend_client import AdminAuthRequired, BackendAPIError
from storefront.services.navigator import Navigator, NavigationRequest
from storefront.services.session_guard import LOADING_VIEW, SessionGuard


def make_guard(probe):
    navigator = Navigator()
    guard = SessionGuard(probe=probe, navigator=navigator, login_path="/admin/login")
    guard.mount()
    return guard, navigator


class TestResolution:

    @pytest.mark.asyncio
    async def test_initial_state_is_checking(self):
        guard, _ = make_guard(AsyncMock())

        assert guard.status is SessionStatus.CHECKING

    @pytest.mark.asyncio
    async def test_probe_success_authenticates(self):
        probe = AsyncMock(return_value={"email": "admin@sdherbs.com"})
        guard, navigator = make_guard(probe)

        status = await guard.check_session()

        assert status is SessionStatus.AUTHENTICATED
        assert guard.identity == {"email": "admin@sdherbs.com"}
        assert navigator.requests == []
        probe.assert_awaited_once()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [
        AdminAuthRequired(),
        BackendAPIError(500, "boom"),
        BackendAPIError(None, "connection refused"),
        ValueError("malformed"),
        asyncio.TimeoutError(),
    ])
    async def test_probe_failure_redirects_once(self, error):
        probe = AsyncMock(side_effect=error)
        guard, navigator = make_guard(probe)

        status = await guard.check_session()

        assert status is SessionStatus.UNAUTHENTICATED
        assert navigator.requests == [NavigationRequest(path="/admin/login", replace=True)]

    @pytest.mark.asyncio
    async def test_no_retry_and_no_second_redirect(self):
        probe = AsyncMock(side_effect=AdminAuthRequired())
        guard, navigator = make_guard(probe)

        await guard.check_session()
        await guard.check_session()

        probe.assert_awaited_once()
        assert len(navigator.requests) == 1
        assert guard.status is SessionStatus.UNAUTHENTICATED

    @pytest.mark.asyncio
    async def test_resolved_guard_never_returns_to_checking(self):
        guard, _ = make_guard(AsyncMock(return_value={}))
        await guard.check_session()

        with pytest.raises(RuntimeError):
            guard._transition(SessionStatus.UNAUTHENTICATED)
        assert guard.status is SessionStatus.AUTHENTICATED


class TestUnmount:
    """Nothing is applied once the guard is unmounted"""

    @pytest.mark.asyncio
    async def test_success_after_unmount_is_discarded(self):
        probe_result = asyncio.get_running_loop().create_future()

        async def probe():
            return await probe_result

        guard, navigator = make_guard(probe)

        with patch.object(guard, "_transition", wraps=guard._transition) as spy:
            task = asyncio.create_task(guard.check_session())
            await asyncio.sleep(0)
            guard.unmount()
            probe_result.set_result({"email": "admin@sdherbs.com"})
            status = await task

        assert status is SessionStatus.CHECKING
        assert guard.status is SessionStatus.CHECKING
        assert guard.identity is None
        spy.assert_not_called()
        assert navigator.requests == []

    @pytest.mark.asyncio
    async def test_failure_after_unmount_does_not_redirect(self):
        probe_result = asyncio.get_running_loop().create_future()

        async def probe():
            return await probe_result

        guard, navigator = make_guard(probe)

        task = asyncio.create_task(guard.check_session())
        await asyncio.sleep(0)
        guard.unmount()
        probe_result.set_exception(AdminAuthRequired())
        status = await task

        assert status is SessionStatus.CHECKING
        assert navigator.requests == []

    @pytest.mark.asyncio
    async def test_cancelled_probe_after_unmount_is_swallowed(self):
        started = asyncio.Event()

        async def probe():
            started.set()
            await asyncio.sleep(10)

        guard, navigator = make_guard(probe)

        task = asyncio.create_task(guard.check_session())
        await started.wait()
        guard.unmount()
        guard._probe_task.cancel()
        status = await task

        assert status is SessionStatus.CHECKING
        assert navigator.requests == []

    @pytest.mark.asyncio
    async def test_unmounted_before_check(self):
        probe = AsyncMock(return_value={})
        guard = SessionGuard(probe=probe, navigator=Navigator())

        status = await guard.check_session()

        assert status is SessionStatus.CHECKING
        assert guard.is_mounted is False


class TestRender:

    @pytest.mark.asyncio
    async def test_checking_renders_only_loading(self):
        guard, _ = make_guard(AsyncMock())
        content = MagicMock(return_value={"view": "dashboard"})

        assert guard.render(content) == LOADING_VIEW
        content.assert_not_called()

    @pytest.mark.asyncio
    async def test_authenticated_renders_content(self):
        guard, _ = make_guard(AsyncMock(return_value={}))
        await guard.check_session()

        assert guard.render(lambda: {"view": "dashboard"}) == {"view": "dashboard"}

    @pytest.mark.asyncio
    async def test_unauthenticated_renders_nothing(self):
        guard, _ = make_guard(AsyncMock(side_effect=AdminAuthRequired()))
        await guard.check_session()
        content = MagicMock()

        assert guard.render(content) is None
        content.assert_not_called()

"""
Transcript storage tests
"""

import pytest

from storefront.models.chat import ChatMessage, Sender, WidgetState
from storefront.storage.memory_storage import MemoryTranscriptStorage
from storefront.storage.redis_storage import RedisTranscriptStorage


@pytest.mark.asyncio
async def test_messages_are_kept_per_visitor(storage):
    await storage.append_message("v1", ChatMessage.create(Sender.USER, "hi"))
    await storage.append_message("v1", ChatMessage.create(Sender.BOT, "hello"))
    await storage.append_message("v2", ChatMessage.create(Sender.USER, "other"))

    messages = await storage.get_messages("v1")

    assert [m.raw_text for m in messages] == ["hi", "hello"]
    assert len(await storage.get_messages("v2")) == 1


@pytest.mark.asyncio
async def test_clear_only_affects_one_visitor(storage):
    await storage.append_message("v1", ChatMessage.create(Sender.USER, "hi"))
    await storage.append_message("v2", ChatMessage.create(Sender.USER, "hi"))

    await storage.clear_messages("v1")

    assert await storage.get_messages("v1") == []
    assert len(await storage.get_messages("v2")) == 1


@pytest.mark.asyncio
async def test_state_defaults_and_copies(storage):
    state = await storage.get_state("v1")
    assert state == WidgetState()

    state.muted = True
    assert (await storage.get_state("v1")).muted is False

    await storage.save_state("v1", state)
    assert (await storage.get_state("v1")).muted is True


@pytest.mark.asyncio
async def test_memory_storage_health():
    assert await MemoryTranscriptStorage().health_check() is True


@pytest.mark.asyncio
async def test_redis_storage_requires_connect():
    storage = RedisTranscriptStorage(redis_url="redis://localhost:6379/0")

    with pytest.raises(RuntimeError):
        await storage.get_messages("v1")
    assert await storage.health_check() is False


class TestMemoryExpiry:

    @pytest.mark.asyncio
    async def test_idle_visitors_expire(self, clock):
        storage = MemoryTranscriptStorage(ttl_seconds=60, clock=clock)
        for i in range(50):
            await storage.append_message(f"v{i}", ChatMessage.create(Sender.USER, "hi"))
            await storage.save_state(f"v{i}", WidgetState(muted=True))
        assert len(storage) == 50

        clock.advance(60)

        assert await storage.get_messages("v0") == []
        assert await storage.get_state("v0") == WidgetState()
        assert len(storage) == 0

    @pytest.mark.asyncio
    async def test_write_refreshes_expiry(self, clock):
        storage = MemoryTranscriptStorage(ttl_seconds=60, clock=clock)
        await storage.append_message("v1", ChatMessage.create(Sender.USER, "first"))

        clock.advance(50)
        await storage.append_message("v1", ChatMessage.create(Sender.BOT, "second"))
        clock.advance(50)

        messages = await storage.get_messages("v1")
        assert [m.raw_text for m in messages] == ["first", "second"]

    @pytest.mark.asyncio
    async def test_reads_do_not_refresh_expiry(self, clock):
        storage = MemoryTranscriptStorage(ttl_seconds=60, clock=clock)
        await storage.append_message("v1", ChatMessage.create(Sender.USER, "hi"))

        clock.advance(50)
        assert len(await storage.get_messages("v1")) == 1
        clock.advance(10)

        assert await storage.get_messages("v1") == []

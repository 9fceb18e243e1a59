import asyncio

import pytest

from supportbot.chat import SessionLocks


@pytest.mark.asyncio
async def test_same_session_is_serialized():
    locks = SessionLocks()
    events = []

    async def worker(tag: str):
        async with locks.hold("s1"):
            events.append(f"{tag}-start")
            await asyncio.sleep(0.01)
            events.append(f"{tag}-end")

    await asyncio.gather(worker("a"), worker("b"))

    assert events == ["a-start", "a-end", "b-start", "b-end"]
    assert len(locks) == 0


@pytest.mark.asyncio
async def test_different_sessions_run_concurrently():
    locks = SessionLocks()
    inside = asyncio.Event()
    release = asyncio.Event()

    async def first():
        async with locks.hold("s1"):
            inside.set()
            await release.wait()

    task = asyncio.create_task(first())
    await inside.wait()

    async with locks.hold("s2"):
        assert len(locks) == 2

    release.set()
    await task
    assert len(locks) == 0


@pytest.mark.asyncio
async def test_lock_released_on_error():
    locks = SessionLocks()

    with pytest.raises(RuntimeError):
        async with locks.hold("s1"):
            raise RuntimeError("boom")

    assert len(locks) == 0
    async with locks.hold("s1"):
        pass

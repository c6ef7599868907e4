"""Tests for KeyedLock."""

import asyncio

from dircache.cache.locks import KeyedLock


class TestKeyedLock:
    async def test_same_key_is_serialized(self):
        locks = KeyedLock()
        order = []

        async def worker(label, hold):
            async with locks.acquire("a"):
                order.append(f"{label}-in")
                await hold.wait()
                order.append(f"{label}-out")

        first_hold, second_hold = asyncio.Event(), asyncio.Event()
        first = asyncio.create_task(worker("first", first_hold))
        await asyncio.sleep(0)
        second = asyncio.create_task(worker("second", second_hold))
        await asyncio.sleep(0)

        assert order == ["first-in"]
        assert locks.locked("a")

        first_hold.set()
        second_hold.set()
        await asyncio.gather(first, second)

        assert order == ["first-in", "first-out", "second-in", "second-out"]

    async def test_different_keys_are_independent(self):
        locks = KeyedLock()
        hold = asyncio.Event()

        async def blocker():
            async with locks.acquire("a"):
                await hold.wait()

        task = asyncio.create_task(blocker())
        await asyncio.sleep(0)

        async with locks.acquire("b"):
            assert locks.locked("b")
            assert locks.locked("a")

        hold.set()
        await task

    async def test_lock_is_dropped_when_unused(self):
        locks = KeyedLock()

        async with locks.acquire("a"):
            assert len(locks) == 1

        assert len(locks) == 0
        assert not locks.locked("a")

    async def test_lock_is_kept_while_a_waiter_remains(self):
        locks = KeyedLock()
        first_hold, second_hold = asyncio.Event(), asyncio.Event()

        async def holder(hold):
            async with locks.acquire("a"):
                await hold.wait()

        first = asyncio.create_task(holder(first_hold))
        await asyncio.sleep(0)
        second = asyncio.create_task(holder(second_hold))
        await asyncio.sleep(0)

        first_hold.set()
        await first
        assert len(locks) == 1

        second_hold.set()
        await second
        assert len(locks) == 0

    async def test_lock_is_released_when_body_raises(self):
        locks = KeyedLock()

        try:
            async with locks.acquire("a"):
                raise RuntimeError("boom")
        except RuntimeError:
            pass

        assert len(locks) == 0
        async with locks.acquire("a"):
            assert locks.locked("a")

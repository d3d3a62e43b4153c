"""Tests for Waiter sleeps and bounded polling."""

import pytest

from formfiller.components.utils.waiter import Waiter
from tests.fake_tree import VirtualWaiter


class TestWaiterPoll:
    @pytest.mark.asyncio
    async def test_truthy_attempt_returns_without_sleeping(self):
        waiter = VirtualWaiter()
        calls = []

        async def attempt():
            calls.append(1)
            return "node"

        assert await waiter.poll(attempt, timeout_ms=1000) == "node"
        assert calls == [1]
        assert waiter.sleeps == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("timeout_ms", [None, 0])
    async def test_no_timeout_is_single_pass(self, timeout_ms):
        waiter = VirtualWaiter()
        calls = []

        async def attempt():
            calls.append(1)
            return None

        assert await waiter.poll(attempt, timeout_ms=timeout_ms) is None
        assert calls == [1]
        assert waiter.sleeps == []

    @pytest.mark.asyncio
    async def test_gives_up_at_deadline(self):
        waiter = VirtualWaiter(poll_interval_ms=100)
        calls = []

        async def attempt():
            calls.append(waiter.now_ms())
            return None

        assert await waiter.poll(attempt, timeout_ms=250) is None
        assert waiter.sleeps == [100, 100, 50]
        assert calls == [0, 100, 200, 250]

    @pytest.mark.asyncio
    async def test_returns_once_attempt_succeeds(self):
        waiter = VirtualWaiter(poll_interval_ms=100)
        box = {}
        waiter.at(300, lambda: box.update(found="late node"))

        async def attempt():
            return box.get("found")

        assert await waiter.poll(attempt, timeout_ms=3000) == "late node"
        assert waiter.now_ms() == 300

    @pytest.mark.asyncio
    async def test_interval_override(self):
        waiter = VirtualWaiter(poll_interval_ms=100)

        async def attempt():
            return None

        await waiter.poll(attempt, timeout_ms=100, interval_ms=25)
        assert waiter.sleeps == [25, 25, 25, 25]


class TestRealWaiter:
    def test_rejects_non_positive_interval(self):
        with pytest.raises(ValueError):
            Waiter(poll_interval_ms=0)

    @pytest.mark.asyncio
    async def test_sleep_and_poll_on_event_loop(self):
        waiter = Waiter(poll_interval_ms=5)
        start = waiter.now_ms()
        await waiter.sleep(0)
        await waiter.sleep(10)
        assert waiter.now_ms() - start >= 9

        async def attempt():
            return None

        assert await waiter.poll(attempt, timeout_ms=20) is None

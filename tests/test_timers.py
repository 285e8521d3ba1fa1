"""Tests for the single-slot debouncer."""

import asyncio

from giphyblock.editor.timers import Debouncer


def counter():
    calls = {"n": 0}

    async def action():
        calls["n"] += 1

    return calls, action


async def test_burst_fires_once():
    calls, action = counter()
    d = Debouncer(0.05, action)
    for _ in range(5):
        d.schedule()
        await asyncio.sleep(0.01)
    assert calls["n"] == 0
    assert d.pending
    await asyncio.sleep(0.1)
    assert calls["n"] == 1
    assert not d.pending


async def test_separate_windows_fire_separately():
    calls, action = counter()
    d = Debouncer(0.02, action)
    d.schedule()
    await asyncio.sleep(0.06)
    d.schedule()
    await asyncio.sleep(0.06)
    assert calls["n"] == 2


async def test_cancel_prevents_fire():
    calls, action = counter()
    d = Debouncer(0.02, action)
    d.schedule()
    d.cancel()
    await asyncio.sleep(0.05)
    assert calls["n"] == 0


async def test_reschedule_does_not_cancel_running_action():
    started = asyncio.Event()
    release = asyncio.Event()
    finished = []

    async def slow():
        started.set()
        await release.wait()
        finished.append(True)

    d = Debouncer(0.01, slow)
    d.schedule()
    await started.wait()
    d.schedule()
    d.cancel()
    release.set()
    await asyncio.sleep(0.02)
    assert finished == [True]


async def test_close_cancels_pending_and_running():
    started = asyncio.Event()
    finished = []

    async def slow():
        started.set()
        await asyncio.sleep(1)
        finished.append(True)

    d = Debouncer(0.01, slow)
    d.schedule()
    await started.wait()
    await d.close()
    assert finished == []

    # Closed debouncers ignore new schedules
    d.schedule()
    assert not d.pending


async def test_failing_action_is_logged_not_raised(caplog):
    async def broken():
        raise RuntimeError("boom")

    d = Debouncer(0.01, broken, name="broken")
    d.schedule()
    await asyncio.sleep(0.05)
    assert "Debounced action broken failed" in caplog.text

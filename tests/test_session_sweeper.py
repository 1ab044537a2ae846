"""
Tests for the background session sweep task.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from screen_relay.tasks.session_sweeper import session_sweeper_task


@pytest.mark.asyncio
async def test_sweeper_expires_idle_sessions(registry, clock):
    """The task periodically removes sessions past the idle threshold."""
    session_id = await registry.create()
    clock.advance(61)

    task = asyncio.create_task(session_sweeper_task(registry, interval=0.01))
    try:
        for _ in range(100):
            if not registry.status(session_id).exists:
                break
            await asyncio.sleep(0.01)
    finally:
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)

    assert registry.status(session_id).exists is False


@pytest.mark.asyncio
async def test_sweeper_keeps_active_sessions(registry, clock):
    """Sessions within the threshold survive several sweeps."""
    session_id = await registry.create()
    clock.advance(30)

    task = asyncio.create_task(session_sweeper_task(registry, interval=0.01))
    await asyncio.sleep(0.05)
    task.cancel()
    await asyncio.gather(task, return_exceptions=True)

    assert registry.status(session_id).exists is True


@pytest.mark.asyncio
async def test_sweeper_continues_after_error():
    """An error in one sweep is logged and the loop keeps going."""
    registry = MagicMock()
    registry.sweep_expired = AsyncMock(
        side_effect=[Exception("boom"), [], []]
    )

    with patch("screen_relay.tasks.session_sweeper.TASK_ERROR_BACKOFF_SECONDS", 0):
        task = asyncio.create_task(session_sweeper_task(registry, interval=0))
        for _ in range(100):
            if registry.sweep_expired.await_count >= 3:
                break
            await asyncio.sleep(0.01)
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)

    assert registry.sweep_expired.await_count >= 3


@pytest.mark.asyncio
async def test_sweeper_stops_on_cancel(registry):
    """Cancellation ends the task cleanly."""
    task = asyncio.create_task(session_sweeper_task(registry, interval=10))
    await asyncio.sleep(0)

    task.cancel()
    await asyncio.wait_for(asyncio.gather(task, return_exceptions=True), 1)

    assert task.done()

from __future__ import annotations

import asyncio

from conftest import FakeTimer

from dotlive.render.scheduler import DebounceScheduler
from dotlive.render.status import DONE, StatusDisplay


def test_burst_of_triggers_fires_once_after_last(timer: FakeTimer) -> None:
    calls: list[float] = []
    scheduler = DebounceScheduler(1.5, timer=timer)

    for _ in range(5):
        scheduler.schedule(lambda: calls.append(timer.now))
        timer.advance(0.1)

    # Last trigger happened at t=0.4; the quiet period ends at t=1.9.
    timer.advance(1.3)
    assert calls == []
    assert scheduler.pending()

    timer.advance(0.1)
    assert len(calls) == 1
    assert abs(calls[0] - 1.9) < 1e-9
    assert not scheduler.pending()


def test_latest_trigger_wins(timer: FakeTimer) -> None:
    calls: list[str] = []
    scheduler = DebounceScheduler(1.5, timer=timer)

    scheduler.schedule(lambda: calls.append("first"))
    scheduler.schedule(lambda: calls.append("second"))
    timer.advance(1.5)

    assert calls == ["second"]


def test_channels_are_independent(timer: FakeTimer) -> None:
    calls: list[str] = []
    scheduler = DebounceScheduler(1.0, timer=timer)

    scheduler.schedule(lambda: calls.append("edit"))
    scheduler.schedule(lambda: calls.append("other"), channel="other")
    timer.advance(1.0)

    assert sorted(calls) == ["edit", "other"]


def test_cancel_disarms_pending_trigger(timer: FakeTimer) -> None:
    calls: list[str] = []
    scheduler = DebounceScheduler(1.0, timer=timer)

    scheduler.schedule(lambda: calls.append("x"))
    assert scheduler.cancel() is True
    assert scheduler.cancel() is False
    timer.advance(5)

    assert calls == []


def test_coroutine_triggers_run_as_tasks(timer: FakeTimer) -> None:
    ran: list[str] = []

    async def trigger() -> None:
        ran.append("rendered")

    async def scenario() -> None:
        scheduler = DebounceScheduler(1.5, timer=timer)
        scheduler.schedule(trigger)
        timer.advance(1.5)
        await asyncio.sleep(0)

    asyncio.run(scenario())
    assert ran == ["rendered"]


def test_scheduler_uses_running_loop_by_default() -> None:
    ran: list[str] = []

    async def scenario() -> None:
        scheduler = DebounceScheduler(0.01)
        scheduler.schedule(lambda: ran.append("x"))
        scheduler.schedule(lambda: ran.append("y"))
        await asyncio.sleep(0.05)

    asyncio.run(scenario())
    assert ran == ["y"]


def test_status_auto_clears(timer: FakeTimer) -> None:
    status = StatusDisplay(timer=timer)

    status.show(DONE, 500)
    assert status.text == DONE
    timer.advance(0.499)
    assert status.text == DONE
    timer.advance(0.001)
    assert status.text == ""


def test_status_new_message_cancels_pending_clear(timer: FakeTimer) -> None:
    status = StatusDisplay(timer=timer)

    status.show("done", 500)
    timer.advance(0.3)
    status.show("rendering...")
    timer.advance(1.0)

    assert status.text == "rendering..."


def test_status_without_timeout_persists(timer: FakeTimer) -> None:
    status = StatusDisplay(timer=timer)
    status.show("rendering...")
    timer.advance(100)
    assert status.text == "rendering..."

import asyncio
import threading

import pytest

from ringterm.daemon.manager import EventPump


@pytest.mark.asyncio
async def test_events_applied_in_arrival_order():
    pump = EventPump()
    seen = []
    pump.on_event = seen.append
    for i in range(5):
        pump.post_nowait(i)
    pump.close()
    await pump.run()
    assert seen == [0, 1, 2, 3, 4]
    assert pump.processed == 5


@pytest.mark.asyncio
async def test_handler_error_is_reported_and_loop_continues():
    pump = EventPump()
    seen = []
    status = []

    def on_event(ev):
        if ev == "boom":
            raise RuntimeError("bad payload")
        seen.append(ev)

    pump.on_event = on_event
    pump.on_status = status.append
    for ev in ("a", "boom", "b"):
        pump.post_nowait(ev)
    pump.close()
    await pump.run()
    assert seen == ["a", "b"]
    assert "event error: str: RuntimeError: bad payload" in status
    assert status[-1] == "stopped"


@pytest.mark.asyncio
async def test_should_stop_ends_loop_early():
    pump = EventPump()
    seen = []
    status = []
    pump.on_event = seen.append
    pump.on_status = status.append
    pump.should_stop = lambda: "quit" in seen
    for ev in ("x", "quit", "never"):
        pump.post_nowait(ev)
    await pump.run()
    assert seen == ["x", "quit"]
    assert status == ["session ended", "stopped"]


@pytest.mark.asyncio
async def test_post_from_other_thread():
    pump = EventPump()
    seen = []
    pump.on_event = seen.append
    runner = asyncio.create_task(pump.run())
    await asyncio.sleep(0)

    def producer():
        for i in range(3):
            pump.post(i)
        pump.close()

    t = threading.Thread(target=producer)
    t.start()
    await asyncio.wait_for(runner, timeout=2)
    t.join()
    assert seen == [0, 1, 2]


@pytest.mark.asyncio
async def test_stop_now_skips_nothing_already_applied():
    pump = EventPump()
    seen = []

    def on_event(ev):
        seen.append(ev)
        if ev == 1:
            pump.stop_now()

    pump.on_event = on_event
    for ev in (1, 2, 3):
        pump.post_nowait(ev)
    await pump.run()
    assert seen == [1]

from __future__ import annotations

import asyncio
from typing import Callable, Optional

_STOP = object()


class EventPump:
    """Single consumer for daemon notifications and key presses.

    Producers (the daemon binding thread, the terminal reader) call `post`;
    `run` applies events one at a time, in arrival order, through `on_event`.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self.queue: asyncio.Queue = asyncio.Queue()
        self._loop = loop
        self.on_event: Optional[Callable[[object], None]] = None
        self.on_status: Optional[Callable[[str], None]] = None
        self.should_stop: Optional[Callable[[], bool]] = None
        self._stop = False
        self.processed = 0

    def post(self, event: object) -> None:
        """Queue an event from any thread."""
        loop = self._loop
        if loop is None:
            self.queue.put_nowait(event)
            return
        loop.call_soon_threadsafe(self.queue.put_nowait, event)

    def post_nowait(self, event: object) -> None:
        self.queue.put_nowait(event)

    async def run(self) -> None:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        try:
            while not self._stop:
                event = await self.queue.get()
                if event is _STOP:
                    break
                self._apply(event)
                if self.should_stop and self.should_stop():
                    self._status("session ended")
                    break
        finally:
            self._status("stopped")

    def _apply(self, event: object) -> None:
        if not self.on_event:
            return
        try:
            self.on_event(event)
        except Exception as e:
            self._status(f"event error: {type(event).__name__}: {type(e).__name__}: {e}")
        self.processed += 1

    def _status(self, text: str) -> None:
        if self.on_status:
            try:
                self.on_status(text)
            except Exception:
                pass

    def close(self) -> None:
        """Stop once the events already queued have been applied."""
        self.post(_STOP)

    def stop_now(self) -> None:
        self._stop = True
        self.post(_STOP)

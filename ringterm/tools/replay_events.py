from __future__ import annotations

import argparse
import asyncio
import json
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

from ..controllers.session import Session
from ..daemon.events import KeyPressed
from ..daemon.manager import EventPump
from ..logging.log_writer import LogWriter
from .scripted_daemon import ScriptedDaemon, ScriptEvent, load_script

DEFAULT_STATE: Dict[str, Any] = {
    "accounts": [{"id": "acc1", "alias": "me", "username": "me"}],
}


def typed(text: str) -> List[KeyPressed]:
    keys = [KeyPressed("char", c) for c in text]
    keys.append(KeyPressed("enter"))
    return keys


class ReplayDriver:
    """Feed a script of daemon events and key presses through a live session."""

    def __init__(
        self,
        session: Session,
        pump: EventPump,
        script: List[ScriptEvent],
        on_status: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.session = session
        self.pump = pump
        self.script = script
        self.status: List[str] = []
        self.on_status = on_status
        pump.on_event = session.dispatch
        pump.on_status = self._status
        pump.should_stop = lambda: session.should_quit

    def _status(self, text: str) -> None:
        self.status.append(text)
        if self.on_status:
            self.on_status(text)

    async def _feed(self, speed: float) -> None:
        for item in self.script:
            if item.delay_ms and speed > 0:
                await asyncio.sleep(item.delay_ms / 1000.0 / speed)
            events = item.event
            if isinstance(events, dict):
                events = typed(str(events.get("text", "")))
            else:
                events = [events]
            for ev in events:
                self.pump.post_nowait(ev)
            # let daemon replies to this step queue up before the next one
            while not self.pump.queue.empty():
                await asyncio.sleep(0)
        self.pump.close()

    async def run(self, speed: float = 0.0) -> None:
        feeder = asyncio.create_task(self._feed(speed))
        await self.pump.run()
        feeder.cancel()
        await asyncio.gather(feeder, return_exceptions=True)


def render(session: Session, console: Optional[Console] = None) -> None:
    console = console or Console()
    table = Table(title=f"account: {session.account.display_name or '(none)'}", expand=True)
    table.add_column("#", justify="right", width=3)
    table.add_column("Channel", style="bold")
    table.add_column("Kind", width=14)
    table.add_column("Unread", justify="right", width=6)
    table.add_column("Members", justify="right", width=7)
    for i, ch in enumerate(session.channels):
        marker = "▶" if i == session.channels.selected else ""
        table.add_row(
            f"{marker}{i}",
            ch.label,
            ch.kind.value,
            str(ch.unread_messages),
            str(len(ch.members)),
        )
    console.print(table)
    selected = session.channels.selected_channel()
    if selected is None:
        return
    for msg in selected.messages:
        stamp = time.strftime("%H:%M:%S", time.localtime(msg.arrived_at))
        line = Text(f"{stamp} ", style="dim")
        if msg.info:
            line.append(msg.body, style="italic yellow")
        else:
            line.append(f"{msg.author}: ", style="cyan")
            line.append(msg.body)
        console.print(line)


def load_state(path: Optional[Path]) -> Dict[str, Any]:
    if path is None:
        return dict(DEFAULT_STATE)
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


async def replay(
    script_path: Path,
    state_path: Optional[Path] = None,
    config: Optional[Dict[str, Any]] = None,
    verbose: bool = False,
    speed: float = 0.0,
    on_status: Optional[Callable[[str], None]] = None,
) -> Session:
    config = config or {}
    daemon = ScriptedDaemon.from_dict(load_state(state_path))
    log_cfg = config.get("logging", {})
    log = LogWriter(log_cfg.get("dir"), enabled=verbose or bool(log_cfg.get("enabled")))
    pump = EventPump()
    daemon.emit = pump.post_nowait
    session = Session.start(daemon, config, log)
    session.on_status = on_status
    driver = ReplayDriver(session, pump, load_script(script_path), on_status)
    await driver.run(speed)
    return session


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(prog="ringterm-replay")
    ap.add_argument("script", type=Path)
    ap.add_argument("--state", type=Path, default=None)
    ap.add_argument("--speed", type=float, default=0.0, help="0 = ignore script delays")
    ap.add_argument("--verbose", action="store_true")
    args = ap.parse_args(argv)
    if not args.script.exists():
        print(f"Script not found: {args.script}")
        return 2
    on_status = print if args.verbose else None
    session = asyncio.run(
        replay(args.script, args.state, verbose=args.verbose, speed=args.speed, on_status=on_status)
    )
    render(session)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

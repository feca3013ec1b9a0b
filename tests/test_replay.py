from pathlib import Path

import pytest
from rich.console import Console

from ringterm.daemon.events import KeyPressed, MessageReceived
from ringterm.tools.replay_events import render, replay, typed
from ringterm.tools.scripted_daemon import ScriptedDaemon, load_script, parse_script_line

from .conftest import EVE

FIXTURES = Path(__file__).parent / "fixtures"
TRUSTED = "b" * 40


def test_parse_script_line():
    assert parse_script_line("") is None
    assert parse_script_line("# comment") is None
    ev = parse_script_line('15 {"event": "KeyPressed", "key": "down"}')
    assert ev.delay_ms == 15
    assert ev.event == KeyPressed("down")
    typed_line = parse_script_line('0 {"event": "Type", "text": "/new"}')
    assert typed_line.event == {"event": "Type", "text": "/new"}


def test_load_script_reports_bad_line(tmp_path):
    script = tmp_path / "bad.script"
    script.write_text('0 {"event": "Nope"}\n', encoding="utf-8")
    with pytest.raises(ValueError, match="bad.script:1"):
        load_script(script)


def test_load_fixture_script():
    events = load_script(FIXTURES / "new_conversation.script")
    assert len(events) == 8
    assert isinstance(events[1].event, MessageReceived)


def test_typed_appends_enter():
    assert typed("hi") == [KeyPressed("char", "h"), KeyPressed("char", "i"), KeyPressed("enter")]


@pytest.mark.asyncio
async def test_replay_scenario():
    status = []
    session = await replay(
        FIXTURES / "new_conversation.script",
        FIXTURES / "state.json",
        on_status=status.append,
    )
    assert session.should_quit
    assert session.channels.ids() == ["", TRUSTED, "conv1", "room1"]
    assert session.channels.selected == 0
    daemon = session.daemon
    assert isinstance(daemon, ScriptedDaemon)
    assert daemon.calls_named("add_conversation_member") == [("acc1", "conv1", EVE)]
    assert session.profiles.display_name(EVE) == "eve"
    assert session.channels.get("never") is None
    assert status[-2:] == ["session ended", "stopped"]


@pytest.mark.asyncio
async def test_render_lists_channels():
    session = await replay(FIXTURES / "new_conversation.script", FIXTURES / "state.json")
    console = Console(record=True, width=120)
    render(session, console)
    out = console.export_text()
    assert "account: me" in out
    assert "conv1" in out
    assert "Book club" in out


@pytest.mark.asyncio
async def test_replay_logging_follows_config(tmp_path):
    script = FIXTURES / "new_conversation.script"
    state = FIXTURES / "state.json"
    off_dir = tmp_path / "off"
    session = await replay(script, state, {"logging": {"enabled": False, "dir": str(off_dir)}})
    assert session.log is not None and not session.log.enabled
    assert not off_dir.exists()

    on_dir = tmp_path / "on"
    session = await replay(script, state, {"logging": {"enabled": True, "dir": str(on_dir)}})
    assert session.log.enabled
    assert "anyone here?" in (on_dir / "acc1" / "room1.log").read_text(encoding="utf-8")


@pytest.mark.asyncio
async def test_replay_verbose_enables_logging(tmp_path):
    log_dir = tmp_path / "logs"
    await replay(
        FIXTURES / "new_conversation.script",
        FIXTURES / "state.json",
        {"logging": {"enabled": False, "dir": str(log_dir)}},
        verbose=True,
    )
    assert (log_dir / "acc1" / "control.log").exists()

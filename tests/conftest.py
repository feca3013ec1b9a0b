from __future__ import annotations

import pytest

from ringterm.controllers.session import Session
from ringterm.daemon.client import Account
from ringterm.tools.scripted_daemon import ScriptedDaemon

ALICE = "a" * 40
BOB = "b" * 40
EVE = "e" * 40


@pytest.fixture
def daemon() -> ScriptedDaemon:
    return ScriptedDaemon(
        accounts=[Account(id="acc1", alias="Me", username="me")],
        conversations={"acc1": ["room1", "room2"]},
        details={"acc1": {"Account.alias": "Me", "Account.displayName": "Me"}},
        infos={"room1": {"title": "First room"}},
        members={
            "room1": [{"uri": ALICE, "role": "admin"}, {"uri": BOB, "role": "member"}],
            "room2": [{"uri": BOB, "role": "member"}],
        },
    )


@pytest.fixture
def config(tmp_path) -> dict:
    return {
        "ui": {"welcome": "hello"},
        "downloads": {"dir": str(tmp_path / "downloads")},
        "profiles": {"dir": str(tmp_path / "profiles")},
        "logging": {"enabled": False, "dir": str(tmp_path / "logs")},
    }


@pytest.fixture
def session(daemon, config) -> Session:
    s = Session.start(daemon, config)
    daemon.calls.clear()
    return s


def type_line(session: Session, text: str) -> None:
    for c in text:
        session.handle_character(c)
    session.handle_enter()


def select(session: Session, channel_id: str) -> None:
    idx = session.channels.index_of(channel_id)
    assert idx is not None
    session.channels.select(idx)

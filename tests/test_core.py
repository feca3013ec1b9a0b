import pytest

from ringterm.core.models import Channel, Member
from ringterm.core.presence import PresenceTracker
from ringterm.core.profiles import ProfileManager, profile_filename
from ringterm.core.transfers import TransferManager, status_label
from ringterm.daemon.events import IncomingTrustRequest, event_from_dict
from ringterm.logging.log_writer import LogWriter
from ringterm.tools.scripted_daemon import ScriptedDaemon


def test_status_labels():
    assert status_label(5) == "ongoing"
    assert status_label(6) == "finished"
    assert status_label(9) == "not downloaded"
    assert status_label(0) == "not downloaded"


def test_transfer_paths_keyed_by_string_tid():
    t = TransferManager()
    t.set_file_path("acc1", "room1", 7, "/tmp/x")
    assert t.path("acc1", "room1", "7") == "/tmp/x"
    assert t.path("acc1", "room2", "7") is None


def test_presence_entries_appear_on_track():
    daemon = ScriptedDaemon()
    p = PresenceTracker(daemon)
    p.track("acc1", [Member("x"), Member("y")])
    assert len(p) == 2
    assert p.is_online("x") is False
    p.update("x", True)
    p.untrack("acc1", [Member("x")])
    # untracking keeps the last known state
    assert p.is_online("x") is True
    assert daemon.calls_named("subscribe_presence")[-1] == ("acc1", "x", False)


def test_profiles_prefer_vcard_name(tmp_path):
    acc_dir = tmp_path / "acc1"
    acc_dir.mkdir()
    (acc_dir / profile_filename("u1")).write_text("FN;CHARSET=UTF-8:Uma\n", encoding="utf-8")
    pm = ProfileManager(tmp_path)
    pm.load_from_account("acc1")
    pm.username_found("u1", "uma42")
    pm.username_found("u2", "vic")
    assert pm.display_name("u1") == "Uma"
    assert pm.display_name("u2") == "vic"
    assert pm.display_name("u3") == "u3"
    assert pm.knows("u2") and not pm.knows("u3")


def test_profiles_without_directory():
    pm = ProfileManager(None)
    pm.load_from_account("acc1")
    assert pm.account_dir("acc1") is None


def test_channel_update_infos_keeps_missing_fields():
    ch = Channel.control()
    ch.update_infos({"title": "T", "description": "D"})
    ch.update_infos({"title": "T2"})
    assert (ch.title, ch.description) == ("T2", "D")
    assert ch.label == "T2"


def test_event_from_dict():
    ev = event_from_dict(
        {"event": "IncomingTrustRequest", "account_id": "a", "from": "x", "payload": "hi"}
    )
    assert ev == IncomingTrustRequest("a", "x", b"hi")
    with pytest.raises(ValueError):
        event_from_dict({"event": "Nope"})


def test_log_writer_paths(tmp_path):
    log = LogWriter(tmp_path)
    log.append("acc1", "", "hello", ts=1700000000)
    log.append("acc1", "room1", "hi")
    assert log.path_for("acc1", "").name == "control.log"
    assert "hello" in log.path_for("acc1", "").read_text(encoding="utf-8")
    assert log.path_for("acc1", "room1").exists()


def test_disabled_log_writer_writes_nothing(tmp_path):
    log = LogWriter(tmp_path / "logs", enabled=False)
    log.append("acc1", "room1", "hi")
    assert not (tmp_path / "logs").exists()


def test_router_writes_event_log(daemon, config, tmp_path):
    from ringterm.controllers.session import Session
    from ringterm.daemon.events import ConversationRequest, MessageReceived

    log = LogWriter(tmp_path / "logs")
    session = Session.start(daemon, config, log)
    session.dispatch(MessageReceived("acc1", "room1", {"type": "text/plain", "body": "yo"}))
    session.dispatch(ConversationRequest("acc1", "inv1"))
    assert "incoming:" in log.path_for("acc1", "room1").read_text(encoding="utf-8")
    assert "ConversationRequest" in log.path_for("acc1", "inv1").read_text(encoding="utf-8")

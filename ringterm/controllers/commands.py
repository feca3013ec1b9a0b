from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Dict

from ..core.models import Channel, ChannelKind
from ..core.pending import FollowUp, PendingLookup, split_username
from ..daemon.client import ImportType

if TYPE_CHECKING:
    from .session import Session

# send_message flag: not a reply, not an edit
PLAIN_MESSAGE = 0

CONTROL_HELP = [
    "/help: Show this help",
    "/new: Start a new conversation",
    "/msg <id|username>: Start a conversation with someone",
    "/list: list accounts",
    "/switch <id>: switch to an account",
    "/add: Add a new account",
    "/rm <id>: Remove an account",
    "/link <pin> [password]: Link an account via a PIN",
    "/import <file> [password]: Import an account from a backup",
    "/get [key]: get account details (if key specified, only get key)",
    "/set <key> <value>: set account detail",
    "/exit: quit",
]

GROUP_HELP = [
    "/help: Show this help",
    "/leave: Leave this conversation",
    "/invite [hash|username]: Invite somebody to the conversation",
    "/kick [hash|username]: Kick someone from the conversation",
    "/title [title]: Change the title of the room",
    "/description [description]: Change the description of the room",
    "/send [path]: Send a file to the conversation",
    "/accept [tid] <path>: Accept a file transfer",
    "/cancel [tid]: Cancel a file transfer",
    "/exit: quit",
]

REQUEST_HELP = [
    "/help: Show this help",
    "/leave: Decline this request",
    "/join: Accepts the request",
]


@dataclass
class Outcome:
    """What the session does after a line was interpreted."""

    show_msg: bool = True  # echo the raw line in the channel
    done: bool = False  # channel went away; skip echo and bubble-up


def execute(session: "Session", channel: Channel, text: str) -> Outcome:
    if text == "/exit":
        session.should_quit = True
        return Outcome(show_msg=False, done=True)
    cmd, _, arg = text.partition(" ")
    arg = arg.strip()
    if cmd == "/msg":
        return _direct_message(session, channel, arg)
    kind = channel.kind
    if kind is ChannelKind.GENERATED:
        return _control_command(session, channel, cmd, arg)
    if kind is ChannelKind.GROUP:
        return _group_command(session, channel, text, cmd, arg)
    if kind in (ChannelKind.INVITE, ChannelKind.TRUST_REQUEST):
        return _request_command(session, channel, cmd)
    raise ValueError(f"unhandled channel kind: {kind}")


def _usage(channel: Channel, usage: str) -> Outcome:
    channel.info(f"Usage: {usage}")
    return Outcome(show_msg=False)


def _resolve_then(
    session: "Session",
    channel_id: str | None,
    target: str,
    action: FollowUp,
    act_now: Callable[[str], None],
) -> bool:
    """Run `act_now(address)` if `target` is an address, else defer it to a name lookup.

    Returns True when the action was deferred.
    """
    if session.daemon.is_address(target):
        act_now(target)
        return False
    name, name_service = split_username(target)
    if action is FollowUp.REMOVE_FROM_CONVERSATION:
        table = session.pending_rm
    else:
        table = session.out_invite
    table.enqueue(PendingLookup(session.account.id, channel_id, name, action))
    session.daemon.lookup_name(session.account.id, name_service, name)
    return True


# ----- Any channel -----
def _direct_message(session: "Session", channel: Channel, arg: str) -> Outcome:
    if not arg:
        return _usage(channel, "/msg <id|username>")
    account_id = session.account.id
    daemon = session.daemon

    def invite(address: str) -> None:
        daemon.add_contact(account_id, address)
        daemon.send_trust_request(account_id, address, b"")

    deferred = _resolve_then(session, None, arg, FollowUp.INVITE_CONTACT, invite)
    return Outcome(show_msg=not deferred)


# ----- Control channel -----
def _control_command(session: "Session", channel: Channel, cmd: str, arg: str) -> Outcome:
    daemon = session.daemon
    account_id = session.account.id
    parts = arg.split(" ") if arg else []
    if cmd == "/new":
        daemon.start_conversation(account_id)
    elif cmd == "/list":
        for account in daemon.get_account_list():
            channel.info(str(account))
    elif cmd == "/get":
        wanted = parts[0].lower() if parts else ""
        for key, value in daemon.get_account_details(account_id).items():
            if not wanted or wanted == key.lower():
                channel.info(f"{key}: {value}")
        return Outcome(show_msg=False)
    elif cmd == "/set":
        key = parts[0] if parts else ""
        value = parts[1] if len(parts) > 1 else ""
        details: Dict[str, str] = dict(daemon.get_account_details(account_id))
        found = ""
        for existing in details:
            if existing.lower() == key.lower():
                found = existing
        if found:
            details[found] = value
        daemon.set_account_details(account_id, details)
        return Outcome(show_msg=False)
    elif cmd == "/switch":
        if not arg:
            return _usage(channel, "/switch <id>")
        account = daemon.get_account(arg)
        if account.is_null():
            channel.info("Invalid account id.")
        else:
            session.switch_account(account)
    elif cmd == "/add":
        daemon.add_account("", "", ImportType.NONE)
    elif cmd == "/rm":
        if not arg:
            return _usage(channel, "/rm <id>")
        daemon.remove_account(arg)
    elif cmd == "/import":
        if not parts:
            return _usage(channel, "/import <file> [password]")
        password = parts[1] if len(parts) > 1 else ""
        daemon.add_account(parts[0], password, ImportType.BACKUP)
    elif cmd == "/link":
        if not parts:
            return _usage(channel, "/link <pin> [password]")
        password = parts[1] if len(parts) > 1 else ""
        daemon.add_account(parts[0], password, ImportType.NETWORK)
    elif cmd == "/help":
        for line in CONTROL_HELP:
            channel.info(line)
    return Outcome()


# ----- Group conversation -----
def _group_command(
    session: "Session", channel: Channel, text: str, cmd: str, arg: str
) -> Outcome:
    daemon = session.daemon
    account_id = session.account.id
    conv = channel.id
    parts = arg.split(" ") if arg else []
    if cmd == "/leave":
        if daemon.remove_conversation(account_id, conv):
            return Outcome(show_msg=False, done=True)
        channel.info("Cannot remove conversation")
        return Outcome()
    if cmd == "/invite":
        if not arg:
            return _usage(channel, "/invite <id|username>")
        deferred = _resolve_then(
            session,
            conv,
            arg,
            FollowUp.INVITE_TO_CONVERSATION,
            lambda address: daemon.add_conversation_member(account_id, conv, address),
        )
        return Outcome(show_msg=not deferred)
    if cmd == "/kick":
        if not arg:
            return _usage(channel, "/kick <id|username>")
        deferred = _resolve_then(
            session,
            conv,
            arg,
            FollowUp.REMOVE_FROM_CONVERSATION,
            lambda address: daemon.remove_conversation_member(account_id, conv, address),
        )
        return Outcome(show_msg=not deferred)
    if cmd in ("/title", "/description"):
        daemon.update_conversation_infos(account_id, conv, {cmd[1:]: arg})
        return Outcome(show_msg=False)
    if cmd == "/send":
        if not parts:
            return _usage(channel, "/send <path>")
        daemon.send_file(account_id, conv, parts[0], Path(parts[0]).name, "")
        return Outcome(show_msg=False)
    if cmd == "/accept":
        if not parts:
            return _usage(channel, "/accept <tid> [path]")
        tid = _parse_tid(parts[0])
        path = parts[1] if len(parts) > 1 else ""
        if not path:
            path = _default_download_path(session, channel, tid)
        if path:
            daemon.accept_file_transfer(account_id, conv, tid, path)
        return Outcome(show_msg=False)
    if cmd == "/cancel":
        if not parts:
            return _usage(channel, "/cancel <tid>")
        daemon.cancel_file_transfer(account_id, conv, _parse_tid(parts[0]))
        return Outcome(show_msg=False)
    if cmd == "/help":
        for line in GROUP_HELP:
            channel.info(line)
        return Outcome()
    # the daemon echoes sent messages back as events
    daemon.send_message(account_id, conv, text, "", PLAIN_MESSAGE)
    return Outcome(show_msg=False)


def _parse_tid(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        return 0


def free_download_path(directory: Path, filename: str) -> Path:
    """First of name, name_1, name_2, ... that does not exist yet in `directory`."""
    candidate = directory / filename
    idx = 1
    while candidate.exists():
        candidate = directory / f"{filename}_{idx}"
        idx += 1
    return candidate


def _default_download_path(session: "Session", channel: Channel, tid: int) -> str:
    directory = session.download_dir()
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError:
        channel.info("Cannot accept file")
        return ""
    info = session.daemon.data_transfer_info(session.account.id, channel.id, tid)
    if info is None:
        channel.info("Cannot accept file")
        return ""
    return str(free_download_path(directory, info.display_name))


# ----- Conversation request / trust request -----
def _request_command(session: "Session", channel: Channel, cmd: str) -> Outcome:
    daemon = session.daemon
    account_id = session.account.id
    is_invite = channel.kind is ChannelKind.INVITE
    if cmd == "/leave":
        if is_invite:
            daemon.decline_conversation_request(account_id, channel.id)
        else:
            daemon.discard_trust_request(account_id, channel.channel_type.contact)
        session.drop_request_channel(channel.id)
        return Outcome(show_msg=False, done=True)
    if cmd == "/join":
        if is_invite:
            daemon.accept_conversation_request(account_id, channel.id)
        else:
            daemon.accept_trust_request(account_id, channel.channel_type.contact)
        session.drop_request_channel(channel.id)
        if is_invite:
            control = session.channels.control()
            if control is not None:
                control.info("Syncing… the view will update")
        return Outcome(show_msg=False, done=True)
    for line in REQUEST_HELP:
        channel.info(line)
    return Outcome()


from __future__ import annotations

import shutil
import time
from typing import TYPE_CHECKING, Callable, Dict, Optional

from ..core.models import Channel, ChannelKind, ChannelType, Message
from ..core.pending import FollowUp, PendingLookup
from ..core.profiles import profile_filename
from ..core.transfers import FINISHED, status_label
from ..daemon.events import (
    AccountsChanged,
    ConversationLoaded,
    ConversationReady,
    ConversationRemoved,
    ConversationRequest,
    DataTransferEvent,
    IncomingTrustRequest,
    MessageReceived,
    PresenceChanged,
    ProfileReceived,
    RegisteredNameFound,
    RegistrationStateChanged,
)

if TYPE_CHECKING:
    from .session import Session

PayloadHandler = Callable[[str, Channel, Dict[str, str]], Optional[str]]

MEMBER_BANNERS = {
    "add": "--> | {} has been added",
    "join": "--> | {} joins the conversation",
    "ban": "<-- | {} was banned from the conversation",
    "remove": "<-- | {} leaves the conversation",
}

LOOKUP_FAILED = {
    FollowUp.INVITE_CONTACT: "Cannot invite member",
    FollowUp.INVITE_TO_CONVERSATION: "Cannot invite member",
    FollowUp.REMOVE_FROM_CONVERSATION: "Cannot remove member",
}

MISSED_CALL = "❌ Call missed"


def call_banner(duration_ms: int) -> str:
    secs = int(duration_ms / 1000)
    if secs == 0:
        return MISSED_CALL
    return f"📞 Call with duration: {secs} secs"


def arrival_time(payloads: Dict[str, str]) -> float:
    raw = payloads.get("timestamp", "")
    if not raw:
        return time.time()
    try:
        return float(int(raw))
    except ValueError:
        return 0.0


class EventRouter:
    """Applies daemon notifications to the session.

    Events for another account, or for a channel that is no longer listed,
    are dropped without touching anything.
    """

    def __init__(self, session: "Session"):
        self.session = session
        self._handlers: Dict[type, Callable] = {
            MessageReceived: self.on_message,
            RegistrationStateChanged: self.on_registration_state_changed,
            PresenceChanged: self.on_presence_changed,
            AccountsChanged: self.on_accounts_changed,
            ConversationReady: self.on_conversation_ready,
            ConversationRemoved: self.on_conversation_removed,
            ConversationRequest: self.on_conversation_request,
            IncomingTrustRequest: self.on_incoming_trust_request,
            RegisteredNameFound: self.on_registered_name_found,
            DataTransferEvent: self.on_data_transfer_event,
            ConversationLoaded: self.on_conversation_loaded,
            ProfileReceived: self.on_profile_received,
        }
        self._payload_handlers: Dict[str, PayloadHandler] = {
            "initial": self._initial,
            "text/plain": self._text,
            "application/call-history+json": self._call_history,
            "application/data-transfer+json": self._data_transfer,
            "application/update-profile": self._update_profile,
            "merge": self._merge,
            "member": self._member,
        }

    def route(self, event: object) -> None:
        handler = self._handlers.get(type(event))
        if handler is None:
            self.session.status(f"ignored event: {type(event).__name__}")
            return
        if not isinstance(event, MessageReceived):
            # messages log their own payload line
            self._log(
                getattr(event, "account_id", ""),
                getattr(event, "conversation_id", ""),
                f"event: {event}",
            )
        handler(event)

    def _log(self, account_id: str, conversation_id: str, line: str) -> None:
        log = self.session.log
        if log is not None:
            log.append(account_id, conversation_id, line)

    def _is_current(self, account_id: str) -> bool:
        return account_id == self.session.account.id

    # ----- Messages -----
    def on_message(self, event: MessageReceived, live: bool = True) -> None:
        s = self.session
        payloads = event.payloads
        self._log(event.account_id, event.conversation_id, f"incoming: {payloads}")
        if not self._is_current(event.account_id):
            return
        idx = s.channels.index_of(event.conversation_id)
        if idx is None:
            return
        channel = s.channels.at(idx)
        kind = payloads.get("type")
        if not kind:
            return
        handler = self._payload_handlers.get(kind, self._raw)
        body = handler(event.account_id, channel, payloads)
        if body is None:
            return
        author = s.profiles.display_name(payloads.get("author", ""))
        channel.messages.append(Message(author, body, arrival_time(payloads)))
        if not live:
            return
        if channel is s.channels.selected_channel():
            channel.unread_messages = 0
        else:
            channel.unread_messages += 1
        s.channels.bubble_up(idx)

    def _initial(
        self, account_id: str, channel: Channel, payloads: Dict[str, str]
    ) -> Optional[str]:
        if payloads.get("mode", "") == "0":
            invited = self.session.profiles.display_name(payloads.get("invited", ""))
            return f"--> started a private conversation with {invited}"
        return "--> started the conversation"

    def _text(self, account_id: str, channel: Channel, payloads: Dict[str, str]) -> Optional[str]:
        return payloads.get("body", "")

    def _call_history(
        self, account_id: str, channel: Channel, payloads: Dict[str, str]
    ) -> Optional[str]:
        try:
            duration = int(payloads.get("duration", "0"))
        except ValueError:
            return None
        return call_banner(duration)

    def _data_transfer(
        self, account_id: str, channel: Channel, payloads: Dict[str, str]
    ) -> Optional[str]:
        s = self.session
        tid = payloads.get("tid", "")
        display_name = payloads.get("displayName", "")
        path = s.transfers.path(account_id, channel.id, tid)
        if path is not None:
            return f"<file://{path}>"
        status = "sent"
        try:
            numeric_tid = int(tid)
        except ValueError:
            numeric_tid = 0
        info = s.daemon.data_transfer_info(account_id, channel.id, numeric_tid)
        if info is not None:
            status = status_label(info.last_event)
        return f"<New file transfer with id: {tid} - {display_name} - {status}>"

    def _update_profile(
        self, account_id: str, channel: Channel, payloads: Dict[str, str]
    ) -> Optional[str]:
        channel.update_infos(self.session.daemon.get_conversation_infos(account_id, channel.id))
        return None

    def _merge(self, account_id: str, channel: Channel, payloads: Dict[str, str]) -> Optional[str]:
        return None

    def _member(self, account_id: str, channel: Channel, payloads: Dict[str, str]) -> Optional[str]:
        s = self.session
        action = payloads.get("action")
        uri = payloads.get("uri")
        if action is None or uri is None:
            return None
        banner = MEMBER_BANNERS.get(action)
        body = banner.format(s.profiles.display_name(uri)) if banner else None
        channel.members = s.conversation_members(account_id, channel.id)
        s.presence.track(s.account.id, channel.members)
        return body

    def _raw(self, account_id: str, channel: Channel, payloads: Dict[str, str]) -> Optional[str]:
        return repr(dict(payloads))

    def on_conversation_loaded(self, event: ConversationLoaded) -> None:
        for payloads in reversed(event.messages):
            self.on_message(
                MessageReceived(event.account_id, event.conversation_id, payloads), live=False
            )

    # ----- Accounts -----
    def on_registration_state_changed(self, event: RegistrationStateChanged) -> None:
        s = self.session
        if event.state != "REGISTERED" or not s.account.is_null():
            return
        account = s.daemon.select_account()
        if not account.is_null():
            s.load_account(account)

    def on_presence_changed(self, event: PresenceChanged) -> None:
        if self._is_current(event.account_id):
            self.session.presence.update(event.uri, event.online)

    def on_accounts_changed(self, event: AccountsChanged) -> None:
        s = self.session
        if not s.account.is_null():
            if any(a.id == s.account.id for a in s.daemon.get_account_list()):
                return
        s.load_account(s.daemon.select_account())

    def on_profile_received(self, event: ProfileReceived) -> None:
        s = self.session
        dest_dir = s.profiles.account_dir(event.account_id)
        if dest_dir is None:
            return
        dest = dest_dir / profile_filename(event.from_)
        try:
            dest_dir.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(event.path, dest)
        except OSError as e:
            s.status(f"cannot store profile for {event.from_}: {e}")
            return
        s.profiles.load_profile(dest)
        s.daemon.lookup_address(event.account_id, "", event.from_)

    # ----- Conversations -----
    def on_conversation_ready(self, event: ConversationReady) -> None:
        s = self.session
        if not self._is_current(event.account_id):
            return
        s.channels.select(0)
        s.channels.remove_by_id(event.conversation_id)
        channel = Channel(id=event.conversation_id, channel_type=ChannelType.group())
        channel.update_infos(s.daemon.get_conversation_infos(event.account_id, channel.id))
        channel.members = s.conversation_members(event.account_id, channel.id)
        s.channels.insert_and_bubble(channel)
        s.channels.select(0)

    def on_conversation_removed(self, event: ConversationRemoved) -> None:
        s = self.session
        if not self._is_current(event.account_id):
            return
        selected = s.channels.selected_channel()
        if selected is not None and selected.id == event.conversation_id:
            s.untrack_current_conversation()
            s.channels.select(0)
        s.channels.remove_by_id(event.conversation_id)

    def on_conversation_request(self, event: ConversationRequest) -> None:
        s = self.session
        if not self._is_current(event.account_id):
            return
        s.channels.insert_and_bubble(
            Channel(id=event.conversation_id, channel_type=ChannelType.invite())
        )
        s.channels.select(0)

    def on_incoming_trust_request(self, event: IncomingTrustRequest) -> None:
        s = self.session
        if not self._is_current(event.account_id):
            return
        s.channels.insert_and_bubble(
            Channel(id=event.from_, channel_type=ChannelType.trust_request(event.from_))
        )
        s.channels.select(0)

    # ----- Name lookups -----
    def on_registered_name_found(self, event: RegisteredNameFound) -> None:
        s = self.session
        s.profiles.username_found(event.address, event.name)
        for table in (s.out_invite, s.pending_rm):
            entry = table.take(event.account_id, event.name)
            if entry is not None:
                self._complete_lookup(entry, event.status, event.address)

    def _complete_lookup(self, entry: PendingLookup, status: int, address: str) -> None:
        s = self.session
        channel = s.channels.get(entry.channel) if entry.channel is not None else None
        if entry.channel is not None and (
            channel is None or channel.kind is not ChannelKind.GROUP
        ):
            # conversation left or account switched meanwhile
            return
        if status != 0:
            if channel is not None:
                channel.info(LOOKUP_FAILED[entry.action])
            return
        daemon = s.daemon
        if entry.action is FollowUp.INVITE_CONTACT:
            daemon.add_contact(entry.account, address)
            daemon.send_trust_request(entry.account, address, b"")
        elif entry.action is FollowUp.INVITE_TO_CONVERSATION:
            daemon.add_conversation_member(entry.account, entry.channel, address)
        else:
            daemon.remove_conversation_member(entry.account, entry.channel, address)

    # ----- File transfers -----
    def on_data_transfer_event(self, event: DataTransferEvent) -> None:
        s = self.session
        info = s.daemon.data_transfer_info(event.account_id, event.conversation_id, event.tid)
        if info is None:
            return
        tid = str(event.tid)
        if s.transfers.path(event.account_id, event.conversation_id, tid) is None:
            if info.flags == 0 or event.status == FINISHED:
                s.transfers.set_file_path(event.account_id, event.conversation_id, tid, info.path)
        if not self._is_current(event.account_id):
            return
        selected = s.channels.selected_channel()
        if selected is not None and selected.id == event.conversation_id:
            selected.messages.clear()
            s.daemon.load_conversation(s.account.id, selected.id, "", 0)

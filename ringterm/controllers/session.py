from __future__ import annotations

import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from ..core.channels import ChannelList
from ..core.models import Channel, ChannelKind, ChannelType, Member, Message
from ..core.pending import PendingTable
from ..core.presence import PresenceTracker
from ..core.profiles import ProfileManager
from ..core.transfers import TransferManager
from ..daemon.client import Account, DaemonClient
from ..daemon.events import KeyPressed
from ..logging.log_writer import LogWriter
from . import commands
from .router import EventRouter

NO_ACCOUNT_LEFT = "!!!! No more account left to use"


class Session:
    """Everything the terminal client shows, kept in sync with the daemon.

    Mutated only from the pump's apply loop: key presses and daemon events
    both arrive through `dispatch`.
    """

    def __init__(
        self,
        daemon: DaemonClient,
        config: Optional[Dict[str, Any]] = None,
        log: Optional[LogWriter] = None,
    ):
        self.daemon = daemon
        self.config: Dict[str, Any] = config or {}
        self.log = log
        self.account = Account.null()
        self.channels = ChannelList([self._control_channel()])
        self.out_invite = PendingTable("invite")
        self.pending_rm = PendingTable("remove")
        self.presence = PresenceTracker(daemon)
        self.profiles = ProfileManager(self.config.get("profiles", {}).get("dir"))
        self.transfers = TransferManager()
        self.input = ""
        self.input_cursor = 0
        self.should_quit = False
        self.router = EventRouter(self)
        self.on_status: Optional[Callable[[str], None]] = None

    @classmethod
    def start(
        cls,
        daemon: DaemonClient,
        config: Optional[Dict[str, Any]] = None,
        log: Optional[LogWriter] = None,
    ) -> "Session":
        session = cls(daemon, config, log)
        session.load_account(daemon.select_account())
        return session

    # ----- Account / channel list -----
    def _control_channel(self) -> Channel:
        return Channel.control(self.config.get("ui", {}).get("welcome"))

    def channels_for_account(self, account: Account) -> List[Channel]:
        items = [self._control_channel()]
        if account.is_null():
            return items
        for conv in self.daemon.get_conversations(account.id):
            ch = Channel(id=conv, channel_type=ChannelType.group())
            ch.update_infos(self.daemon.get_conversation_infos(account.id, conv))
            items.append(ch)
        for conv in self.daemon.get_conversation_requests(account.id):
            items.append(Channel(id=conv, channel_type=ChannelType.invite()))
        for contact in self.daemon.get_trust_requests(account.id):
            items.append(Channel(id=contact, channel_type=ChannelType.trust_request(contact)))
        return items

    def load_account(self, account: Account) -> None:
        """Make `account` current and rebuild the channel list from scratch."""
        self.account = account
        if account.is_null():
            self.no_account_left()
            return
        self.profiles.load_from_account(account.id)
        self.channels.replace(self.channels_for_account(account))
        self.lookup_members()

    def switch_account(self, account: Account) -> None:
        self.untrack_current_conversation()
        self.load_account(account)

    def no_account_left(self) -> None:
        self.channels.select(0)
        self.channels.retain(lambda ch: ch.is_control())
        control = self.channels.control()
        if control is None:
            control = self._control_channel()
            self.channels.replace([control])
        control.info(NO_ACCOUNT_LEFT)

    def conversation_members(self, account_id: str, conversation_id: str) -> List[Member]:
        return [
            Member.from_dict(m)
            for m in self.daemon.get_conversation_members(account_id, conversation_id)
        ]

    def lookup_members(self) -> None:
        """Load members of every conversation and ask for names we do not know."""
        for ch in self.channels:
            if ch.kind is not ChannelKind.GROUP:
                continue
            ch.members = self.conversation_members(self.account.id, ch.id)
            for member in ch.members:
                if not self.profiles.knows(member.address):
                    self.daemon.lookup_address(self.account.id, "", member.address)

    def drop_request_channel(self, channel_id: str) -> None:
        self.channels.remove_by_id(channel_id)
        self.channels.select(0)

    def download_dir(self) -> Path:
        configured = self.config.get("downloads", {}).get("dir")
        return Path(configured) if configured else Path.home() / "Downloads" / "ringterm"

    # ----- Focus -----
    def untrack_current_conversation(self) -> None:
        ch = self.channels.selected_channel()
        if ch is not None:
            self.presence.untrack(self.account.id, ch.members)

    def reset_unread_messages(self) -> bool:
        ch = self.channels.selected_channel()
        if ch is not None and ch.unread_messages > 0:
            ch.unread_messages = 0
            return True
        return False

    def change_conversation(self, forward: bool) -> None:
        self.reset_unread_messages()
        self.untrack_current_conversation()
        if forward:
            self.channels.next()
        else:
            self.channels.previous()
        ch = self.channels.selected_channel()
        if ch is None:
            return
        if ch.kind is ChannelKind.GROUP:
            ch.messages.clear()
            self.daemon.load_conversation(self.account.id, ch.id, "", 0)
        self.presence.track(self.account.id, ch.members)

    def select_next_channel(self) -> None:
        self.change_conversation(True)

    def select_previous_channel(self) -> None:
        self.change_conversation(False)

    # ----- Input line -----
    def handle_character(self, c: str) -> None:
        self.input = self.input[: self.input_cursor] + c + self.input[self.input_cursor :]
        self.input_cursor += len(c)

    def handle_backspace(self) -> None:
        if 0 < self.input_cursor <= len(self.input):
            self.input_cursor -= 1
            self.input = self.input[: self.input_cursor] + self.input[self.input_cursor + 1 :]

    def handle_cursor_left(self) -> None:
        self.input_cursor = max(self.input_cursor - 1, 0)

    def handle_cursor_right(self) -> None:
        if self.input_cursor < len(self.input):
            self.input_cursor += 1

    def handle_enter(self) -> None:
        if not self.input:
            return
        if self.channels.selected_channel() is None:
            return
        self.send_input()

    def send_input(self) -> None:
        channel = self.channels.selected_channel()
        if channel is None:
            return
        text, self.input, self.input_cursor = self.input, "", 0
        channel_id = channel.id
        outcome = commands.execute(self, channel, text)
        if outcome.done:
            return
        # the command may have rebuilt the list; find the channel again by id
        idx = self.channels.index_of(channel_id)
        if idx is None:
            return
        if outcome.show_msg:
            self.channels.at(idx).messages.append(
                Message(self.account.display_name, text, time.time())
            )
        self.reset_unread_messages()
        self.channels.bubble_up(idx)

    # ----- Apply loop entry -----
    def dispatch(self, event: object) -> None:
        if isinstance(event, KeyPressed):
            self._on_key(event)
        else:
            self.router.route(event)

    def _on_key(self, event: KeyPressed) -> None:
        handlers: Dict[str, Callable[[], None]] = {
            "backspace": self.handle_backspace,
            "enter": self.handle_enter,
            "left": self.handle_cursor_left,
            "right": self.handle_cursor_right,
            "up": self.select_previous_channel,
            "down": self.select_next_channel,
        }
        if event.key == "char":
            if event.char:
                self.handle_character(event.char)
            return
        handler = handlers.get(event.key)
        if handler:
            handler()

    def status(self, text: str) -> None:
        if self.on_status:
            self.on_status(text)

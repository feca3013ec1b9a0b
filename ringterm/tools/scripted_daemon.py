from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..daemon.client import Account, DaemonClient, DataTransferInfo, ImportType
from ..daemon.events import (
    ConversationLoaded,
    ConversationReady,
    RegisteredNameFound,
    event_from_dict,
)


@dataclass
class ScriptEvent:
    delay_ms: int
    event: object


def parse_script_line(line: str) -> Optional[ScriptEvent]:
    """`<delay_ms> <json>`; blank lines and `#` comments yield None."""
    line = line.strip()
    if not line or line.startswith("#"):
        return None
    delay, _, rest = line.partition(" ")
    data = json.loads(rest)
    if data.get("event") == "Type":
        # shorthand for typing a whole line then Enter
        return ScriptEvent(int(delay), data)
    return ScriptEvent(int(delay), event_from_dict(data))


def load_script(path: Path) -> list[ScriptEvent]:
    events: list[ScriptEvent] = []
    for n, ln in enumerate(path.read_text(encoding="utf-8").splitlines(), 1):
        try:
            ev = parse_script_line(ln)
        except (ValueError, TypeError) as e:
            raise ValueError(f"{path}:{n}: {e}") from e
        if ev is not None:
            events.append(ev)
    return events


class ScriptedDaemon(DaemonClient):
    """In-memory daemon for tests and offline replays.

    Queries answer from the state given at construction; every command is
    recorded in `calls`. When `emit` is set, a few commands answer the way the
    real daemon would (new conversation, name lookup, history load).
    """

    def __init__(
        self,
        accounts: Optional[List[Account]] = None,
        conversations: Optional[Dict[str, List[str]]] = None,
        requests: Optional[Dict[str, List[str]]] = None,
        trust_requests: Optional[Dict[str, List[str]]] = None,
        details: Optional[Dict[str, Dict[str, str]]] = None,
        infos: Optional[Dict[str, Dict[str, str]]] = None,
        members: Optional[Dict[str, List[Dict[str, str]]]] = None,
        transfers: Optional[Dict[int, DataTransferInfo]] = None,
        history: Optional[Dict[str, List[Dict[str, str]]]] = None,
        names: Optional[Dict[str, str]] = None,
    ):
        self.accounts = list(accounts or [])
        self.conversations = conversations or {}
        self.requests = requests or {}
        self.trust_requests = trust_requests or {}
        self.details = details or {}
        self.infos = infos or {}
        self.members = members or {}
        self.transfers = transfers or {}
        self.history = history or {}
        self.names = names or {}  # registered username -> address
        self.can_remove = True
        self.calls: List[Tuple[str, tuple]] = []
        self.emit: Optional[Callable[[object], None]] = None
        self._next_conv = 0
        self._next_request = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScriptedDaemon":
        transfers = {
            int(tid): DataTransferInfo(**info) for tid, info in data.get("transfers", {}).items()
        }
        return cls(
            accounts=[Account(**a) for a in data.get("accounts", [])],
            conversations=data.get("conversations"),
            requests=data.get("requests"),
            trust_requests=data.get("trust_requests"),
            details=data.get("details"),
            infos=data.get("infos"),
            members=data.get("members"),
            transfers=transfers,
            history=data.get("history"),
            names=data.get("names"),
        )

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))

    def calls_named(self, name: str) -> List[tuple]:
        return [args for n, args in self.calls if n == name]

    def _emit(self, event: object) -> None:
        if self.emit:
            self.emit(event)

    # ----- Queries -----
    def get_account_list(self) -> List[Account]:
        return list(self.accounts)

    def get_account(self, account_id: str) -> Account:
        for account in self.accounts:
            if account.id == account_id:
                return account
        return Account.null()

    def get_account_details(self, account_id: str) -> Dict[str, str]:
        return dict(self.details.get(account_id, {}))

    def get_conversations(self, account_id: str) -> List[str]:
        return list(self.conversations.get(account_id, []))

    def get_conversation_requests(self, account_id: str) -> List[str]:
        return list(self.requests.get(account_id, []))

    def get_trust_requests(self, account_id: str) -> List[str]:
        return list(self.trust_requests.get(account_id, []))

    def get_conversation_infos(self, account_id: str, conversation_id: str) -> Dict[str, str]:
        return dict(self.infos.get(conversation_id, {}))

    def get_conversation_members(
        self, account_id: str, conversation_id: str
    ) -> List[Dict[str, str]]:
        return list(self.members.get(conversation_id, []))

    def data_transfer_info(
        self, account_id: str, conversation_id: str, tid: int
    ) -> Optional[DataTransferInfo]:
        return self.transfers.get(tid)

    # ----- Commands -----
    def add_account(self, archive_or_pin: str, password: str, import_type: ImportType) -> None:
        self._record("add_account", archive_or_pin, password, import_type)

    def remove_account(self, account_id: str) -> None:
        self._record("remove_account", account_id)

    def set_account_details(self, account_id: str, details: Dict[str, str]) -> None:
        self._record("set_account_details", account_id, details)
        self.details[account_id] = dict(details)

    def start_conversation(self, account_id: str) -> None:
        self._record("start_conversation", account_id)
        self._next_conv += 1
        conv = f"conv{self._next_conv}"
        self.conversations.setdefault(account_id, []).append(conv)
        self._emit(ConversationReady(account_id, conv))

    def remove_conversation(self, account_id: str, conversation_id: str) -> bool:
        self._record("remove_conversation", account_id, conversation_id)
        return self.can_remove

    def send_message(
        self, account_id: str, conversation_id: str, body: str, reply_to: str, flag: int
    ) -> None:
        self._record("send_message", account_id, conversation_id, body, reply_to, flag)

    def load_conversation(
        self, account_id: str, conversation_id: str, from_id: str, count: int
    ) -> None:
        self._record("load_conversation", account_id, conversation_id, from_id, count)
        if conversation_id in self.history:
            self._next_request += 1
            self._emit(
                ConversationLoaded(
                    self._next_request,
                    account_id,
                    conversation_id,
                    list(self.history[conversation_id]),
                )
            )

    def update_conversation_infos(
        self, account_id: str, conversation_id: str, infos: Dict[str, str]
    ) -> None:
        self._record("update_conversation_infos", account_id, conversation_id, infos)

    def add_conversation_member(self, account_id: str, conversation_id: str, uri: str) -> None:
        self._record("add_conversation_member", account_id, conversation_id, uri)

    def remove_conversation_member(
        self, account_id: str, conversation_id: str, uri: str
    ) -> None:
        self._record("remove_conversation_member", account_id, conversation_id, uri)

    def accept_conversation_request(self, account_id: str, conversation_id: str) -> None:
        self._record("accept_conversation_request", account_id, conversation_id)

    def decline_conversation_request(self, account_id: str, conversation_id: str) -> None:
        self._record("decline_conversation_request", account_id, conversation_id)

    def add_contact(self, account_id: str, uri: str) -> None:
        self._record("add_contact", account_id, uri)

    def remove_contact(self, account_id: str, uri: str) -> None:
        self._record("remove_contact", account_id, uri)

    def send_trust_request(self, account_id: str, uri: str, payload: bytes = b"") -> None:
        self._record("send_trust_request", account_id, uri, payload)

    def accept_trust_request(self, account_id: str, uri: str) -> None:
        self._record("accept_trust_request", account_id, uri)

    def discard_trust_request(self, account_id: str, uri: str) -> None:
        self._record("discard_trust_request", account_id, uri)

    def subscribe_presence(self, account_id: str, uri: str, flag: bool) -> None:
        self._record("subscribe_presence", account_id, uri, flag)

    def lookup_name(self, account_id: str, name_service: str, name: str) -> None:
        self._record("lookup_name", account_id, name_service, name)
        address = self.names.get(name)
        self._emit(RegisteredNameFound(account_id, 0 if address else 1, address or "", name))

    def lookup_address(self, account_id: str, name_service: str, address: str) -> None:
        self._record("lookup_address", account_id, name_service, address)
        for name, known in self.names.items():
            if known == address:
                self._emit(RegisteredNameFound(account_id, 0, address, name))
                return

    def send_file(
        self, account_id: str, conversation_id: str, path: str, display_name: str, parent: str
    ) -> None:
        self._record("send_file", account_id, conversation_id, path, display_name, parent)

    def accept_file_transfer(
        self, account_id: str, conversation_id: str, tid: int, path: str
    ) -> None:
        self._record("accept_file_transfer", account_id, conversation_id, tid, path)

    def cancel_file_transfer(self, account_id: str, conversation_id: str, tid: int) -> None:
        self._record("cancel_file_transfer", account_id, conversation_id, tid)

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

# 40 hex chars: the daemon's permanent account address format
_ADDRESS_RE = re.compile(r"^[0-9a-fA-F]{40}$")


class ImportType(Enum):
    NONE = 0
    BACKUP = 1
    NETWORK = 2


@dataclass
class Account:
    id: str
    alias: str = ""
    username: str = ""
    enabled: bool = True

    @classmethod
    def null(cls) -> "Account":
        return cls(id="")

    def is_null(self) -> bool:
        return not self.id

    @property
    def display_name(self) -> str:
        return self.alias or self.username or self.id

    def __str__(self) -> str:
        name = self.username or "(no username)"
        return f"{self.id}: {self.alias} ({name})"


@dataclass
class DataTransferInfo:
    display_name: str
    path: str = ""
    flags: int = 0  # 0 = outgoing
    last_event: int = 0
    total_size: int = 0
    bytes_progress: int = 0


class DaemonClient:
    """Boundary with the messaging daemon.

    Queries return their answer directly. Every other call is fire-and-forget:
    its outcome, if any, comes back later as an event on the pump.
    A concrete binding overrides all of these.
    """

    # ----- Queries -----
    def get_account_list(self) -> List[Account]:
        raise NotImplementedError

    def get_account(self, account_id: str) -> Account:
        raise NotImplementedError

    def get_account_details(self, account_id: str) -> Dict[str, str]:
        raise NotImplementedError

    def get_conversations(self, account_id: str) -> List[str]:
        raise NotImplementedError

    def get_conversation_requests(self, account_id: str) -> List[str]:
        raise NotImplementedError

    def get_trust_requests(self, account_id: str) -> List[str]:
        raise NotImplementedError

    def get_conversation_infos(self, account_id: str, conversation_id: str) -> Dict[str, str]:
        raise NotImplementedError

    def get_conversation_members(
        self, account_id: str, conversation_id: str
    ) -> List[Dict[str, str]]:
        raise NotImplementedError

    def data_transfer_info(
        self, account_id: str, conversation_id: str, tid: int
    ) -> Optional[DataTransferInfo]:
        raise NotImplementedError

    def is_address(self, value: str) -> bool:
        return bool(_ADDRESS_RE.match(value or ""))

    def select_account(self) -> Account:
        """Pick the account to use: first enabled one, else the null account."""
        for account in self.get_account_list():
            if account.enabled:
                return account
        return Account.null()

    # ----- Accounts -----
    def add_account(self, archive_or_pin: str, password: str, import_type: ImportType) -> None:
        raise NotImplementedError

    def remove_account(self, account_id: str) -> None:
        raise NotImplementedError

    def set_account_details(self, account_id: str, details: Dict[str, str]) -> None:
        raise NotImplementedError

    # ----- Conversations -----
    def start_conversation(self, account_id: str) -> None:
        raise NotImplementedError

    def remove_conversation(self, account_id: str, conversation_id: str) -> bool:
        raise NotImplementedError

    def send_message(
        self, account_id: str, conversation_id: str, body: str, reply_to: str, flag: int
    ) -> None:
        raise NotImplementedError

    def load_conversation(
        self, account_id: str, conversation_id: str, from_id: str, count: int
    ) -> None:
        raise NotImplementedError

    def update_conversation_infos(
        self, account_id: str, conversation_id: str, infos: Dict[str, str]
    ) -> None:
        raise NotImplementedError

    def add_conversation_member(self, account_id: str, conversation_id: str, uri: str) -> None:
        raise NotImplementedError

    def remove_conversation_member(
        self, account_id: str, conversation_id: str, uri: str
    ) -> None:
        raise NotImplementedError

    def accept_conversation_request(self, account_id: str, conversation_id: str) -> None:
        raise NotImplementedError

    def decline_conversation_request(self, account_id: str, conversation_id: str) -> None:
        raise NotImplementedError

    # ----- Contacts -----
    def add_contact(self, account_id: str, uri: str) -> None:
        raise NotImplementedError

    def remove_contact(self, account_id: str, uri: str) -> None:
        raise NotImplementedError

    def send_trust_request(self, account_id: str, uri: str, payload: bytes = b"") -> None:
        raise NotImplementedError

    def accept_trust_request(self, account_id: str, uri: str) -> None:
        raise NotImplementedError

    def discard_trust_request(self, account_id: str, uri: str) -> None:
        raise NotImplementedError

    def subscribe_presence(self, account_id: str, uri: str, flag: bool) -> None:
        raise NotImplementedError

    def lookup_name(self, account_id: str, name_service: str, name: str) -> None:
        raise NotImplementedError

    def lookup_address(self, account_id: str, name_service: str, address: str) -> None:
        raise NotImplementedError

    # ----- File transfers -----
    def send_file(
        self, account_id: str, conversation_id: str, path: str, display_name: str, parent: str
    ) -> None:
        raise NotImplementedError

    def accept_file_transfer(
        self, account_id: str, conversation_id: str, tid: int, path: str
    ) -> None:
        raise NotImplementedError

    def cancel_file_transfer(self, account_id: str, conversation_id: str, tid: int) -> None:
        raise NotImplementedError

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional


class FollowUp(Enum):
    INVITE_CONTACT = "invite_contact"  # add contact + trust request
    INVITE_TO_CONVERSATION = "invite_to_conversation"
    REMOVE_FROM_CONVERSATION = "remove_from_conversation"


@dataclass(frozen=True)
class PendingLookup:
    """An action waiting for a username to resolve to an address."""

    account: str
    channel: Optional[str]  # None for a direct contact invite
    name: str
    action: FollowUp

    def matches(self, account: str, name: str) -> bool:
        return self.account == account and self.name == name


class PendingTable:
    """Insertion-ordered table of pending lookups.

    `take` removes and returns the first entry for (account, name), so
    duplicate requests for the same name resolve one per lookup, oldest first.
    """

    def __init__(self, name: str = ""):
        self.name = name
        self._entries: List[PendingLookup] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[PendingLookup]:
        return iter(list(self._entries))

    def enqueue(self, entry: PendingLookup) -> None:
        self._entries.append(entry)

    def take(self, account: str, name: str) -> Optional[PendingLookup]:
        for i, entry in enumerate(self._entries):
            if entry.matches(account, name):
                del self._entries[i]
                return entry
        return None

    def clear(self) -> None:
        self._entries.clear()


def split_username(value: str) -> tuple[str, str]:
    """'bob@ns.example' -> ('bob', 'ns.example'); no '@' -> (value, '')."""
    if "@" not in value:
        return value, ""
    name, _, name_service = value.partition("@")
    return name, name_service

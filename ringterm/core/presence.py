from __future__ import annotations

from typing import Dict, Iterable, Optional

from ..daemon.client import DaemonClient
from .models import Member


class PresenceTracker:
    """Online state of members of the focused conversation.

    Entries appear on subscribe and are only updated afterwards; stale
    addresses are left in place.
    """

    def __init__(self, daemon: DaemonClient):
        self.daemon = daemon
        self._online: Dict[str, bool] = {}

    def track(self, account_id: str, members: Iterable[Member]) -> None:
        for member in members:
            self._online.setdefault(member.address, False)
            self.daemon.subscribe_presence(account_id, member.address, True)

    def untrack(self, account_id: str, members: Iterable[Member]) -> None:
        for member in members:
            self.daemon.subscribe_presence(account_id, member.address, False)

    def update(self, uri: str, online: bool) -> None:
        self._online[uri] = online

    def is_online(self, uri: str) -> Optional[bool]:
        return self._online.get(uri)

    def __len__(self) -> int:
        return len(self._online)

from __future__ import annotations

from typing import Dict, Optional, Tuple

# Labels for DataTransferInfo.last_event; anything else reads "not downloaded"
TRANSFER_STATUS = {
    3: "awaiting peer",
    4: "awaiting host",
    5: "ongoing",
    6: "finished",
    7: "closed by host",
    8: "closed by peer",
    10: "unjoinable peer",
    11: "timeout expired",
}
FINISHED = 6


def status_label(code: int) -> str:
    return TRANSFER_STATUS.get(code, "not downloaded")


class TransferManager:
    """Local paths of files that finished (or were sent) per transfer id."""

    def __init__(self) -> None:
        self._paths: Dict[Tuple[str, str, str], str] = {}

    def path(self, account_id: str, conversation_id: str, tid: str) -> Optional[str]:
        return self._paths.get((account_id, conversation_id, str(tid)))

    def set_file_path(self, account_id: str, conversation_id: str, tid: str, path: str) -> None:
        self._paths[(account_id, conversation_id, str(tid))] = path

from __future__ import annotations
import os
import time
from pathlib import Path


class LogWriter:
    def __init__(self, base_dir: str | Path | None = None, enabled: bool = True) -> None:
        self.base = Path(base_dir or Path.cwd() / "logs")
        self.enabled = enabled
        if enabled:
            self.base.mkdir(parents=True, exist_ok=True)

    def _path_for(self, account: str, conversation: str) -> Path:
        safe_acc = (account or "noaccount").strip().replace(os.sep, "_")
        # the control channel has an empty id
        safe_conv = (conversation or "control").strip().replace(os.sep, "_")
        p = self.base / safe_acc
        p.mkdir(parents=True, exist_ok=True)
        return p / f"{safe_conv}.log"

    def append(self, account: str, conversation: str, line: str, ts: float | None = None) -> None:
        if not self.enabled:
            return
        path = self._path_for(account, conversation)
        t = ts or time.time()
        stamp = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(t))
        with path.open("a", encoding="utf-8", errors="ignore") as f:
            f.write(f"[{stamp}] {line}\n")

    # Public accessor for consumers that need to open the file
    def path_for(self, account: str, conversation: str) -> Path:
        return self._path_for(account, conversation)

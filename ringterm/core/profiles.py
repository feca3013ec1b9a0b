from __future__ import annotations

import base64
import binascii
from pathlib import Path
from typing import Dict, Optional


def profile_filename(uri: str) -> str:
    return base64.urlsafe_b64encode(uri.encode()).decode() + ".vcf"


def _uri_from_filename(path: Path) -> Optional[str]:
    try:
        return base64.urlsafe_b64decode(path.stem.encode()).decode()
    except (binascii.Error, UnicodeDecodeError):
        return None


def _vcard_display_name(text: str) -> str:
    for line in text.splitlines():
        key, sep, value = line.partition(":")
        if sep and key.split(";", 1)[0].upper() == "FN":
            return value.strip()
    return ""


class ProfileManager:
    """Display-name cache: vCard names win over registered usernames."""

    def __init__(self, base_dir: str | Path | None = None):
        self.base = Path(base_dir) if base_dir else None
        self.names: Dict[str, str] = {}
        self.usernames: Dict[str, str] = {}

    def account_dir(self, account_id: str) -> Optional[Path]:
        if self.base is None:
            return None
        return self.base / (account_id or "none")

    def load_from_account(self, account_id: str) -> None:
        self.names.clear()
        self.usernames.clear()
        d = self.account_dir(account_id)
        if d is None or not d.is_dir():
            return
        for vcf in sorted(d.glob("*.vcf")):
            self.load_profile(vcf)

    def load_profile(self, path: str | Path) -> None:
        p = Path(path)
        uri = _uri_from_filename(p)
        if not uri:
            return
        try:
            text = p.read_text(encoding="utf-8", errors="ignore")
        except OSError:
            return
        name = _vcard_display_name(text)
        if name:
            self.names[uri] = name

    def username_found(self, address: str, name: str) -> None:
        if address and name:
            self.usernames[address] = name

    def display_name(self, uri: str) -> str:
        return self.names.get(uri) or self.usernames.get(uri) or uri

    def knows(self, uri: str) -> bool:
        return uri in self.names or uri in self.usernames

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class ChannelKind(Enum):
    GENERATED = "generated"  # control channel
    GROUP = "group"
    INVITE = "invite"
    TRUST_REQUEST = "trust_request"


@dataclass(frozen=True)
class ChannelType:
    kind: ChannelKind
    contact: str = ""  # sender of a trust request

    @classmethod
    def generated(cls) -> "ChannelType":
        return cls(ChannelKind.GENERATED)

    @classmethod
    def group(cls) -> "ChannelType":
        return cls(ChannelKind.GROUP)

    @classmethod
    def invite(cls) -> "ChannelType":
        return cls(ChannelKind.INVITE)

    @classmethod
    def trust_request(cls, contact: str) -> "ChannelType":
        return cls(ChannelKind.TRUST_REQUEST, contact)


@dataclass
class Message:
    author: str
    body: str
    arrived_at: float
    info: bool = False

    @classmethod
    def local_info(cls, body: str) -> "Message":
        return cls(author="", body=body, arrived_at=time.time(), info=True)


@dataclass(frozen=True)
class Member:
    address: str
    role: str = "member"

    @classmethod
    def from_dict(cls, data: Dict[str, str]) -> "Member":
        return cls(address=data.get("uri", ""), role=data.get("role", "member"))


@dataclass
class Channel:
    id: str
    channel_type: ChannelType
    messages: List[Message] = field(default_factory=list)
    members: List[Member] = field(default_factory=list)
    unread_messages: int = 0
    title: str = ""
    description: str = ""

    @classmethod
    def control(cls, banner: Optional[str] = None) -> "Channel":
        ch = cls(id="", channel_type=ChannelType.generated(), title="ringterm")
        if banner:
            ch.messages.append(Message.local_info(banner))
        return ch

    @property
    def kind(self) -> ChannelKind:
        return self.channel_type.kind

    def is_control(self) -> bool:
        return self.channel_type.kind is ChannelKind.GENERATED

    def info(self, body: str) -> None:
        self.messages.append(Message.local_info(body))

    def update_infos(self, infos: Dict[str, str]) -> None:
        if "title" in infos:
            self.title = infos.get("title", "")
        if "description" in infos:
            self.description = infos.get("description", "")

    @property
    def label(self) -> str:
        return self.title or self.id or "ringterm"

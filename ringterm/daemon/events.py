from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

# Notifications emitted by the daemon. One dataclass per signal; the router
# matches on the class.


@dataclass(frozen=True)
class MessageReceived:
    account_id: str
    conversation_id: str
    payloads: Dict[str, str]


@dataclass(frozen=True)
class RegistrationStateChanged:
    account_id: str
    state: str  # "REGISTERED" once usable


@dataclass(frozen=True)
class PresenceChanged:
    account_id: str
    uri: str
    online: bool


@dataclass(frozen=True)
class AccountsChanged:
    pass


@dataclass(frozen=True)
class ConversationReady:
    account_id: str
    conversation_id: str


@dataclass(frozen=True)
class ConversationRemoved:
    account_id: str
    conversation_id: str


@dataclass(frozen=True)
class ConversationRequest:
    account_id: str
    conversation_id: str


@dataclass(frozen=True)
class IncomingTrustRequest:
    account_id: str
    from_: str
    payload: bytes = b""
    received: int = 0


@dataclass(frozen=True)
class RegisteredNameFound:
    account_id: str
    status: int  # 0 on success
    address: str
    name: str


@dataclass(frozen=True)
class DataTransferEvent:
    account_id: str
    conversation_id: str
    tid: int
    status: int


@dataclass(frozen=True)
class ConversationLoaded:
    request_id: int
    account_id: str
    conversation_id: str
    # newest first, as the daemon sends them
    messages: List[Dict[str, str]] = field(default_factory=list)


@dataclass(frozen=True)
class ProfileReceived:
    account_id: str
    from_: str
    path: str


# Input layer
@dataclass(frozen=True)
class KeyPressed:
    key: str  # char | backspace | enter | left | right | up | down
    char: str = ""


DAEMON_EVENTS = (
    MessageReceived,
    RegistrationStateChanged,
    PresenceChanged,
    AccountsChanged,
    ConversationReady,
    ConversationRemoved,
    ConversationRequest,
    IncomingTrustRequest,
    RegisteredNameFound,
    DataTransferEvent,
    ConversationLoaded,
    ProfileReceived,
)


def event_from_dict(data: Dict[str, object]) -> object:
    """Build an event from a plain dict: {"event": "ConversationReady", ...fields}."""
    kinds = {cls.__name__: cls for cls in DAEMON_EVENTS + (KeyPressed,)}
    fields = dict(data)
    name = str(fields.pop("event", ""))
    cls = kinds.get(name)
    if cls is None:
        raise ValueError(f"unknown event: {name!r}")
    if "from" in fields:
        fields["from_"] = fields.pop("from")
    if cls is IncomingTrustRequest and isinstance(fields.get("payload"), str):
        fields["payload"] = str(fields["payload"]).encode()
    return cls(**fields)

from __future__ import annotations
from dataclasses import dataclass, field


@dataclass(frozen=True)
class ParsedAddress:
    address: str
    name: str = ""


@dataclass(frozen=True)
class ParsedMessage:
    # Already-decoded message as handed over by a transport feed
    sequence: int
    message_id: str
    subject: str
    sender: ParsedAddress
    sent_at: int  # epoch ms
    text: str = ""
    in_reply_to: str | None = None
    references: list[str] = field(default_factory=list)
    to: list[ParsedAddress] = field(default_factory=list)
    cc: list[ParsedAddress] = field(default_factory=list)
    headers: str = "{}"


@dataclass(frozen=True)
class FetchResult:
    messages: list[ParsedMessage]
    max_sequence: int

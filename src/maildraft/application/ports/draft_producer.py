from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, Protocol

from maildraft.domain.models import MessageRecord


@dataclass(frozen=True)
class DraftRequest:
    thread_id: str
    model: str
    vibe: str
    messages: list[MessageRecord]
    user_notes: list[str] = field(default_factory=list)
    thread_notes: list[str] = field(default_factory=list)
    instruction: Optional[str] = None


@dataclass(frozen=True)
class DraftResult:
    content: str
    model: str
    producer: str = ""


class DraftProducer(Protocol):
    name: str

    # None means "no usable draft"; DraftProducerError means "try again"
    async def generate(self, request: DraftRequest) -> Optional[DraftResult]: ...

"""Domain models for persisted mailbox state."""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field


class DraftStatus(str, Enum):
    """Lifecycle of a reply draft."""

    DRAFTED = "drafted"
    EDITED = "edited"
    SKIPPED = "skipped"


class RuleKind(str, Enum):
    """Kinds of user rules evaluated per message."""

    IGNORE_SENDER = "ignore_sender"
    IGNORE_DOMAIN = "ignore_domain"
    STYLE = "style"


class MemoryScope(str, Enum):
    """Scopes for free-form memory notes."""

    USER = "user"
    THREAD = "thread"


class Account(BaseModel):
    """Identity of one mailbox."""

    id: str
    email: str
    provider: str = "generic"
    host: str = ""
    port: int = 993
    secure: bool = True
    username: str = ""
    auth: str = "password"
    created_at: int = 0


class SyncState(BaseModel):
    """Per-account watermark."""

    account_id: str
    last_watermark: int = 0
    last_sync_at: int = 0


class ThreadRecord(BaseModel):
    """A conversation, unique per (account_id, thread_key)."""

    id: str
    account_id: str
    thread_key: str
    subject: str = ""
    participants: list[str] = Field(default_factory=list)
    last_message_at: int = 0
    last_sender: str = ""
    needs_reply: bool = True
    summary: str | None = None
    updated_at: int = 0


class MessageRecord(BaseModel):
    """A persisted message, unique per (account_id, message_id)."""

    id: str
    account_id: str
    thread_id: str
    sequence: int
    message_id: str
    in_reply_to: str | None = None
    subject: str = ""
    from_address: str = ""
    from_name: str = ""
    to_addresses: list[str] = Field(default_factory=list)
    cc_addresses: list[str] = Field(default_factory=list)
    body_text: str = ""
    sent_at: int = 0
    raw_headers: str = "{}"


class DraftRecord(BaseModel):
    """At most one draft per thread."""

    id: str
    thread_id: str
    content: str
    status: DraftStatus = DraftStatus.DRAFTED
    model: str = ""
    updated_at: int = 0


class RuleRecord(BaseModel):
    """An ignore or style rule stored in the database."""

    id: str
    kind: RuleKind
    scope: str = "global"
    pattern: str
    value: str = ""
    enabled: bool = True


class MemoryNote(BaseModel):
    """A note used to bias future drafts. Unique per (scope, key)."""

    id: str
    scope: MemoryScope
    key: str
    value: str
    updated_at: int = 0


class IgnoreDecision(BaseModel):
    """Outcome of the ignore check for one sender."""

    ignore: bool
    reason: str | None = None


CycleState = Literal["idle", "fetching", "ingesting", "drafting", "checkpointing", "error"]


class SyncRunStats(BaseModel):
    """Per-account result of one sync cycle."""

    account_id: str
    fetched: int = 0
    imported: int = 0
    drafted: int = 0
    ignored: int = 0
    state: CycleState = "idle"
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

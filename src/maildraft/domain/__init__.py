"""Domain models, entities and errors."""

from maildraft.domain.errors import (
    ConfigurationError,
    DraftProducerError,
    MailDraftError,
    ThreadNotFoundError,
    TransientError,
    TransportError,
)
from maildraft.domain.models import (
    Account,
    DraftRecord,
    DraftStatus,
    IgnoreDecision,
    MemoryNote,
    MemoryScope,
    MessageRecord,
    RuleKind,
    RuleRecord,
    SyncRunStats,
    SyncState,
    ThreadRecord,
)

__all__ = [
    # Errors
    "MailDraftError",
    "ConfigurationError",
    "TransientError",
    "TransportError",
    "DraftProducerError",
    "ThreadNotFoundError",
    # Records
    "Account",
    "SyncState",
    "ThreadRecord",
    "MessageRecord",
    "DraftRecord",
    "DraftStatus",
    "RuleRecord",
    "RuleKind",
    "MemoryNote",
    "MemoryScope",
    "IgnoreDecision",
    "SyncRunStats",
]

"""SQLite persistence for mailbox sync state."""

from maildraft.infrastructure.sqlite.store import (
    SQLiteStore,
    decode_list,
    encode_list,
)

__all__ = [
    "SQLiteStore",
    "decode_list",
    "encode_list",
]

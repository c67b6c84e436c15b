"""SQLite store for accounts, watermarks, threads, messages, drafts, rules and memory."""

from __future__ import annotations

import json
import sqlite3
import time
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Iterable

from loguru import logger

from maildraft.domain.models import (
    Account,
    DraftRecord,
    DraftStatus,
    MemoryNote,
    MemoryScope,
    MessageRecord,
    RuleKind,
    RuleRecord,
    SyncState,
    ThreadRecord,
)
from maildraft.infrastructure.email.message_id import message_id_candidates, normalize_message_id

SCHEMA_SQL = """
    CREATE TABLE IF NOT EXISTS accounts (
        id TEXT PRIMARY KEY,
        email TEXT NOT NULL,
        provider TEXT NOT NULL,
        host TEXT NOT NULL,
        port INTEGER NOT NULL,
        secure INTEGER NOT NULL,
        username TEXT NOT NULL,
        auth TEXT NOT NULL,
        created_at INTEGER NOT NULL
    );

    CREATE TABLE IF NOT EXISTS sync_state (
        account_id TEXT PRIMARY KEY,
        last_watermark INTEGER NOT NULL DEFAULT 0,
        last_sync_at INTEGER NOT NULL DEFAULT 0
    );

    CREATE TABLE IF NOT EXISTS threads (
        id TEXT PRIMARY KEY,
        account_id TEXT NOT NULL,
        thread_key TEXT NOT NULL,
        subject TEXT NOT NULL,
        participants TEXT NOT NULL DEFAULT '[]',
        last_message_at INTEGER NOT NULL,
        last_sender TEXT NOT NULL,
        needs_reply INTEGER NOT NULL DEFAULT 1,
        summary TEXT,
        updated_at INTEGER NOT NULL,
        UNIQUE(account_id, thread_key)
    );

    CREATE TABLE IF NOT EXISTS messages (
        id TEXT PRIMARY KEY,
        account_id TEXT NOT NULL,
        thread_id TEXT NOT NULL,
        sequence INTEGER NOT NULL,
        message_id TEXT NOT NULL,
        in_reply_to TEXT,
        subject TEXT NOT NULL,
        from_address TEXT NOT NULL,
        from_name TEXT NOT NULL,
        to_addresses TEXT NOT NULL DEFAULT '[]',
        cc_addresses TEXT NOT NULL DEFAULT '[]',
        body_text TEXT NOT NULL,
        sent_at INTEGER NOT NULL,
        raw_headers TEXT NOT NULL DEFAULT '{}',
        UNIQUE(account_id, message_id)
    );

    CREATE TABLE IF NOT EXISTS drafts (
        id TEXT PRIMARY KEY,
        thread_id TEXT NOT NULL UNIQUE,
        content TEXT NOT NULL,
        status TEXT NOT NULL CHECK(status IN ('drafted','edited','skipped')),
        model TEXT NOT NULL,
        updated_at INTEGER NOT NULL
    );

    CREATE TABLE IF NOT EXISTS rules (
        id TEXT PRIMARY KEY,
        kind TEXT NOT NULL CHECK(kind IN ('ignore_sender','ignore_domain','style')),
        scope TEXT NOT NULL,
        pattern TEXT NOT NULL,
        value TEXT NOT NULL,
        enabled INTEGER NOT NULL DEFAULT 1,
        created_at INTEGER NOT NULL DEFAULT 0
    );

    CREATE TABLE IF NOT EXISTS memory_notes (
        id TEXT PRIMARY KEY,
        scope TEXT NOT NULL CHECK(scope IN ('user','thread')),
        key TEXT NOT NULL,
        value TEXT NOT NULL,
        updated_at INTEGER NOT NULL,
        UNIQUE(scope, key)
    );

    CREATE INDEX IF NOT EXISTS idx_messages_thread_id ON messages(thread_id, sent_at);
    CREATE INDEX IF NOT EXISTS idx_messages_account_message_id ON messages(account_id, message_id);
    CREATE INDEX IF NOT EXISTS idx_threads_needs_reply ON threads(needs_reply, last_message_at);
"""

# Older databases declared message ids unique across all accounts
LEGACY_MESSAGE_UNIQUE = "message_id TEXT NOT NULL UNIQUE"

MESSAGE_COLUMNS = (
    "id, account_id, thread_id, sequence, message_id, in_reply_to, subject, "
    "from_address, from_name, to_addresses, cc_addresses, body_text, sent_at, raw_headers"
)

# SQL twin of normalize_message_id for ids without inner whitespace
CANONICAL_ID_SQL = (
    "lower(trim(replace(replace(message_id, '<', ''), '>', ''), "
    "' ' || char(9) || char(10) || char(13)))"
)

THREAD_COLUMNS = (
    "id, account_id, thread_key, subject, participants, last_message_at, "
    "last_sender, needs_reply, summary, updated_at"
)


def _now_ms() -> int:
    return int(time.time() * 1000)


def encode_list(values: Iterable[str]) -> str:
    return json.dumps([str(v) for v in values])


def decode_list(raw: str | None) -> list[str]:
    """Decode a JSON array column. Malformed data decodes to an empty list."""
    if not raw:
        return []
    try:
        parsed = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        logger.warning(f"Discarding malformed JSON array column: {raw[:80]!r}")
        return []
    if not isinstance(parsed, list):
        return []
    return [str(v) for v in parsed if v is not None]


class SQLiteStore:
    """Single-writer SQLite persistence for the sync engine.

    Every write is an upsert or insert-or-ignore, so replaying a cycle is
    harmless. Connections are opened per operation; WAL keeps readers and the
    single writer out of each other's way.
    """

    def __init__(self, db_path: str | Path = "data/maildraft.db"):
        self.db_path = Path(db_path)
        self._ensure_db()

    def _ensure_db(self) -> None:
        """Create database and tables if they don't exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        with self._connection() as conn:
            conn.execute("PRAGMA journal_mode=WAL")
            self._migrate_legacy_message_unique(conn)
            conn.executescript(SCHEMA_SQL)
            self._canonicalize_message_ids(conn)
        logger.info(f"SQLite store initialized at {self.db_path}")

    def _migrate_legacy_message_unique(self, conn: sqlite3.Connection) -> None:
        row = conn.execute(
            "SELECT sql FROM sqlite_master WHERE type = 'table' AND name = 'messages'"
        ).fetchone()
        if not row or LEGACY_MESSAGE_UNIQUE not in (row["sql"] or ""):
            return

        logger.info("Migrating messages table to per-account message id uniqueness")
        legacy_columns = {r["name"] for r in conn.execute("PRAGMA table_info(messages)")}
        sequence_col = "sequence" if "sequence" in legacy_columns else "uid"
        conn.executescript(f"""
            CREATE TABLE messages_new (
                id TEXT PRIMARY KEY,
                account_id TEXT NOT NULL,
                thread_id TEXT NOT NULL,
                sequence INTEGER NOT NULL,
                message_id TEXT NOT NULL,
                in_reply_to TEXT,
                subject TEXT NOT NULL,
                from_address TEXT NOT NULL,
                from_name TEXT NOT NULL,
                to_addresses TEXT NOT NULL DEFAULT '[]',
                cc_addresses TEXT NOT NULL DEFAULT '[]',
                body_text TEXT NOT NULL,
                sent_at INTEGER NOT NULL,
                raw_headers TEXT NOT NULL DEFAULT '{{}}',
                UNIQUE(account_id, message_id)
            );

            INSERT OR IGNORE INTO messages_new ({MESSAGE_COLUMNS})
            SELECT id, account_id, thread_id, {sequence_col}, message_id, in_reply_to, subject,
                   from_address, from_name, to_addresses, cc_addresses, body_text, sent_at, raw_headers
            FROM messages;

            DROP TABLE messages;
            ALTER TABLE messages_new RENAME TO messages;
        """)

    def _canonicalize_message_ids(self, conn: sqlite3.Connection) -> None:
        # Older rows may hold bracketed or mixed-case ids; lookups only match canonical forms.
        # OR IGNORE leaves a row alone when its canonical twin already exists.
        cursor = conn.execute(
            f"UPDATE OR IGNORE messages SET message_id = {CANONICAL_ID_SQL} "
            f"WHERE message_id != {CANONICAL_ID_SQL}"
        )
        if cursor.rowcount > 0:
            logger.info(f"Normalized {cursor.rowcount} stored message ids")

    @contextmanager
    def _connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Context manager for database connections."""
        conn = sqlite3.connect(self.db_path, timeout=30.0)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    # ------------------------------------------------------------------
    # Accounts and watermarks
    # ------------------------------------------------------------------

    def upsert_account(self, account: Account) -> None:
        """Refresh an account's identity. Keeps the original created_at."""
        with self._connection() as conn:
            conn.execute(
                """INSERT INTO accounts (id, email, provider, host, port, secure, username, auth, created_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                   ON CONFLICT(id) DO UPDATE SET
                       email = excluded.email,
                       provider = excluded.provider,
                       host = excluded.host,
                       port = excluded.port,
                       secure = excluded.secure,
                       username = excluded.username,
                       auth = excluded.auth""",
                (
                    account.id,
                    account.email.lower(),
                    account.provider,
                    account.host,
                    account.port,
                    int(account.secure),
                    account.username,
                    account.auth,
                    account.created_at or _now_ms(),
                ),
            )

    def get_account(self, account_id: str) -> Account | None:
        with self._connection() as conn:
            row = conn.execute("SELECT * FROM accounts WHERE id = ?", (account_id,)).fetchone()
        if not row:
            return None
        return Account(
            id=row["id"],
            email=row["email"],
            provider=row["provider"],
            host=row["host"],
            port=row["port"],
            secure=bool(row["secure"]),
            username=row["username"],
            auth=row["auth"],
            created_at=row["created_at"],
        )

    def get_sync_state(self, account_id: str) -> SyncState:
        """Watermark for an account; zero when the account was never synced."""
        with self._connection() as conn:
            row = conn.execute(
                "SELECT account_id, last_watermark, last_sync_at FROM sync_state WHERE account_id = ?",
                (account_id,),
            ).fetchone()
        if not row:
            return SyncState(account_id=account_id)
        return SyncState(
            account_id=row["account_id"],
            last_watermark=row["last_watermark"] or 0,
            last_sync_at=row["last_sync_at"] or 0,
        )

    def upsert_sync_state(self, state: SyncState) -> SyncState:
        """Record a completed cycle. The watermark never moves backwards."""
        with self._connection() as conn:
            conn.execute(
                """INSERT INTO sync_state (account_id, last_watermark, last_sync_at)
                   VALUES (?, ?, ?)
                   ON CONFLICT(account_id) DO UPDATE SET
                       last_watermark = MAX(sync_state.last_watermark, excluded.last_watermark),
                       last_sync_at = excluded.last_sync_at""",
                (state.account_id, state.last_watermark, state.last_sync_at or _now_ms()),
            )
        return self.get_sync_state(state.account_id)

    # ------------------------------------------------------------------
    # Threads
    # ------------------------------------------------------------------

    def find_thread_by_key(self, account_id: str, thread_key: str) -> ThreadRecord | None:
        with self._connection() as conn:
            row = conn.execute(
                f"SELECT {THREAD_COLUMNS} FROM threads WHERE account_id = ? AND thread_key = ?",
                (account_id, thread_key),
            ).fetchone()
        return _row_to_thread(row) if row else None

    def get_thread(self, thread_id: str) -> ThreadRecord | None:
        with self._connection() as conn:
            row = conn.execute(
                f"SELECT {THREAD_COLUMNS} FROM threads WHERE id = ? LIMIT 1",
                (thread_id,),
            ).fetchone()
        return _row_to_thread(row) if row else None

    def upsert_thread(
        self,
        account_id: str,
        thread_key: str,
        subject: str,
        participants: Iterable[str],
        last_message_at: int,
        last_sender: str,
        needs_reply: bool,
        summary: str | None = None,
    ) -> ThreadRecord:
        """Create or update the thread for (account_id, thread_key).

        Subject, last sender, timestamp and needs_reply are last-write-wins.
        Participants accumulate; an existing summary is kept unless replaced.
        """
        existing = self.find_thread_by_key(account_id, thread_key)
        thread_id = existing.id if existing else str(uuid.uuid4())

        merged: list[str] = list(existing.participants) if existing else []
        for address in participants:
            if address and address not in merged:
                merged.append(address)

        with self._connection() as conn:
            conn.execute(
                f"""INSERT INTO threads ({THREAD_COLUMNS})
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    ON CONFLICT(account_id, thread_key) DO UPDATE SET
                        subject = excluded.subject,
                        participants = excluded.participants,
                        last_message_at = excluded.last_message_at,
                        last_sender = excluded.last_sender,
                        needs_reply = excluded.needs_reply,
                        summary = COALESCE(excluded.summary, threads.summary),
                        updated_at = excluded.updated_at""",
                (
                    thread_id,
                    account_id,
                    thread_key,
                    subject,
                    encode_list(merged),
                    last_message_at,
                    last_sender,
                    int(needs_reply),
                    summary,
                    _now_ms(),
                ),
            )

        if existing is None:
            logger.debug(f"Created thread {thread_id} for key {thread_key}")

        thread = self.find_thread_by_key(account_id, thread_key)
        if thread is None:
            raise RuntimeError(f"Thread {thread_key} vanished after upsert")
        return thread

    def set_thread_needs_reply(self, thread_id: str, needs_reply: bool) -> None:
        with self._connection() as conn:
            conn.execute(
                "UPDATE threads SET needs_reply = ?, updated_at = ? WHERE id = ?",
                (int(needs_reply), _now_ms(), thread_id),
            )

    def set_thread_summary(self, thread_id: str, summary: str | None) -> None:
        with self._connection() as conn:
            conn.execute(
                "UPDATE threads SET summary = ?, updated_at = ? WHERE id = ?",
                (summary, _now_ms(), thread_id),
            )

    def list_threads_needing_reply(self, limit: int = 25, account_id: str | None = None) -> list[ThreadRecord]:
        """Threads flagged for reply, newest activity first."""
        query = f"SELECT {THREAD_COLUMNS} FROM threads WHERE needs_reply = 1"
        params: list[object] = []
        if account_id:
            query += " AND account_id = ?"
            params.append(account_id)
        query += " ORDER BY last_message_at DESC LIMIT ?"
        params.append(limit)

        with self._connection() as conn:
            rows = conn.execute(query, params).fetchall()
        return [_row_to_thread(r) for r in rows]

    def list_threads_awaiting_draft(self, account_id: str, limit: int = 25) -> list[ThreadRecord]:
        """Flagged threads of one account that have no draft yet."""
        columns = ", ".join(f"t.{c.strip()}" for c in THREAD_COLUMNS.split(","))
        with self._connection() as conn:
            rows = conn.execute(
                f"""SELECT {columns}
                    FROM threads t
                    LEFT JOIN drafts d ON d.thread_id = t.id
                    WHERE t.account_id = ? AND t.needs_reply = 1 AND d.thread_id IS NULL
                    ORDER BY t.last_message_at DESC
                    LIMIT ?""",
                (account_id, limit),
            ).fetchall()
        return [_row_to_thread(r) for r in rows]

    def count_threads(self, account_id: str) -> int:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT COUNT(*) AS cnt FROM threads WHERE account_id = ?", (account_id,)
            ).fetchone()
        return row["cnt"] if row else 0

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------

    def has_message(self, account_id: str, message_id: str) -> bool:
        """True when any stored form of ``message_id`` exists for the account."""
        clause, params = _message_id_match("message_id", message_id)
        if not clause:
            return False
        with self._connection() as conn:
            row = conn.execute(
                f"SELECT 1 AS ok FROM messages WHERE account_id = ? AND ({clause}) LIMIT 1",
                (account_id, *params),
            ).fetchone()
        return row is not None

    def find_thread_by_message_reference(self, account_id: str, reference: str) -> ThreadRecord | None:
        """Thread holding the persisted message that ``reference`` points at."""
        clause, params = _message_id_match("m.message_id", reference)
        if not clause:
            return None
        columns = ", ".join(f"t.{c.strip()}" for c in THREAD_COLUMNS.split(","))
        with self._connection() as conn:
            row = conn.execute(
                f"""SELECT {columns}
                    FROM messages m
                    JOIN threads t ON t.id = m.thread_id
                    WHERE m.account_id = ? AND ({clause})
                    ORDER BY m.sent_at DESC
                    LIMIT 1""",
                (account_id, *params),
            ).fetchone()
        return _row_to_thread(row) if row else None

    def insert_message(self, message: MessageRecord) -> bool:
        """Insert-or-ignore. Returns False when the id was already stored."""
        canonical = normalize_message_id(message.message_id) or message.message_id
        with self._connection() as conn:
            cursor = conn.execute(
                f"""INSERT OR IGNORE INTO messages ({MESSAGE_COLUMNS})
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    message.id,
                    message.account_id,
                    message.thread_id,
                    message.sequence,
                    canonical,
                    message.in_reply_to,
                    message.subject,
                    message.from_address,
                    message.from_name,
                    encode_list(message.to_addresses),
                    encode_list(message.cc_addresses),
                    message.body_text,
                    message.sent_at,
                    message.raw_headers,
                ),
            )
            inserted = cursor.rowcount == 1

        if not inserted:
            logger.debug(f"Message {canonical} already stored for {message.account_id}")
        return inserted

    def get_messages_for_thread(self, thread_id: str) -> list[MessageRecord]:
        """All messages of a thread, oldest first."""
        with self._connection() as conn:
            rows = conn.execute(
                f"SELECT {MESSAGE_COLUMNS} FROM messages WHERE thread_id = ? ORDER BY sent_at ASC, sequence ASC",
                (thread_id,),
            ).fetchall()
        return [_row_to_message(r) for r in rows]

    def count_messages(self, account_id: str) -> int:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT COUNT(*) AS cnt FROM messages WHERE account_id = ?", (account_id,)
            ).fetchone()
        return row["cnt"] if row else 0

    # ------------------------------------------------------------------
    # Drafts
    # ------------------------------------------------------------------

    def get_draft(self, thread_id: str) -> DraftRecord | None:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT id, thread_id, content, status, model, updated_at FROM drafts WHERE thread_id = ? LIMIT 1",
                (thread_id,),
            ).fetchone()
        if not row:
            return None
        return DraftRecord(
            id=row["id"],
            thread_id=row["thread_id"],
            content=row["content"],
            status=DraftStatus(row["status"]),
            model=row["model"],
            updated_at=row["updated_at"],
        )

    def upsert_draft(
        self,
        thread_id: str,
        content: str,
        model: str,
        status: DraftStatus = DraftStatus.DRAFTED,
    ) -> DraftRecord:
        """Write the single draft of a thread, overwriting it in place."""
        existing = self.get_draft(thread_id)
        draft_id = existing.id if existing else str(uuid.uuid4())
        now = _now_ms()

        with self._connection() as conn:
            conn.execute(
                """INSERT INTO drafts (id, thread_id, content, status, model, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?)
                   ON CONFLICT(thread_id) DO UPDATE SET
                       content = excluded.content,
                       status = excluded.status,
                       model = excluded.model,
                       updated_at = excluded.updated_at""",
                (draft_id, thread_id, content, DraftStatus(status).value, model, now),
            )

        return DraftRecord(
            id=draft_id,
            thread_id=thread_id,
            content=content,
            status=DraftStatus(status),
            model=model,
            updated_at=now,
        )

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------

    def list_rules(self) -> list[RuleRecord]:
        """Enabled rules in insertion order."""
        with self._connection() as conn:
            rows = conn.execute(
                "SELECT id, kind, scope, pattern, value, enabled FROM rules WHERE enabled = 1 ORDER BY created_at, rowid"
            ).fetchall()
        return [
            RuleRecord(
                id=r["id"],
                kind=RuleKind(r["kind"]),
                scope=r["scope"],
                pattern=r["pattern"],
                value=r["value"],
                enabled=bool(r["enabled"]),
            )
            for r in rows
        ]

    def upsert_rule(
        self,
        kind: RuleKind,
        pattern: str,
        value: str = "",
        scope: str = "global",
        enabled: bool = True,
        rule_id: str | None = None,
    ) -> RuleRecord:
        rule = RuleRecord(
            id=rule_id or str(uuid.uuid4()),
            kind=RuleKind(kind),
            scope=scope,
            pattern=pattern,
            value=value,
            enabled=enabled,
        )
        with self._connection() as conn:
            conn.execute(
                """INSERT INTO rules (id, kind, scope, pattern, value, enabled, created_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?)
                   ON CONFLICT(id) DO UPDATE SET
                       kind = excluded.kind,
                       scope = excluded.scope,
                       pattern = excluded.pattern,
                       value = excluded.value,
                       enabled = excluded.enabled""",
                (rule.id, rule.kind.value, rule.scope, rule.pattern, rule.value, int(rule.enabled), _now_ms()),
            )
        return rule

    def delete_rule(self, rule_id: str) -> bool:
        with self._connection() as conn:
            cursor = conn.execute("DELETE FROM rules WHERE id = ?", (rule_id,))
            return cursor.rowcount > 0

    # ------------------------------------------------------------------
    # Memory notes
    # ------------------------------------------------------------------

    def upsert_memory_note(self, scope: MemoryScope, key: str, value: str) -> MemoryNote:
        existing = self.get_memory_note(scope, key)
        note = MemoryNote(
            id=existing.id if existing else str(uuid.uuid4()),
            scope=MemoryScope(scope),
            key=key,
            value=value,
            updated_at=_now_ms(),
        )
        with self._connection() as conn:
            conn.execute(
                """INSERT INTO memory_notes (id, scope, key, value, updated_at)
                   VALUES (?, ?, ?, ?, ?)
                   ON CONFLICT(scope, key) DO UPDATE SET
                       value = excluded.value,
                       updated_at = excluded.updated_at""",
                (note.id, note.scope.value, note.key, note.value, note.updated_at),
            )
        return note

    def get_memory_note(self, scope: MemoryScope, key: str) -> MemoryNote | None:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT id, scope, key, value, updated_at FROM memory_notes WHERE scope = ? AND key = ? LIMIT 1",
                (MemoryScope(scope).value, key),
            ).fetchone()
        return _row_to_note(row) if row else None

    def list_memory(self, scope: MemoryScope) -> list[MemoryNote]:
        """Notes of one scope, most recently updated first."""
        with self._connection() as conn:
            rows = conn.execute(
                "SELECT id, scope, key, value, updated_at FROM memory_notes WHERE scope = ? ORDER BY updated_at DESC",
                (MemoryScope(scope).value,),
            ).fetchall()
        return [_row_to_note(r) for r in rows]


def _message_id_match(column: str, message_id: str) -> tuple[str, list[str]]:
    """SQL predicate matching every stored form of ``message_id``."""
    candidates = sorted(message_id_candidates(message_id))
    if not candidates:
        return "", []
    placeholders = ", ".join("?" * len(candidates))
    return f"{column} IN ({placeholders})", candidates


def _row_to_thread(row: sqlite3.Row) -> ThreadRecord:
    return ThreadRecord(
        id=row["id"],
        account_id=row["account_id"],
        thread_key=row["thread_key"],
        subject=row["subject"] or "",
        participants=decode_list(row["participants"]),
        last_message_at=row["last_message_at"] or 0,
        last_sender=row["last_sender"] or "",
        needs_reply=bool(row["needs_reply"]),
        summary=row["summary"],
        updated_at=row["updated_at"] or 0,
    )


def _row_to_message(row: sqlite3.Row) -> MessageRecord:
    return MessageRecord(
        id=row["id"],
        account_id=row["account_id"],
        thread_id=row["thread_id"],
        sequence=row["sequence"] or 0,
        message_id=row["message_id"] or "",
        in_reply_to=row["in_reply_to"],
        subject=row["subject"] or "",
        from_address=row["from_address"] or "",
        from_name=row["from_name"] or "",
        to_addresses=decode_list(row["to_addresses"]),
        cc_addresses=decode_list(row["cc_addresses"]),
        body_text=row["body_text"] or "",
        sent_at=row["sent_at"] or 0,
        raw_headers=row["raw_headers"] or "{}",
    )


def _row_to_note(row: sqlite3.Row) -> MemoryNote:
    return MemoryNote(
        id=row["id"],
        scope=MemoryScope(row["scope"]),
        key=row["key"],
        value=row["value"],
        updated_at=row["updated_at"] or 0,
    )

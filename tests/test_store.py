import sqlite3

import pytest

from maildraft.domain.models import (
    Account,
    DraftStatus,
    MemoryScope,
    MessageRecord,
    RuleKind,
    SyncState,
)
from maildraft.infrastructure.sqlite.store import SQLiteStore, _message_id_match, decode_list


def _message(store_id: str, thread_id: str, message_id: str, sequence: int = 1, account_id: str = "work") -> MessageRecord:
    return MessageRecord(
        id=store_id,
        account_id=account_id,
        thread_id=thread_id,
        sequence=sequence,
        message_id=message_id,
        subject="Deploy",
        from_address="alice@partner.io",
        to_addresses=["me@example.com"],
        body_text="hello",
        sent_at=1_000 * sequence,
    )


def _thread(store, key="ref:a@x", account_id="work", **kwargs):
    values = dict(
        subject="Deploy",
        participants=["alice@partner.io"],
        last_message_at=1_000,
        last_sender="alice@partner.io",
        needs_reply=True,
    )
    values.update(kwargs)
    return store.upsert_thread(account_id=account_id, thread_key=key, **values)


def test_sync_state_defaults_to_zero(store):
    state = store.get_sync_state("work")
    assert state.last_watermark == 0


def test_watermark_never_moves_backwards(store):
    store.upsert_sync_state(SyncState(account_id="work", last_watermark=10))
    store.upsert_sync_state(SyncState(account_id="work", last_watermark=4))
    assert store.get_sync_state("work").last_watermark == 10


def test_account_upsert_keeps_created_at(store):
    store.upsert_account(Account(id="work", email="Me@Example.com", host="imap", created_at=5))
    store.upsert_account(Account(id="work", email="me@example.com", host="imap2", created_at=99))
    account = store.get_account("work")
    assert account.host == "imap2"
    assert account.created_at == 5
    assert account.email == "me@example.com"


def test_thread_upsert_reuses_id_and_merges_participants(store):
    first = _thread(store)
    second = _thread(
        store,
        subject="Re: Deploy",
        participants=["me@example.com"],
        last_message_at=2_000,
        last_sender="me@example.com",
        needs_reply=False,
    )
    assert second.id == first.id
    assert second.subject == "Re: Deploy"
    assert second.needs_reply is False
    assert second.participants == ["alice@partner.io", "me@example.com"]
    assert store.count_threads("work") == 1


def test_thread_summary_survives_upsert(store):
    thread = _thread(store)
    store.set_thread_summary(thread.id, "draft snippet")
    again = _thread(store, last_message_at=3_000)
    assert again.summary == "draft snippet"


def test_message_insert_or_ignore_and_dedup_forms(store):
    thread = _thread(store)
    assert store.insert_message(_message("m1", thread.id, "<AbC@X.io>")) is True
    assert store.insert_message(_message("m2", thread.id, "abc@x.io")) is False

    assert store.has_message("work", "<abc@x.io>")
    assert store.has_message("work", " ABC@x.io ")
    assert not store.has_message("other", "abc@x.io")
    assert not store.has_message("work", "")
    assert store.count_messages("work") == 1


def test_same_message_id_allowed_across_accounts(store):
    t1 = _thread(store, account_id="work")
    t2 = _thread(store, account_id="home")
    assert store.insert_message(_message("m1", t1.id, "<a@x>", account_id="work"))
    assert store.insert_message(_message("m2", t2.id, "<a@x>", account_id="home"))


def test_find_thread_by_message_reference(store):
    thread = _thread(store)
    store.insert_message(_message("m1", thread.id, "<root@x>"))
    found = store.find_thread_by_message_reference("work", "<ROOT@x>")
    assert found is not None and found.id == thread.id
    assert store.find_thread_by_message_reference("work", "<missing@x>") is None


def test_messages_for_thread_ordered_oldest_first(store):
    thread = _thread(store)
    store.insert_message(_message("m2", thread.id, "<b@x>", sequence=2))
    store.insert_message(_message("m1", thread.id, "<a@x>", sequence=1))
    assert [m.id for m in store.get_messages_for_thread(thread.id)] == ["m1", "m2"]


def test_draft_is_single_per_thread(store):
    thread = _thread(store)
    first = store.upsert_draft(thread.id, "v1", "gpt-4o-mini")
    second = store.upsert_draft(thread.id, "v2", "gpt-4o-mini", DraftStatus.EDITED)
    assert second.id == first.id
    draft = store.get_draft(thread.id)
    assert draft.content == "v2"
    assert draft.status == DraftStatus.EDITED


def test_list_threads_needing_reply(store):
    a = _thread(store, key="k1", last_message_at=1_000)
    b = _thread(store, key="k2", last_message_at=2_000)
    _thread(store, key="k3", needs_reply=False)
    store.set_thread_needs_reply(a.id, True)
    assert [t.id for t in store.list_threads_needing_reply()] == [b.id, a.id]


def test_rules_crud_lists_enabled_only(store):
    kept = store.upsert_rule(RuleKind.IGNORE_DOMAIN, "spam.io")
    store.upsert_rule(RuleKind.STYLE, "boss@", value="formal", enabled=False)
    assert [r.id for r in store.list_rules()] == [kept.id]
    assert store.delete_rule(kept.id) is True
    assert store.list_rules() == []


def test_memory_notes_unique_per_scope_and_key(store):
    store.upsert_memory_note(MemoryScope.USER, "tone", "short")
    store.upsert_memory_note(MemoryScope.USER, "tone", "shorter")
    store.upsert_memory_note(MemoryScope.THREAD, "tone", "thread level")
    assert [n.value for n in store.list_memory(MemoryScope.USER)] == ["shorter"]
    assert store.get_memory_note(MemoryScope.THREAD, "tone").value == "thread level"


def test_memory_scope_is_user_or_thread(store):
    assert {s.value for s in MemoryScope} == {"user", "thread"}
    with sqlite3.connect(store.db_path) as conn, pytest.raises(sqlite3.IntegrityError):
        conn.execute(
            "INSERT INTO memory_notes (id, scope, key, value, updated_at) VALUES ('n1', 'contact', 'k', 'v', 0)"
        )


def test_malformed_json_array_decodes_empty(store):
    thread = _thread(store)
    with sqlite3.connect(store.db_path) as conn:
        conn.execute("UPDATE threads SET participants = 'not json' WHERE id = ?", (thread.id,))
    assert store.get_thread(thread.id).participants == []
    assert decode_list(None) == []
    assert decode_list('{"a": 1}') == []


def test_legacy_global_unique_is_migrated(tmp_path):
    db_path = tmp_path / "legacy.db"
    with sqlite3.connect(db_path) as conn:
        conn.execute(
            """CREATE TABLE messages (
                id TEXT PRIMARY KEY,
                account_id TEXT NOT NULL,
                thread_id TEXT NOT NULL,
                uid INTEGER NOT NULL,
                message_id TEXT NOT NULL UNIQUE,
                in_reply_to TEXT,
                subject TEXT NOT NULL,
                from_address TEXT NOT NULL,
                from_name TEXT NOT NULL,
                to_addresses TEXT NOT NULL,
                cc_addresses TEXT NOT NULL,
                body_text TEXT NOT NULL,
                sent_at INTEGER NOT NULL,
                raw_headers TEXT NOT NULL
            )"""
        )
        conn.execute(
            "INSERT INTO messages VALUES ('m1', 'work', 't1', 7, '<Legacy@X>', NULL, 's', 'a@x', '', '[]', '[]', 'b', 1, '{}')"
        )

    store = SQLiteStore(db_path=db_path)

    assert store.has_message("work", "legacy@x")
    thread = _thread(store, account_id="home")
    assert store.insert_message(_message("m2", thread.id, "<Legacy@X>", account_id="home"))


def test_mixed_case_ids_are_canonicalized_on_open(tmp_path):
    db_path = tmp_path / "maildraft.db"
    store = SQLiteStore(db_path=db_path)
    thread = _thread(store)
    with sqlite3.connect(db_path) as conn:
        conn.execute(
            "INSERT INTO messages (id, account_id, thread_id, sequence, message_id, subject, from_address, "
            "from_name, body_text, sent_at) VALUES ('old', 'work', ?, 3, ' <Mixed@X.io> ', 's', 'a@x', '', 'b', 1)",
            (thread.id,),
        )

    reopened = SQLiteStore(db_path=db_path)

    assert reopened.has_message("work", "mixed@x.io")
    assert reopened.find_thread_by_message_reference("work", "<MIXED@x.io>").id == thread.id
    with sqlite3.connect(db_path) as conn:
        [(stored,)] = conn.execute("SELECT message_id FROM messages WHERE id = 'old'").fetchall()
    assert stored == "mixed@x.io"


def test_message_lookup_is_served_by_index(store):
    clause, params = _message_id_match("message_id", "<AbC@X.io>")
    with sqlite3.connect(store.db_path) as conn:
        plan = conn.execute(
            f"EXPLAIN QUERY PLAN SELECT 1 FROM messages WHERE account_id = ? AND ({clause}) LIMIT 1",
            ("work", *params),
        ).fetchall()

    details = " ".join(row[-1] for row in plan)
    assert "INDEX" in details
    assert "SCAN" not in details


def test_threads_awaiting_draft_excludes_drafted_and_unflagged(store):
    waiting = _thread(store, key="ref:wait@x")
    drafted = _thread(store, key="ref:done@x")
    _thread(store, key="ref:quiet@x", needs_reply=False)
    _thread(store, key="ref:other@x", account_id="home")
    store.upsert_draft(drafted.id, "On it.", "gpt-4o-mini", DraftStatus.DRAFTED)

    assert [t.id for t in store.list_threads_awaiting_draft("work")] == [waiting.id]

"""Memory notes that bias future drafts."""

from __future__ import annotations

import re

from maildraft.domain.models import MemoryScope
from maildraft.infrastructure.sqlite.store import SQLiteStore

AUTOLEARNED_KEY = "style:autolearned"
EDIT_SAMPLE_CHARS = 320
SHORT_FORM_CHARS = 220


class MemoryService:
    """Reads and writes user-wide and per-thread notes."""

    def __init__(self, store: SQLiteStore):
        self.store = store

    def get_user_notes(self) -> list[str]:
        return [note.value for note in self.store.list_memory(MemoryScope.USER)]

    def get_thread_notes(self, thread_id: str) -> list[str]:
        prefix = f"{thread_id}:"
        return [
            note.value
            for note in self.store.list_memory(MemoryScope.THREAD)
            if note.key.startswith(prefix)
        ]

    def remember_thread_context(self, thread_id: str, summary: str) -> None:
        self.store.upsert_memory_note(MemoryScope.THREAD, f"{thread_id}:context", summary)

    def remember_draft_pattern(self, thread_id: str, summary: str) -> None:
        self.store.upsert_memory_note(MemoryScope.THREAD, f"{thread_id}:draft", summary)

    def remember_user_preference(self, key: str, value: str) -> None:
        self.store.upsert_memory_note(MemoryScope.USER, key, value)

    def learn_from_edit(self, thread_id: str, draft: str) -> None:
        """Keep a sample of a human-edited draft and derive style markers from it."""
        compact = re.sub(r"\s+", " ", draft or "").strip()[:EDIT_SAMPLE_CHARS]
        if not compact:
            return

        self.store.upsert_memory_note(
            MemoryScope.THREAD,
            f"{thread_id}:edit",
            f"Edited draft tone sample: {compact}",
        )

        hint = extract_style_hint(draft)
        if hint:
            self.remember_user_preference(AUTOLEARNED_KEY, hint)


def extract_style_hint(text: str) -> str | None:
    text = (text or "").strip()
    lower = text.lower()
    markers = []

    if len(text) < SHORT_FORM_CHARS:
        markers.append("short-form")
    if "thanks" in lower:
        markers.append("polite-close")
    if "- " in text or "\n1." in text:
        markers.append("structured-list")
    if "let me know" in lower:
        markers.append("explicit-follow-up")

    if not markers:
        return None
    return f"Autolearned style markers: {', '.join(markers)}"

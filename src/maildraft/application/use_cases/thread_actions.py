"""Human-facing actions on stored threads."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from loguru import logger

from maildraft.application.memory import MemoryService
from maildraft.application.ports.draft_producer import DraftRequest
from maildraft.application.retry import RetryPolicy
from maildraft.application.rule_engine import resolve_vibe
from maildraft.application.use_cases.sync_mailboxes import ProducerResolver
from maildraft.domain.errors import DraftProducerError, ThreadNotFoundError
from maildraft.domain.models import DraftRecord, DraftStatus, MessageRecord, ThreadRecord
from maildraft.infrastructure.config import MailDraftConfig
from maildraft.infrastructure.email.threading import snippet
from maildraft.infrastructure.sqlite.store import SQLiteStore


@dataclass
class ThreadView:
    thread: ThreadRecord
    messages: list[MessageRecord]
    draft: Optional[DraftRecord]


class ThreadService:
    """View, regenerate, edit, skip and close drafts for a single thread."""

    def __init__(
        self,
        store: SQLiteStore,
        producers: ProducerResolver,
        config_loader: Callable[[], MailDraftConfig],
        draft_retry: RetryPolicy,
        memory: Optional[MemoryService] = None,
    ) -> None:
        self.store = store
        self.producers = producers
        self.config_loader = config_loader
        self.draft_retry = draft_retry
        self.memory = memory or MemoryService(store)

    def _require_thread(self, thread_id: str) -> ThreadRecord:
        thread = self.store.get_thread(thread_id)
        if thread is None:
            raise ThreadNotFoundError(f"Thread {thread_id} not found")
        return thread

    def get_thread_view(self, thread_id: str) -> ThreadView:
        return ThreadView(
            thread=self._require_thread(thread_id),
            messages=self.store.get_messages_for_thread(thread_id),
            draft=self.store.get_draft(thread_id),
        )

    async def regenerate_draft(self, thread_id: str, instruction: Optional[str] = None) -> str:
        """Produce a fresh draft, optionally steered by ``instruction``."""
        self._require_thread(thread_id)
        messages = self.store.get_messages_for_thread(thread_id)
        if not messages:
            raise ThreadNotFoundError(f"Thread {thread_id} has no messages")

        config = self.config_loader()
        vibe = resolve_vibe(messages[-1].from_address, config.rules, self.store.list_rules())
        request = DraftRequest(
            thread_id=thread_id,
            model=config.llm.model,
            vibe=vibe,
            messages=messages,
            user_notes=self.memory.get_user_notes(),
            thread_notes=self.memory.get_thread_notes(thread_id),
            instruction=instruction,
        )

        producer = self.producers.resolve(config)
        retry = self.draft_retry.with_label(f"llm:thread:{thread_id}")
        result = await retry.run(lambda: producer.generate(request))
        if result is None:
            raise DraftProducerError(f"No usable draft produced for thread {thread_id}")

        self.store.upsert_draft(thread_id, result.content, result.model, DraftStatus.DRAFTED)
        self.store.set_thread_needs_reply(thread_id, True)
        draft_snippet = snippet(result.content, 280)
        self.memory.remember_draft_pattern(thread_id, draft_snippet)
        self.store.set_thread_summary(thread_id, draft_snippet)
        logger.info(f"Regenerated draft for thread {thread_id}")
        return result.content

    def save_edited_draft(self, thread_id: str, content: str) -> DraftRecord:
        self._require_thread(thread_id)
        existing = self.store.get_draft(thread_id)
        model = existing.model if existing else self.config_loader().llm.model

        draft = self.store.upsert_draft(thread_id, content, model, DraftStatus.EDITED)
        self.store.set_thread_summary(thread_id, snippet(content, 280))
        self.memory.learn_from_edit(thread_id, content)
        return draft

    def skip_draft(self, thread_id: str) -> Optional[DraftRecord]:
        """Mark the current draft skipped. Nothing to skip returns None."""
        self._require_thread(thread_id)
        existing = self.store.get_draft(thread_id)
        if existing is None:
            return None
        return self.store.upsert_draft(thread_id, existing.content, existing.model, DraftStatus.SKIPPED)

    def mark_done(self, thread_id: str) -> None:
        self._require_thread(thread_id)
        self.store.set_thread_needs_reply(thread_id, False)

"""One sync cycle across the configured mailboxes."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Callable, Optional, Protocol

from loguru import logger

from maildraft.application.memory import MemoryService
from maildraft.application.ports.draft_producer import DraftProducer, DraftRequest
from maildraft.application.ports.transport_feed import TransportFeed
from maildraft.application.retry import RetryPolicy
from maildraft.application.rule_engine import resolve_vibe, should_ignore
from maildraft.application.use_cases.bootstrap import select_latest_thread_keys
from maildraft.domain.entities.parsed_message import ParsedMessage
from maildraft.domain.models import (
    Account,
    DraftStatus,
    MessageRecord,
    SyncRunStats,
    SyncState,
    ThreadRecord,
)
from maildraft.infrastructure.config import MailDraftConfig, select_accounts, to_account
from maildraft.infrastructure.email.body_cleaner import clean_body
from maildraft.infrastructure.email.threading import (
    derive_thread_key,
    has_body_content,
    reference_candidates,
    snippet,
)
from maildraft.infrastructure.settings import Settings
from maildraft.infrastructure.sqlite.store import SQLiteStore

NO_BODY_PLACEHOLDER = "(no text body)"
NO_REPLY_MARKERS = ("fyi", "no reply needed", "noreply", "automated")
CONTEXT_MEMORY_MESSAGES = 3
PENDING_DRAFT_LIMIT = 25


class ProducerResolver(Protocol):
    def resolve(self, config: MailDraftConfig) -> DraftProducer: ...


def is_inbound_requiring_reply(messages: list[MessageRecord], account_email: str) -> bool:
    """True when the latest message is from someone else and doesn't look like a no-reply."""
    if not messages:
        return False

    latest = messages[-1]
    if latest.from_address.lower() == account_email.lower():
        return False

    body = latest.body_text.lower()
    return not any(marker in body for marker in NO_REPLY_MARKERS)


def build_thread_context(messages: list[MessageRecord]) -> str:
    latest = messages[-CONTEXT_MEMORY_MESSAGES:]
    if not latest:
        return "no messages"

    parts = []
    for m in latest:
        stamp = datetime.fromtimestamp(m.sent_at / 1000, tz=timezone.utc).isoformat().replace("+00:00", "Z")
        parts.append(f"{stamp} {m.from_address}: {snippet(m.body_text, 180)}")
    return f"recent thread context: {' | '.join(parts)}"


class SyncOrchestrator:
    """Pull, dedup, thread, filter, draft and checkpoint each account.

    Flow per account:
    1. Refresh the account row and read its watermark (0 means bootstrap)
    2. Fetch above the watermark through the transport, with retries
    3. For each message: bootstrap window, dedup, ignore rules, thread, insert
    4. Draft once for every touched or still undrafted thread whose latest message wants a reply
    5. Advance the watermark to the highest fetched sequence
    """

    def __init__(
        self,
        settings: Settings,
        store: SQLiteStore,
        transport: TransportFeed,
        producers: ProducerResolver,
        config_loader: Callable[[], MailDraftConfig],
        memory: Optional[MemoryService] = None,
        transport_retry: Optional[RetryPolicy] = None,
        draft_retry: Optional[RetryPolicy] = None,
    ) -> None:
        self.settings = settings
        self.store = store
        self.transport = transport
        self.producers = producers
        self.config_loader = config_loader
        self.memory = memory or MemoryService(store)
        self.transport_retry = transport_retry or RetryPolicy(
            attempts=settings.transport_retry_attempts,
            base_delay=settings.transport_retry_base_delay,
            max_delay=settings.retry_max_delay,
            label="transport",
        )
        self.draft_retry = draft_retry or RetryPolicy(
            attempts=settings.draft_retry_attempts,
            base_delay=settings.draft_retry_base_delay,
            max_delay=settings.retry_max_delay,
            label="draft",
        )

    async def run_once(self, account_id: Optional[str] = None) -> list[SyncRunStats]:
        """Run one cycle. Account selection errors abort it; any other failure is confined to its account."""
        config = self.config_loader()
        targets = select_accounts(config, account_id)
        logger.info(f"Sync cycle starting for {len(targets)} account(s)")

        results: list[SyncRunStats] = []
        for account_config in targets:
            account = to_account(account_config)
            stats = SyncRunStats(account_id=account.id)
            try:
                await self._sync_account(config, account, stats)
            except Exception as e:
                stats.state = "error"
                stats.error = str(e) or e.__class__.__name__
                logger.error(f"Account {account.id} sync failed: {stats.error}")
            else:
                stats.state = "idle"
                logger.info(
                    f"Account {account.id}: fetched={stats.fetched}, imported={stats.imported}, "
                    f"drafted={stats.drafted}, ignored={stats.ignored}"
                )
            results.append(stats)

        logger.info("Sync cycle finished")
        return results

    async def _sync_account(self, config: MailDraftConfig, account: Account, stats: SyncRunStats) -> None:
        self.store.upsert_account(account)
        state = self.store.get_sync_state(account.id)
        is_bootstrap = state.last_watermark == 0
        window = config.sync.bootstrap_message_window if is_bootstrap else None

        stats.state = "fetching"
        retry = self.transport_retry.with_label(f"imap:{account.id}")
        pull = await retry.run(lambda: self.transport.fetch_since(account, state.last_watermark, window))
        stats.fetched = len(pull.messages)

        stats.state = "ingesting"
        db_rules = self.store.list_rules()
        bootstrap_keys = (
            select_latest_thread_keys(pull.messages, config.sync.bootstrap_thread_limit) if is_bootstrap else None
        )

        touched: dict[str, ThreadRecord] = {}
        for message in pull.messages:
            if bootstrap_keys is not None and derive_thread_key(message) not in bootstrap_keys:
                logger.debug(f"Skipping {message.message_id}: outside bootstrap window")
                continue

            if self.store.has_message(account.id, message.message_id):
                logger.debug(f"Skipping {message.message_id}: already stored")
                continue

            decision = should_ignore(message.sender.address, config.rules, db_rules)
            if decision.ignore:
                stats.ignored += 1
                logger.debug(f"Ignored {message.message_id}: {decision.reason}")
                continue

            thread = self._upsert_thread(account, message)
            if self._insert_message(account, thread, message):
                stats.imported += 1

            messages = self.store.get_messages_for_thread(thread.id)
            self.memory.remember_thread_context(thread.id, build_thread_context(messages))
            touched[thread.id] = thread

        stats.state = "drafting"
        pending = dict(touched)
        for thread in self.store.list_threads_awaiting_draft(account.id, limit=PENDING_DRAFT_LIMIT):
            pending.setdefault(thread.id, thread)

        producer: Optional[DraftProducer] = None
        for thread_id in pending:
            thread = self.store.get_thread(thread_id)
            if thread is None or not thread.needs_reply:
                continue

            messages = self.store.get_messages_for_thread(thread.id)
            if not is_inbound_requiring_reply(messages, account.email):
                self.store.set_thread_needs_reply(thread.id, False)
                continue

            if producer is None:
                try:
                    producer = self.producers.resolve(config)
                except Exception as e:
                    logger.error(f"No draft producer for {account.id}; leaving threads flagged: {e}")
                    break

            vibe = resolve_vibe(messages[-1].from_address, config.rules, db_rules)
            if await self._draft_thread(config, account, thread, messages, vibe, producer):
                stats.drafted += 1

        stats.state = "checkpointing"
        self.store.upsert_sync_state(SyncState(account_id=account.id, last_watermark=pull.max_sequence))

    def _resolve_thread_key(self, account_id: str, message: ParsedMessage) -> str:
        for reference in reference_candidates(message):
            linked = self.store.find_thread_by_message_reference(account_id, reference)
            if linked:
                return linked.thread_key
        return derive_thread_key(message)

    def _upsert_thread(self, account: Account, message: ParsedMessage) -> ThreadRecord:
        participants = [message.sender.address]
        participants += [a.address for a in message.to]
        participants += [a.address for a in message.cc]

        return self.store.upsert_thread(
            account_id=account.id,
            thread_key=self._resolve_thread_key(account.id, message),
            subject=message.subject,
            participants=[p for p in participants if p],
            last_message_at=message.sent_at,
            last_sender=message.sender.address,
            needs_reply=message.sender.address.lower() != account.email.lower(),
        )

    def _insert_message(self, account: Account, thread: ThreadRecord, message: ParsedMessage) -> bool:
        body = clean_body(message.text)
        return self.store.insert_message(
            MessageRecord(
                id=str(uuid.uuid4()),
                account_id=account.id,
                thread_id=thread.id,
                sequence=message.sequence,
                message_id=message.message_id,
                in_reply_to=message.in_reply_to,
                subject=message.subject,
                from_address=message.sender.address,
                from_name=message.sender.name,
                to_addresses=[a.address for a in message.to],
                cc_addresses=[a.address for a in message.cc],
                body_text=body if has_body_content(body) else NO_BODY_PLACEHOLDER,
                sent_at=message.sent_at,
                raw_headers=message.headers,
            )
        )

    async def _draft_thread(
        self,
        config: MailDraftConfig,
        account: Account,
        thread: ThreadRecord,
        messages: list[MessageRecord],
        vibe: str,
        producer: DraftProducer,
    ) -> bool:
        request = DraftRequest(
            thread_id=thread.id,
            model=config.llm.model,
            vibe=vibe,
            messages=messages,
            user_notes=self.memory.get_user_notes(),
            thread_notes=self.memory.get_thread_notes(thread.id),
        )
        retry = self.draft_retry.with_label(f"llm:{account.id}:{thread.id}")

        try:
            result = await retry.run(lambda: producer.generate(request))
        except Exception as e:
            logger.error(f"Draft for thread {thread.id} failed after retries: {e}")
            return False

        if result is None:
            logger.warning(f"No usable draft for thread {thread.id}; leaving it flagged")
            return False

        self.store.upsert_draft(thread.id, result.content, result.model, DraftStatus.DRAFTED)
        draft_snippet = snippet(result.content, 280)
        self.memory.remember_draft_pattern(thread.id, draft_snippet)
        self.store.set_thread_summary(thread.id, draft_snippet)
        return True

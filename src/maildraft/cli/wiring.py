"""Build the sync stack from settings."""

from __future__ import annotations

from loguru import logger

from maildraft.application.agents.registry import ProducerRegistry
from maildraft.application.memory import MemoryService
from maildraft.application.use_cases.sync_mailboxes import SyncOrchestrator
from maildraft.domain.models import MemoryScope
from maildraft.infrastructure.config import MailDraftConfig, load_config, resolve_passwords
from maildraft.infrastructure.email.imap_feed import ImapTransportFeed
from maildraft.infrastructure.settings import Settings
from maildraft.infrastructure.sqlite.store import SQLiteStore


def build_orchestrator(settings: Settings) -> tuple[SyncOrchestrator, MailDraftConfig]:
    """Wire store, IMAP transport and producer registry for one process."""
    config_path = settings.config_path
    config = load_config(config_path)

    store = SQLiteStore(db_path=settings.database_path)
    memory = MemoryService(store)
    transport = ImapTransportFeed(passwords=resolve_passwords(config))

    def long_term_memory() -> list[str]:
        return [f"{note.key}: {note.value}" for note in store.list_memory(MemoryScope.USER)]

    registry = ProducerRegistry(settings, long_term_memory=long_term_memory)

    logger.info(f"Loaded {len(config.accounts)} account(s) from {config_path}")
    orchestrator = SyncOrchestrator(
        settings=settings,
        store=store,
        transport=transport,
        producers=registry,
        config_loader=lambda: load_config(config_path),
        memory=memory,
    )
    return orchestrator, config

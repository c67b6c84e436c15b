"""Shared fixtures for maildraft tests."""

from __future__ import annotations

from typing import Optional

import pytest

from maildraft.application.ports.draft_producer import DraftRequest, DraftResult
from maildraft.application.retry import RetryPolicy
from maildraft.application.use_cases.sync_mailboxes import SyncOrchestrator
from maildraft.domain.entities.parsed_message import FetchResult, ParsedAddress, ParsedMessage
from maildraft.domain.models import Account
from maildraft.infrastructure.config import MailDraftConfig
from maildraft.infrastructure.settings import Settings
from maildraft.infrastructure.sqlite.store import SQLiteStore

ACCOUNT_EMAIL = "me@example.com"
BASE_TS = 1_700_000_000_000


def make_message(
    sequence: int,
    message_id: str,
    sender: str = "alice@partner.io",
    subject: str = "Deploy window",
    text: str = "Can we move the deploy to Thursday?",
    in_reply_to: Optional[str] = None,
    references: Optional[list[str]] = None,
    sent_at: Optional[int] = None,
) -> ParsedMessage:
    return ParsedMessage(
        sequence=sequence,
        message_id=message_id,
        subject=subject,
        sender=ParsedAddress(address=sender, name=sender.split("@")[0].title()),
        sent_at=sent_at if sent_at is not None else BASE_TS + sequence * 60_000,
        text=text,
        in_reply_to=in_reply_to,
        references=references or [],
        to=[ParsedAddress(address=ACCOUNT_EMAIL)],
    )


class FakeTransport:
    """Returns scripted pulls; raises queued errors first."""

    def __init__(self, messages: Optional[list[ParsedMessage]] = None, errors: Optional[list[Exception]] = None):
        self.messages = list(messages or [])
        self.errors = list(errors or [])
        self.calls: list[tuple[str, int, Optional[int]]] = []

    async def fetch_since(self, account: Account, watermark: int, bootstrap_window: Optional[int] = None) -> FetchResult:
        self.calls.append((account.id, watermark, bootstrap_window))
        if self.errors:
            raise self.errors.pop(0)
        batch = [m for m in self.messages if m.sequence > watermark]
        return FetchResult(messages=batch, max_sequence=max([watermark] + [m.sequence for m in batch]))


class FakeProducer:
    name = "fake"

    def __init__(self, content: Optional[str] = "Thursday works. I'll move it.", errors: Optional[list[Exception]] = None):
        self.content = content
        self.errors = list(errors or [])
        self.requests: list[DraftRequest] = []

    async def generate(self, request: DraftRequest) -> Optional[DraftResult]:
        self.requests.append(request)
        if self.errors:
            raise self.errors.pop(0)
        if not (self.content or "").strip():
            return None
        return DraftResult(content=self.content, model=request.model, producer=self.name)


class StaticProducers:
    def __init__(self, producer):
        self.producer = producer

    def resolve(self, config: MailDraftConfig):
        return self.producer


async def no_sleep(_: float) -> None:
    return None


def config_with(**overrides) -> MailDraftConfig:
    data = {
        "accounts": [
            {
                "id": "work",
                "email": ACCOUNT_EMAIL,
                "imap": {"host": "imap.example.com", "port": 993, "username": ACCOUNT_EMAIL},
            }
        ],
    }
    data.update(overrides)
    return MailDraftConfig.model_validate(data)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(_env_file=None, data_dir=tmp_path, config_path=tmp_path / "maildraft.yaml")


@pytest.fixture
def store(tmp_path) -> SQLiteStore:
    return SQLiteStore(db_path=tmp_path / "maildraft.db")


@pytest.fixture
def config() -> MailDraftConfig:
    return config_with()


@pytest.fixture
def fast_retry() -> RetryPolicy:
    return RetryPolicy(attempts=3, base_delay=0.5, sleep=no_sleep)


@pytest.fixture
def make_orchestrator(settings, store, config, fast_retry):
    def _make(transport, producer, cfg: Optional[MailDraftConfig] = None) -> SyncOrchestrator:
        return SyncOrchestrator(
            settings=settings,
            store=store,
            transport=transport,
            producers=StaticProducers(producer),
            config_loader=lambda: cfg or config,
            transport_retry=fast_retry,
            draft_retry=fast_retry,
        )

    return _make

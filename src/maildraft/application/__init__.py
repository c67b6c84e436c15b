"""Application layer - sync orchestration, drafting and thread actions."""

from maildraft.application.memory import MemoryService
from maildraft.application.retry import RetryPolicy
from maildraft.application.runner import RunnerHooks, SyncRunner
from maildraft.application.use_cases.sync_mailboxes import SyncOrchestrator
from maildraft.application.use_cases.thread_actions import ThreadService, ThreadView

__all__ = [
    "MemoryService",
    "RetryPolicy",
    "RunnerHooks",
    "SyncRunner",
    "SyncOrchestrator",
    "ThreadService",
    "ThreadView",
]
